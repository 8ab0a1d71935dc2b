"""CRUD operations for `Prescription` model."""

from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from maternacare.crud.base import CRUDBase
from maternacare.models.prescription import Prescription
from maternacare.schemas.prescription import PrescriptionCreate, PrescriptionUpdate


class CRUDPrescription(CRUDBase[Prescription, PrescriptionCreate, PrescriptionUpdate]):
    def get_by_appointment(self, db: Session, *, appointment_id: int) -> List[Prescription]:
        """Get prescriptions written during one appointment."""
        stmt = (
            select(Prescription)
            .where(Prescription.appointment_id == appointment_id)
            .order_by(Prescription.id)
        )
        return list(db.scalars(stmt).all())

    def get_by_clinician(self, db: Session, *, clinician_id: int) -> List[Prescription]:
        stmt = (
            select(Prescription)
            .where(Prescription.clinician_id == clinician_id)
            .order_by(Prescription.date.desc())
        )
        return list(db.scalars(stmt).all())


# Singleton instance
crud_prescription = CRUDPrescription(Prescription)
