"""CRUD operations for `Patient` model."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from maternacare.crud.base import CRUDBase
from maternacare.crud.person import name_filter, split_person_fields
from maternacare.models.patient import Patient
from maternacare.models.person import Person
from maternacare.schemas.person import PatientCreate, PatientUpdate


logger = logging.getLogger(__name__)


class CRUDPatient(CRUDBase[Patient, PatientCreate, PatientUpdate]):
    def get_multi_with_person(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Patient]:
        """List patients with their person row, ordered by last then first name."""
        stmt = (
            select(Patient)
            .join(Patient.person)
            .options(joinedload(Patient.person))
            .order_by(Person.last_name, Person.first_name)
        )
        if search:
            stmt = stmt.where(name_filter(search))
        if status:
            stmt = stmt.where(Person.status == status)
        stmt = stmt.offset(skip).limit(limit)
        return list(db.scalars(stmt).all())

    def count_active(self, db: Session) -> int:
        stmt = select(func.count(Patient.id)).join(Patient.person).where(Person.status == "Active")
        return db.scalar(stmt) or 0

    def create_with_person(self, db: Session, *, obj_in: PatientCreate) -> Patient:
        """Insert the person row and the patient row in one transaction."""
        person_data, patient_data = split_person_fields(obj_in.model_dump(exclude_unset=True))
        person = Person(**person_data)
        try:
            db.add(person)
            db.flush()
            db_obj = Patient(id=person.id, **patient_data)
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            logger.warning(f"Patient creation rolled back for {obj_in.first_name} {obj_in.last_name}")
            raise
        logger.info(f"Patient created: id={db_obj.id}")
        return db_obj

    def update_with_person(self, db: Session, *, db_obj: Patient, obj_in: PatientUpdate) -> Patient:
        person_data, patient_data = split_person_fields(obj_in.model_dump(exclude_unset=True))
        for field, value in person_data.items():
            setattr(db_obj.person, field, value)
        for field, value in patient_data.items():
            setattr(db_obj, field, value)
        try:
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            raise
        return db_obj


# Singleton instance
crud_patient = CRUDPatient(Patient)
