"""CRUD operations for `Appointment` model."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from maternacare.core.exceptions import DuplicateAppointmentError, RecordNotFoundError
from maternacare.crud.base import CRUDBase
from maternacare.models.appointment import Appointment
from maternacare.models.clinician import Clinician
from maternacare.models.patient import Patient
from maternacare.models.prescription import Prescription
from maternacare.models.supplement import Supplement
from maternacare.schemas.appointment import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentUpdate,
    parse_time,
)
from maternacare.schemas.prescription import PrescriptionResponse
from maternacare.schemas.supplement import SupplementResponse


logger = logging.getLogger(__name__)

SLOT_CONSTRAINT_NAME = "unq_appointment_slot"


def combine_date_time(day: date, time_str: str) -> datetime:
    """Merge a calendar day and an "HH:MM" string into one naive local timestamp."""
    hours, minutes = parse_time(time_str)
    return datetime.combine(day, time(hours, minutes))


def _is_slot_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    # PostgreSQL reports the constraint name, SQLite only the columns
    return SLOT_CONSTRAINT_NAME in message or "UNIQUE constraint failed: appointment." in message


class CRUDAppointment(CRUDBase[Appointment, AppointmentCreate, AppointmentUpdate]):
    # ==================== READ ====================

    def get_multi_filtered(
        self,
        db: Session,
        *,
        clinician_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Appointment]:
        """List appointments, most recent first, optionally for one clinician."""
        stmt = select(Appointment).order_by(Appointment.date.desc(), Appointment.id.desc())
        if clinician_id is not None:
            stmt = stmt.where(Appointment.clinician_id == clinician_id)
        stmt = stmt.offset(skip).limit(limit)
        return list(db.scalars(stmt).all())

    def get_by_patient(self, db: Session, *, patient_id: int) -> List[Appointment]:
        """Get all appointments of a patient, most recent first."""
        stmt = (
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(Appointment.date.desc())
        )
        return list(db.scalars(stmt).all())

    def get_by_clinician(self, db: Session, *, clinician_id: int) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.clinician_id == clinician_id)
            .order_by(Appointment.date.desc())
        )
        return list(db.scalars(stmt).all())

    def get_for_day(self, db: Session, *, day: date, clinician_id: Optional[int] = None) -> List[Appointment]:
        """Get appointments falling on one local calendar day, earliest first."""
        start = datetime.combine(day, time.min)
        stmt = (
            select(Appointment)
            .where(Appointment.date >= start, Appointment.date < start + timedelta(days=1))
            .order_by(Appointment.date)
        )
        if clinician_id is not None:
            stmt = stmt.where(Appointment.clinician_id == clinician_id)
        return list(db.scalars(stmt).all())

    def find_slot(
        self,
        db: Session,
        *,
        patient_id: int,
        clinician_id: int,
        slot: datetime,
        exclude_id: Optional[int] = None,
    ) -> Optional[Appointment]:
        """Find an appointment occupying the (patient, clinician, date+time) slot."""
        stmt = select(Appointment).where(
            Appointment.patient_id == patient_id,
            Appointment.clinician_id == clinician_id,
            Appointment.date == slot,
        )
        if exclude_id is not None:
            stmt = stmt.where(Appointment.id != exclude_id)
        return db.scalars(stmt.limit(1)).first()

    def get_with_relations(self, db: Session, *, ids: Optional[List[int]] = None, clinician_id: Optional[int] = None) -> List[Appointment]:
        """Load appointments with patient, clinician and vitals eagerly joined."""
        stmt = select(Appointment).options(
            joinedload(Appointment.patient).joinedload(Patient.person),
            joinedload(Appointment.clinician).joinedload(Clinician.person),
            joinedload(Appointment.vitals),
        ).order_by(Appointment.id)
        if ids is not None:
            stmt = stmt.where(Appointment.id.in_(ids))
        if clinician_id is not None:
            stmt = stmt.where(Appointment.clinician_id == clinician_id)
        return list(db.scalars(stmt).unique().all())

    def to_detail(
        self,
        db: Session,
        appointment: Appointment,
        *,
        include_prescriptions: bool = False,
        include_supplements: bool = False,
    ) -> AppointmentDetail:
        """Build the joined view used by the appointment page and the exports."""
        detail = AppointmentDetail.model_validate(appointment)
        if include_prescriptions:
            stmt = (
                select(Prescription)
                .where(Prescription.patient_id == appointment.patient_id)
                .order_by(Prescription.id)
            )
            detail.prescriptions = [PrescriptionResponse.model_validate(p) for p in db.scalars(stmt).all()]
        if include_supplements:
            stmt = (
                select(Supplement)
                .where(Supplement.patient_id == appointment.patient_id)
                .order_by(Supplement.id)
            )
            detail.supplements = [SupplementResponse.model_validate(s) for s in db.scalars(stmt).all()]
        return detail

    def get_detail(
        self,
        db: Session,
        *,
        appointment_id: int,
        include_prescriptions: bool = True,
        include_supplements: bool = True,
    ) -> Optional[AppointmentDetail]:
        rows = self.get_with_relations(db, ids=[appointment_id])
        if not rows:
            return None
        return self.to_detail(
            db,
            rows[0],
            include_prescriptions=include_prescriptions,
            include_supplements=include_supplements,
        )

    # ==================== WRITE ====================

    def _ensure_participants(self, db: Session, *, patient_id: int, clinician_id: int) -> None:
        if db.get(Patient, patient_id) is None:
            raise RecordNotFoundError("Patient", patient_id)
        if db.get(Clinician, clinician_id) is None:
            raise RecordNotFoundError("Clinician", clinician_id)

    def _commit_slot(self, db: Session, db_obj: Appointment) -> Appointment:
        try:
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except IntegrityError as e:
            db.rollback()
            if _is_slot_violation(e):
                logger.warning(
                    f"Slot constraint rejected appointment: patient={db_obj.patient_id}, "
                    f"clinician={db_obj.clinician_id}, date={db_obj.date}"
                )
                raise DuplicateAppointmentError() from e
            raise
        except Exception:
            db.rollback()
            raise
        return db_obj

    def create_appointment(self, db: Session, *, obj_in: AppointmentCreate) -> Appointment:
        """Create an appointment after checking its slot is free.

        Raises:
            RecordNotFoundError: Unknown patient or clinician
            DuplicateAppointmentError: Slot already taken (read check or unique constraint)
        """
        self._ensure_participants(db, patient_id=obj_in.patient_id, clinician_id=obj_in.clinician_id)

        slot = combine_date_time(obj_in.date, obj_in.time)
        if self.find_slot(db, patient_id=obj_in.patient_id, clinician_id=obj_in.clinician_id, slot=slot):
            logger.warning(
                f"Duplicate appointment rejected: patient={obj_in.patient_id}, "
                f"clinician={obj_in.clinician_id}, date={slot.isoformat()}"
            )
            raise DuplicateAppointmentError()

        db_obj = Appointment(
            **obj_in.model_dump(exclude={"date", "time"}),
            date=slot,
        )
        db_obj = self._commit_slot(db, db_obj)
        logger.info(f"Appointment created: id={db_obj.id}, date={slot.isoformat()}")
        return db_obj

    def update_appointment(self, db: Session, *, db_obj: Appointment, obj_in: AppointmentUpdate) -> Appointment:
        """Apply a partial update; date and time are recombined against the stored slot."""
        update_data = obj_in.model_dump(exclude_unset=True, exclude_none=True)
        new_day = update_data.pop("date", None)
        new_time = update_data.pop("time", None)

        patient_id = update_data.get("patient_id", db_obj.patient_id)
        clinician_id = update_data.get("clinician_id", db_obj.clinician_id)
        if "patient_id" in update_data or "clinician_id" in update_data:
            self._ensure_participants(db, patient_id=patient_id, clinician_id=clinician_id)

        slot = db_obj.date
        if new_day is not None or new_time is not None:
            day = new_day if new_day is not None else db_obj.date.date()
            time_str = new_time if new_time is not None else db_obj.date.strftime("%H:%M")
            slot = combine_date_time(day, time_str)

        slot_changed = (
            slot != db_obj.date
            or patient_id != db_obj.patient_id
            or clinician_id != db_obj.clinician_id
        )
        if slot_changed and self.find_slot(
            db, patient_id=patient_id, clinician_id=clinician_id, slot=slot, exclude_id=db_obj.id
        ):
            logger.warning(f"Duplicate appointment rejected on update: id={db_obj.id}, date={slot.isoformat()}")
            raise DuplicateAppointmentError()

        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db_obj.date = slot

        db_obj = self._commit_slot(db, db_obj)
        logger.info(f"Appointment updated: id={db_obj.id}")
        return db_obj

    def delete_appointment(self, db: Session, *, id: int) -> Optional[Appointment]:
        """Delete an appointment. Vitals and prescriptions are left in place."""
        db_obj = self.delete(db, id=id)
        if db_obj is not None:
            logger.info(f"Appointment deleted: id={id}")
        return db_obj

    def set_status(self, db: Session, *, db_obj: Appointment, status: str) -> Appointment:
        return self.update(db, db_obj=db_obj, obj_in={"status": status})

    def set_payment_status(self, db: Session, *, db_obj: Appointment, payment_status: str) -> Appointment:
        return self.update(db, db_obj=db_obj, obj_in={"payment_status": payment_status})

    def count(self, db: Session) -> int:
        return db.scalar(select(func.count(Appointment.id))) or 0


# Singleton instance
crud_appointment = CRUDAppointment(Appointment)
