"""Service layer for recording vitals on an appointment."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from maternacare.core.exceptions import RecordNotFoundError, VitalsSaveError
from maternacare.crud.vitals import crud_vitals
from maternacare.models.appointment import Appointment
from maternacare.models.vitals import Vitals
from maternacare.schemas.vitals import VitalsSave

logger = logging.getLogger(__name__)


@dataclass
class VitalsSaveResult:
    vitals: Vitals
    appointment: Appointment
    created: bool


class VitalsRecorder:
    """
    Saves a vitals row together with the weight and gestational age
    stored on the appointment.

    Both writes share one transaction: either both are kept or neither is.
    Range checks happen in the `VitalsSave` schema, before anything is written.
    """

    def save_vitals(self, db: Session, *, appointment_id: int, obj_in: VitalsSave) -> VitalsSaveResult:
        """
        Upsert the vitals of an appointment and update its measurements.

        Args:
            db: Database session
            appointment_id: Appointment the vitals belong to (also the vitals id)
            obj_in: Validated vitals and measurements

        Returns:
            VitalsSaveResult with `created=True` on first save

        Raises:
            RecordNotFoundError: If the appointment does not exist
            VitalsSaveError: If either write fails; both are rolled back
        """
        appointment = db.get(Appointment, appointment_id)
        if appointment is None:
            raise RecordNotFoundError("Appointment", appointment_id)

        try:
            vitals, created = crud_vitals.stage_upsert(
                db, appointment_id=appointment_id, obj_in=obj_in.vitals_fields()
            )
            measurements = obj_in.measurements()
            appointment.weight = measurements.weight
            appointment.gestational_age = measurements.gestational_age
            db.add(appointment)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Vitals save rolled back for appointment {appointment_id}: {e}")
            raise VitalsSaveError(f"Failed to save vitals for appointment {appointment_id}") from e

        db.refresh(vitals)
        db.refresh(appointment)
        logger.info(
            f"Vitals {'recorded' if created else 'updated'} for appointment {appointment_id}"
        )
        return VitalsSaveResult(vitals=vitals, appointment=appointment, created=created)


# Singleton instance
vitals_recorder = VitalsRecorder()
