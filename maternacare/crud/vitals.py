"""CRUD operations for `Vitals` model."""

from __future__ import annotations

from typing import Tuple

from sqlalchemy.orm import Session

from maternacare.crud.base import CRUDBase
from maternacare.models.vitals import Vitals
from maternacare.schemas.vitals import VitalsFields


class CRUDVitals(CRUDBase[Vitals, VitalsFields, VitalsFields]):
    def stage_upsert(self, db: Session, *, appointment_id: int, obj_in: VitalsFields) -> Tuple[Vitals, bool]:
        """Insert or update the vitals row of an appointment without committing.

        Returns:
            (vitals, created)
        """
        values = obj_in.model_dump()
        db_obj = self.get(db, appointment_id)
        created = db_obj is None
        if created:
            db_obj = Vitals(id=appointment_id, **values)
        else:
            for field, value in values.items():
                setattr(db_obj, field, value)
        db.add(db_obj)
        db.flush()
        return db_obj, created


# Singleton instance
crud_vitals = CRUDVitals(Vitals)
