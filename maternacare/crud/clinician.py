"""CRUD operations for `Clinician` model."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from maternacare.core.security import get_password_hash, verify_password
from maternacare.crud.base import CRUDBase
from maternacare.crud.person import name_filter, split_person_fields
from maternacare.models.clinician import Clinician
from maternacare.models.person import Person
from maternacare.schemas.person import ClinicianCreate, ClinicianUpdate


logger = logging.getLogger(__name__)


class CRUDClinician(CRUDBase[Clinician, ClinicianCreate, ClinicianUpdate]):
    def get_multi_with_person(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Clinician]:
        """List clinicians with their person row, ordered by last then first name."""
        stmt = (
            select(Clinician)
            .join(Clinician.person)
            .options(joinedload(Clinician.person))
            .order_by(Person.last_name, Person.first_name)
        )
        if search:
            stmt = stmt.where(name_filter(search))
        if role:
            stmt = stmt.where(Clinician.role == role)
        if status:
            stmt = stmt.where(Person.status == status)
        stmt = stmt.offset(skip).limit(limit)
        return list(db.scalars(stmt).all())

    def count_active(self, db: Session) -> int:
        stmt = select(func.count(Clinician.id)).join(Clinician.person).where(Person.status == "Active")
        return db.scalar(stmt) or 0

    def get_by_full_name(self, db: Session, *, name: str) -> Optional[Clinician]:
        """Match "first [middle] last" case-insensitively."""
        wanted = " ".join(name.split()).lower()
        stmt = select(Clinician).options(joinedload(Clinician.person))
        for clinician in db.scalars(stmt).all():
            if clinician.person.full_name.lower() == wanted:
                return clinician
        return None

    def create_with_person(self, db: Session, *, obj_in: ClinicianCreate) -> Clinician:
        """Insert the person row and the clinician row in one transaction."""
        data = obj_in.model_dump(exclude_unset=True)
        raw_password = data.pop("password")
        person_data, clinician_data = split_person_fields(data)
        person = Person(**person_data)
        try:
            db.add(person)
            db.flush()
            db_obj = Clinician(
                id=person.id,
                password_hash=get_password_hash(raw_password),
                **clinician_data,
            )
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            logger.warning(f"Clinician creation rolled back for {obj_in.first_name} {obj_in.last_name}")
            raise
        logger.info(f"Clinician created: id={db_obj.id}, role={db_obj.role}")
        return db_obj

    def update_with_person(self, db: Session, *, db_obj: Clinician, obj_in: ClinicianUpdate) -> Clinician:
        person_data, clinician_data = split_person_fields(obj_in.model_dump(exclude_unset=True))
        for field, value in person_data.items():
            setattr(db_obj.person, field, value)
        for field, value in clinician_data.items():
            setattr(db_obj, field, value)
        try:
            db.add(db_obj)
            db.commit()
            db.refresh(db_obj)
        except Exception:
            db.rollback()
            raise
        return db_obj

    def authenticate(self, db: Session, *, name: str, password: str) -> Optional[Clinician]:
        clinician = self.get_by_full_name(db, name=name)
        if not clinician:
            return None
        if not verify_password(password, clinician.password_hash):
            return None
        return clinician


# Singleton instance
crud_clinician = CRUDClinician(Clinician)
