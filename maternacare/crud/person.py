"""CRUD operations for `Person` model and the helpers shared by its extensions."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from maternacare.crud.base import CRUDBase
from maternacare.models.person import Person
from maternacare.schemas.person import PersonBase, PersonUpdate


logger = logging.getLogger(__name__)

PERSON_FIELDS = set(PersonBase.model_fields)


def split_person_fields(data: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Split a flat payload into (person columns, extension columns)."""
    person_data = {k: v for k, v in data.items() if k in PERSON_FIELDS}
    extension_data = {k: v for k, v in data.items() if k not in PERSON_FIELDS}
    return person_data, extension_data


def name_filter(search: str):
    """Case-insensitive match against any part of a person's name."""
    pattern = f"%{search.strip()}%"
    return or_(
        Person.first_name.ilike(pattern),
        Person.middle_name.ilike(pattern),
        Person.last_name.ilike(pattern),
    )


class CRUDPerson(CRUDBase[Person, PersonBase, PersonUpdate]):
    def set_status(self, db: Session, *, person_id: int, status: str) -> Optional[Person]:
        """Mark a person Active or Inactive."""
        person = self.get(db, person_id)
        if not person:
            return None
        person = self.update(db, db_obj=person, obj_in={"status": status})
        logger.info(f"Person {person_id} status set to {status}")
        return person

    def set_profile_picture(self, db: Session, *, person_id: int, fileurl: str) -> Optional[Person]:
        """Point a person at a stored profile picture object."""
        person = self.get(db, person_id)
        if not person:
            return None
        return self.update(db, db_obj=person, obj_in={"fileurl": fileurl})


# Singleton instance
crud_person = CRUDPerson(Person)
