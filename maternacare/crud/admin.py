"""CRUD operations for `Admin` model."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from maternacare.core.security import get_password_hash, verify_password
from maternacare.crud.base import CRUDBase
from maternacare.models.admin import Admin


class CRUDAdmin(CRUDBase[Admin, BaseModel, BaseModel]):
    def get_by_full_name(self, db: Session, *, name: str) -> Optional[Admin]:
        """Match "first [middle] last" case-insensitively."""
        wanted = " ".join(name.split()).lower()
        for admin in db.scalars(select(Admin)).all():
            if admin.full_name.lower() == wanted:
                return admin
        return None

    def create_admin(
        self,
        db: Session,
        *,
        first_name: str,
        last_name: str,
        password: str,
        middle_name: Optional[str] = None,
    ) -> Admin:
        return self.create(
            db,
            obj_in={
                "first_name": first_name,
                "middle_name": middle_name,
                "last_name": last_name,
                "password_hash": get_password_hash(password),
            },
        )

    def authenticate(self, db: Session, *, name: str, password: str) -> Optional[Admin]:
        admin = self.get_by_full_name(db, name=name)
        if not admin:
            return None
        if not verify_password(password, admin.password_hash):
            return None
        return admin


# Singleton instance
crud_admin = CRUDAdmin(Admin)
