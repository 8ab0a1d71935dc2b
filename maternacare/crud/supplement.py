"""CRUD operations for `Supplement` model."""

from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from maternacare.crud.base import CRUDBase
from maternacare.models.supplement import Supplement
from maternacare.schemas.supplement import SupplementCreate, SupplementUpdate


class CRUDSupplement(CRUDBase[Supplement, SupplementCreate, SupplementUpdate]):
    def get_by_clinician(self, db: Session, *, clinician_id: int) -> List[Supplement]:
        """Supplements recommended by one clinician, newest first."""
        stmt = (
            select(Supplement)
            .where(Supplement.clinician_id == clinician_id)
            .order_by(Supplement.date.desc(), Supplement.id.desc())
        )
        return list(db.scalars(stmt).all())


# Singleton instance
crud_supplement = CRUDSupplement(Supplement)
