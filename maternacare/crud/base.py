"""Generic repository base shared by the MaternaCare CRUD modules."""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from maternacare.database import Base


ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


def _as_dict(obj_in: Union[BaseModel, Dict[str, Any]]) -> Dict[str, Any]:
	if isinstance(obj_in, BaseModel):
		return obj_in.model_dump(exclude_unset=True)
	return dict(obj_in)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
	"""Repository for one table.

	Methods take and return ORM instances. Every write commits on its own and
	rolls the session back before re-raising if the commit fails.
	"""

	def __init__(self, model: Type[ModelType]):
		self.model = model

	def _persist(self, db: Session, db_obj: ModelType) -> ModelType:
		try:
			db.add(db_obj)
			db.commit()
			db.refresh(db_obj)
		except Exception:
			db.rollback()
			raise
		return db_obj

	# ----- Read -----
	def get(self, db: Session, id: Any) -> Optional[ModelType]:
		return db.get(self.model, id)

	def get_by_patient(self, db: Session, *, patient_id: int) -> List[ModelType]:
		"""Rows attached to one patient, in insertion order."""
		column = getattr(self.model, "patient_id", None)
		if column is None:
			raise AttributeError(f"{self.model.__name__} is not attached to a patient")
		stmt = select(self.model).where(column == patient_id).order_by(self.model.id)
		return list(db.scalars(stmt).all())

	# ----- Write -----
	def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]], **extra: Any) -> ModelType:
		"""Insert a row from a schema or dict; `extra` sets columns the schema does not carry (e.g. patient_id)."""
		values = _as_dict(obj_in)
		values.update(extra)
		return self._persist(db, self.model(**values))

	def update(
		self,
		db: Session,
		*,
		db_obj: ModelType,
		obj_in: Union[UpdateSchemaType, Dict[str, Any]],
	) -> ModelType:
		"""Apply the fields that were sent; unknown keys are ignored."""
		for field, value in _as_dict(obj_in).items():
			if hasattr(db_obj, field):
				setattr(db_obj, field, value)
		return self._persist(db, db_obj)

	def delete(self, db: Session, *, id: Any) -> Optional[ModelType]:
		"""Remove a row for good. Returns it, or None when there was nothing to delete."""
		db_obj = self.get(db, id)
		if db_obj is None:
			return None
		try:
			db.delete(db_obj)
			db.commit()
		except Exception:
			db.rollback()
			raise
		return db_obj
