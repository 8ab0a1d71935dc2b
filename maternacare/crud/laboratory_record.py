"""CRUD operations for `LaboratoryRecord` model."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from maternacare.crud.base import CRUDBase
from maternacare.models.laboratory_record import LaboratoryRecord
from maternacare.schemas.laboratory_record import LaboratoryRecordCreate
from maternacare.utils.file_handler import LABORATORY_BUCKET, delete_object


logger = logging.getLogger(__name__)


class CRUDLaboratoryRecord(CRUDBase[LaboratoryRecord, LaboratoryRecordCreate, LaboratoryRecordCreate]):
    def create_with_file(
        self, db: Session, *, obj_in: LaboratoryRecordCreate, patient_id: int, fileurl: Optional[str]
    ) -> LaboratoryRecord:
        """Insert the record for an already stored file.

        The stored object is removed again if the insert fails.
        """
        try:
            db_obj = self.create(db, obj_in=obj_in, patient_id=patient_id, fileurl=fileurl)
        except Exception:
            if fileurl:
                delete_object(LABORATORY_BUCKET, fileurl)
            raise
        logger.info(f"Laboratory record created: id={db_obj.id}, patient={patient_id}")
        return db_obj

    def delete_with_file(self, db: Session, *, id: int) -> Optional[LaboratoryRecord]:
        """Delete the record, then its stored file."""
        db_obj = self.get(db, id)
        if db_obj is None:
            return None
        fileurl = db_obj.fileurl
        self.delete(db, id=id)
        if fileurl and not delete_object(LABORATORY_BUCKET, fileurl):
            logger.warning(f"Stored file already missing for laboratory record {id}: {fileurl}")
        return db_obj


# Singleton instance
crud_laboratory_record = CRUDLaboratoryRecord(LaboratoryRecord)
