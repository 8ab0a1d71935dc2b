"""Laboratory record endpoints."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, UploadFile, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from maternacare.api.deps import get_current_user, get_db, require_admin
from maternacare.core.exceptions import NotFoundException, SaveFailedException, StorageError
from maternacare.crud import crud_laboratory_record, crud_patient
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.laboratory_record import (
    LaboratoryRecordCreate,
    LaboratoryRecordListResponse,
    LaboratoryRecordResponse,
    SignedUrlResponse,
)
from maternacare.utils.file_handler import LABORATORY_BUCKET, create_signed_url, save_upload_file

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Laboratory Records"],
)


@router.get(
    "/patients/{patient_id}/laboratory-records",
    response_model=LaboratoryRecordListResponse,
    summary="List a patient's laboratory records",
)
def list_laboratory_records(
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LaboratoryRecordListResponse:
    if not crud_patient.get(db, patient_id):
        raise NotFoundException("Patient not found")
    records = crud_laboratory_record.get_by_patient(db, patient_id=patient_id)
    return LaboratoryRecordListResponse(
        records=[LaboratoryRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.post(
    "/patients/{patient_id}/laboratory-records",
    response_model=LaboratoryRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a laboratory record",
    description="""
    Multipart form: the record fields plus a `file` (PDF, JPEG or PNG, max 5MB).

    The file content must match its extension. The file is stored in the
    `laboratory-files` bucket; if the record cannot be saved the file is removed.
    """,
)
def upload_laboratory_record(
    patient_id: int = Path(..., description="Patient ID"),
    file_name: str = Form(...),
    record_type: str = Form(...),
    doctor: str = Form(...),
    ordered_date: date = Form(...),
    received_date: date = Form(...),
    reported_date: date = Form(...),
    impressions: str = Form(...),
    remarks: Optional[str] = Form(None),
    recommendations: Optional[str] = Form(None),
    file: UploadFile = File(...),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> LaboratoryRecordResponse:
    if not crud_patient.get(db, patient_id):
        raise NotFoundException("Patient not found")

    try:
        record_in = LaboratoryRecordCreate(
            file_name=file_name,
            record_type=record_type,
            doctor=doctor,
            ordered_date=ordered_date,
            received_date=received_date,
            reported_date=reported_date,
            impressions=impressions,
            remarks=remarks,
            recommendations=recommendations,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.errors())

    try:
        key = save_upload_file(file, LABORATORY_BUCKET, prefix=str(patient_id))
    except StorageError as e:
        raise SaveFailedException(str(e))

    record = crud_laboratory_record.create_with_file(db, obj_in=record_in, patient_id=patient_id, fileurl=key)
    return LaboratoryRecordResponse.model_validate(record)


@router.get(
    "/laboratory-records/{record_id}/signed-url",
    response_model=SignedUrlResponse,
    summary="Get a signed download URL for a laboratory file",
    description="The URL expires after one hour.",
)
def get_laboratory_file_url(
    record_id: int = Path(..., description="Laboratory record ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SignedUrlResponse:
    record = crud_laboratory_record.get(db, record_id)
    if not record or not record.fileurl:
        raise NotFoundException("Laboratory file not found")
    try:
        signed_url, expires_at = create_signed_url(LABORATORY_BUCKET, record.fileurl)
    except StorageError as e:
        raise NotFoundException(str(e))
    return SignedUrlResponse(signed_url=signed_url, expires_at=expires_at)


@router.delete(
    "/laboratory-records/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a laboratory record and its file (admin only)",
)
def delete_laboratory_record(
    record_id: int = Path(..., description="Laboratory record ID"),
    current_user: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> None:
    if not crud_laboratory_record.delete_with_file(db, id=record_id):
        raise NotFoundException("Laboratory record not found")
