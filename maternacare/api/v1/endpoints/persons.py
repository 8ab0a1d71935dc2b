"""Endpoints shared by patients and clinicians: status and profile picture."""

import logging

from fastapi import APIRouter, Depends, File, Path, UploadFile
from sqlalchemy.orm import Session

from maternacare.api.deps import get_current_user, get_db
from maternacare.core.exceptions import NotFoundException, SaveFailedException, StorageError
from maternacare.crud import crud_person
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.person import PersonResponse, PersonStatusUpdate, ProfilePictureResponse
from maternacare.utils.file_handler import (
    PROFILE_PICTURE_BUCKET,
    create_signed_url,
    delete_object,
    save_upload_file,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/persons",
    tags=["Persons"],
)


@router.patch(
    "/{person_id}/status",
    response_model=PersonResponse,
    summary="Mark a patient or clinician Active or Inactive",
)
def set_person_status(
    status_in: PersonStatusUpdate,
    person_id: int = Path(..., description="Person ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PersonResponse:
    person = crud_person.set_status(db, person_id=person_id, status=status_in.status)
    if not person:
        raise NotFoundException("Person not found")
    return PersonResponse.model_validate(person)


@router.put(
    "/{person_id}/profile-picture",
    response_model=ProfilePictureResponse,
    summary="Upload a profile picture",
    description="""
    Upload a JPEG or PNG profile picture (max 5MB). The previous picture,
    if any, is removed. Returns a signed URL valid for one hour.
    """,
)
def upload_profile_picture(
    person_id: int = Path(..., description="Person ID"),
    file: UploadFile = File(...),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfilePictureResponse:
    person = crud_person.get(db, person_id)
    if not person:
        raise NotFoundException("Person not found")

    try:
        key = save_upload_file(file, PROFILE_PICTURE_BUCKET, prefix=str(person_id))
    except StorageError as e:
        raise SaveFailedException(str(e))

    previous = person.fileurl
    crud_person.set_profile_picture(db, person_id=person_id, fileurl=key)
    if previous:
        delete_object(PROFILE_PICTURE_BUCKET, previous)

    signed_url, expires_at = create_signed_url(PROFILE_PICTURE_BUCKET, key)
    logger.info(f"Profile picture updated for person {person_id}")
    return ProfilePictureResponse(person_id=person_id, fileurl=key, signed_url=signed_url, expires_at=expires_at)


@router.get(
    "/{person_id}/profile-picture",
    response_model=ProfilePictureResponse,
    summary="Get a signed URL for a profile picture",
)
def get_profile_picture(
    person_id: int = Path(..., description="Person ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfilePictureResponse:
    person = crud_person.get(db, person_id)
    if not person or not person.fileurl:
        raise NotFoundException("Profile picture not found")
    try:
        signed_url, expires_at = create_signed_url(PROFILE_PICTURE_BUCKET, person.fileurl)
    except StorageError as e:
        raise NotFoundException(str(e))
    return ProfilePictureResponse(
        person_id=person_id, fileurl=person.fileurl, signed_url=signed_url, expires_at=expires_at
    )
