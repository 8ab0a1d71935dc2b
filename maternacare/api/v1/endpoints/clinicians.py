"""Clinician endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from maternacare.api.deps import get_current_user, get_db
from maternacare.core.exceptions import NotFoundException
from maternacare.crud import crud_clinician
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.person import (
    ClinicianCreate,
    ClinicianListResponse,
    ClinicianResponse,
    ClinicianUpdate,
)

router = APIRouter(
    prefix="/clinicians",
    tags=["Clinicians"],
)


# ==================== CREATE ====================

@router.post(
    "/",
    response_model=ClinicianResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new clinician",
    description="""
    Create the person record and the clinician record together.
    If either insert fails, neither is kept.

    **Role:** Doctor or Midwife. The password is stored hashed.
    """,
)
def create_clinician(
    clinician_in: ClinicianCreate,
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClinicianResponse:
    clinician = crud_clinician.create_with_person(db, obj_in=clinician_in)
    return ClinicianResponse.model_validate(clinician)


# ==================== READ ====================

@router.get(
    "/",
    response_model=ClinicianListResponse,
    summary="List clinicians",
)
def list_clinicians(
    search: Optional[str] = Query(None, description="Name search"),
    role: Optional[str] = Query(None, description="Doctor or Midwife"),
    status_filter: Optional[str] = Query(None, alias="status", description="Active or Inactive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClinicianListResponse:
    clinicians = crud_clinician.get_multi_with_person(
        db, search=search, role=role, status=status_filter, skip=skip, limit=limit
    )
    return ClinicianListResponse(
        clinicians=[ClinicianResponse.model_validate(c) for c in clinicians],
        total=len(clinicians),
    )


@router.get(
    "/{clinician_id}",
    response_model=ClinicianResponse,
    summary="Get clinician by ID",
)
def get_clinician(
    clinician_id: int = Path(..., description="Clinician ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClinicianResponse:
    clinician = crud_clinician.get(db, clinician_id)
    if not clinician:
        raise NotFoundException("Clinician not found")
    return ClinicianResponse.model_validate(clinician)


# ==================== UPDATE ====================

@router.put(
    "/{clinician_id}",
    response_model=ClinicianResponse,
    summary="Update clinician and person details",
)
def update_clinician(
    clinician_in: ClinicianUpdate,
    clinician_id: int = Path(..., description="Clinician ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ClinicianResponse:
    clinician = crud_clinician.get(db, clinician_id)
    if not clinician:
        raise NotFoundException("Clinician not found")
    clinician = crud_clinician.update_with_person(db, db_obj=clinician, obj_in=clinician_in)
    return ClinicianResponse.model_validate(clinician)
