"""Patient endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from maternacare.api.deps import get_current_user, get_db
from maternacare.core.exceptions import NotFoundException
from maternacare.crud import crud_patient
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.person import (
    PatientCreate,
    PatientListResponse,
    PatientResponse,
    PatientUpdate,
)

router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
)


# ==================== CREATE ====================

@router.post(
    "/",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new patient",
    description="""
    Create the person record and the patient record together.
    If either insert fails, neither is kept.
    """,
)
def create_patient(
    patient_in: PatientCreate,
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PatientResponse:
    patient = crud_patient.create_with_person(db, obj_in=patient_in)
    return PatientResponse.model_validate(patient)


# ==================== READ ====================

@router.get(
    "/",
    response_model=PatientListResponse,
    summary="List patients",
    description="Search matches first, middle or last name, case-insensitively.",
)
def list_patients(
    search: Optional[str] = Query(None, description="Name search"),
    status_filter: Optional[str] = Query(None, alias="status", description="Active or Inactive"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PatientListResponse:
    patients = crud_patient.get_multi_with_person(
        db, search=search, status=status_filter, skip=skip, limit=limit
    )
    return PatientListResponse(
        patients=[PatientResponse.model_validate(p) for p in patients],
        total=len(patients),
    )


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    summary="Get patient by ID",
)
def get_patient(
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PatientResponse:
    patient = crud_patient.get(db, patient_id)
    if not patient:
        raise NotFoundException("Patient not found")
    return PatientResponse.model_validate(patient)


# ==================== UPDATE ====================

@router.put(
    "/{patient_id}",
    response_model=PatientResponse,
    summary="Update patient and person details",
)
def update_patient(
    patient_in: PatientUpdate,
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PatientResponse:
    patient = crud_patient.get(db, patient_id)
    if not patient:
        raise NotFoundException("Patient not found")
    patient = crud_patient.update_with_person(db, db_obj=patient, obj_in=patient_in)
    return PatientResponse.model_validate(patient)
