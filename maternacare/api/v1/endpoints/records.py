"""Patient record endpoints: allergies, prescriptions and supplements."""

import logging

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from maternacare.api.deps import get_current_user, get_db, require_admin
from maternacare.core.exceptions import NotFoundException
from maternacare.crud import crud_allergy, crud_clinician, crud_patient, crud_prescription, crud_supplement
from maternacare.schemas.allergy import AllergyCreate, AllergyListResponse, AllergyResponse
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.prescription import (
    PrescriptionCreate,
    PrescriptionListResponse,
    PrescriptionResponse,
    PrescriptionUpdate,
)
from maternacare.schemas.supplement import (
    SupplementCreate,
    SupplementListResponse,
    SupplementResponse,
    SupplementUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Patient Records"],
)


def _ensure_patient(db: Session, patient_id: int) -> None:
    if not crud_patient.get(db, patient_id):
        raise NotFoundException("Patient not found")


def _ensure_clinician(db: Session, clinician_id) -> None:
    if clinician_id is not None and not crud_clinician.get(db, clinician_id):
        raise NotFoundException("Clinician not found")


# ==================== ALLERGIES ====================

@router.get(
    "/patients/{patient_id}/allergies",
    response_model=AllergyListResponse,
    summary="List a patient's allergies",
)
def list_allergies(
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AllergyListResponse:
    _ensure_patient(db, patient_id)
    allergies = crud_allergy.get_by_patient(db, patient_id=patient_id)
    return AllergyListResponse(
        allergies=[AllergyResponse.model_validate(a) for a in allergies],
        total=len(allergies),
    )


@router.post(
    "/patients/{patient_id}/allergies",
    response_model=AllergyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an allergy",
)
def add_allergy(
    allergy_in: AllergyCreate,
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AllergyResponse:
    _ensure_patient(db, patient_id)
    allergy = crud_allergy.create(db, obj_in=allergy_in, patient_id=patient_id)
    return AllergyResponse.model_validate(allergy)


@router.delete(
    "/allergies/{allergy_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an allergy (admin only)",
)
def delete_allergy(
    allergy_id: int = Path(..., description="Allergy ID"),
    current_user: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> None:
    if not crud_allergy.delete(db, id=allergy_id):
        raise NotFoundException("Allergy not found")


# ==================== PRESCRIPTIONS ====================

@router.get(
    "/patients/{patient_id}/prescriptions",
    response_model=PrescriptionListResponse,
    summary="List a patient's prescriptions",
)
def list_prescriptions(
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PrescriptionListResponse:
    _ensure_patient(db, patient_id)
    prescriptions = crud_prescription.get_by_patient(db, patient_id=patient_id)
    return PrescriptionListResponse(
        prescriptions=[PrescriptionResponse.model_validate(p) for p in prescriptions],
        total=len(prescriptions),
    )


@router.post(
    "/patients/{patient_id}/prescriptions",
    response_model=PrescriptionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a prescription",
    description="Optionally linked to the appointment it was written in via `appointment_id`.",
)
def add_prescription(
    prescription_in: PrescriptionCreate,
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PrescriptionResponse:
    _ensure_patient(db, patient_id)
    _ensure_clinician(db, prescription_in.clinician_id)
    prescription = crud_prescription.create(db, obj_in=prescription_in, patient_id=patient_id)
    logger.info(f"Prescription {prescription.id} added for patient {patient_id}")
    return PrescriptionResponse.model_validate(prescription)


@router.put(
    "/prescriptions/{prescription_id}",
    response_model=PrescriptionResponse,
    summary="Update a prescription",
)
def update_prescription(
    prescription_in: PrescriptionUpdate,
    prescription_id: int = Path(..., description="Prescription ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PrescriptionResponse:
    prescription = crud_prescription.get(db, prescription_id)
    if not prescription:
        raise NotFoundException("Prescription not found")
    _ensure_clinician(db, prescription_in.clinician_id)
    prescription = crud_prescription.update(db, db_obj=prescription, obj_in=prescription_in)
    return PrescriptionResponse.model_validate(prescription)


@router.delete(
    "/prescriptions/{prescription_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a prescription (admin only)",
)
def delete_prescription(
    prescription_id: int = Path(..., description="Prescription ID"),
    current_user: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> None:
    if not crud_prescription.delete(db, id=prescription_id):
        raise NotFoundException("Prescription not found")


# ==================== SUPPLEMENTS ====================

@router.get(
    "/patients/{patient_id}/supplements",
    response_model=SupplementListResponse,
    summary="List a patient's supplement recommendations",
)
def list_supplements(
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SupplementListResponse:
    _ensure_patient(db, patient_id)
    supplements = crud_supplement.get_by_patient(db, patient_id=patient_id)
    return SupplementListResponse(
        supplements=[SupplementResponse.model_validate(s) for s in supplements],
        total=len(supplements),
    )


@router.post(
    "/patients/{patient_id}/supplements",
    response_model=SupplementResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a supplement recommendation",
)
def add_supplement(
    supplement_in: SupplementCreate,
    patient_id: int = Path(..., description="Patient ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SupplementResponse:
    _ensure_patient(db, patient_id)
    _ensure_clinician(db, supplement_in.clinician_id)
    supplement = crud_supplement.create(db, obj_in=supplement_in, patient_id=patient_id)
    return SupplementResponse.model_validate(supplement)


@router.put(
    "/supplements/{supplement_id}",
    response_model=SupplementResponse,
    summary="Update a supplement recommendation",
)
def update_supplement(
    supplement_in: SupplementUpdate,
    supplement_id: int = Path(..., description="Supplement ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SupplementResponse:
    supplement = crud_supplement.get(db, supplement_id)
    if not supplement:
        raise NotFoundException("Supplement not found")
    _ensure_clinician(db, supplement_in.clinician_id)
    supplement = crud_supplement.update(db, db_obj=supplement, obj_in=supplement_in)
    return SupplementResponse.model_validate(supplement)


@router.delete(
    "/supplements/{supplement_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a supplement recommendation (admin only)",
)
def delete_supplement(
    supplement_id: int = Path(..., description="Supplement ID"),
    current_user: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> None:
    if not crud_supplement.delete(db, id=supplement_id):
        raise NotFoundException("Supplement not found")
