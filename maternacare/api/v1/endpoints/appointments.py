"""Appointment endpoints."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from maternacare.api.deps import clinician_scope, get_current_user, get_db, require_admin
from maternacare.core.exceptions import (
    DuplicateAppointmentError,
    DuplicateAppointmentException,
    NotFoundException,
    RecordNotFoundError,
    SaveFailedException,
    VitalsSaveError,
)
from maternacare.crud import crud_appointment, crud_vitals
from maternacare.models.appointment import Appointment
from maternacare.schemas.appointment import (
    AppointmentCreate,
    AppointmentDetail,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    PaymentStatusUpdate,
    VitalsSaveResponse,
)
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.vitals import VitalsResponse, VitalsSave
from maternacare.services.vitals_recorder import vitals_recorder

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
)


def _get_visible_appointment(db: Session, appointment_id: int, current_user: SessionUser) -> Appointment:
    """Load an appointment the current user is allowed to see."""
    appointment = crud_appointment.get(db, appointment_id)
    scope = clinician_scope(current_user)
    if not appointment or (scope is not None and appointment.clinician_id != scope):
        raise NotFoundException("Appointment not found")
    return appointment


# ==================== CREATE ====================

@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new appointment",
    description="""
    Create an appointment for a patient with a clinician.

    `date` (YYYY-MM-DD) and `time` (HH:MM, 24-hour) are merged into one local
    timestamp. A second appointment for the same patient, clinician, date and
    time is rejected with 409.
    """,
)
def create_appointment(
    appointment_in: AppointmentCreate,
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentResponse:
    """Create a new appointment."""
    try:
        appointment = crud_appointment.create_appointment(db, obj_in=appointment_in)
    except RecordNotFoundError as e:
        raise NotFoundException(str(e))
    except DuplicateAppointmentError as e:
        raise DuplicateAppointmentException(str(e))
    return AppointmentResponse.model_validate(appointment)


# ==================== READ ====================

@router.get(
    "/",
    response_model=AppointmentListResponse,
    summary="List appointments",
    description="""
    List appointments, most recent first.

    Clinicians only see their own appointments; admins see all of them.
    Pass `day` to list one calendar day, or `patient_id` for one patient.
    """,
)
def list_appointments(
    day: Optional[date] = Query(None, description="Only appointments on this day (YYYY-MM-DD)"),
    patient_id: Optional[int] = Query(None, description="Only appointments of this patient"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentListResponse:
    scope = clinician_scope(current_user)
    if day is not None:
        appointments = crud_appointment.get_for_day(db, day=day, clinician_id=scope)
    elif patient_id is not None:
        appointments = crud_appointment.get_by_patient(db, patient_id=patient_id)
        if scope is not None:
            appointments = [a for a in appointments if a.clinician_id == scope]
    else:
        appointments = crud_appointment.get_multi_filtered(db, clinician_id=scope, skip=skip, limit=limit)

    return AppointmentListResponse(
        appointments=[AppointmentResponse.model_validate(a) for a in appointments],
        total=len(appointments),
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentDetail,
    summary="Get appointment with patient, clinician, vitals, prescriptions and supplements",
)
def get_appointment(
    appointment_id: int = Path(..., description="Appointment ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentDetail:
    _get_visible_appointment(db, appointment_id, current_user)
    return crud_appointment.get_detail(db, appointment_id=appointment_id)


# ==================== UPDATE ====================

@router.put(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    summary="Update an appointment",
    description="""
    Partially update an appointment. When only `date` or only `time` is sent,
    the other part is taken from the stored timestamp before the duplicate
    check runs.
    """,
)
def update_appointment(
    appointment_in: AppointmentUpdate,
    appointment_id: int = Path(..., description="Appointment ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentResponse:
    appointment = _get_visible_appointment(db, appointment_id, current_user)
    try:
        appointment = crud_appointment.update_appointment(db, db_obj=appointment, obj_in=appointment_in)
    except RecordNotFoundError as e:
        raise NotFoundException(str(e))
    except DuplicateAppointmentError as e:
        raise DuplicateAppointmentException(str(e))
    return AppointmentResponse.model_validate(appointment)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    summary="Set appointment status",
    description="Any of Scheduled, Completed, Canceled may follow any other.",
)
def set_appointment_status(
    status_in: AppointmentStatusUpdate,
    appointment_id: int = Path(..., description="Appointment ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentResponse:
    appointment = _get_visible_appointment(db, appointment_id, current_user)
    appointment = crud_appointment.set_status(db, db_obj=appointment, status=status_in.status)
    logger.info(f"Appointment {appointment_id} status set to {status_in.status}")
    return AppointmentResponse.model_validate(appointment)


@router.patch(
    "/{appointment_id}/payment-status",
    response_model=AppointmentResponse,
    summary="Set appointment payment status",
    description="Any of Unpaid, Pending, Paid may follow any other. `Completed` is accepted as Paid.",
)
def set_payment_status(
    payment_in: PaymentStatusUpdate,
    appointment_id: int = Path(..., description="Appointment ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AppointmentResponse:
    appointment = _get_visible_appointment(db, appointment_id, current_user)
    appointment = crud_appointment.set_payment_status(
        db, db_obj=appointment, payment_status=payment_in.payment_status
    )
    logger.info(f"Appointment {appointment_id} payment status set to {payment_in.payment_status}")
    return AppointmentResponse.model_validate(appointment)


# ==================== VITALS ====================

@router.get(
    "/{appointment_id}/vitals",
    response_model=VitalsResponse,
    summary="Get the vitals recorded for an appointment",
)
def get_vitals(
    appointment_id: int = Path(..., description="Appointment ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> VitalsResponse:
    _get_visible_appointment(db, appointment_id, current_user)
    vitals = crud_vitals.get(db, appointment_id)
    if not vitals:
        raise NotFoundException("No vitals recorded for this appointment")
    return VitalsResponse.model_validate(vitals)


@router.put(
    "/{appointment_id}/vitals",
    response_model=VitalsSaveResponse,
    summary="Record vitals for an appointment",
    description="""
    Insert or update the vitals of an appointment, together with the weight
    and gestational age stored on the appointment. Both are saved or neither is.

    **Ranges:** temperature 35-42 °C, pulse 40-200 bpm, respiration 12-30/min,
    oxygen saturation 90-100 %, weight 30-200 kg, gestational age 0-45 weeks.
    """,
)
def save_vitals(
    vitals_in: VitalsSave,
    appointment_id: int = Path(..., description="Appointment ID"),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> VitalsSaveResponse:
    _get_visible_appointment(db, appointment_id, current_user)
    try:
        result = vitals_recorder.save_vitals(db, appointment_id=appointment_id, obj_in=vitals_in)
    except RecordNotFoundError as e:
        raise NotFoundException(str(e))
    except VitalsSaveError as e:
        raise SaveFailedException(str(e))

    return VitalsSaveResponse(
        created=result.created,
        vitals=VitalsResponse.model_validate(result.vitals),
        appointment=AppointmentResponse.model_validate(result.appointment),
    )


# ==================== DELETE ====================

@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an appointment (admin only)",
    description="Vitals and prescriptions linked to the appointment are kept.",
)
def delete_appointment(
    appointment_id: int = Path(..., description="Appointment ID"),
    current_user: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> None:
    if not crud_appointment.delete_appointment(db, id=appointment_id):
        raise NotFoundException("Appointment not found")
