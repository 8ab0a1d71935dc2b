"""Pydantic schemas for `Appointment` domain objects."""

import re
from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .person import ClinicianSummary, PatientSummary
from .prescription import PrescriptionResponse
from .supplement import SupplementResponse
from .vitals import VitalsResponse


SERVICES = ("Prenatal Care", "Postpartum Care", "Consultation", "Ultrasound", "Lab Test")
APPOINTMENT_STATUSES = ("Scheduled", "Completed", "Canceled")
PAYMENT_STATUSES = ("Unpaid", "Pending", "Paid")

# "Completed" is what the payment select used to send for a settled bill
PAYMENT_STATUS_ALIASES = {"completed": "Paid"}

TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def normalize_status(value: str) -> str:
    """Map a case-insensitive status onto its canonical spelling."""
    for status in APPOINTMENT_STATUSES:
        if value.strip().lower() == status.lower():
            return status
    raise ValueError(f"status must be one of {list(APPOINTMENT_STATUSES)}")


def normalize_payment_status(value: str) -> str:
    """Map a case-insensitive payment status onto its canonical spelling."""
    key = value.strip().lower()
    if key in PAYMENT_STATUS_ALIASES:
        return PAYMENT_STATUS_ALIASES[key]
    for status in PAYMENT_STATUSES:
        if key == status.lower():
            return status
    raise ValueError(f"payment_status must be one of {list(PAYMENT_STATUSES)}")


def parse_time(value: str) -> tuple:
    """Parse an "HH:MM" string into (hours, minutes)."""
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError("time must be formatted as HH:MM (24-hour)")
    return int(match.group(1)), int(match.group(2))


def _validate_service(value: str) -> str:
    if value not in SERVICES:
        raise ValueError(f"service must be one of {list(SERVICES)}")
    return value


class AppointmentCreate(BaseModel):
    patient_id: int
    clinician_id: int
    date: date_type
    time: str = Field(..., description="Local time of day, HH:MM")
    service: str
    weight: Optional[float] = Field(None, ge=30, le=200)
    gestational_age: Optional[int] = Field(None, ge=0, le=45)
    status: str = "Scheduled"
    payment_status: str = "Unpaid"

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        parse_time(v)
        return v.strip()

    @field_validator("service")
    @classmethod
    def validate_service(cls, v: str) -> str:
        return _validate_service(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return normalize_status(v)

    @field_validator("payment_status")
    @classmethod
    def validate_payment_status(cls, v: str) -> str:
        return normalize_payment_status(v)

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "patient_id": 1,
            "clinician_id": 2,
            "date": "2024-01-10",
            "time": "09:00",
            "service": "Prenatal Care",
            "status": "Scheduled",
            "payment_status": "Unpaid",
        }
    })


class AppointmentUpdate(BaseModel):
    patient_id: Optional[int] = None
    clinician_id: Optional[int] = None
    date: Optional[date_type] = None
    time: Optional[str] = None
    service: Optional[str] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        parse_time(v)
        return v.strip()

    @field_validator("service")
    @classmethod
    def validate_service(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _validate_service(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else normalize_status(v)

    @field_validator("payment_status")
    @classmethod
    def validate_payment_status(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else normalize_payment_status(v)


class AppointmentStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        return normalize_status(v)


class PaymentStatusUpdate(BaseModel):
    payment_status: str

    @field_validator("payment_status")
    @classmethod
    def validate_payment_status(cls, v: str) -> str:
        return normalize_payment_status(v)


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    clinician_id: int
    date: datetime
    service: str
    weight: Optional[float] = None
    gestational_age: Optional[int] = None
    status: str
    payment_status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AppointmentDetail(BaseModel):
    """Appointment joined with the records shown in views and exports."""
    id: Optional[int] = None
    patient_id: Optional[int] = None
    clinician_id: Optional[int] = None
    date: datetime
    service: Optional[str] = None
    weight: Optional[float] = None
    gestational_age: Optional[int] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    patient: Optional[PatientSummary] = None
    clinician: Optional[ClinicianSummary] = None
    vitals: Optional[VitalsResponse] = None
    prescriptions: Optional[List[PrescriptionResponse]] = None
    supplements: Optional[List[SupplementResponse]] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def patient_name(self) -> str:
        if self.patient is None:
            return "Unknown Patient"
        return self.patient.person.full_name

    @property
    def clinician_name(self) -> str:
        if self.clinician is None:
            return "Unknown Clinician"
        return self.clinician.person.full_name


class AppointmentListResponse(BaseModel):
    appointments: List[AppointmentResponse]
    total: int


class VitalsSaveResponse(BaseModel):
    success: bool = True
    created: bool
    vitals: VitalsResponse
    appointment: AppointmentResponse
