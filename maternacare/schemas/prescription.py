"""Pydantic schemas for `Prescription` domain objects."""

from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PrescriptionBase(BaseModel):
    clinician_id: int
    appointment_id: Optional[int] = None
    name: str = Field(..., min_length=1)
    strength: str = Field(..., min_length=1)
    amount: str = Field(..., min_length=1)
    frequency: str = Field(..., min_length=1)
    route: str = Field(..., min_length=1)
    status: str = "active"
    date: Optional[date_type] = None


class PrescriptionCreate(PrescriptionBase):
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "clinician_id": 3,
            "name": "Ferrous sulfate",
            "strength": "325 mg",
            "amount": "1 tablet",
            "frequency": "Once daily",
            "route": "Oral",
        }
    })


class PrescriptionUpdate(BaseModel):
    clinician_id: Optional[int] = None
    appointment_id: Optional[int] = None
    name: Optional[str] = None
    strength: Optional[str] = None
    amount: Optional[str] = None
    frequency: Optional[str] = None
    route: Optional[str] = None
    status: Optional[str] = None
    date: Optional[date_type] = None


class PrescriptionResponse(BaseModel):
    id: int
    patient_id: int
    clinician_id: Optional[int] = None
    appointment_id: Optional[int] = None
    name: str
    strength: Optional[str] = None
    amount: Optional[str] = None
    frequency: Optional[str] = None
    route: Optional[str] = None
    status: Optional[str] = None
    date: Optional[date_type] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PrescriptionListResponse(BaseModel):
    prescriptions: List[PrescriptionResponse]
    total: int
