"""Pydantic schemas for `Supplement` domain objects."""

from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SupplementBase(BaseModel):
    clinician_id: Optional[int] = None
    name: str = Field(..., min_length=1)
    strength: Optional[str] = None
    amount: Optional[str] = None
    frequency: Optional[str] = None
    route: Optional[str] = None
    status: str = "active"
    date: Optional[date_type] = None


class SupplementCreate(SupplementBase):
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "name": "Folic acid",
            "strength": "400 mcg",
            "amount": "1 tablet",
            "frequency": "Once daily",
            "route": "Oral",
        }
    })


class SupplementUpdate(BaseModel):
    clinician_id: Optional[int] = None
    name: Optional[str] = None
    strength: Optional[str] = None
    amount: Optional[str] = None
    frequency: Optional[str] = None
    route: Optional[str] = None
    status: Optional[str] = None
    date: Optional[date_type] = None


class SupplementResponse(BaseModel):
    id: int
    patient_id: int
    clinician_id: Optional[int] = None
    name: str
    strength: Optional[str] = None
    amount: Optional[str] = None
    frequency: Optional[str] = None
    route: Optional[str] = None
    status: Optional[str] = None
    date: Optional[date_type] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SupplementListResponse(BaseModel):
    supplements: List[SupplementResponse]
    total: int
