"""Pydantic schemas for `LaboratoryRecord` domain objects."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LaboratoryRecordCreate(BaseModel):
    file_name: str = Field(..., min_length=1)
    record_type: str = Field(..., min_length=1)
    doctor: str = Field(..., min_length=1)
    ordered_date: date
    received_date: date
    reported_date: date
    impressions: str = Field(..., min_length=1)
    remarks: Optional[str] = None
    recommendations: Optional[str] = None


class LaboratoryRecordResponse(LaboratoryRecordCreate):
    id: int
    patient_id: int
    fileurl: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LaboratoryRecordListResponse(BaseModel):
    records: List[LaboratoryRecordResponse]
    total: int


class SignedUrlResponse(BaseModel):
    signed_url: str
    expires_at: datetime
