"""Pydantic schemas for `Vitals` and the measurements saved alongside them."""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


BLOOD_PRESSURE_PATTERN = re.compile(r"^\d{2,3}/\d{2,3}$")


class VitalsFields(BaseModel):
    temperature: Optional[float] = Field(None, ge=35, le=42, description="Body temperature (°C)")
    pulse_rate: Optional[int] = Field(None, ge=40, le=200, description="Pulse rate (bpm)")
    blood_pressure: str = Field(..., min_length=1, description="Systolic/diastolic, e.g. 120/80")
    respiration_rate: Optional[int] = Field(None, ge=12, le=30, description="Breaths per minute")
    oxygen_saturation: Optional[float] = Field(None, ge=90, le=100, description="SpO2 (%)")

    @field_validator("blood_pressure")
    @classmethod
    def validate_blood_pressure(cls, v: str) -> str:
        v = v.strip()
        if not BLOOD_PRESSURE_PATTERN.match(v):
            raise ValueError("blood_pressure must be formatted as systolic/diastolic, e.g. 120/80")
        return v


class AppointmentMeasurements(BaseModel):
    weight: Optional[float] = Field(None, ge=30, le=200, description="Weight (kg)")
    gestational_age: Optional[int] = Field(None, ge=0, le=45, description="Gestational age (weeks)")


class VitalsSave(VitalsFields, AppointmentMeasurements):
    """Request body for recording vitals on an appointment."""

    def vitals_fields(self) -> VitalsFields:
        return VitalsFields(**self.model_dump(include=set(VitalsFields.model_fields)))

    def measurements(self) -> AppointmentMeasurements:
        return AppointmentMeasurements(**self.model_dump(include=set(AppointmentMeasurements.model_fields)))

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "temperature": 36.8,
            "pulse_rate": 82,
            "blood_pressure": "110/70",
            "respiration_rate": 18,
            "oxygen_saturation": 98,
            "weight": 62.5,
            "gestational_age": 24,
        }
    })


class VitalsResponse(BaseModel):
    id: int
    temperature: Optional[float] = None
    pulse_rate: Optional[int] = None
    blood_pressure: Optional[str] = None
    respiration_rate: Optional[int] = None
    oxygen_saturation: Optional[float] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
