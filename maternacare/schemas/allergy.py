"""Pydantic schemas for `Allergy` domain objects."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class AllergyCreate(BaseModel):
    name: str = Field(..., min_length=1)
    severity: str = Field(..., min_length=1)


class AllergyResponse(AllergyCreate):
    id: int
    patient_id: int

    model_config = ConfigDict(from_attributes=True)


class AllergyListResponse(BaseModel):
    allergies: List[AllergyResponse]
    total: int
