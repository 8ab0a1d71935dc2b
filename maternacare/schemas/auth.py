"""Pydantic schemas for login and the session identity."""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


NAME_PATTERN = re.compile(r"^[A-Za-z\s]+$")


class LoginRequest(BaseModel):
    name: str
    password: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        if not NAME_PATTERN.match(v):
            raise ValueError("Name can only contain letters and spaces")
        return v


class SessionUser(BaseModel):
    """Identity kept by the dashboard for gating admin-only actions."""
    name: str
    first_name: str = Field(..., alias="firstName")
    role: str
    avatar: Optional[str] = None
    user_type: str = Field(..., alias="userType")
    is_admin: bool = Field(..., alias="isAdmin")
    is_doctor: bool = Field(False, alias="isDoctor")
    clinician_id: Optional[int] = Field(None, alias="clinicianId")

    model_config = ConfigDict(populate_by_name=True)


class LoginResponse(BaseModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"
    user: SessionUser
