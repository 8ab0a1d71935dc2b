"""Pydantic schemas for `Person`, `Patient` and `Clinician` domain objects."""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


CLINICIAN_ROLES = {"Doctor", "Midwife"}
PERSON_STATUSES = {"Active", "Inactive"}


class PersonBase(BaseModel):
    first_name: str = Field(..., min_length=1)
    middle_name: Optional[str] = None
    last_name: str = Field(..., min_length=1)
    birth_date: date
    age: Optional[int] = Field(None, ge=0, le=120)
    contact_number: str = Field(..., min_length=1)
    citizenship: Optional[str] = None
    address: Optional[str] = None
    religion: Optional[str] = None

    # Emergency Contact
    ec_first_name: Optional[str] = None
    ec_middle_name: Optional[str] = None
    ec_last_name: Optional[str] = None
    ec_contact_number: Optional[str] = None
    ec_relationship: Optional[str] = None


class PersonUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    middle_name: Optional[str] = None
    last_name: Optional[str] = Field(None, min_length=1)
    birth_date: Optional[date] = None
    age: Optional[int] = Field(None, ge=0, le=120)
    contact_number: Optional[str] = Field(None, min_length=1)
    citizenship: Optional[str] = None
    address: Optional[str] = None
    religion: Optional[str] = None
    ec_first_name: Optional[str] = None
    ec_middle_name: Optional[str] = None
    ec_last_name: Optional[str] = None
    ec_contact_number: Optional[str] = None
    ec_relationship: Optional[str] = None

    @field_validator("first_name", "last_name", "birth_date", "contact_number")
    @classmethod
    def reject_null(cls, v):
        # Omit a field to leave it unchanged; these cannot be cleared
        if v is None:
            raise ValueError("field cannot be null")
        return v


class PersonResponse(PersonBase):
    id: int
    status: str
    fileurl: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PersonSummary(BaseModel):
    """Subset of person columns embedded in appointment views and exports."""
    id: Optional[int] = None
    first_name: str = ""
    middle_name: Optional[str] = None
    last_name: str = ""
    birth_date: Optional[date] = None
    age: Optional[int] = None
    contact_number: Optional[str] = None
    address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p).strip()


class PersonStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        if v not in PERSON_STATUSES:
            raise ValueError(f"status must be one of {sorted(PERSON_STATUSES)}")
        return v


# ==================== PATIENT ====================

class PatientFields(BaseModel):
    gravidity: Optional[str] = None
    parity: Optional[str] = None
    last_menstrual_cycle: Optional[date] = None
    expected_date_of_confinement: Optional[date] = None
    member: Optional[str] = None
    ssn: Optional[str] = None
    occupation: Optional[str] = None
    marital_status: Optional[str] = None


class PatientCreate(PersonBase, PatientFields):
    model_config = ConfigDict(json_schema_extra={
        "example": {
            "first_name": "Maria",
            "middle_name": "Luz",
            "last_name": "Santos",
            "birth_date": "1995-04-12",
            "age": 29,
            "contact_number": "09171234567",
            "address": "12 Mabini St., Quezon City",
            "gravidity": "2",
            "parity": "1",
            "last_menstrual_cycle": "2024-01-02",
            "expected_date_of_confinement": "2024-10-08",
            "ec_first_name": "Jose",
            "ec_last_name": "Santos",
            "ec_contact_number": "09179876543",
            "ec_relationship": "Husband",
        }
    })


class PatientUpdate(PersonUpdate, PatientFields):
    pass


class PatientResponse(PatientFields):
    id: int
    person: PersonResponse

    model_config = ConfigDict(from_attributes=True)


class PatientSummary(BaseModel):
    id: Optional[int] = None
    person: PersonSummary

    model_config = ConfigDict(from_attributes=True)


# ==================== CLINICIAN ====================

class ClinicianCreate(PersonBase):
    role: str
    specialization: Optional[str] = None
    license_number: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        if v not in CLINICIAN_ROLES:
            raise ValueError(f"role must be one of {sorted(CLINICIAN_ROLES)}")
        return v

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "first_name": "Ana",
            "last_name": "Reyes",
            "birth_date": "1985-09-30",
            "age": 39,
            "contact_number": "09181112222",
            "role": "Midwife",
            "specialization": "Prenatal Care",
            "license_number": "PRC-0012345",
            "password": "changeme123",
        }
    })


class ClinicianUpdate(PersonUpdate):
    role: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = Field(None, min_length=1)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: Optional[str]) -> Optional[str]:
        if v not in CLINICIAN_ROLES:
            raise ValueError(f"role must be one of {sorted(CLINICIAN_ROLES)}")
        return v

    @field_validator("license_number")
    @classmethod
    def reject_null_license(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("license_number cannot be null")
        return v


class ClinicianResponse(BaseModel):
    id: int
    role: str
    specialization: Optional[str] = None
    license_number: str
    person: PersonResponse

    model_config = ConfigDict(from_attributes=True)


class ClinicianSummary(BaseModel):
    id: Optional[int] = None
    role: Optional[str] = None
    specialization: Optional[str] = None
    person: PersonSummary

    model_config = ConfigDict(from_attributes=True)


class PatientListResponse(BaseModel):
    patients: List[PatientResponse]
    total: int


class ClinicianListResponse(BaseModel):
    clinicians: List[ClinicianResponse]
    total: int


class ProfilePictureResponse(BaseModel):
    person_id: int
    fileurl: str
    signed_url: str
    expires_at: datetime
