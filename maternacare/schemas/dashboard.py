"""Pydantic schemas for the dashboard summary."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AgeBucket(BaseModel):
    age: int
    number_of_patients: int


class ClinicianLoad(BaseModel):
    clinician_id: int
    clinician_name: str
    number_of_patients: int


class TodayAppointment(BaseModel):
    id: int
    patient_id: int
    clinician_id: int
    date: datetime
    service: str
    status: str
    payment_status: str
    patient_name: str
    clinician_name: str


class DashboardSummary(BaseModel):
    active_patients: int
    active_clinicians: int
    total_appointments: int
    todays_appointments: List[TodayAppointment]
    age_distribution: List[AgeBucket]
    clinician_distribution: List[ClinicianLoad]


class DashboardExportOptions(BaseModel):
    overview: bool = True
    age_distribution: bool = Field(True, alias="ageDistribution")
    clinician_distribution: bool = Field(True, alias="clinicianDistribution")
    appointments: bool = True

    model_config = ConfigDict(populate_by_name=True)


class DashboardExportRequest(BaseModel):
    export_options: Optional[DashboardExportOptions] = Field(None, alias="exportOptions")
    export_format: Literal["csv", "pdf"] = Field("csv", alias="exportFormat")

    model_config = ConfigDict(populate_by_name=True)
