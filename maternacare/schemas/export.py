"""Pydantic schemas for appointment exports."""

from datetime import date
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


EXPORT_STATUS_FILTERS = ("all", "scheduled", "completed", "canceled")


class ExportContent(BaseModel):
    """Which categories of data go into an export."""
    appointment_info: bool = Field(True, alias="appointmentInfo")
    patient_info: bool = Field(True, alias="patientInfo")
    clinician_info: bool = Field(True, alias="clinicianInfo")
    vitals: bool = True
    prescriptions: bool = False
    supplements: bool = False

    model_config = ConfigDict(populate_by_name=True)


class ExportFilters(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str = "all"
    sort: Literal["none", "asc", "desc"] = "none"
    limit: Optional[int] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in EXPORT_STATUS_FILTERS:
            raise ValueError(f"status must be one of {list(EXPORT_STATUS_FILTERS)}")
        return v


class AppointmentExportRequest(BaseModel):
    filters: ExportFilters = Field(default_factory=ExportFilters)
    content: ExportContent = Field(default_factory=ExportContent)
    export_format: Literal["csv", "pdf"] = "csv"

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "filters": {"status": "completed", "sort": "desc", "limit": 5},
            "content": {"appointment_info": True, "patient_info": True, "vitals": True},
            "export_format": "csv",
        }
    })


class SingleAppointmentExportRequest(BaseModel):
    """Body of the document-generation endpoint: `{appointment, exportOptions, exportFormat}`."""
    appointment: Optional[Dict[str, Any]] = None
    export_options: Optional[ExportContent] = Field(None, alias="exportOptions")
    export_format: Optional[str] = Field("pdf", alias="exportFormat")

    model_config = ConfigDict(populate_by_name=True)


class PatientReportOptions(BaseModel):
    """Sections of a patient report."""
    basic_info: bool = Field(True, alias="basicInfo")
    allergies: bool = True
    supplements: bool = True
    prescriptions: bool = True
    lab_records: bool = Field(True, alias="labRecords")

    model_config = ConfigDict(populate_by_name=True)


class ClinicianReportOptions(BaseModel):
    """Sections of a clinician report. Prescriptions only apply to doctors."""
    basic_info: bool = Field(True, alias="basicInfo")
    supplements: bool = True
    prescriptions: bool = True
    appointments: bool = True

    model_config = ConfigDict(populate_by_name=True)


class PatientExportRequest(BaseModel):
    """Body of `POST /api/export/patient`: `{patientId, exportOptions, exportFormat}`."""
    patient_id: int = Field(..., alias="patientId")
    export_options: PatientReportOptions = Field(..., alias="exportOptions")
    export_format: Optional[str] = Field("pdf", alias="exportFormat")

    model_config = ConfigDict(populate_by_name=True)


class ClinicianExportRequest(BaseModel):
    """Body of `POST /api/export/clinician`: `{clinicianId, exportOptions, exportFormat}`."""
    clinician_id: int = Field(..., alias="clinicianId")
    export_options: ClinicianReportOptions = Field(..., alias="exportOptions")
    export_format: Optional[str] = Field("pdf", alias="exportFormat")

    model_config = ConfigDict(populate_by_name=True)
