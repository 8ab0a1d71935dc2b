"""Appointment, patient and clinician export endpoints."""

import logging
import unicodedata
from datetime import date
from typing import Any, Dict
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, Response, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from maternacare.api.deps import clinician_scope, get_current_user, get_db
from maternacare.core.exceptions import EmptyExportError, ExportError, NotFoundException, SaveFailedException
from maternacare.crud import (
    crud_allergy,
    crud_appointment,
    crud_clinician,
    crud_laboratory_record,
    crud_patient,
    crud_prescription,
    crud_supplement,
)
from maternacare.schemas.appointment import AppointmentDetail
from maternacare.schemas.auth import SessionUser
from maternacare.schemas.export import (
    AppointmentExportRequest,
    ClinicianExportRequest,
    ExportContent,
    PatientExportRequest,
    SingleAppointmentExportRequest,
)
from maternacare.services.export_composer import ExportFile, bundle_files, export_composer
from maternacare.services.person_report import (
    clinician_report_sections,
    compose_clinician_report,
    compose_patient_report,
    patient_report_sections,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/exports",
    tags=["Exports"],
)

# Mounted at the application root, outside /api/v1
document_router = APIRouter(
    prefix="/api/export",
    tags=["Exports"],
)


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and the UTF-8 original.

    Header values go out as latin-1, so patient names outside it only
    travel in the percent-encoded `filename*` parameter.
    """
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = "".join(ch for ch in fallback if ch.isprintable() and ch not in '"\\') or "export"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def file_response(export_file: ExportFile) -> Response:
    return Response(
        content=export_file.content,
        media_type=export_file.media_type,
        headers={"Content-Disposition": content_disposition(export_file.filename)},
    )


@router.post(
    "/appointments",
    summary="Export appointments as CSV or PDF",
    description="""
    Filters run in order: date range (inclusive, by calendar day), status
    (`all` disables it), sort by date (`none`, `asc`, `desc`), then `limit`.

    **Content:** appointment_info, patient_info, clinician_info, vitals,
    prescriptions, supplements.

    CSV returns one file. PDF returns one report per appointment; several
    reports come back as a zip archive.
    """,
    responses={200: {"content": {"text/csv": {}, "application/pdf": {}, "application/zip": {}}}},
)
def export_appointments(
    export_in: AppointmentExportRequest,
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    content = export_in.content
    appointments = crud_appointment.get_with_relations(db, clinician_id=clinician_scope(current_user))
    details = [
        crud_appointment.to_detail(
            db,
            appointment,
            include_prescriptions=content.prescriptions,
            include_supplements=content.supplements,
        )
        for appointment in appointments
    ]

    try:
        files = export_composer.compose(details, export_in.filters, content, export_in.export_format)
    except EmptyExportError as e:
        raise NotFoundException(str(e))
    except ExportError as e:
        raise SaveFailedException(str(e))

    if len(files) == 1:
        return file_response(files[0])
    return file_response(bundle_files(files, f"appointments_export_{date.today().isoformat()}.zip"))


@document_router.post(
    "/appointment",
    summary="Render one appointment as a PDF report or a Category/Field/Value CSV",
    description="""
    Body: `{appointment, exportOptions, exportFormat}` where `appointment` is
    the joined appointment view. Failures answer `{"error": "..."}`.
    """,
    responses={200: {"content": {"application/pdf": {}, "text/csv": {}}}},
)
def export_single_appointment(
    payload: Dict[str, Any] = Body(...),
    current_user: SessionUser = Depends(get_current_user),
) -> Response:
    if not payload.get("appointment") or not payload.get("exportOptions"):
        logger.warning("Single appointment export without appointment data or export options")
        return JSONResponse({"error": "Missing appointment data or export options"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        request = SingleAppointmentExportRequest.model_validate(payload)
        appointment = AppointmentDetail.model_validate(request.appointment)
    except ValidationError as e:
        return JSONResponse({"error": f"Invalid appointment data: {e.errors()[0]['msg']}"}, status_code=status.HTTP_400_BAD_REQUEST)

    export_format = "csv" if request.export_format == "csv" else "pdf"
    try:
        export_file = export_composer.compose_single(
            appointment, request.export_options or ExportContent(), export_format
        )
    except ExportError as e:
        return JSONResponse({"error": str(e)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Single appointment export: {export_file.filename}")
    return file_response(export_file)


# ==================== PERSON REPORTS ====================

def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@document_router.post(
    "/patient",
    summary="Render a patient report as PDF or Category/Field/Value CSV",
    description="""
    Body: `{patientId, exportOptions, exportFormat}`.

    **exportOptions:** basicInfo, allergies, supplements, prescriptions,
    labRecords. Failures answer `{"error": "..."}`.
    """,
    responses={200: {"content": {"application/pdf": {}, "text/csv": {}}}},
)
def export_patient(
    payload: Dict[str, Any] = Body(...),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    if payload.get("patientId") is None or not payload.get("exportOptions"):
        logger.warning("Patient export without patient data or export options")
        return _error("Missing patient data or export options", status.HTTP_400_BAD_REQUEST)

    try:
        request = PatientExportRequest.model_validate(payload)
    except ValidationError as e:
        return _error(f"Invalid export request: {e.errors()[0]['msg']}", status.HTTP_400_BAD_REQUEST)

    patient = crud_patient.get(db, request.patient_id)
    if patient is None:
        return _error("Patient not found", status.HTTP_404_NOT_FOUND)

    sections = patient_report_sections(
        patient,
        request.export_options,
        allergies=crud_allergy.get_by_patient(db, patient_id=patient.id),
        supplements=crud_supplement.get_by_patient(db, patient_id=patient.id),
        prescriptions=crud_prescription.get_by_patient(db, patient_id=patient.id),
        lab_records=crud_laboratory_record.get_by_patient(db, patient_id=patient.id),
    )
    try:
        export_file = compose_patient_report(patient, sections, "csv" if request.export_format == "csv" else "pdf")
    except ExportError as e:
        return _error(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Patient export: {export_file.filename}")
    return file_response(export_file)


@document_router.post(
    "/clinician",
    summary="Render a clinician report as PDF or Category/Field/Value CSV",
    description="""
    Body: `{clinicianId, exportOptions, exportFormat}`.

    **exportOptions:** basicInfo, supplements, prescriptions (doctors only),
    appointments. The PDF shows the profile picture when one is stored.
    Non-admin clinicians may only export their own report.
    Failures answer `{"error": "..."}`.
    """,
    responses={200: {"content": {"application/pdf": {}, "text/csv": {}}}},
)
def export_clinician(
    payload: Dict[str, Any] = Body(...),
    current_user: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    if payload.get("clinicianId") is None or not payload.get("exportOptions"):
        logger.warning("Clinician export without clinician data or export options")
        return _error("Missing clinician data or export options", status.HTTP_400_BAD_REQUEST)

    try:
        request = ClinicianExportRequest.model_validate(payload)
    except ValidationError as e:
        return _error(f"Invalid export request: {e.errors()[0]['msg']}", status.HTTP_400_BAD_REQUEST)

    scope = clinician_scope(current_user)
    if scope is not None and scope != request.clinician_id:
        return _error("Clinicians can only export their own report", status.HTTP_403_FORBIDDEN)

    clinician = crud_clinician.get(db, request.clinician_id)
    if clinician is None:
        return _error("Clinician not found", status.HTTP_404_NOT_FOUND)

    sections = clinician_report_sections(
        clinician,
        request.export_options,
        supplements=crud_supplement.get_by_clinician(db, clinician_id=clinician.id),
        prescriptions=crud_prescription.get_by_clinician(db, clinician_id=clinician.id),
        appointments=crud_appointment.get_by_clinician(db, clinician_id=clinician.id),
    )
    try:
        export_file = compose_clinician_report(clinician, sections, "csv" if request.export_format == "csv" else "pdf")
    except ExportError as e:
        return _error(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Clinician export: {export_file.filename}")
    return file_response(export_file)
