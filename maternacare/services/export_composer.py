"""Service layer for appointment exports (CSV and PDF)."""

import csv
import io
import logging
import zipfile
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional, Sequence

from maternacare.core.exceptions import EmptyExportError, ExportError
from maternacare.schemas.appointment import AppointmentDetail
from maternacare.schemas.export import ExportContent, ExportFilters
from maternacare.services.pdf_report import ReportSection, render_report

logger = logging.getLogger(__name__)

CSV_MEDIA_TYPE = "text/csv"
PDF_MEDIA_TYPE = "application/pdf"
ZIP_MEDIA_TYPE = "application/zip"

NOT_SPECIFIED = "Not specified"
NOT_RECORDED = "Not recorded"
NOT_PROVIDED = "Not provided"

# Column groups, in the order they appear in a bulk CSV
APPOINTMENT_COLUMNS = ["Date", "Service", "Status", "Payment Status"]
PATIENT_COLUMNS = ["Patient Name", "Patient Birth Date", "Patient Age", "Patient Contact", "Patient Address"]
CLINICIAN_COLUMNS = ["Clinician Name", "Role", "Specialization"]
VITALS_COLUMNS = [
    "Weight",
    "Gestational Age",
    "Temperature",
    "Pulse Rate",
    "Blood Pressure",
    "Respiration Rate",
    "Oxygen Saturation",
]
PRESCRIPTION_COLUMNS = ["Prescription Name", "Strength", "Amount", "Frequency", "Route", "Prescription Status", "Date Prescribed"]
SUPPLEMENT_COLUMNS = ["Supplement Name", "Strength", "Amount", "Frequency", "Route", "Supplement Status", "Date Recommended"]


@dataclass
class ExportFile:
    filename: str
    media_type: str
    content: bytes


# ============================================
# FILTER PIPELINE
# ============================================

def filter_appointments(appointments: Iterable[AppointmentDetail], filters: ExportFilters) -> List[AppointmentDetail]:
    """
    Apply the export filters in order: date range, status, sort, limit.

    Date bounds are inclusive and compare local calendar days. Sorting is
    stable, so appointments sharing a timestamp keep their input order.
    """
    result = list(appointments)

    if filters.start_date is not None:
        result = [a for a in result if a.date.date() >= filters.start_date]
    if filters.end_date is not None:
        result = [a for a in result if a.date.date() <= filters.end_date]

    if filters.status != "all":
        result = [a for a in result if (a.status or "").lower() == filters.status]

    if filters.sort == "asc":
        result = sorted(result, key=lambda a: a.date)
    elif filters.sort == "desc":
        result = sorted(result, key=lambda a: a.date, reverse=True)

    if filters.limit is not None and filters.limit > 0:
        result = result[:filters.limit]

    return result


# ============================================
# CSV
# ============================================

def format_cell(value: Any) -> str:
    """Serialize one value for a CSV cell; missing values become ''."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def build_csv(rows: Iterable[Sequence[Any]]) -> str:
    """Render rows with every cell quoted and rows joined by newlines."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([format_cell(cell) for cell in row])
    content = buffer.getvalue()
    return content[:-1] if content.endswith("\n") else content


def csv_header(content: ExportContent) -> List[str]:
    header: List[str] = []
    if content.appointment_info:
        header.extend(APPOINTMENT_COLUMNS)
    if content.patient_info:
        header.extend(PATIENT_COLUMNS)
    if content.clinician_info:
        header.extend(CLINICIAN_COLUMNS)
    if content.vitals:
        header.extend(VITALS_COLUMNS)
    if content.prescriptions:
        header.extend(PRESCRIPTION_COLUMNS)
    if content.supplements:
        header.extend(SUPPLEMENT_COLUMNS)
    return header


def csv_row(appointment: AppointmentDetail, content: ExportContent) -> List[Any]:
    """Cells for one appointment, matching `csv_header(content)`."""
    row: List[Any] = []

    if content.appointment_info:
        row.extend([appointment.date, appointment.service, appointment.status, appointment.payment_status])

    if content.patient_info:
        person = appointment.patient.person if appointment.patient else None
        if person:
            row.extend([person.full_name, person.birth_date, person.age, person.contact_number, person.address])
        else:
            row.extend([None] * len(PATIENT_COLUMNS))

    if content.clinician_info:
        clinician = appointment.clinician
        if clinician:
            row.extend([clinician.person.full_name, clinician.role, clinician.specialization])
        else:
            row.extend([None] * len(CLINICIAN_COLUMNS))

    if content.vitals:
        vitals = appointment.vitals
        row.extend([appointment.weight, appointment.gestational_age])
        if vitals:
            row.extend([
                vitals.temperature,
                vitals.pulse_rate,
                vitals.blood_pressure,
                vitals.respiration_rate,
                vitals.oxygen_saturation,
            ])
        else:
            row.extend([None] * 5)

    if content.prescriptions:
        first = appointment.prescriptions[0] if appointment.prescriptions else None
        if first:
            row.extend([first.name, first.strength, first.amount, first.frequency, first.route, first.status, first.date])
        else:
            row.extend([None] * len(PRESCRIPTION_COLUMNS))

    if content.supplements:
        first = appointment.supplements[0] if appointment.supplements else None
        if first:
            row.extend([first.name, first.strength, first.amount, first.frequency, first.route, first.status, first.date])
        else:
            row.extend([None] * len(SUPPLEMENT_COLUMNS))

    return row


def appointments_csv(appointments: Sequence[AppointmentDetail], content: ExportContent) -> str:
    rows = [csv_header(content)]
    rows.extend(csv_row(a, content) for a in appointments)
    return build_csv(rows)


# ============================================
# REPORT SECTIONS (single appointment)
# ============================================

def _with_unit(value: Any, unit: str, fallback: str = NOT_RECORDED) -> str:
    if value is None:
        return fallback
    return f"{value}{unit}"


def _or(value: Any, fallback: str = NOT_SPECIFIED) -> str:
    if value is None or value == "":
        return fallback
    return format_cell(value)


def report_sections(appointment: AppointmentDetail, content: ExportContent) -> List[ReportSection]:
    """Sections of a single-appointment report, in display order."""
    sections: List[ReportSection] = []

    if content.appointment_info:
        sections.append(ReportSection("Appointment Information", [("Appointment", [
            ("Date", appointment.date.date().isoformat()),
            ("Service", _or(appointment.service)),
            ("Status", _or(appointment.status)),
            ("Payment Status", _or(appointment.payment_status)),
            ("Weight", _with_unit(appointment.weight, " kg")),
            ("Gestational Age", _with_unit(appointment.gestational_age, " weeks")),
        ])]))

    if content.patient_info and appointment.patient:
        person = appointment.patient.person
        sections.append(ReportSection("Patient Information", [("Patient", [
            ("Name", appointment.patient_name),
            ("Birth Date", _or(person.birth_date)),
            ("Age", _or(person.age)),
            ("Contact Number", _or(person.contact_number, NOT_PROVIDED)),
            ("Address", _or(person.address, NOT_PROVIDED)),
        ])]))

    if content.clinician_info and appointment.clinician:
        sections.append(ReportSection("Clinician Information", [("Clinician", [
            ("Name", appointment.clinician_name),
            ("Role", _or(appointment.clinician.role)),
            ("Specialization", _or(appointment.clinician.specialization)),
        ])]))

    if content.vitals and appointment.vitals:
        vitals = appointment.vitals
        sections.append(ReportSection("Vitals", [("Vitals", [
            ("Weight", _with_unit(appointment.weight, " kg")),
            ("Gestational Age", _with_unit(appointment.gestational_age, " weeks")),
            ("Temperature", _with_unit(vitals.temperature, " °C")),
            ("Pulse Rate", _with_unit(vitals.pulse_rate, " bpm")),
            ("Blood Pressure", _or(vitals.blood_pressure, NOT_RECORDED)),
            ("Respiration Rate", _with_unit(vitals.respiration_rate, " breaths/min")),
            ("Oxygen Saturation", _with_unit(vitals.oxygen_saturation, "%")),
        ])]))

    if content.prescriptions:
        groups = []
        for index, prescription in enumerate(appointment.prescriptions or [], start=1):
            groups.append((f"Prescription {index}", [
                ("Name", _or(prescription.name)),
                ("Strength", _or(prescription.strength)),
                ("Amount", _or(prescription.amount)),
                ("Frequency", _or(prescription.frequency)),
                ("Route", _or(prescription.route)),
                ("Status", _or(prescription.status)),
                ("Date Prescribed", _or(prescription.date)),
                ("Appointment", f"ID: {prescription.appointment_id}" if prescription.appointment_id else "Not linked to appointment"),
            ]))
        sections.append(ReportSection("Prescriptions", groups, empty_message="No prescriptions recorded"))

    if content.supplements:
        groups = []
        for index, supplement in enumerate(appointment.supplements or [], start=1):
            groups.append((f"Supplement {index}", [
                ("Name", _or(supplement.name)),
                ("Strength", _or(supplement.strength)),
                ("Amount", _or(supplement.amount)),
                ("Frequency", _or(supplement.frequency)),
                ("Route", _or(supplement.route)),
                ("Status", _or(supplement.status)),
                ("Date Recommended", _or(supplement.date)),
            ]))
        sections.append(ReportSection("Supplements", groups, empty_message="No supplements recorded"))

    return sections


def sections_csv(sections: Sequence[ReportSection], value_header: str = "Field") -> str:
    """Flatten report sections into Category/<value_header>/Value rows."""
    rows: List[Sequence[Any]] = [["Category", value_header, "Value"]]
    for section in sections:
        for category, fields in section.groups:
            rows.extend([category, label, value] for label, value in fields)
    return build_csv(rows)


# ============================================
# FILENAMES
# ============================================

def report_filename(appointment: AppointmentDetail, extension: str) -> str:
    return f"Appointment_Report_{appointment.patient_name}_{appointment.date.date().isoformat()}.{extension}"


def bulk_csv_filename(today: Optional[date] = None) -> str:
    return f"appointments_export_{(today or date.today()).isoformat()}.csv"


# ============================================
# COMPOSER
# ============================================

class ExportComposer:
    """Turns joined appointment views into downloadable files."""

    def compose(
        self,
        appointments: Sequence[AppointmentDetail],
        filters: ExportFilters,
        content: ExportContent,
        export_format: str = "csv",
    ) -> List[ExportFile]:
        """
        Filter appointments and render them.

        Returns:
            One CSV file (header only when nothing matches), or one PDF per
            appointment

        Raises:
            EmptyExportError: If nothing matches the filters of a PDF export
            ExportError: If a PDF fails to render
        """
        selected = filter_appointments(appointments, filters)

        if export_format == "csv":
            body = appointments_csv(selected, content)
            logger.info(f"CSV export composed: {len(selected)} appointments")
            return [ExportFile(bulk_csv_filename(), CSV_MEDIA_TYPE, body.encode("utf-8"))]

        if not selected:
            raise EmptyExportError("No appointments match the selected filters")

        files = []
        for appointment in selected:
            files.append(self.compose_single(appointment, content, "pdf"))
        logger.info(f"PDF export composed: {len(files)} reports")
        return files

    def compose_single(self, appointment: AppointmentDetail, content: ExportContent, export_format: str = "pdf") -> ExportFile:
        """Render one appointment as a PDF report or a Category/Field/Value CSV."""
        sections = report_sections(appointment, content)
        if export_format == "csv":
            body = sections_csv(sections)
            return ExportFile(report_filename(appointment, "csv"), CSV_MEDIA_TYPE, body.encode("utf-8"))

        try:
            pdf = render_report("Appointment Report", sections)
        except Exception as e:
            logger.error(f"PDF rendering failed for appointment {appointment.id}: {e}")
            raise ExportError(
                f"Failed to export PDF for appointment on {appointment.date.date().isoformat()}"
            ) from e
        return ExportFile(report_filename(appointment, "pdf"), PDF_MEDIA_TYPE, pdf)


def bundle_files(files: Sequence[ExportFile], filename: str) -> ExportFile:
    """Pack several export files into one zip archive."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        seen = {}
        for export_file in files:
            name = export_file.filename
            # Reports for the same patient and day would collide
            if name in seen:
                seen[name] += 1
                stem, _, ext = name.rpartition(".")
                name = f"{stem}_{seen[export_file.filename]}.{ext}"
            else:
                seen[name] = 1
            archive.writestr(name, export_file.content)
    return ExportFile(filename, ZIP_MEDIA_TYPE, buffer.getvalue())


# Singleton instance
export_composer = ExportComposer()
