"""Patient and clinician reports (PDF or Category/Field/Value CSV)."""

import logging
from typing import Any, List, Optional, Sequence

from maternacare.core.exceptions import ExportError, StorageError
from maternacare.models.clinician import Clinician
from maternacare.models.patient import Patient
from maternacare.models.person import Person
from maternacare.schemas.export import ClinicianReportOptions, PatientReportOptions
from maternacare.services.export_composer import (
    CSV_MEDIA_TYPE,
    NOT_PROVIDED,
    NOT_SPECIFIED,
    PDF_MEDIA_TYPE,
    ExportFile,
    format_cell,
    sections_csv,
)
from maternacare.services.pdf_report import ReportSection, render_report
from maternacare.utils.file_handler import PROFILE_PICTURE_BUCKET, read_object

logger = logging.getLogger(__name__)


def _or(value: Any, fallback: str = NOT_SPECIFIED) -> str:
    if value is None or value == "":
        return fallback
    return format_cell(value)


def _name_of(holder: Any) -> str:
    """Full name of a related patient or clinician row, if any."""
    if holder is None or holder.person is None:
        return NOT_SPECIFIED
    return holder.person.full_name


def _emergency_contact(person: Person) -> ReportSection:
    parts = [person.ec_first_name, person.ec_middle_name, person.ec_last_name]
    name = " ".join(p for p in parts if p) if person.ec_first_name else NOT_PROVIDED
    return ReportSection("Emergency Contact", [("Emergency Contact", [
        ("Name", name),
        ("Relationship", _or(person.ec_relationship)),
        ("Contact Number", _or(person.ec_contact_number, NOT_PROVIDED)),
    ])])


def _medication_fields(record: Any, *, with_route: bool = True) -> List[tuple]:
    fields = [
        ("Name", _or(record.name)),
        ("Strength", _or(record.strength)),
        ("Amount", _or(record.amount)),
        ("Frequency", _or(record.frequency)),
    ]
    if with_route:
        fields.append(("Route", _or(record.route)))
    return fields


# ============================================
# PATIENT
# ============================================

def patient_report_sections(
    patient: Patient,
    options: PatientReportOptions,
    *,
    allergies: Sequence[Any] = (),
    supplements: Sequence[Any] = (),
    prescriptions: Sequence[Any] = (),
    lab_records: Sequence[Any] = (),
) -> List[ReportSection]:
    person = patient.person
    sections: List[ReportSection] = []

    if options.basic_info:
        sections.append(ReportSection("Patient Information", [("Personal Info", [
            ("Full Name", person.full_name),
            ("Date of Birth", _or(person.birth_date)),
            ("Age", _or(person.age)),
            ("Contact Number", _or(person.contact_number, NOT_PROVIDED)),
            ("Address", _or(person.address, NOT_PROVIDED)),
            ("Marital Status", _or(patient.marital_status, NOT_PROVIDED)),
            ("Citizenship", _or(person.citizenship)),
            ("Religion", _or(person.religion)),
            ("Occupation", _or(patient.occupation)),
            ("SSN", _or(patient.ssn, NOT_PROVIDED)),
            ("Member Status", _or(patient.member)),
            ("Status", _or(person.status)),
            ("Gravidity", _or(patient.gravidity)),
            ("Parity", _or(patient.parity)),
            ("Last Menstrual Cycle", _or(patient.last_menstrual_cycle)),
            ("Expected Date of Confinement", _or(patient.expected_date_of_confinement)),
        ])]))
        sections.append(_emergency_contact(person))

    if options.allergies:
        groups = [
            (f"Allergy {index}", [("Name", _or(allergy.name)), ("Severity", _or(allergy.severity))])
            for index, allergy in enumerate(allergies, start=1)
        ]
        sections.append(ReportSection("Allergies", groups, empty_message="No allergies recorded"))

    if options.supplements:
        groups = []
        for index, supplement in enumerate(supplements, start=1):
            groups.append((f"Supplement {index}", _medication_fields(supplement) + [
                ("Clinician", _name_of(supplement.clinician)),
                ("Status", _or(supplement.status)),
                ("Date Recommended", _or(supplement.date)),
            ]))
        sections.append(ReportSection("Supplements", groups, empty_message="No supplements recorded"))

    if options.prescriptions:
        groups = []
        for index, prescription in enumerate(prescriptions, start=1):
            groups.append((f"Prescription {index}", _medication_fields(prescription) + [
                ("Clinician", _name_of(prescription.clinician)),
                ("Status", _or(prescription.status)),
                ("Date Prescribed", _or(prescription.date)),
            ]))
        sections.append(ReportSection("Prescriptions", groups, empty_message="No prescriptions recorded"))

    if options.lab_records:
        groups = []
        for record in lab_records:
            groups.append((f"{record.file_name} ({record.record_type})", [
                ("Doctor", _or(record.doctor)),
                ("Ordered Date", _or(record.ordered_date)),
                ("Received Date", _or(record.received_date)),
                ("Reported Date", _or(record.reported_date)),
                ("Impressions", _or(record.impressions)),
                ("Remarks", _or(record.remarks)),
                ("Recommendations", _or(record.recommendations)),
            ]))
        sections.append(ReportSection("Laboratory Records", groups, empty_message="No laboratory records recorded"))

    return sections


# ============================================
# CLINICIAN
# ============================================

def clinician_report_sections(
    clinician: Clinician,
    options: ClinicianReportOptions,
    *,
    supplements: Sequence[Any] = (),
    prescriptions: Sequence[Any] = (),
    appointments: Sequence[Any] = (),
) -> List[ReportSection]:
    person = clinician.person
    sections: List[ReportSection] = []

    if options.basic_info:
        sections.append(ReportSection("Clinician Information", [("Personal Info", [
            ("Full Name", person.full_name),
            ("Role", _or(clinician.role)),
            ("License Number", _or(clinician.license_number)),
            ("Specialization", _or(clinician.specialization)),
            ("Date of Birth", _or(person.birth_date)),
            ("Age", _or(person.age)),
            ("Contact Number", _or(person.contact_number, NOT_PROVIDED)),
            ("Address", _or(person.address, NOT_PROVIDED)),
            ("Citizenship", _or(person.citizenship)),
            ("Religion", _or(person.religion)),
            ("Status", _or(person.status)),
        ])]))
        sections.append(_emergency_contact(person))

    if options.supplements:
        groups = []
        for index, supplement in enumerate(supplements, start=1):
            groups.append((f"Supplement {index}", _medication_fields(supplement, with_route=False) + [
                ("Patient", _name_of(supplement.patient)),
                ("Status", _or(supplement.status)),
            ]))
        sections.append(ReportSection("Supplements", groups, empty_message="No supplements recorded"))

    # Midwives do not prescribe
    if options.prescriptions and clinician.role == "Doctor":
        groups = []
        for index, prescription in enumerate(prescriptions, start=1):
            groups.append((f"Prescription {index}", _medication_fields(prescription) + [
                ("Patient", _name_of(prescription.patient)),
                ("Status", _or(prescription.status)),
                ("Date", _or(prescription.date)),
            ]))
        sections.append(ReportSection("Prescriptions", groups, empty_message="No prescriptions recorded"))

    if options.appointments:
        groups = []
        for index, appointment in enumerate(appointments, start=1):
            groups.append((f"Appointment {index}", [
                ("Service", _or(appointment.service)),
                ("Date", _or(appointment.date)),
                ("Patient", _name_of(appointment.patient)),
                ("Status", _or(appointment.status)),
                ("Payment Status", _or(appointment.payment_status)),
            ]))
        sections.append(ReportSection("Appointments", groups, empty_message="No appointments recorded"))

    return sections


def load_profile_picture(person: Person) -> Optional[bytes]:
    """Bytes of the person's stored profile picture, or None."""
    if not person.fileurl:
        return None
    try:
        return read_object(PROFILE_PICTURE_BUCKET, person.fileurl).read_bytes()
    except (StorageError, OSError) as e:
        logger.warning(f"Profile picture unavailable for person {person.id}: {e}")
        return None


# ============================================
# COMPOSER
# ============================================

def _compose(
    title: str,
    filename_stem: str,
    sections: Sequence[ReportSection],
    export_format: str,
    image: Optional[bytes] = None,
) -> ExportFile:
    if export_format == "csv":
        body = sections_csv(sections)
        return ExportFile(f"{filename_stem}.csv", CSV_MEDIA_TYPE, body.encode("utf-8"))

    try:
        pdf = render_report(title, sections, image=image)
    except Exception as e:
        logger.error(f"PDF rendering failed for {filename_stem}: {e}")
        raise ExportError(f"Failed to export PDF for {title}") from e
    return ExportFile(f"{filename_stem}.pdf", PDF_MEDIA_TYPE, pdf)


def compose_patient_report(patient: Patient, sections: Sequence[ReportSection], export_format: str = "pdf") -> ExportFile:
    full_name = patient.person.full_name
    return _compose(f"Patient Report: {full_name}", f"Patient_Report_{full_name}", sections, export_format)


def compose_clinician_report(
    clinician: Clinician, sections: Sequence[ReportSection], export_format: str = "pdf"
) -> ExportFile:
    """Clinician reports carry the profile picture under the title when one is stored."""
    full_name = clinician.person.full_name
    image = load_profile_picture(clinician.person) if export_format != "csv" else None
    return _compose(f"Clinician Report: {full_name}", f"Clinician_Report_{full_name}", sections, export_format, image)
