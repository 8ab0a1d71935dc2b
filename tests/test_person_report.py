"""
Tests for patient and clinician reports.

Tests:
- Section selection follows the export options
- Empty sections carry a placeholder message
- Prescriptions appear only on doctors' reports
- CSV flattening and PDF rendering, with and without a profile picture
"""

import csv
import io
from datetime import date

from PIL import Image as PILImage

from conftest import make_clinician
from maternacare.crud import crud_allergy, crud_appointment, crud_prescription, crud_supplement
from maternacare.schemas.allergy import AllergyCreate
from maternacare.schemas.appointment import AppointmentCreate
from maternacare.schemas.export import ClinicianReportOptions, PatientReportOptions
from maternacare.schemas.prescription import PrescriptionCreate
from maternacare.schemas.supplement import SupplementCreate
from maternacare.services.person_report import (
    clinician_report_sections,
    compose_clinician_report,
    compose_patient_report,
    load_profile_picture,
    patient_report_sections,
)
from maternacare.utils.file_handler import PROFILE_PICTURE_BUCKET, save_object


def _png_bytes():
    buffer = io.BytesIO()
    PILImage.new("RGB", (4, 4), (200, 40, 90)).save(buffer, "PNG")
    return buffer.getvalue()


def _prescription(db, patient, clinician):
    return crud_prescription.create(
        db,
        obj_in=PrescriptionCreate(
            clinician_id=clinician.id,
            name="Ferrous sulfate",
            strength="325 mg",
            amount="1 tablet",
            frequency="Once daily",
            route="Oral",
            date=date(2024, 1, 10),
        ),
        patient_id=patient.id,
    )


def _titles(sections):
    return [s.title for s in sections]


# =============================================================================
# Patient report
# =============================================================================

class TestPatientReport:
    """Tests for patient report sections and rendering."""

    def test_sections_follow_options(self, db, patient):
        allergy = crud_allergy.create(db, obj_in=AllergyCreate(name="Penicillin", severity="Severe"), patient_id=patient.id)
        options = PatientReportOptions(basicInfo=True, allergies=True, supplements=False, prescriptions=False, labRecords=False)

        sections = patient_report_sections(patient, options, allergies=[allergy])

        assert _titles(sections) == ["Patient Information", "Emergency Contact", "Allergies"]
        assert sections[2].groups == [("Allergy 1", [("Name", "Penicillin"), ("Severity", "Severe")])]
        personal = dict(sections[0].groups[0][1])
        assert personal["Full Name"] == "Maria Santos"
        assert personal["SSN"] == "Not provided"
        assert dict(sections[1].groups[0][1])["Name"] == "Not provided"

    def test_empty_sections_have_placeholders(self, patient):
        sections = patient_report_sections(patient, PatientReportOptions(basicInfo=False))

        assert _titles(sections) == ["Allergies", "Supplements", "Prescriptions", "Laboratory Records"]
        assert all(s.groups == [] for s in sections)
        assert sections[3].empty_message == "No laboratory records recorded"

    def test_prescription_names_clinician(self, db, patient, clinician):
        prescription = _prescription(db, patient, clinician)

        sections = patient_report_sections(
            patient, PatientReportOptions(basicInfo=False, allergies=False, supplements=False, labRecords=False),
            prescriptions=[prescription],
        )

        fields = dict(sections[0].groups[0][1])
        assert fields["Clinician"] == "Ana Reyes"
        assert fields["Date Prescribed"] == "2024-01-10"

    def test_csv_and_pdf(self, patient):
        sections = patient_report_sections(patient, PatientReportOptions())

        as_csv = compose_patient_report(patient, sections, "csv")
        as_pdf = compose_patient_report(patient, sections, "pdf")

        rows = list(csv.reader(io.StringIO(as_csv.content.decode("utf-8"))))
        assert rows[0] == ["Category", "Field", "Value"]
        assert ["Personal Info", "Full Name", "Maria Santos"] in rows
        assert as_csv.filename == "Patient_Report_Maria Santos.csv"
        assert as_pdf.filename == "Patient_Report_Maria Santos.pdf"
        assert as_pdf.content.startswith(b"%PDF")


# =============================================================================
# Clinician report
# =============================================================================

class TestClinicianReport:
    """Tests for clinician report sections and rendering."""

    def test_midwife_report_has_no_prescriptions(self, db, patient, clinician):
        prescription = _prescription(db, patient, clinician)

        sections = clinician_report_sections(clinician, ClinicianReportOptions(), prescriptions=[prescription])

        assert "Prescriptions" not in _titles(sections)

    def test_doctor_report_lists_patients(self, db, patient):
        doctor = make_clinician(db, first_name="Jose", last_name="Cruz", role="Doctor")
        prescription = _prescription(db, patient, doctor)
        supplement = crud_supplement.create(
            db, obj_in=SupplementCreate(clinician_id=doctor.id, name="Folic acid"), patient_id=patient.id
        )
        appointment = crud_appointment.create_appointment(
            db,
            obj_in=AppointmentCreate(
                patient_id=patient.id, clinician_id=doctor.id, date=date(2024, 1, 10), time="09:00", service="Prenatal Care"
            ),
        )

        sections = clinician_report_sections(
            doctor,
            ClinicianReportOptions(basicInfo=False),
            supplements=crud_supplement.get_by_clinician(db, clinician_id=doctor.id),
            prescriptions=crud_prescription.get_by_clinician(db, clinician_id=doctor.id),
            appointments=crud_appointment.get_by_clinician(db, clinician_id=doctor.id),
        )

        assert _titles(sections) == ["Supplements", "Prescriptions", "Appointments"]
        assert dict(sections[0].groups[0][1])["Patient"] == "Maria Santos"
        assert dict(sections[0].groups[0][1])["Name"] == supplement.name
        assert dict(sections[1].groups[0][1])["Patient"] == "Maria Santos"
        assert dict(sections[1].groups[0][1])["Name"] == prescription.name
        appointment_fields = dict(sections[2].groups[0][1])
        assert appointment_fields["Date"] == "2024-01-10 09:00"
        assert appointment_fields["Status"] == appointment.status

    def test_pdf_includes_profile_picture(self, db, clinician, upload_dir):
        clinician.person.fileurl = save_object(PROFILE_PICTURE_BUCKET, _png_bytes(), ".png", prefix=str(clinician.id))
        db.commit()
        sections = clinician_report_sections(clinician, ClinicianReportOptions())

        export_file = compose_clinician_report(clinician, sections, "pdf")

        assert export_file.filename == "Clinician_Report_Ana Reyes.pdf"
        assert b"/Subtype /Image" in export_file.content

    def test_unreadable_picture_is_skipped(self, db, clinician, upload_dir):
        clinician.person.fileurl = save_object(PROFILE_PICTURE_BUCKET, b"\x89PNG\r\n\x1a\n" + b"\x00" * 16, ".png")
        db.commit()

        export_file = compose_clinician_report(clinician, clinician_report_sections(clinician, ClinicianReportOptions()))

        assert export_file.content.startswith(b"%PDF")
        assert b"/Subtype /Image" not in export_file.content

    def test_missing_picture(self, db, clinician, upload_dir):
        assert load_profile_picture(clinician.person) is None

        clinician.person.fileurl = "5/gone.png"
        db.commit()

        assert load_profile_picture(clinician.person) is None
