"""
End-to-end tests for the HTTP API.

Tests:
- Registry endpoints (patients, clinicians, persons)
- Appointment lifecycle, duplicate rejection and scoping
- Vitals recording
- Bulk and single-appointment exports
- Patient and clinician report exports
- Laboratory uploads and signed downloads
- Dashboard summary and export
"""

import csv
import io
from urllib.parse import urlparse

import pytest

from conftest import make_clinician, make_patient
from maternacare.api.v1.endpoints.exports import content_disposition


PDF_BYTES = b"%PDF-1.4\n% lab result\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

APPOINTMENTS = "/api/v1/appointments/"


def _book(client, headers, patient, clinician, day="2024-01-10", time="09:00", **extra):
    payload = {
        "patient_id": patient.id,
        "clinician_id": clinician.id,
        "date": day,
        "time": time,
        "service": "Prenatal Care",
    }
    payload.update(extra)
    return client.post(APPOINTMENTS, json=payload, headers=headers)


# =============================================================================
# Registry
# =============================================================================

class TestRegistry:
    """Tests for patient, clinician and person endpoints."""

    def test_register_and_search_patient(self, client, admin_headers):
        response = client.post(
            "/api/v1/patients/",
            json={
                "first_name": "Maria",
                "middle_name": "Luz",
                "last_name": "Santos",
                "birth_date": "1995-04-12",
                "age": 29,
                "contact_number": "09171234567",
                "gravidity": "2",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["person"]["status"] == "Active"
        assert body["gravidity"] == "2"

        found = client.get("/api/v1/patients/", params={"search": "luz"}, headers=admin_headers).json()
        assert [p["id"] for p in found["patients"]] == [body["id"]]

    def test_register_clinician_hides_password(self, client, admin_headers):
        response = client.post(
            "/api/v1/clinicians/",
            json={
                "first_name": "Jose",
                "last_name": "Cruz",
                "birth_date": "1980-02-02",
                "contact_number": "09170000000",
                "role": "Doctor",
                "license_number": "PRC-0099999",
                "password": "doctorpass1",
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert "password" not in response.text
        assert response.json()["role"] == "Doctor"

    def test_invalid_role(self, client, admin_headers):
        response = client.post(
            "/api/v1/clinicians/",
            json={
                "first_name": "Jose",
                "last_name": "Cruz",
                "birth_date": "1980-02-02",
                "contact_number": "09170000000",
                "role": "Nurse",
                "license_number": "PRC-0099999",
                "password": "doctorpass1",
            },
            headers=admin_headers,
        )

        assert response.status_code == 422

    def test_deactivate_person(self, client, admin_headers, patient):
        response = client.patch(
            f"/api/v1/persons/{patient.id}/status", json={"status": "Inactive"}, headers=admin_headers
        )

        assert response.status_code == 200
        active = client.get("/api/v1/patients/", params={"status": "Active"}, headers=admin_headers).json()
        assert active["total"] == 0

    def test_update_patient_keeps_unset_fields(self, client, admin_headers, patient):
        response = client.put(
            f"/api/v1/patients/{patient.id}", json={"address": "7 Rizal Ave."}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["person"]["address"] == "7 Rizal Ave."
        assert response.json()["person"]["first_name"] == "Maria"

    @pytest.mark.parametrize("field", ["first_name", "last_name", "contact_number"])
    def test_update_rejects_null_required_field(self, client, admin_headers, patient, clinician, field):
        for url in (f"/api/v1/patients/{patient.id}", f"/api/v1/clinicians/{clinician.id}"):
            response = client.put(url, json={field: None}, headers=admin_headers)

            assert response.status_code == 422

        assert client.get(f"/api/v1/patients/{patient.id}", headers=admin_headers).json()["person"]["first_name"] == "Maria"

    def test_profile_picture_replaces_previous(self, client, admin_headers, patient, upload_dir):
        url = f"/api/v1/persons/{patient.id}/profile-picture"

        first = client.put(url, files={"file": ("me.png", PNG_BYTES, "image/png")}, headers=admin_headers)
        second = client.put(url, files={"file": ("me2.png", PNG_BYTES, "image/png")}, headers=admin_headers)

        assert first.status_code == 200 and second.status_code == 200
        stored = list((upload_dir / "profile-pictures").rglob("*.png"))
        assert [p.name for p in stored] == [second.json()["fileurl"].rsplit("/", 1)[-1]]

    def test_profile_picture_rejects_pdf(self, client, admin_headers, patient, upload_dir):
        response = client.put(
            f"/api/v1/persons/{patient.id}/profile-picture",
            files={"file": ("me.pdf", PDF_BYTES, "application/pdf")},
            headers=admin_headers,
        )

        assert response.status_code == 400


# =============================================================================
# Appointments
# =============================================================================

class TestAppointmentEndpoints:
    """Tests for /api/v1/appointments."""

    def test_duplicate_booking_conflicts(self, client, admin_headers, patient, clinician):
        assert _book(client, admin_headers, patient, clinician).status_code == 201

        response = _book(client, admin_headers, patient, clinician)

        assert response.status_code == 409
        assert client.get(APPOINTMENTS, headers=admin_headers).json()["total"] == 1

    def test_unknown_clinician(self, client, admin_headers, patient):
        response = client.post(
            APPOINTMENTS,
            json={
                "patient_id": patient.id,
                "clinician_id": 999,
                "date": "2024-01-10",
                "time": "09:00",
                "service": "Prenatal Care",
            },
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_bad_time_rejected(self, client, admin_headers, patient, clinician):
        assert _book(client, admin_headers, patient, clinician, time="9am").status_code == 422

    def test_status_and_payment(self, client, admin_headers, patient, clinician):
        appointment_id = _book(client, admin_headers, patient, clinician).json()["id"]

        status_response = client.patch(
            f"{APPOINTMENTS}{appointment_id}/status", json={"status": "canceled"}, headers=admin_headers
        )
        payment_response = client.patch(
            f"{APPOINTMENTS}{appointment_id}/payment-status",
            json={"payment_status": "Completed"},
            headers=admin_headers,
        )

        assert status_response.json()["status"] == "Canceled"
        assert payment_response.json()["payment_status"] == "Paid"

    def test_clinician_sees_only_own_appointments(self, client, db, admin_headers, clinician_headers, patient, clinician):
        other = make_clinician(db, first_name="Jose", last_name="Cruz", role="Doctor")
        _book(client, admin_headers, patient, clinician)
        foreign_id = _book(client, admin_headers, patient, other).json()["id"]

        listing = client.get(APPOINTMENTS, headers=clinician_headers).json()

        assert [a["clinician_id"] for a in listing["appointments"]] == [clinician.id]
        assert client.get(f"{APPOINTMENTS}{foreign_id}", headers=clinician_headers).status_code == 404

    def test_admin_delete(self, client, admin_headers, patient, clinician):
        appointment_id = _book(client, admin_headers, patient, clinician).json()["id"]

        assert client.delete(f"{APPOINTMENTS}{appointment_id}", headers=admin_headers).status_code == 204
        assert client.delete(f"{APPOINTMENTS}{appointment_id}", headers=admin_headers).status_code == 404

    def test_list_by_day(self, client, admin_headers, patient, clinician):
        _book(client, admin_headers, patient, clinician, day="2024-01-10")
        _book(client, admin_headers, patient, clinician, day="2024-01-11")

        listing = client.get(APPOINTMENTS, params={"day": "2024-01-11"}, headers=admin_headers).json()

        assert [a["date"][:10] for a in listing["appointments"]] == ["2024-01-11"]


# =============================================================================
# Vitals
# =============================================================================

class TestVitalsEndpoints:
    """Tests for /api/v1/appointments/{id}/vitals."""

    VITALS = {
        "temperature": 36.8,
        "pulse_rate": 82,
        "blood_pressure": "110/70",
        "respiration_rate": 18,
        "oxygen_saturation": 98,
        "weight": 62.5,
        "gestational_age": 24,
    }

    def test_save_then_update(self, client, clinician_headers, admin_headers, patient, clinician):
        appointment_id = _book(client, admin_headers, patient, clinician).json()["id"]
        url = f"{APPOINTMENTS}{appointment_id}/vitals"

        first = client.put(url, json=self.VITALS, headers=clinician_headers)
        second = client.put(url, json={**self.VITALS, "temperature": 37.2}, headers=clinician_headers)

        assert first.json()["created"] is True
        assert second.json()["created"] is False
        assert client.get(url, headers=clinician_headers).json()["temperature"] == 37.2
        assert second.json()["appointment"]["weight"] == 62.5

    def test_out_of_range_temperature(self, client, admin_headers, patient, clinician):
        appointment_id = _book(client, admin_headers, patient, clinician).json()["id"]

        response = client.put(
            f"{APPOINTMENTS}{appointment_id}/vitals",
            json={**self.VITALS, "temperature": 42.1},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert client.get(f"{APPOINTMENTS}{appointment_id}/vitals", headers=admin_headers).status_code == 404


# =============================================================================
# Exports
# =============================================================================

class TestExportEndpoints:
    """Tests for bulk and single-appointment exports."""

    def test_bulk_csv(self, client, admin_headers, patient, clinician):
        _book(client, admin_headers, patient, clinician, time="09:00", status="Completed")
        _book(client, admin_headers, patient, clinician, time="10:00")

        response = client.post(
            "/api/v1/exports/appointments",
            json={"filters": {"status": "completed"}, "export_format": "csv"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert len(rows) == 2
        assert rows[1][rows[0].index("Status")] == "Completed"

    def test_bulk_pdf_zips_several_reports(self, client, admin_headers, patient, clinician):
        _book(client, admin_headers, patient, clinician, time="09:00")
        _book(client, admin_headers, patient, clinician, time="10:00")

        response = client.post(
            "/api/v1/exports/appointments", json={"export_format": "pdf"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"

    def test_bulk_nothing_matches_csv_is_header_only(self, client, admin_headers):
        response = client.post("/api/v1/exports/appointments", json={}, headers=admin_headers)

        assert response.status_code == 200
        rows = list(csv.reader(io.StringIO(response.text)))
        assert len(rows) == 1
        assert rows[0][0] == "Date"

    def test_bulk_nothing_matches_pdf(self, client, admin_headers):
        response = client.post(
            "/api/v1/exports/appointments", json={"export_format": "pdf"}, headers=admin_headers
        )

        assert response.status_code == 404

    def test_single_missing_options(self, client, admin_headers):
        response = client.post(
            "/api/export/appointment", json={"appointment": {"date": "2024-01-10T09:00:00"}}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Missing appointment data or export options"}

    def test_single_invalid_appointment(self, client, admin_headers):
        response = client.post(
            "/api/export/appointment",
            json={"appointment": {"date": "not a date"}, "exportOptions": {"vitals": True}},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_single_pdf(self, client, admin_headers, patient, clinician):
        appointment_id = _book(client, admin_headers, patient, clinician).json()["id"]
        appointment = client.get(f"{APPOINTMENTS}{appointment_id}", headers=admin_headers).json()

        response = client.post(
            "/api/export/appointment",
            json={
                "appointment": appointment,
                "exportOptions": {"appointmentInfo": True, "patientInfo": True, "prescriptions": True},
                "exportFormat": "pdf",
            },
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
        assert "Appointment_Report_Maria Santos_2024-01-10.pdf" in response.headers["content-disposition"]

    def test_single_pdf_for_non_latin_name(self, client, db, admin_headers, clinician):
        patient = make_patient(db, first_name="Nguyễn", last_name="Thị")
        appointment_id = _book(client, admin_headers, patient, clinician).json()["id"]
        appointment = client.get(f"{APPOINTMENTS}{appointment_id}", headers=admin_headers).json()

        response = client.post(
            "/api/export/appointment",
            json={"appointment": appointment, "exportOptions": {"patientInfo": True}, "exportFormat": "pdf"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
        disposition = response.headers["content-disposition"]
        assert 'filename="Appointment_Report_Nguyen Thi_2024-01-10.pdf"' in disposition
        assert "filename*=UTF-8''Appointment_Report_Nguy%E1%BB%85n%20Th%E1%BB%8B_2024-01-10.pdf" in disposition

    def test_filename_quotes_are_dropped_from_fallback(self):
        disposition = content_disposition('Appointment_Report_Ana "Bing" Cruz_2024-01-10.csv')

        assert 'filename="Appointment_Report_Ana Bing Cruz_2024-01-10.csv"' in disposition
        assert "%22Bing%22" in disposition


class TestPersonReportEndpoints:
    """Tests for patient and clinician report exports."""

    def test_patient_report_pdf(self, client, admin_headers, patient):
        client.post(
            f"/api/v1/patients/{patient.id}/allergies",
            json={"name": "Penicillin", "severity": "Severe"},
            headers=admin_headers,
        )

        response = client.post(
            "/api/export/patient",
            json={"patientId": patient.id, "exportOptions": {"basicInfo": True, "allergies": True}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")
        assert 'filename="Patient_Report_Maria Santos.pdf"' in response.headers["content-disposition"]

    def test_patient_report_csv(self, client, admin_headers, patient):
        client.post(
            f"/api/v1/patients/{patient.id}/allergies",
            json={"name": "Penicillin", "severity": "Severe"},
            headers=admin_headers,
        )

        response = client.post(
            "/api/export/patient",
            json={"patientId": patient.id, "exportOptions": {"basicInfo": False}, "exportFormat": "csv"},
            headers=admin_headers,
        )

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["Category", "Field", "Value"]
        assert ["Allergy 1", "Severity", "Severe"] in rows

    def test_patient_report_missing_options(self, client, admin_headers, patient):
        response = client.post("/api/export/patient", json={"patientId": patient.id}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing patient data or export options"}

    def test_patient_report_unknown_patient(self, client, admin_headers):
        response = client.post(
            "/api/export/patient", json={"patientId": 999, "exportOptions": {"basicInfo": True}}, headers=admin_headers
        )

        assert response.status_code == 404
        assert response.json() == {"error": "Patient not found"}

    def test_clinician_report_own(self, client, clinician_headers, clinician):
        response = client.post(
            "/api/export/clinician",
            json={"clinicianId": clinician.id, "exportOptions": {"basicInfo": True}, "exportFormat": "csv"},
            headers=clinician_headers,
        )

        assert response.status_code == 200
        rows = list(csv.reader(io.StringIO(response.text)))
        assert ["Personal Info", "License Number", "PRC-0012345"] in rows
        assert 'filename="Clinician_Report_Ana Reyes.csv"' in response.headers["content-disposition"]

    def test_clinician_report_of_colleague_forbidden(self, client, db, clinician_headers):
        colleague = make_clinician(db, first_name="Jose", last_name="Cruz", role="Doctor")

        response = client.post(
            "/api/export/clinician",
            json={"clinicianId": colleague.id, "exportOptions": {"basicInfo": True}},
            headers=clinician_headers,
        )

        assert response.status_code == 403
        assert "error" in response.json()

    def test_clinician_report_missing_data(self, client, admin_headers):
        response = client.post("/api/export/clinician", json={"exportOptions": {"basicInfo": True}}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing clinician data or export options"}

    def test_clinician_report_pdf_with_picture(self, client, admin_headers, clinician, upload_dir):
        client.put(
            f"/api/v1/persons/{clinician.id}/profile-picture",
            files={"file": ("me.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )

        response = client.post(
            "/api/export/clinician",
            json={"clinicianId": clinician.id, "exportOptions": {"basicInfo": True, "appointments": True}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.content.startswith(b"%PDF")


# =============================================================================
# Laboratory records and signed downloads
# =============================================================================

LAB_FORM = {
    "file_name": "CBC",
    "record_type": "Hematology",
    "doctor": "Dr. Cruz",
    "ordered_date": "2024-01-05",
    "received_date": "2024-01-06",
    "reported_date": "2024-01-07",
    "impressions": "Normal",
}


class TestLaboratoryEndpoints:
    """Tests for laboratory uploads and file downloads."""

    def _upload(self, client, headers, patient, filename="cbc.pdf", content=PDF_BYTES):
        return client.post(
            f"/api/v1/patients/{patient.id}/laboratory-records",
            data=LAB_FORM,
            files={"file": (filename, content, "application/pdf")},
            headers=headers,
        )

    def test_upload_and_download(self, client, clinician_headers, patient, upload_dir):
        record = self._upload(client, clinician_headers, patient).json()
        assert record["fileurl"].startswith(f"{patient.id}/")

        signed = client.get(
            f"/api/v1/laboratory-records/{record['id']}/signed-url", headers=clinician_headers
        ).json()
        download = client.get(urlparse(signed["signed_url"]).path)

        assert download.status_code == 200
        assert download.content == PDF_BYTES
        assert download.headers["content-type"] == "application/pdf"

    def test_fake_pdf_rejected(self, client, clinician_headers, patient, upload_dir):
        response = self._upload(client, clinician_headers, patient, content=b"MZ not a pdf")

        assert response.status_code == 400
        assert not (upload_dir / "laboratory-files").exists() or not any((upload_dir / "laboratory-files").rglob("*"))

    def test_tampered_token(self, client):
        assert client.get("/api/v1/files/not-a-token").status_code == 401

    def test_delete_removes_file(self, client, admin_headers, patient, upload_dir):
        record = self._upload(client, admin_headers, patient).json()
        stored = upload_dir / "laboratory-files" / record["fileurl"]
        assert stored.is_file()

        response = client.delete(f"/api/v1/laboratory-records/{record['id']}", headers=admin_headers)

        assert response.status_code == 204
        assert not stored.exists()


# =============================================================================
# Records
# =============================================================================

class TestRecordEndpoints:
    """Tests for allergies, prescriptions and supplements."""

    def test_allergy_lifecycle(self, client, admin_headers, clinician_headers, patient):
        created = client.post(
            f"/api/v1/patients/{patient.id}/allergies",
            json={"name": "Penicillin", "severity": "Severe"},
            headers=clinician_headers,
        )
        assert created.status_code == 201
        allergy_id = created.json()["id"]

        assert client.delete(f"/api/v1/allergies/{allergy_id}", headers=clinician_headers).status_code == 403
        assert client.delete(f"/api/v1/allergies/{allergy_id}", headers=admin_headers).status_code == 204
        assert client.get(f"/api/v1/patients/{patient.id}/allergies", headers=admin_headers).json()["total"] == 0

    def test_prescription_for_unknown_patient(self, client, admin_headers, clinician):
        response = client.post(
            "/api/v1/patients/999/prescriptions",
            json={
                "clinician_id": clinician.id,
                "name": "Ferrous sulfate",
                "strength": "325 mg",
                "amount": "1 tablet",
                "frequency": "Once daily",
                "route": "Oral",
            },
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_supplement_listed(self, client, admin_headers, patient):
        client.post(
            f"/api/v1/patients/{patient.id}/supplements",
            json={"name": "Folic acid", "strength": "400 mcg"},
            headers=admin_headers,
        )

        listing = client.get(f"/api/v1/patients/{patient.id}/supplements", headers=admin_headers).json()

        assert [s["name"] for s in listing["supplements"]] == ["Folic acid"]


# =============================================================================
# Dashboard
# =============================================================================

class TestDashboardEndpoints:
    """Tests for /api/v1/dashboard."""

    def test_summary(self, client, db, admin_headers, patient, clinician):
        second = make_patient(db, first_name="Liza", last_name="Garcia", age=31)
        _book(client, admin_headers, patient, clinician, day="2024-01-10")
        _book(client, admin_headers, second, clinician, day="2024-01-10", time="10:00")
        _book(client, admin_headers, patient, clinician, day="2024-01-11")

        summary = client.get(
            "/api/v1/dashboard/summary", params={"today": "2024-01-10"}, headers=admin_headers
        ).json()

        assert summary["active_patients"] == 2
        assert summary["active_clinicians"] == 1
        assert summary["total_appointments"] == 3
        assert [a["patient_name"] for a in summary["todays_appointments"]] == ["Maria Santos", "Liza Garcia"]
        assert summary["age_distribution"] == [
            {"age": 29, "number_of_patients": 1},
            {"age": 31, "number_of_patients": 1},
        ]
        assert summary["clinician_distribution"] == [
            {"clinician_id": clinician.id, "clinician_name": "Ana Reyes", "number_of_patients": 2}
        ]

    @pytest.mark.parametrize("export_format", ["csv", "pdf"])
    def test_export(self, client, admin_headers, patient, export_format):
        response = client.post(
            "/api/v1/dashboard/export",
            json={"exportOptions": {"ageDistribution": True, "clinicianDistribution": False}, "exportFormat": export_format},
            headers=admin_headers,
        )

        assert response.status_code == 200
        if export_format == "csv":
            rows = list(csv.reader(io.StringIO(response.text)))
            assert rows[0] == ["Category", "Metric", "Value"]
            assert ["Overview", "Active Patients", "1"] in rows
            assert ["Age Distribution", "Age 29", "1"] in rows
        else:
            assert response.content.startswith(b"%PDF")
