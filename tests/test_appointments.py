"""
Tests for the appointment repository.

Tests:
- Duplicate (patient, clinician, date+time) slots are rejected
- Unique constraint violations map onto DuplicateAppointmentError
- Partial updates recombine date and time against the stored slot
- Joined views carry prescriptions and supplements of the patient
"""

from datetime import date, datetime

import pytest

from conftest import make_clinician, make_patient
from maternacare.core.exceptions import DuplicateAppointmentError, RecordNotFoundError
from maternacare.crud import crud_appointment, crud_prescription
from maternacare.crud.appointment import combine_date_time
from maternacare.schemas.appointment import AppointmentCreate, AppointmentUpdate
from maternacare.schemas.prescription import PrescriptionCreate


def _create(db, patient, clinician, day=date(2024, 1, 10), time="09:00", **extra):
    obj_in = AppointmentCreate(
        patient_id=patient.id,
        clinician_id=clinician.id,
        date=day,
        time=time,
        service="Prenatal Care",
        **extra,
    )
    return crud_appointment.create_appointment(db, obj_in=obj_in)


# =============================================================================
# Slot helpers
# =============================================================================

class TestCombineDateTime:
    """Tests for merging a day and an HH:MM string."""

    def test_combines_local_time(self):
        assert combine_date_time(date(2024, 1, 10), "09:00") == datetime(2024, 1, 10, 9, 0)

    def test_accepts_single_digit_hour(self):
        assert combine_date_time(date(2024, 1, 10), "7:05") == datetime(2024, 1, 10, 7, 5)

    def test_rejects_bad_time(self):
        with pytest.raises(ValueError):
            combine_date_time(date(2024, 1, 10), "25:00")


# =============================================================================
# Create
# =============================================================================

class TestCreateAppointment:
    """Tests for create_appointment."""

    def test_creates_with_defaults(self, db, patient, clinician):
        appointment = _create(db, patient, clinician)

        assert appointment.id is not None
        assert appointment.date == datetime(2024, 1, 10, 9, 0)
        assert appointment.status == "Scheduled"
        assert appointment.payment_status == "Unpaid"

    def test_duplicate_slot_rejected(self, db, patient, clinician):
        """A second booking for the same slot fails and leaves the count unchanged."""
        _create(db, patient, clinician)
        assert crud_appointment.count(db) == 1

        with pytest.raises(DuplicateAppointmentError):
            _create(db, patient, clinician)

        assert crud_appointment.count(db) == 1

    def test_same_day_other_time_allowed(self, db, patient, clinician):
        _create(db, patient, clinician, time="09:00")
        _create(db, patient, clinician, time="10:30")

        assert crud_appointment.count(db) == 2

    def test_same_slot_other_clinician_allowed(self, db, patient, clinician):
        other = make_clinician(db, first_name="Jose", last_name="Cruz", role="Doctor")

        _create(db, patient, clinician)
        _create(db, patient, other)

        assert crud_appointment.count(db) == 2

    def test_unique_constraint_maps_to_duplicate(self, db, patient, clinician, monkeypatch):
        """With the read check bypassed the database constraint still rejects the slot."""
        _create(db, patient, clinician)
        monkeypatch.setattr(crud_appointment, "find_slot", lambda *args, **kwargs: None)

        with pytest.raises(DuplicateAppointmentError):
            _create(db, patient, clinician)

        assert crud_appointment.count(db) == 1

    def test_unknown_patient(self, db, clinician):
        obj_in = AppointmentCreate(
            patient_id=999,
            clinician_id=clinician.id,
            date=date(2024, 1, 10),
            time="09:00",
            service="Consultation",
        )

        with pytest.raises(RecordNotFoundError):
            crud_appointment.create_appointment(db, obj_in=obj_in)

    def test_payment_completed_alias(self, db, patient, clinician):
        appointment = _create(db, patient, clinician, payment_status="Completed")

        assert appointment.payment_status == "Paid"


# =============================================================================
# Update
# =============================================================================

class TestUpdateAppointment:
    """Tests for update_appointment."""

    def test_time_only_keeps_stored_day(self, db, patient, clinician):
        appointment = _create(db, patient, clinician)

        updated = crud_appointment.update_appointment(
            db, db_obj=appointment, obj_in=AppointmentUpdate(time="14:15")
        )

        assert updated.date == datetime(2024, 1, 10, 14, 15)

    def test_date_only_keeps_stored_time(self, db, patient, clinician):
        appointment = _create(db, patient, clinician)

        updated = crud_appointment.update_appointment(
            db, db_obj=appointment, obj_in=AppointmentUpdate(date=date(2024, 2, 1))
        )

        assert updated.date == datetime(2024, 2, 1, 9, 0)

    def test_move_onto_taken_slot_rejected(self, db, patient, clinician):
        _create(db, patient, clinician, time="09:00")
        second = _create(db, patient, clinician, time="11:00")

        with pytest.raises(DuplicateAppointmentError):
            crud_appointment.update_appointment(
                db, db_obj=second, obj_in=AppointmentUpdate(time="09:00")
            )

        db.refresh(second)
        assert second.date == datetime(2024, 1, 10, 11, 0)

    def test_unchanged_slot_is_not_a_duplicate(self, db, patient, clinician):
        appointment = _create(db, patient, clinician)

        updated = crud_appointment.update_appointment(
            db, db_obj=appointment, obj_in=AppointmentUpdate(time="09:00", service="Ultrasound")
        )

        assert updated.service == "Ultrasound"


# =============================================================================
# Reads
# =============================================================================

class TestAppointmentReads:
    """Tests for the query helpers."""

    def test_get_for_day(self, db, patient, clinician):
        _create(db, patient, clinician, day=date(2024, 1, 10), time="15:00")
        _create(db, patient, clinician, day=date(2024, 1, 10), time="08:00")
        _create(db, patient, clinician, day=date(2024, 1, 11), time="08:00")

        rows = crud_appointment.get_for_day(db, day=date(2024, 1, 10))

        assert [a.date.hour for a in rows] == [8, 15]

    def test_scoped_listing(self, db, patient, clinician):
        other = make_clinician(db, first_name="Jose", last_name="Cruz", role="Doctor")
        _create(db, patient, clinician)
        _create(db, patient, other)

        rows = crud_appointment.get_multi_filtered(db, clinician_id=other.id)

        assert [a.clinician_id for a in rows] == [other.id]

    def test_detail_includes_patient_prescriptions(self, db, patient, clinician):
        appointment = _create(db, patient, clinician)
        crud_prescription.create(
            db,
            obj_in=PrescriptionCreate(
                clinician_id=clinician.id,
                name="Ferrous sulfate",
                strength="325 mg",
                amount="1 tablet",
                frequency="Once daily",
                route="Oral",
            ),
            patient_id=patient.id,
        )

        detail = crud_appointment.get_detail(db, appointment_id=appointment.id)

        assert detail.patient_name == "Maria Santos"
        assert detail.clinician_name == "Ana Reyes"
        assert [p.name for p in detail.prescriptions] == ["Ferrous sulfate"]
        assert detail.supplements == []

    def test_delete_leaves_other_patients_untouched(self, db, patient, clinician):
        other_patient = make_patient(db, first_name="Liza", last_name="Garcia")
        first = _create(db, patient, clinician)
        _create(db, other_patient, clinician)

        crud_appointment.delete_appointment(db, id=first.id)

        assert crud_appointment.get(db, first.id) is None
        assert crud_appointment.count(db) == 1
