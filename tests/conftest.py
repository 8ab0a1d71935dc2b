"""
Pytest configuration for all tests.

Runs against an in-memory SQLite database; the environment is set before
the application modules read their settings.
"""

import os
from datetime import date

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DEBUG"] = "False"

import pytest
from fastapi.testclient import TestClient

import maternacare.models  # noqa: F401  registers every table
from maternacare.config import settings
from maternacare.crud import crud_admin, crud_clinician, crud_patient
from maternacare.database import Base, SessionLocal, engine, get_db
from maternacare.schemas.person import ClinicianCreate, PatientCreate


ADMIN_NAME = "Clinic Admin"
ADMIN_PASSWORD = "adminpass123"
CLINICIAN_PASSWORD = "midwife12345"


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(path))
    return path


@pytest.fixture
def client(db):
    from maternacare.main import app

    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# =============================================================================
# Factories
# =============================================================================

def make_patient(db, first_name="Maria", last_name="Santos", **overrides):
    data = {
        "first_name": first_name,
        "last_name": last_name,
        "birth_date": date(1995, 4, 12),
        "age": 29,
        "contact_number": "09171234567",
        "address": "12 Mabini St., Quezon City",
    }
    data.update(overrides)
    return crud_patient.create_with_person(db, obj_in=PatientCreate(**data))


def make_clinician(db, first_name="Ana", last_name="Reyes", role="Midwife", **overrides):
    data = {
        "first_name": first_name,
        "last_name": last_name,
        "birth_date": date(1985, 9, 30),
        "contact_number": "09181112222",
        "role": role,
        "specialization": "Prenatal Care",
        "license_number": "PRC-0012345",
        "password": CLINICIAN_PASSWORD,
    }
    data.update(overrides)
    return crud_clinician.create_with_person(db, obj_in=ClinicianCreate(**data))


@pytest.fixture
def patient(db):
    return make_patient(db)


@pytest.fixture
def clinician(db):
    return make_clinician(db)


@pytest.fixture
def admin(db):
    first, last = ADMIN_NAME.split()
    return crud_admin.create_admin(db, first_name=first, last_name=last, password=ADMIN_PASSWORD)


def _login(client, name, password):
    response = client.post("/api/v1/auth/login", json={"name": name, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client, admin):
    return _login(client, ADMIN_NAME, ADMIN_PASSWORD)


@pytest.fixture
def clinician_headers(client, clinician):
    return _login(client, clinician.person.full_name, CLINICIAN_PASSWORD)
