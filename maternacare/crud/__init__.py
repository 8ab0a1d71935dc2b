"""CRUD operations package - exports singleton instances for all models."""

from .base import CRUDBase
from .person import crud_person
from .patient import crud_patient
from .clinician import crud_clinician
from .admin import crud_admin
from .appointment import crud_appointment
from .vitals import crud_vitals
from .prescription import crud_prescription
from .supplement import crud_supplement
from .allergy import crud_allergy
from .laboratory_record import crud_laboratory_record


__all__ = [
    # Base
    "CRUDBase",
    # CRUD instances
    "crud_person",
    "crud_patient",
    "crud_clinician",
    "crud_admin",
    "crud_appointment",
    "crud_vitals",
    "crud_prescription",
    "crud_supplement",
    "crud_allergy",
    "crud_laboratory_record",
]
