"""
SQLAlchemy Models for MaternaCare
"""

from ..database import Base
from .person import Person
from .patient import Patient
from .clinician import Clinician
from .admin import Admin
from .appointment import Appointment
from .vitals import Vitals
from .prescription import Prescription
from .supplement import Supplement
from .allergy import Allergy
from .laboratory_record import LaboratoryRecord

# Export all models
__all__ = [
    "Base",
    "Person",
    "Patient",
    "Clinician",
    "Admin",
    "Appointment",
    "Vitals",
    "Prescription",
    "Supplement",
    "Allergy",
    "LaboratoryRecord",
]
