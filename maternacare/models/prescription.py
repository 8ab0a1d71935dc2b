import datetime

from sqlalchemy import Column, Integer, String, Date, TIMESTAMP, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Prescription(Base):
    __tablename__ = "prescriptions"
    
    id = Column(Integer, primary_key=True, index=True)
    
    # Foreign Keys
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    clinician_id = Column(Integer, ForeignKey("clinicians.id", ondelete="SET NULL"), index=True)
    # Plain column: prescriptions outlive a deleted appointment
    appointment_id = Column(Integer, index=True)
    
    # Medication
    name = Column(String(200), nullable=False)
    strength = Column(String(100))
    amount = Column(String(100))
    frequency = Column(String(100))
    route = Column(String(100))
    
    status = Column(String(20), default="active", nullable=False)
    date = Column(Date, default=datetime.date.today)
    
    created_at = Column(TIMESTAMP, server_default=func.now())
    
    # Relationships
    patient = relationship("Patient", foreign_keys=[patient_id])
    clinician = relationship("Clinician", foreign_keys=[clinician_id])
