from sqlalchemy import Column, Integer, String, Float, DateTime, TIMESTAMP, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Appointment(Base):
    __tablename__ = "appointment"
    
    id = Column(Integer, primary_key=True, index=True)
    
    # Foreign Keys
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    clinician_id = Column(Integer, ForeignKey("clinicians.id"), nullable=False, index=True)
    
    # Slot (local time, no timezone normalization)
    date = Column(DateTime, nullable=False, index=True)
    service = Column(String(50), nullable=False)
    
    # Measurements recorded with vitals
    weight = Column(Float)
    gestational_age = Column(Integer)
    
    # Status
    status = Column(String(20), default="Scheduled", nullable=False, index=True)
    payment_status = Column(String(20), default="Unpaid", nullable=False)
    
    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
    
    # Constraints
    __table_args__ = (
        UniqueConstraint("patient_id", "clinician_id", "date", name="unq_appointment_slot"),
    )
    
    # Relationships
    patient = relationship("Patient", back_populates="appointments")
    clinician = relationship("Clinician", back_populates="appointments")
    # Vitals share the appointment id; no FK so deleting an appointment leaves them in place
    vitals = relationship(
        "Vitals",
        primaryjoin="Appointment.id == foreign(Vitals.id)",
        uselist=False,
        viewonly=True,
    )
