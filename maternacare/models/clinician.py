from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from ..database import Base


class Clinician(Base):
    __tablename__ = "clinicians"
    
    # 1:1 extension of person
    id = Column(Integer, ForeignKey("person.id", ondelete="CASCADE"), primary_key=True)
    
    # Professional Info
    role = Column(String(20), nullable=False, index=True)
    specialization = Column(String(100))
    license_number = Column(String(100), nullable=False)
    
    # Authentication
    password_hash = Column(String(255), nullable=False)
    
    # Constraints
    __table_args__ = (
        CheckConstraint("role IN ('Doctor', 'Midwife')", name="check_clinician_role"),
    )
    
    # Relationships
    person = relationship("Person", back_populates="clinician")
    appointments = relationship("Appointment", back_populates="clinician")
