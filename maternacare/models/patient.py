from sqlalchemy import Column, Integer, String, Date, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base


class Patient(Base):
    __tablename__ = "patients"
    
    # 1:1 extension of person
    id = Column(Integer, ForeignKey("person.id", ondelete="CASCADE"), primary_key=True)
    
    # Obstetric History
    gravidity = Column(String(10))
    parity = Column(String(10))
    last_menstrual_cycle = Column(Date)
    expected_date_of_confinement = Column(Date)
    
    # Social
    member = Column(String(100))
    ssn = Column(String(50))
    occupation = Column(String(100))
    marital_status = Column(String(50))
    
    # Relationships
    person = relationship("Person", back_populates="patient")
    appointments = relationship("Appointment", back_populates="patient")
