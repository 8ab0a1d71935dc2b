from sqlalchemy import Column, Integer, String, Date, TIMESTAMP
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class Person(Base):
    __tablename__ = "person"
    
    id = Column(Integer, primary_key=True, index=True)
    
    # Identity
    first_name = Column(String(100), nullable=False, index=True)
    middle_name = Column(String(100))
    last_name = Column(String(100), nullable=False, index=True)
    birth_date = Column(Date)
    age = Column(Integer)
    
    # Demographics & Contact
    contact_number = Column(String(30))
    citizenship = Column(String(100))
    address = Column(String(500))
    religion = Column(String(100))
    
    # Emergency Contact
    ec_first_name = Column(String(100))
    ec_middle_name = Column(String(100))
    ec_last_name = Column(String(100))
    ec_contact_number = Column(String(30))
    ec_relationship = Column(String(50))
    
    # Profile picture object key (profile-pictures bucket)
    fileurl = Column(String(500))
    
    # Status
    status = Column(String(20), default="Active", nullable=False, index=True)
    
    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
    
    # Relationships
    patient = relationship("Patient", back_populates="person", uselist=False)
    clinician = relationship("Clinician", back_populates="person", uselist=False)
    
    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p for p in parts if p).strip()
