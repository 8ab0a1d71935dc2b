from sqlalchemy import Column, Integer, String, Float, TIMESTAMP
from sqlalchemy.sql import func
from ..database import Base


class Vitals(Base):
    __tablename__ = "vitals"
    
    # Same value as appointment.id
    id = Column(Integer, primary_key=True, autoincrement=False)
    
    temperature = Column(Float)
    pulse_rate = Column(Integer)
    blood_pressure = Column(String(20))
    respiration_rate = Column(Integer)
    oxygen_saturation = Column(Float)
    
    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
