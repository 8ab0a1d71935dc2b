from sqlalchemy import Column, Integer, String, Date, Text, TIMESTAMP, ForeignKey
from sqlalchemy.sql import func
from ..database import Base


class LaboratoryRecord(Base):
    __tablename__ = "laboratory_records"
    
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    
    # Metadata
    file_name = Column(String(255), nullable=False)
    record_type = Column(String(100), nullable=False)
    doctor = Column(String(200), nullable=False)
    ordered_date = Column(Date, nullable=False)
    received_date = Column(Date, nullable=False)
    reported_date = Column(Date, nullable=False)
    
    # Findings
    impressions = Column(Text, nullable=False)
    remarks = Column(Text)
    recommendations = Column(Text)
    
    # Object key in laboratory-files bucket
    fileurl = Column(String(500))
    
    created_at = Column(TIMESTAMP, server_default=func.now())
