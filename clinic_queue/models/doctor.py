from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("healthcare_providers.id"), nullable=False, index=True)

    # Professional information
    name = Column(String(200), nullable=False)
    specialty = Column(String(100), nullable=False)
    qualification = Column(String(255), nullable=True)
    consultation_fee = Column(Float, nullable=False, default=0)

    # Availability
    slots_per_day = Column(Integer, default=10)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    provider = relationship("HealthcareProvider", back_populates="doctors")
    appointments = relationship("Appointment", back_populates="doctor")

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}', specialty='{self.specialty}')>"
