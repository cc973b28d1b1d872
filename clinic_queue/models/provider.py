from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class ProviderType(str, enum.Enum):
    PHARMACY = "pharmacy"
    CLINIC = "clinic"
    HOSPITAL = "hospital"

class HealthcareProvider(Base):
    __tablename__ = "healthcare_providers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    type = Column(SQLEnum(ProviderType), nullable=False)

    # Contact information
    address = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctors = relationship("Doctor", back_populates="provider")

    def __repr__(self):
        return f"<HealthcareProvider(id={self.id}, name='{self.name}', type='{self.type}')>"
