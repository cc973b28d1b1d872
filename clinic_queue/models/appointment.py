from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Boolean, Float, Text, Index, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # The store is the arbiter of queue number conflicts. Two inserts that
        # race for the same number in the same slot cannot both succeed.
        UniqueConstraint(
            "doctor_id", "date", "time", "queue_number",
            name="uq_appointments_doctor_slot_queue_number",
        ),
        Index("ix_appointments_provider_date_queue", "provider_id", "date", "queue_number"),
        Index("ix_appointments_doctor_date", "doctor_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Scope keys
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    provider_id = Column(Integer, ForeignKey("healthcare_providers.id"), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(String(5), nullable=False)  # slot label, "HH:MM"

    queue_number = Column(Integer, nullable=False)
    status = Column(SQLEnum(AppointmentStatus), nullable=False, default=AppointmentStatus.PENDING)

    # Booking details, copied at creation
    doctor_name = Column(String(200), nullable=False)
    provider_name = Column(String(200), nullable=False)
    patient_id = Column(Integer, nullable=True)
    patient_name = Column(String(200), nullable=False)
    patient_phone = Column(String(20), nullable=False)
    is_walk_in = Column(Boolean, nullable=False, default=False)
    consultation_fee = Column(Float, nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctor = relationship("Doctor", back_populates="appointments")

    def __repr__(self):
        return f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, date='{self.date}', time='{self.time}', queue_number={self.queue_number})>"
