from pydantic import BaseModel, Field
from typing import Optional
from datetime import date as Date, datetime

from ..models.appointment import AppointmentStatus

# Slot labels are 24-hour "HH:MM"
SLOT_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

class QueueScope(BaseModel):
    """Doctor, day and (optionally) slot that make up one numbering space."""
    doctor_id: int
    date: Date
    time: Optional[str] = Field(default=None, pattern=SLOT_PATTERN)

    class Config:
        frozen = True

class AppointmentCreate(BaseModel):
    doctor_id: int
    date: Date
    time: str = Field(..., pattern=SLOT_PATTERN)
    patient_name: str = Field(..., min_length=1, max_length=200)
    patient_phone: str = Field(..., min_length=3, max_length=20)
    patient_id: Optional[int] = None
    notes: Optional[str] = None

class WalkInCreate(BaseModel):
    doctor_id: int
    date: Date
    time: str = Field(..., pattern=SLOT_PATTERN)
    patient_name: str = Field(..., min_length=1, max_length=200)
    patient_phone: str = Field(..., min_length=3, max_length=20)
    notes: Optional[str] = None

class CancelRequest(BaseModel):
    reason: Optional[str] = None

class RescheduleRequest(BaseModel):
    new_date: Date
    new_time: str = Field(..., pattern=SLOT_PATTERN)

class StatusUpdate(BaseModel):
    status: AppointmentStatus

class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    provider_id: int
    doctor_name: str
    provider_name: str
    patient_id: Optional[int] = None
    patient_name: str
    patient_phone: str
    date: Date
    time: str
    queue_number: int
    status: AppointmentStatus
    is_walk_in: bool
    consultation_fee: float
    notes: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class QueueEstimate(BaseModel):
    """Where an appointment stands in its slot and when it should be seen."""
    position: int
    estimated_wait_minutes: int
    estimated_time: Optional[datetime] = None
    total_in_queue: int
    queue_number: Optional[int] = None
    appointment_id: Optional[int] = None
