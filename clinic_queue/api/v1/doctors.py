from fastapi import APIRouter, Depends, Query
from datetime import date as Date
from typing import List, Optional

from ...api.deps import get_appointment_service
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import AppointmentResponse, QueueEstimate, QueueScope, SLOT_PATTERN

router = APIRouter(prefix="/doctors", tags=["Doctor Queues"])

@router.get("/{doctor_id}/appointments", response_model=List[AppointmentResponse])
def list_doctor_appointments(
    doctor_id: int,
    date: Date,
    time: Optional[str] = Query(None, pattern=SLOT_PATTERN),
    service: AppointmentService = Depends(get_appointment_service)
):
    """Appointments for a doctor's day, or a single slot, in queue order."""
    return service.list_appointments(doctor_id, date, time)

@router.get("/{doctor_id}/queue", response_model=QueueEstimate)
def estimate_queue(
    doctor_id: int,
    date: Date,
    time: Optional[str] = Query(None, pattern=SLOT_PATTERN),
    appointment_id: Optional[int] = None,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Estimate queue position and wait. Without an appointment id, the
    estimate is for the last appointment currently in the queue."""
    scope = QueueScope(doctor_id=doctor_id, date=date, time=time)
    return service.estimate_queue(scope, appointment_id)
