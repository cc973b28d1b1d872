from fastapi import APIRouter, Depends, status

from ...api.deps import get_appointment_service, rate_limit_check
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentCreate, WalkInCreate, AppointmentResponse, CancelRequest,
    RescheduleRequest, StatusUpdate, QueueEstimate
)

router = APIRouter(prefix="/appointments", tags=["Appointments"])

# Handlers are plain functions so FastAPI runs the blocking database work in
# its threadpool

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def book_appointment(
    booking: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
    _: None = Depends(rate_limit_check)
):
    """Book an appointment and assign its queue number."""
    return service.book_appointment(booking)

@router.post("/walk-in", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def register_walk_in(
    walk_in: WalkInCreate,
    service: AppointmentService = Depends(get_appointment_service),
    _: None = Depends(rate_limit_check)
):
    """Register a walk-in patient for a slot."""
    return service.register_walk_in(walk_in)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.get_appointment(appointment_id)

@router.get("/{appointment_id}/queue", response_model=QueueEstimate)
def get_queue_position(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Queue position, estimated wait and estimated time for an appointment."""
    return service.queue_position(appointment_id)

@router.put("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    cancel_data: CancelRequest,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Cancel an appointment. Queue numbers of other appointments are unchanged."""
    return service.cancel_appointment(appointment_id, cancel_data.reason)

@router.put("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    reschedule_data: RescheduleRequest,
    service: AppointmentService = Depends(get_appointment_service)
):
    """Move an appointment to a new date and time with a new queue number."""
    return service.reschedule_appointment(appointment_id, reschedule_data)

@router.put("/{appointment_id}/status", response_model=AppointmentResponse)
def update_status(
    appointment_id: int,
    status_data: StatusUpdate,
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.update_status(appointment_id, status_data.status)
