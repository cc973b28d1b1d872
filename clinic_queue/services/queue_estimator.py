from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..core.config import settings
from ..models.appointment import Appointment
from ..schemas.appointment import QueueEstimate, QueueScope
from .appointment_store import AppointmentStore


def slot_start(scope: QueueScope) -> Optional[datetime]:
    """Provider-local start of the scope's slot, or None for a whole day."""
    if scope.time is None:
        return None
    hours, minutes = (int(part) for part in scope.time.split(":"))
    return datetime(scope.date.year, scope.date.month, scope.date.day, hours, minutes)


def estimate_queue_position(
    appointments: Sequence[Appointment],
    appointment_id: Optional[int],
    start: Optional[datetime],
    minutes_per_patient: int
) -> QueueEstimate:
    """Position of an appointment among others, by queue number.

    `appointments` must be in creation order; sorting is stable, so equal
    numbers keep that order. An unknown or missing id counts as last in line.
    """
    ordered = sorted(appointments, key=lambda a: a.queue_number)

    position = len(ordered)
    queue_number = None
    if appointment_id is not None:
        for index, appointment in enumerate(ordered, start=1):
            if appointment.id == appointment_id:
                position = index
                queue_number = appointment.queue_number
                break
    position = max(position, 1)

    wait = (position - 1) * minutes_per_patient
    return QueueEstimate(
        position=position,
        estimated_wait_minutes=wait,
        estimated_time=start + timedelta(minutes=wait) if start else None,
        total_in_queue=len(ordered),
        queue_number=queue_number,
        appointment_id=appointment_id
    )


class QueuePositionEstimator:
    def __init__(self, store: AppointmentStore, minutes_per_patient: Optional[int] = None):
        self.store = store
        if minutes_per_patient is None:
            minutes_per_patient = settings.QUEUE_MINUTES_PER_PATIENT
        self.minutes_per_patient = minutes_per_patient

    def estimate(self, scope: QueueScope, appointment_id: Optional[int] = None) -> QueueEstimate:
        """Read-only; safe to call on every page load."""
        appointments = self.store.list_appointments(scope.doctor_id, scope.date, scope.time)
        return estimate_queue_position(
            appointments, appointment_id, slot_start(scope), self.minutes_per_patient
        )
