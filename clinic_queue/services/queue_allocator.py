"""
Queue number allocation.

A queue number is derived from what is already stored (highest number for
the doctor's day, or occupancy of the slot) and then written together with
the appointment. The store's unique index on (doctor, date, time,
queue_number) decides conflicts; on a conflict the next number is tried, up
to a fixed number of attempts. No counter is kept anywhere else.
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..core.config import settings
from ..models.appointment import Appointment
from ..schemas.appointment import QueueScope
from .appointment_store import AppointmentStore
from .exceptions import InvalidQueueScope, QueueAssignmentExhausted

logger = logging.getLogger(__name__)


class QueueAllocator:
    def __init__(
        self,
        store: AppointmentStore,
        max_attempts: Optional[int] = None,
        walk_in_retry: Optional[bool] = None
    ):
        self.store = store
        if max_attempts is None:
            max_attempts = settings.QUEUE_MAX_BOOKING_ATTEMPTS
        self.max_attempts = max_attempts
        if walk_in_retry is None:
            walk_in_retry = settings.WALK_IN_RETRY_ON_CONFLICT
        self.walk_in_retry = walk_in_retry

    def book_appointment(self, scope: QueueScope, fields: Dict[str, Any]) -> Appointment:
        """Book with the next number after the doctor's highest for the day."""
        self._require_slot(scope)
        return self._insert_with_retry(
            scope, fields, lambda attempt_no: self._after_day_max(scope), self.max_attempts
        )

    def register_walk_in(self, scope: QueueScope, fields: Dict[str, Any]) -> Appointment:
        """Register a walk-in with a number derived from the slot's occupancy."""
        self._require_slot(scope)

        def next_number(attempt_no: int) -> int:
            if attempt_no == 1:
                return self.store.count_appointments(scope.doctor_id, scope.date, scope.time) + 1
            # Bookings number the slot from the day-wide maximum, so after a
            # conflict the slot may hold numbers well above its count
            return (self.store.find_max_queue_number(scope.doctor_id, scope.date, scope.time) or 0) + 1

        attempts = self.max_attempts if self.walk_in_retry else 1
        return self._insert_with_retry(
            scope, dict(fields, is_walk_in=True), next_number, attempts
        )

    def reschedule(self, appointment: Appointment, scope: QueueScope) -> Appointment:
        """Move an appointment to a new slot with a freshly allocated number.

        Other appointments in the old and new slot keep their numbers.
        """
        self._require_slot(scope)

        def attempt(queue_number: int) -> bool:
            return self.store.move_appointment_if_unique(
                appointment, scope.date, scope.time, queue_number
            )

        self._allocate(scope, lambda attempt_no: self._after_day_max(scope), attempt, self.max_attempts)
        return appointment

    def _insert_with_retry(
        self,
        scope: QueueScope,
        fields: Dict[str, Any],
        next_number: Callable[[int], int],
        max_attempts: int
    ) -> Appointment:
        appointment = None

        def attempt(queue_number: int) -> bool:
            nonlocal appointment
            # A rolled back insert leaves nothing behind, so each try starts fresh
            appointment = Appointment(
                **fields,
                doctor_id=scope.doctor_id,
                date=scope.date,
                time=scope.time,
                queue_number=queue_number
            )
            return self.store.insert_appointment_if_unique(appointment)

        self._allocate(scope, next_number, attempt, max_attempts)
        return appointment

    def _allocate(
        self,
        scope: QueueScope,
        next_number: Callable[[int], int],
        attempt: Callable[[int], bool],
        max_attempts: int
    ) -> int:
        candidate = 0
        for attempt_no in range(1, max_attempts + 1):
            # The stored state is only a hint; never retry a number already lost
            candidate = max(next_number(attempt_no), candidate + 1)
            if attempt(candidate):
                logger.info(
                    f"Assigned queue number {candidate} to doctor {scope.doctor_id} "
                    f"on {scope.date} at {scope.time} (attempt {attempt_no})"
                )
                return candidate
            logger.warning(
                f"Queue number {candidate} already taken for doctor {scope.doctor_id} "
                f"on {scope.date} at {scope.time} (attempt {attempt_no}/{max_attempts})"
            )

        logger.error(
            f"Giving up on queue number for doctor {scope.doctor_id} on {scope.date} "
            f"at {scope.time} after {max_attempts} attempts"
        )
        raise QueueAssignmentExhausted(scope.doctor_id, scope.date, scope.time, max_attempts)

    def _after_day_max(self, scope: QueueScope) -> int:
        return (self.store.find_max_queue_number(scope.doctor_id, scope.date) or 0) + 1

    @staticmethod
    def _require_slot(scope: QueueScope):
        if scope.time is None:
            raise InvalidQueueScope("Queue allocation needs a time slot")
