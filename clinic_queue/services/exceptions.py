from datetime import date as Date
from typing import Optional


class QueueServiceError(Exception):
    """Base exception for queue and booking failures."""

    def __init__(self, message: str, *, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class QueueAssignmentExhausted(QueueServiceError):
    """Every allocation attempt for a scope hit a queue number conflict.

    Nothing was written. The caller should report a transient booking failure
    and let the user submit again.
    """

    def __init__(self, doctor_id: int, date: Date, time: str, attempts: int):
        super().__init__(
            f"Failed to book appointment after {attempts} attempts "
            f"(doctor={doctor_id}, date={date}, time={time})"
        )
        self.doctor_id = doctor_id
        self.date = date
        self.time = time
        self.attempts = attempts


class StorageError(QueueServiceError):
    """The appointment store failed for a reason other than a uniqueness conflict."""


class ScopeNotFound(QueueServiceError):
    """The referenced doctor or provider does not exist."""


class AppointmentNotFound(QueueServiceError):
    """No appointment with the requested id."""


class InvalidQueueScope(QueueServiceError):
    """The scope cannot be allocated into, e.g. it has no time slot."""


class InvalidAppointmentState(QueueServiceError):
    """The appointment's status does not allow the requested change."""
