"""
Appointment store.

SQLAlchemy persistence for appointments. The unique index on
(doctor_id, date, time, queue_number) makes the insert itself the conflict
detector; every other read here is a hint for the allocator.
"""

import logging
from datetime import date as Date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.provider import HealthcareProvider  # noqa: F401  (registers the mapper)
from .exceptions import StorageError

logger = logging.getLogger(__name__)

# SQLSTATE for unique_violation on PostgreSQL
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a uniqueness conflict apart from other integrity failures."""
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message


class AppointmentStore:
    def __init__(self, db: Session):
        self.db = db

    def find_max_queue_number(
        self,
        doctor_id: int,
        date: Date,
        time: Optional[str] = None
    ) -> Optional[int]:
        """Highest queue number for a doctor on a day, across all slots unless
        `time` narrows it to one slot."""
        try:
            query = self.db.query(func.max(Appointment.queue_number)).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date == date
            )
            if time is not None:
                query = query.filter(Appointment.time == time)
            return query.scalar()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to read queue numbers", cause=e) from e

    def count_appointments(self, doctor_id: int, date: Date, time: str) -> int:
        """Number of appointments already in one slot."""
        try:
            return self.db.query(func.count(Appointment.id)).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date == date,
                Appointment.time == time
            ).scalar() or 0
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to count appointments", cause=e) from e

    def insert_appointment_if_unique(self, appointment: Appointment) -> bool:
        """Insert and commit. Returns False if the queue number is taken."""
        try:
            self.db.add(appointment)
            self.db.commit()
            self.db.refresh(appointment)
        except IntegrityError as e:
            self.db.rollback()
            if is_unique_violation(e):
                return False
            raise StorageError("Failed to save appointment", cause=e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to save appointment", cause=e) from e
        return True

    def move_appointment_if_unique(
        self,
        appointment: Appointment,
        date: Date,
        time: str,
        queue_number: int
    ) -> bool:
        """Move an appointment to a new slot and number. Returns False on conflict."""
        try:
            appointment.date = date
            appointment.time = time
            appointment.queue_number = queue_number
            appointment.status = AppointmentStatus.PENDING
            self.db.commit()
            self.db.refresh(appointment)
        except IntegrityError as e:
            # Rollback expires the object, so it reloads its old slot
            self.db.rollback()
            if is_unique_violation(e):
                return False
            raise StorageError("Failed to reschedule appointment", cause=e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to reschedule appointment", cause=e) from e
        return True

    def list_appointments(
        self,
        doctor_id: int,
        date: Date,
        time: Optional[str] = None
    ) -> List[Appointment]:
        """Appointments for a doctor's day (or one slot) in creation order."""
        try:
            query = self.db.query(Appointment).filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date == date
            )
            if time is not None:
                query = query.filter(Appointment.time == time)
            return query.order_by(Appointment.created_at, Appointment.id).all()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to list appointments", cause=e) from e

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        try:
            return self.db.query(Appointment).filter(
                Appointment.id == appointment_id
            ).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to load appointment", cause=e) from e

    def get_doctor(self, doctor_id: int) -> Optional[Doctor]:
        try:
            return self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to load doctor", cause=e) from e

    def save(self, appointment: Appointment) -> Appointment:
        """Commit changes to fields that carry no uniqueness requirement."""
        try:
            self.db.commit()
            self.db.refresh(appointment)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("Failed to update appointment", cause=e) from e
        return appointment
