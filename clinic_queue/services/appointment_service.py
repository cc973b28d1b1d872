from sqlalchemy.orm import Session
from datetime import date as Date
from typing import List, Optional
import logging

from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..schemas.appointment import (
    AppointmentCreate, WalkInCreate, RescheduleRequest, QueueScope, QueueEstimate
)
from .appointment_store import AppointmentStore
from .queue_allocator import QueueAllocator
from .queue_estimator import QueuePositionEstimator
from .exceptions import AppointmentNotFound, InvalidAppointmentState, ScopeNotFound

logger = logging.getLogger(__name__)

class AppointmentService:
    def __init__(self, db: Session):
        self.db = db
        self.store = AppointmentStore(db)
        self.allocator = QueueAllocator(self.store)
        self.estimator = QueuePositionEstimator(self.store)

    def book_appointment(self, booking: AppointmentCreate) -> Appointment:
        """Book a patient appointment with the next queue number for the doctor's day."""
        doctor = self._get_doctor(booking.doctor_id)
        scope = QueueScope(doctor_id=doctor.id, date=booking.date, time=booking.time)

        appointment = self.allocator.book_appointment(scope, {
            **self._doctor_fields(doctor),
            "patient_id": booking.patient_id,
            "patient_name": booking.patient_name,
            "patient_phone": booking.patient_phone,
            "notes": booking.notes or "",
        })

        logger.info(f"Appointment {appointment.id} booked with queue number {appointment.queue_number}")
        return appointment

    def register_walk_in(self, walk_in: WalkInCreate) -> Appointment:
        """Register a walk-in patient at the front desk."""
        doctor = self._get_doctor(walk_in.doctor_id)
        scope = QueueScope(doctor_id=doctor.id, date=walk_in.date, time=walk_in.time)

        appointment = self.allocator.register_walk_in(scope, {
            **self._doctor_fields(doctor),
            "patient_name": walk_in.patient_name,
            "patient_phone": walk_in.patient_phone,
            "notes": walk_in.notes or "",
        })

        logger.info(f"Walk-in {appointment.id} registered with queue number {appointment.queue_number}")
        return appointment

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.store.get_appointment(appointment_id)
        if not appointment:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")
        return appointment

    def list_appointments(
        self,
        doctor_id: int,
        date: Date,
        time: Optional[str] = None
    ) -> List[Appointment]:
        """Appointments for a doctor's day or slot, in queue order."""
        self._get_doctor(doctor_id)
        appointments = self.store.list_appointments(doctor_id, date, time)
        return sorted(appointments, key=lambda a: a.queue_number)

    def cancel_appointment(self, appointment_id: int, reason: Optional[str] = None) -> Appointment:
        """Cancel an appointment. Its queue number stays allocated."""
        appointment = self.get_appointment(appointment_id)

        if appointment.status == AppointmentStatus.COMPLETED:
            raise InvalidAppointmentState("Cannot cancel a completed appointment")

        appointment.status = AppointmentStatus.CANCELLED
        appointment.notes = f"Cancelled - {reason or 'No reason provided'}"
        return self.store.save(appointment)

    def reschedule_appointment(self, appointment_id: int, request: RescheduleRequest) -> Appointment:
        """Move an appointment to another date/time and give it a new queue number."""
        appointment = self.get_appointment(appointment_id)

        if appointment.status in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED):
            raise InvalidAppointmentState(
                f"Cannot reschedule a {appointment.status.value} appointment"
            )

        scope = QueueScope(
            doctor_id=appointment.doctor_id,
            date=request.new_date,
            time=request.new_time
        )
        self.allocator.reschedule(appointment, scope)

        logger.info(
            f"Appointment {appointment.id} rescheduled to {scope.date} {scope.time} "
            f"with queue number {appointment.queue_number}"
        )
        return appointment

    def update_status(self, appointment_id: int, status: AppointmentStatus) -> Appointment:
        appointment = self.get_appointment(appointment_id)
        appointment.status = status
        return self.store.save(appointment)

    def queue_position(self, appointment_id: int) -> QueueEstimate:
        """Position and wait for an appointment within its own slot."""
        appointment = self.get_appointment(appointment_id)
        scope = QueueScope(
            doctor_id=appointment.doctor_id,
            date=appointment.date,
            time=appointment.time
        )
        return self.estimator.estimate(scope, appointment.id)

    def estimate_queue(self, scope: QueueScope, appointment_id: Optional[int] = None) -> QueueEstimate:
        self._get_doctor(scope.doctor_id)
        return self.estimator.estimate(scope, appointment_id)

    def _get_doctor(self, doctor_id: int) -> Doctor:
        # Fail before any allocation attempt
        doctor = self.store.get_doctor(doctor_id)
        if not doctor:
            raise ScopeNotFound(f"Doctor {doctor_id} not found")
        if not doctor.provider:
            raise ScopeNotFound(f"Provider for doctor {doctor_id} not found")
        return doctor

    @staticmethod
    def _doctor_fields(doctor: Doctor) -> dict:
        return {
            "provider_id": doctor.provider_id,
            "doctor_name": doctor.name,
            "provider_name": doctor.provider.name,
            "consultation_fee": doctor.consultation_fee or 0,
        }
