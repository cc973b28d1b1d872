from datetime import date, datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

from clinic_queue.schemas.appointment import QueueScope
from clinic_queue.services.appointment_store import AppointmentStore
from clinic_queue.services.queue_estimator import (
    QueuePositionEstimator, estimate_queue_position, slot_start
)

SLOT_START = datetime(2026, 3, 2, 9, 0)


def appointments(*numbers):
    """Rows in creation order; ids follow creation."""
    return [SimpleNamespace(id=index, queue_number=number)
            for index, number in enumerate(numbers, start=1)]


class TestEstimateQueuePosition:

    def test_position_among_sparse_numbers(self):
        """Numbers {2, 5, 7}: the holder of 5 is second in line."""
        rows = appointments(2, 5, 7)

        estimate = estimate_queue_position(rows, 2, SLOT_START, 15)

        assert estimate.position == 2
        assert estimate.estimated_wait_minutes == 15
        assert estimate.estimated_time == datetime(2026, 3, 2, 9, 15)
        assert estimate.queue_number == 5
        assert estimate.total_in_queue == 3

    def test_sorts_by_queue_number_not_creation(self):
        rows = appointments(7, 2, 5)

        estimate = estimate_queue_position(rows, 1, SLOT_START, 15)

        assert estimate.position == 3
        assert estimate.estimated_wait_minutes == 30

    def test_equal_numbers_keep_creation_order(self):
        rows = appointments(1, 3, 3)

        assert estimate_queue_position(rows, 2, SLOT_START, 15).position == 2
        assert estimate_queue_position(rows, 3, SLOT_START, 15).position == 3

    def test_unknown_appointment_counts_as_last(self):
        rows = appointments(1, 2, 3, 4)

        estimate = estimate_queue_position(rows, 99, SLOT_START, 15)

        assert estimate.position == 4
        assert estimate.estimated_wait_minutes == 45
        assert estimate.queue_number is None

    def test_no_appointment_id_counts_as_last(self):
        estimate = estimate_queue_position(appointments(4, 9), None, SLOT_START, 15)

        assert estimate.position == 2

    def test_empty_queue_is_position_one(self):
        estimate = estimate_queue_position([], None, SLOT_START, 15)

        assert estimate.position == 1
        assert estimate.estimated_wait_minutes == 0
        assert estimate.estimated_time == SLOT_START
        assert estimate.total_in_queue == 0

    def test_whole_day_scope_has_no_estimated_time(self):
        estimate = estimate_queue_position(appointments(1, 2), 2, None, 15)

        assert estimate.estimated_wait_minutes == 15
        assert estimate.estimated_time is None

    def test_minutes_per_patient_is_configurable(self):
        estimate = estimate_queue_position(appointments(1, 2, 3), 3, SLOT_START, 20)

        assert estimate.estimated_wait_minutes == 40
        assert estimate.estimated_time == datetime(2026, 3, 2, 9, 40)

    def test_repeated_reads_are_identical(self):
        rows = appointments(2, 5, 7)

        assert estimate_queue_position(rows, 3, SLOT_START, 15) == \
            estimate_queue_position(rows, 3, SLOT_START, 15)

    def test_zero_minutes_per_patient_is_kept(self):
        store = MagicMock(spec=AppointmentStore)
        store.list_appointments.return_value = appointments(1, 2, 3)
        estimator = QueuePositionEstimator(store, minutes_per_patient=0)
        scope = QueueScope(doctor_id=1, date=date(2026, 3, 2), time="09:00")

        estimate = estimator.estimate(scope, 3)

        assert estimate.position == 3
        assert estimate.estimated_wait_minutes == 0
        assert estimate.estimated_time == SLOT_START


class TestSlotStart:

    def test_combines_date_and_slot_label(self):
        scope = QueueScope(doctor_id=1, date=date(2026, 3, 2), time="14:30")

        assert slot_start(scope) == datetime(2026, 3, 2, 14, 30)

    def test_day_scope_has_no_start(self):
        scope = QueueScope(doctor_id=1, date=date(2026, 3, 2))

        assert slot_start(scope) is None
