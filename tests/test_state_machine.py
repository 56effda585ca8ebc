"""Tests for the booking, job and service-request lifecycle machines."""

from itertools import product

import pytest

from booking_engine.errors import InvalidTransition
from booking_engine.lifecycle.state_machine import (
    BookingLifecycle,
    BookingTrigger,
    JobLifecycle,
    JobTrigger,
    ServiceRequestLifecycle,
    ServiceRequestTrigger,
)
from booking_engine.schemas.booking_schema import BookingStatus
from booking_engine.schemas.service_request_schema import (
    Job,
    JobStatus,
    ServiceRequest,
    ServiceRequestStatus,
)
from tests.conftest import FakeClock, make_booking

LEGAL_BOOKING_MOVES = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED),
    (BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS),
    (BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED),
    (BookingStatus.PENDING, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    (BookingStatus.PENDING, BookingStatus.RESCHEDULED),
    (BookingStatus.CONFIRMED, BookingStatus.RESCHEDULED),
}


@pytest.fixture
def booking_machine():
    return BookingLifecycle(make_booking("10:15"), FakeClock())


class TestInitialState:
    def test_starts_pending(self, booking_machine):
        assert booking_machine.current_state == BookingStatus.PENDING

    def test_initial_history_has_one_entry(self, booking_machine):
        assert booking_machine.get_state_trace() == ["PENDING"]

    def test_not_terminal_at_start(self, booking_machine):
        assert not booking_machine.is_terminal()

    def test_valid_triggers_from_pending(self, booking_machine):
        assert set(booking_machine.get_valid_triggers()) == {
            BookingTrigger.CONFIRM, BookingTrigger.CANCEL, BookingTrigger.RESCHEDULE,
        }


class TestHappyPath:
    def test_full_lifecycle(self, booking_machine):
        booking_machine.transition(BookingTrigger.CONFIRM)
        booking_machine.transition(BookingTrigger.CHECK_IN)
        new = booking_machine.transition(BookingTrigger.CHECK_OUT)
        assert new == BookingStatus.COMPLETED
        assert booking_machine.is_terminal()
        assert booking_machine.get_state_trace() == ["PENDING", "CONFIRMED", "IN_PROGRESS", "COMPLETED"]

    def test_transition_mutates_record(self, booking_machine):
        booking_machine.transition(BookingTrigger.CONFIRM, note="paid")
        record = booking_machine.record
        assert record.status == BookingStatus.CONFIRMED
        assert record.history[-1].trigger == "confirm"
        assert record.history[-1].note == "paid"

    def test_advance_to_by_target(self, booking_machine):
        booking_machine.advance_to(BookingStatus.CANCELLED, "customer changed mind")
        assert booking_machine.current_state == BookingStatus.CANCELLED


class TestIllegalTransitions:
    def test_cannot_skip_confirmation(self, booking_machine):
        with pytest.raises(InvalidTransition) as exc_info:
            booking_machine.transition(BookingTrigger.CHECK_IN)
        assert exc_info.value.current == "PENDING"
        assert exc_info.value.requested == "IN_PROGRESS"

    def test_cancelled_cannot_be_confirmed(self, booking_machine):
        booking_machine.transition(BookingTrigger.CANCEL)
        with pytest.raises(InvalidTransition, match="CANCELLED to CONFIRMED"):
            booking_machine.transition(BookingTrigger.CONFIRM)

    def test_in_progress_cannot_be_cancelled(self, booking_machine):
        booking_machine.transition(BookingTrigger.CONFIRM)
        booking_machine.transition(BookingTrigger.CHECK_IN)
        with pytest.raises(InvalidTransition):
            booking_machine.transition(BookingTrigger.CANCEL)

    def test_failed_transition_leaves_record_untouched(self, booking_machine):
        with pytest.raises(InvalidTransition):
            booking_machine.transition(BookingTrigger.CHECK_OUT)
        assert booking_machine.current_state == BookingStatus.PENDING
        assert len(booking_machine.get_history()) == 1

    @pytest.mark.parametrize(
        "start,trigger", list(product(list(BookingStatus), list(BookingTrigger)))
    )
    def test_only_table_moves_succeed(self, start, trigger):
        machine = BookingLifecycle(make_booking("10:15", status=start))
        target = BookingLifecycle.target_of(trigger)
        if (start, target) in LEGAL_BOOKING_MOVES:
            assert machine.transition(trigger) == target
        else:
            with pytest.raises(InvalidTransition):
                machine.transition(trigger)

    @pytest.mark.parametrize(
        "terminal", [BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.RESCHEDULED]
    )
    def test_terminal_states_have_no_exits(self, terminal):
        machine = BookingLifecycle(make_booking("10:15", status=terminal))
        assert machine.is_terminal()
        assert machine.get_valid_triggers() == []


class TestJobLifecycle:
    def _job(self):
        return Job(service_request_id="SR-1", quote_id="QT-1", technician_id="tech-1")

    def test_scheduled_to_completed(self):
        machine = JobLifecycle(self._job())
        machine.transition(JobTrigger.START)
        assert machine.transition(JobTrigger.COMPLETE) == JobStatus.COMPLETED
        assert machine.is_terminal()

    def test_cannot_complete_without_starting(self):
        with pytest.raises(InvalidTransition):
            JobLifecycle(self._job()).transition(JobTrigger.COMPLETE)

    def test_cannot_cancel_once_started(self):
        machine = JobLifecycle(self._job())
        machine.transition(JobTrigger.START)
        with pytest.raises(InvalidTransition):
            machine.transition(JobTrigger.CANCEL)


class TestServiceRequestLifecycle:
    def _request(self):
        return ServiceRequest(customer_id="cust-1", category="plumbing")

    def test_full_path(self):
        machine = ServiceRequestLifecycle(self._request())
        for trigger in (
            ServiceRequestTrigger.ASSIGN,
            ServiceRequestTrigger.START_WORK,
            ServiceRequestTrigger.COMPLETE,
        ):
            machine.transition(trigger)
        assert machine.current_state == ServiceRequestStatus.COMPLETED

    def test_cancel_from_assigned(self):
        machine = ServiceRequestLifecycle(self._request())
        machine.transition(ServiceRequestTrigger.ASSIGN)
        assert machine.transition(ServiceRequestTrigger.CANCEL) == ServiceRequestStatus.CANCELLED

    def test_cannot_assign_twice(self):
        machine = ServiceRequestLifecycle(self._request())
        machine.transition(ServiceRequestTrigger.ASSIGN)
        with pytest.raises(InvalidTransition, match="ASSIGNED to ASSIGNED"):
            machine.transition(ServiceRequestTrigger.ASSIGN)
