"""Tests for overlap and daily-cap conflict detection."""

from datetime import time

import pytest

from booking_engine.scheduling.conflict_checker import ConflictChecker
from booking_engine.schemas.availability_schema import AvailabilityRule, Slot
from booking_engine.schemas.booking_schema import BookingStatus
from booking_engine.utils import parse_time
from tests.conftest import MONDAY, TUESDAY, make_booking


@pytest.fixture
def checker():
    return ConflictChecker()


@pytest.fixture
def rule():
    return AvailabilityRule(
        day_of_week=1, start_time=time(9, 0), end_time=time(12, 0),
        buffer_minutes=15, max_bookings_per_day=3,
    )


def slot(start: str, duration: int = 60, service_type=None, on_date=MONDAY) -> Slot:
    return Slot(date=on_date, start_time=parse_time(start), duration_minutes=duration, service_type=service_type)


class TestOverlap:
    def test_empty_day_is_free(self, checker, rule):
        assert checker.is_slot_available(MONDAY, slot("09:00"), [], rule)

    def test_same_start_conflicts(self, checker, rule):
        bookings = [make_booking("10:15")]
        verdict = checker.check(MONDAY, slot("10:15"), bookings, rule)
        assert not verdict.available
        assert verdict.reason == "overlap"
        assert verdict.conflicts == bookings

    def test_neighbours_outside_buffer_are_free(self, checker, rule):
        bookings = [make_booking("10:15")]
        assert checker.is_slot_available(MONDAY, slot("09:00"), bookings, rule)
        assert checker.is_slot_available(MONDAY, slot("11:30"), bookings, rule)

    def test_slot_inside_buffer_conflicts(self, checker, rule):
        # 10:15 booking with 15 min buffer occupies 10:00-11:30.
        bookings = [make_booking("10:15")]
        assert not checker.is_slot_available(MONDAY, slot("11:20", duration=30), bookings, rule)
        assert not checker.is_slot_available(MONDAY, slot("09:05", duration=60), bookings, rule)

    def test_booking_own_buffer_is_used(self, checker, rule):
        bookings = [make_booking("10:00", buffer_minutes=0)]
        assert checker.is_slot_available(MONDAY, slot("11:00"), bookings, rule)

    @pytest.mark.parametrize("status", [BookingStatus.CANCELLED, BookingStatus.RESCHEDULED])
    def test_released_bookings_do_not_block(self, checker, rule, status):
        bookings = [make_booking("10:15", status=status)]
        assert checker.is_slot_available(MONDAY, slot("10:15"), bookings, rule)

    @pytest.mark.parametrize(
        "status", [BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED]
    )
    def test_active_bookings_block(self, checker, rule, status):
        bookings = [make_booking("10:15", status=status)]
        assert not checker.is_slot_available(MONDAY, slot("10:15"), bookings, rule)

    def test_other_date_does_not_block(self, checker, rule):
        bookings = [make_booking("10:15", on_date=TUESDAY)]
        assert checker.is_slot_available(MONDAY, slot("10:15"), bookings, rule)

    def test_other_service_type_does_not_block(self, checker, rule):
        bookings = [make_booking("10:15", service_type="cleaning")]
        assert checker.is_slot_available(MONDAY, slot("10:15", service_type="plumbing"), bookings, rule)

    def test_excluded_booking_ignored(self, checker, rule):
        booking = make_booking("10:15")
        assert checker.is_slot_available(MONDAY, slot("10:15"), [booking], rule, booking.id)


class TestDailyCap:
    def test_cap_blocks_every_slot(self, checker, rule):
        bookings = [
            make_booking("09:00"),
            make_booking("10:15"),
            make_booking("11:30"),
        ]
        for start in ("09:00", "10:15", "11:30", "14:00"):
            verdict = checker.check(MONDAY, slot(start), bookings, rule)
            assert not verdict.available
            assert verdict.reason == "daily_cap"
            assert verdict.booked_count == 3

    def test_cancelled_bookings_do_not_count(self, checker, rule):
        bookings = [
            make_booking("09:00"),
            make_booking("10:15", status=BookingStatus.CANCELLED),
            make_booking("13:00"),
        ]
        assert checker.count_bookings_on_date(MONDAY, None, bookings) == 2
        assert checker.is_slot_available(MONDAY, slot("11:30"), bookings, rule)

    def test_unbounded_cap(self, checker, rule):
        rule.max_bookings_per_day = None
        bookings = [make_booking(f"{h:02d}:00", buffer_minutes=0) for h in range(13, 20)]
        assert checker.is_slot_available(MONDAY, slot("09:00"), bookings, rule)

    def test_no_rule_means_overlap_only(self, checker):
        bookings = [make_booking(f"{h:02d}:00", buffer_minutes=0) for h in range(13, 20)]
        assert checker.is_slot_available(MONDAY, slot("09:00"), bookings)


class TestFiltering:
    def test_filter_preserves_order(self, checker, rule):
        slots = [slot("09:00"), slot("10:15"), slot("11:30")]
        free = checker.filter_available(slots, [make_booking("10:15")], rule)
        assert free == [slots[0], slots[2]]

    def test_find_conflicts(self, checker):
        first = make_booking("09:00")
        second = make_booking("13:00")
        assert checker.find_conflicts(slot("09:30"), [first, second]) == [first]
