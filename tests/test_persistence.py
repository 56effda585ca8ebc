"""Tests for the in-memory repository."""

import pytest

from booking_engine.errors import NotFound
from booking_engine.schemas.booking_schema import BookingStatus
from tests.conftest import MONDAY, TUESDAY, make_booking


class TestCopies:
    def test_returned_record_is_not_stored_record(self, repo):
        booking = repo.add_booking(make_booking("09:00"))
        booking.status = BookingStatus.CANCELLED
        assert repo.get_booking(booking.id).status == BookingStatus.PENDING

    def test_caller_mutation_after_insert_ignored(self, repo):
        booking = make_booking("09:00")
        repo.add_booking(booking)
        booking.customer_id = "someone-else"
        assert repo.get_booking(booking.id).customer_id == "cust-x"

    def test_update_is_visible(self, repo):
        booking = repo.add_booking(make_booking("09:00"))
        booking.status = BookingStatus.CONFIRMED
        repo.update_booking(booking)
        assert repo.get_booking(booking.id).status == BookingStatus.CONFIRMED


class TestErrors:
    def test_missing_booking(self, repo):
        with pytest.raises(NotFound, match="Booking BK-NOPE not found"):
            repo.get_booking("BK-NOPE")

    def test_update_of_unknown_record(self, repo):
        with pytest.raises(NotFound):
            repo.update_booking(make_booking("09:00"))

    def test_duplicate_insert(self, repo):
        booking = repo.add_booking(make_booking("09:00"))
        with pytest.raises(ValueError, match="already exists"):
            repo.add_booking(booking)


class TestListBookings:
    def test_sorted_by_date_and_start(self, repo):
        late = repo.add_booking(make_booking("11:30"))
        other_day = repo.add_booking(make_booking("08:00", on_date=TUESDAY))
        early = repo.add_booking(make_booking("09:00"))
        assert [b.id for b in repo.list_bookings()] == [early.id, late.id, other_day.id]

    def test_none_service_type_means_generic_scope(self, repo):
        generic = repo.add_booking(make_booking("09:00"))
        repo.add_booking(make_booking("09:00", service_type="plumbing"))
        assert [b.id for b in repo.list_bookings(on_date=MONDAY, service_type=None)] == [generic.id]
        assert len(repo.list_bookings(on_date=MONDAY)) == 2

    def test_status_filter(self, repo):
        repo.add_booking(make_booking("09:00", status=BookingStatus.CANCELLED))
        pending = repo.add_booking(make_booking("10:15"))
        assert [b.id for b in repo.list_bookings(statuses=[BookingStatus.PENDING])] == [pending.id]

    def test_reset_clears_everything(self, repo):
        repo.add_booking(make_booking("09:00"))
        repo.reset()
        assert repo.list_bookings() == []
