"""
Decides whether a candidate slot is still free.

Two independent policies, both evaluated per scope (date, service type):

1. Overlap: every blocking booking occupies
   ``[start - buffer, start + duration + buffer)``; a slot touching that
   interval is taken.
2. Daily cap: once the scope holds ``max_bookings_per_day`` blocking
   bookings, every slot on that date is taken.

The checker never mutates bookings. Claiming a slot is the coordinator's job.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from booking_engine.schemas.availability_schema import AvailabilityRule, Slot
from booking_engine.schemas.booking_schema import Booking

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityVerdict:
    """Outcome of checking one slot."""
    available: bool
    reason: Optional[str] = None  # "overlap" | "daily_cap"
    conflicts: list[Booking] = field(default_factory=list)
    booked_count: int = 0
    cap: Optional[int] = None


def _overlaps(slot: Slot, booking: Booking) -> bool:
    occupied_start, occupied_end = booking.occupied_interval()
    return slot.start_minutes < occupied_end and occupied_start < slot.end_minutes


class ConflictChecker:
    """Stateless availability policy over a snapshot of bookings."""

    def scope_bookings(
        self,
        on_date: date,
        service_type: Optional[str],
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[str] = None,
    ) -> list[Booking]:
        """Blocking bookings in the (date, service type) scope."""
        return [
            b for b in bookings
            if b.date == on_date
            and b.service_type == service_type
            and b.is_blocking
            and b.id != exclude_booking_id
        ]

    def count_bookings_on_date(
        self,
        on_date: date,
        service_type: Optional[str],
        bookings: Iterable[Booking],
    ) -> int:
        """Number of non-cancelled bookings already in the scope."""
        return len(self.scope_bookings(on_date, service_type, bookings))

    def find_conflicts(self, slot: Slot, bookings: Iterable[Booking]) -> list[Booking]:
        """Blocking bookings whose buffered interval overlaps ``slot``."""
        scoped = self.scope_bookings(slot.date, slot.service_type, bookings)
        return [b for b in scoped if _overlaps(slot, b)]

    def check(
        self,
        on_date: date,
        slot: Slot,
        existing_bookings: Iterable[Booking],
        rule: Optional[AvailabilityRule] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> AvailabilityVerdict:
        """Full verdict for one slot, with the reason when it is taken."""
        scoped = self.scope_bookings(on_date, slot.service_type, existing_bookings, exclude_booking_id)
        cap = rule.max_bookings_per_day if rule is not None else None

        if cap is not None and len(scoped) >= cap:
            return AvailabilityVerdict(
                available=False, reason="daily_cap", booked_count=len(scoped), cap=cap,
            )

        conflicts = [b for b in scoped if _overlaps(slot, b)]
        if conflicts:
            return AvailabilityVerdict(
                available=False,
                reason="overlap",
                conflicts=conflicts,
                booked_count=len(scoped),
                cap=cap,
            )

        return AvailabilityVerdict(available=True, booked_count=len(scoped), cap=cap)

    def is_slot_available(
        self,
        on_date: date,
        slot: Slot,
        existing_bookings: Iterable[Booking],
        rule: Optional[AvailabilityRule] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        return self.check(on_date, slot, existing_bookings, rule, exclude_booking_id).available

    def filter_available(
        self,
        slots: Iterable[Slot],
        existing_bookings: Iterable[Booking],
        rule: Optional[AvailabilityRule] = None,
    ) -> list[Slot]:
        """Keep only the free slots, preserving order."""
        bookings = list(existing_bookings)
        free = [s for s in slots if self.is_slot_available(s.date, s, bookings, rule)]
        logger.debug("%d slot(s) free after conflict filtering", len(free))
        return free
