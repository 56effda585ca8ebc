"""Booking (appointment) records and their status vocabulary."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Optional

from booking_engine.utils import format_time, new_id, time_to_minutes


class BookingStatus(str, Enum):
    """All possible states in a booking lifecycle."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"


# Statuses that no longer hold their slot.
RELEASED_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.RESCHEDULED})


class CancellationReason(str, Enum):
    CUSTOMER_REQUEST = "CUSTOMER_REQUEST"
    ADMIN_ACTION = "ADMIN_ACTION"
    BILLING_FAILED = "BILLING_FAILED"
    PAYMENT_TIMEOUT = "PAYMENT_TIMEOUT"
    TECHNICIAN_UNAVAILABLE = "TECHNICIAN_UNAVAILABLE"
    OTHER = "OTHER"


class Actor(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    SYSTEM = "system"


@dataclass
class StatusEntry:
    """Recorded history entry for a status visit."""
    status: str
    entered_at: datetime
    trigger: Optional[str] = None
    note: Optional[str] = None


@dataclass
class Booking:
    """A customer's claim on one slot."""

    customer_id: str
    service_type: Optional[str]
    date: date
    start_time: time
    duration_minutes: int
    buffer_minutes: int = 0
    status: BookingStatus = BookingStatus.PENDING
    rule_id: Optional[str] = None
    id: str = field(default_factory=lambda: new_id("BK"))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    cancellation_reason: Optional[CancellationReason] = None
    cancelled_by: Optional[Actor] = None
    rescheduled_from: Optional[str] = None
    rescheduled_to: Optional[str] = None
    history: list[StatusEntry] = field(default_factory=list)

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def is_blocking(self) -> bool:
        """Whether this booking still occupies its slot."""
        return self.status not in RELEASED_STATUSES

    def occupied_interval(self) -> tuple[int, int]:
        """Buffer-expanded ``[start, end)`` in minutes since midnight."""
        return (
            self.start_minutes - self.buffer_minutes,
            self.end_minutes + self.buffer_minutes,
        )

    def summary(self) -> str:
        return (
            f"{self.id} {self.service_type or 'general'} on {self.date.isoformat()} "
            f"at {format_time(self.start_time)} ({self.status.value})"
        )
