"""Availability rules and the slots derived from them."""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Optional

from booking_engine.utils import day_name, format_time, minutes_to_time, new_id, time_to_minutes


@dataclass
class AvailabilityRule:
    """Weekly opening window for one weekday, optionally for one service type.

    ``max_bookings_per_day`` of ``None`` means unbounded. Rules are never
    deleted; ``is_available=False`` deactivates one.
    """

    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool = True
    buffer_minutes: int = 30
    max_bookings_per_day: Optional[int] = 8
    service_type: Optional[str] = None
    slot_duration_minutes: int = 60
    id: str = field(default_factory=lambda: new_id("AR"))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def scope_label(self) -> str:
        return f"{day_name(self.day_of_week)}/{self.service_type or '*'}"

    @property
    def step_minutes(self) -> int:
        return self.slot_duration_minutes + self.buffer_minutes


@dataclass(frozen=True)
class Slot:
    """A candidate bookable window. Derived, never persisted."""

    date: date
    start_time: time
    duration_minutes: int
    service_type: Optional[str] = None

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @property
    def end_time(self) -> time:
        return minutes_to_time(self.end_minutes)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "start_time": format_time(self.start_time),
            "end_time": format_time(self.end_time),
            "duration_minutes": self.duration_minutes,
            "service_type": self.service_type,
        }
