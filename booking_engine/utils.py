"""Shared time helpers used across the scheduling engine."""

import re
import uuid
from datetime import date, time
from typing import Union

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def parse_time(value: Union[str, time]) -> time:
    """Parse an ``HH:MM`` string into a ``time``.

    Examples:
        >>> parse_time("9:05")
        datetime.time(9, 5)
        >>> parse_time("23:59")
        datetime.time(23, 59)
    """
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    match = _HHMM.match(value.strip())
    if not match:
        raise ValueError(f"Time must be in HH:MM format, got {value!r}")
    return time(int(match.group(1)), int(match.group(2)))


def format_time(value: time) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


def time_to_minutes(value: time) -> int:
    """Minutes since midnight."""
    return value.hour * 60 + value.minute


def minutes_to_time(minutes: int) -> time:
    """Inverse of :func:`time_to_minutes`. Fails past the end of the day."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"{minutes} minutes is outside a single day")
    return time(minutes // 60, minutes % 60)


def day_of_week(value: date) -> int:
    """Weekday index with 0 = Sunday and 6 = Saturday."""
    return (value.weekday() + 1) % 7


def day_name(index: int) -> str:
    return DAY_NAMES[index]


def new_id(prefix: str) -> str:
    """Short prefixed reference, e.g. ``BK-3F9A1C2E``."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
