"""
Slot Generator — turns weekly availability rules into concrete start times.

Generation is a pure function of the stored rules and the requested date:
no bookings are consulted here (the Conflict Checker filters afterwards),
so calling it twice with the same inputs yields the same list.

By default a slot is offered when it *starts* before the window closes, so
the last one may run past ``end_time``: that is how 09:00-12:00 yields an
11:30 slot. Setting ``SLOTS_MUST_FIT_WINDOW=true`` switches to the strict
policy where every slot must also end within the window.

Usage:
    generator = SlotGenerator(rule_store)
    generator.generate_slots(date(2026, 10, 26))
    # Monday 09:00-12:00, buffer 15, 60 min -> [09:00, 10:15, 11:30]
"""

import logging
from datetime import date, timedelta
from typing import Optional

from booking_engine.catalog import normalize_service_type
from booking_engine.config import AppConfig, settings
from booking_engine.errors import ValidationError
from booking_engine.schemas.availability_schema import AvailabilityRule, Slot
from booking_engine.scheduling.rule_store import AvailabilityRuleStore
from booking_engine.utils import MINUTES_PER_DAY, day_of_week, minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)


class SlotGenerator:
    """Generates ordered, deterministic candidate slots for a date."""

    def __init__(self, rule_store: AvailabilityRuleStore, config: Optional[AppConfig] = None) -> None:
        self._rules = rule_store
        self._config = config or settings

    @property
    def must_fit_window(self) -> bool:
        return self._config.scheduling.slots_must_fit_window

    def rule_for(self, on_date: date, service_type: Optional[str] = None) -> Optional[AvailabilityRule]:
        """The rule that governs ``on_date`` for ``service_type``, if any."""
        return self._rules.resolve_rule(day_of_week(on_date), service_type)

    def generate_slots(
        self,
        on_date: date,
        service_type: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> list[Slot]:
        """
        Produce every bookable start time for a date.

        Args:
            on_date: The calendar date to generate for.
            service_type: Optional service tag; a matching rule overrides
                the generic rule for that weekday.
            duration_minutes: Override the rule's slot length.

        Returns:
            Slots ordered by start time. Empty when no active rule covers
            the weekday, which means "no service that day", not an error.
        """
        service_type = normalize_service_type(service_type)
        rule = self.rule_for(on_date, service_type)
        if rule is None or not rule.is_available:
            return []
        return self.slots_for_rule(rule, on_date, service_type, duration_minutes)

    def slots_for_rule(
        self,
        rule: AvailabilityRule,
        on_date: date,
        service_type: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> list[Slot]:
        duration = rule.slot_duration_minutes if duration_minutes is None else duration_minutes
        if duration <= 0:
            raise ValidationError(
                "Slot duration must be a positive number of minutes", value=duration
            )

        step = duration + rule.buffer_minutes
        window_start = time_to_minutes(rule.start_time)
        window_end = time_to_minutes(rule.end_time)

        slots: list[Slot] = []
        cursor = window_start
        while cursor < window_end:
            slot_end = cursor + duration
            if self.must_fit_window and slot_end > window_end:
                break
            if slot_end >= MINUTES_PER_DAY:
                break
            slots.append(Slot(
                date=on_date,
                start_time=minutes_to_time(cursor),
                duration_minutes=duration,
                service_type=service_type,
            ))
            cursor += step

        logger.debug(
            "Generated %d slot(s) for %s under rule %s", len(slots), on_date.isoformat(), rule.id
        )
        return slots

    def generate_slots_for_range(
        self,
        start_date: date,
        end_date: date,
        service_type: Optional[str] = None,
    ) -> dict[date, list[Slot]]:
        """Slots for every date in ``[start_date, end_date]``, keyed by date."""
        if end_date < start_date:
            raise ValidationError(
                "End date must not be before start date",
                start_date=start_date.isoformat(), end_date=end_date.isoformat(),
            )
        result: dict[date, list[Slot]] = {}
        current = start_date
        while current <= end_date:
            result[current] = self.generate_slots(current, service_type)
            current += timedelta(days=1)
        return result
