"""
Availability rule store: administrator-owned weekly opening windows.

All validation happens here, at write time, so the scheduling path only ever
reads well-formed rules. Rules are never deleted: deactivation keeps past
bookings auditable against the rule they were made under.

Usage:
    store = AvailabilityRuleStore(repository)
    rule = store.create_rule(day_of_week=1, start_time="09:00", end_time="12:00",
                             buffer_minutes=15, max_bookings_per_day=3)
    store.resolve_rule(1, "plumbing")  # service-specific rule wins, else generic
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from booking_engine.catalog import normalize_service_type
from booking_engine.config import AppConfig, settings
from booking_engine.errors import ValidationError
from booking_engine.persistence import Repository
from booking_engine.schemas.availability_schema import AvailabilityRule
from booking_engine.utils import day_name, format_time, parse_time, time_to_minutes

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({
    "day_of_week", "is_available", "start_time", "end_time", "buffer_minutes",
    "max_bookings_per_day", "service_type", "slot_duration_minutes",
})

_REQUIRED_ON_CREATE = frozenset({"day_of_week", "start_time", "end_time"})

_UNSET: Any = object()


def _validate_rule(rule: AvailabilityRule) -> None:
    """Reject malformed rules before they are stored."""
    if not isinstance(rule.day_of_week, int) or not 0 <= rule.day_of_week <= 6:
        raise ValidationError(
            "Day of week must be between 0 (Sunday) and 6 (Saturday)",
            field="day_of_week", value=rule.day_of_week,
        )
    if rule.slot_duration_minutes <= 0:
        raise ValidationError(
            "Slot duration must be a positive number of minutes",
            field="slot_duration_minutes", value=rule.slot_duration_minutes,
        )
    if rule.buffer_minutes < 0:
        raise ValidationError(
            "Buffer must not be negative",
            field="buffer_minutes", value=rule.buffer_minutes,
        )
    if rule.max_bookings_per_day is not None and rule.max_bookings_per_day < 1:
        raise ValidationError(
            "Max bookings per day must be positive or unbounded",
            field="max_bookings_per_day", value=rule.max_bookings_per_day,
        )
    if rule.is_available and time_to_minutes(rule.start_time) >= time_to_minutes(rule.end_time):
        raise ValidationError(
            "Start time must be before end time (rules cannot span midnight)",
            field="end_time",
            start_time=format_time(rule.start_time),
            end_time=format_time(rule.end_time),
        )


def _coerce_time(value: Any, field_name: str):
    try:
        return parse_time(value)
    except (ValueError, TypeError, AttributeError):
        raise ValidationError(
            "Time must be in HH:MM format", field=field_name, value=str(value)
        ) from None


class AvailabilityRuleStore:
    """Write-validated access to availability rules."""

    def __init__(self, repository: Repository, config: Optional[AppConfig] = None) -> None:
        self._repo = repository
        self._config = config or settings

    # ------------------------------------------------------------------ #
    # Writes (administrator path)
    # ------------------------------------------------------------------ #

    def create_rule(
        self,
        day_of_week: int,
        start_time: Any,
        end_time: Any,
        is_available: bool = True,
        buffer_minutes: Optional[int] = None,
        max_bookings_per_day: Any = _UNSET,
        service_type: Optional[str] = None,
        slot_duration_minutes: Optional[int] = None,
    ) -> AvailabilityRule:
        """Create a rule. Omitted numeric fields take configured defaults.

        Pass ``max_bookings_per_day=None`` explicitly for an unbounded cap.

        Raises:
            ValidationError: malformed fields, or another active rule already
                covers the same (day, service type) pair.
        """
        rule = self._new_rule(
            day_of_week, start_time, end_time, is_available, buffer_minutes,
            max_bookings_per_day, service_type, slot_duration_minutes,
        )
        with self._repo.transaction():
            self._check_active_conflict(rule)
            stored = self._repo.add_rule(rule)
        logger.info(
            "Availability rule %s created for %s %s-%s",
            stored.id, stored.scope_label, format_time(stored.start_time), format_time(stored.end_time),
        )
        return stored

    def _new_rule(
        self,
        day_of_week: int,
        start_time: Any,
        end_time: Any,
        is_available: bool = True,
        buffer_minutes: Optional[int] = None,
        max_bookings_per_day: Any = _UNSET,
        service_type: Optional[str] = None,
        slot_duration_minutes: Optional[int] = None,
    ) -> AvailabilityRule:
        defaults = self._config.scheduling
        rule = AvailabilityRule(
            day_of_week=day_of_week,
            start_time=_coerce_time(start_time, "start_time"),
            end_time=_coerce_time(end_time, "end_time"),
            is_available=is_available,
            buffer_minutes=defaults.default_buffer_minutes if buffer_minutes is None else buffer_minutes,
            max_bookings_per_day=(
                defaults.default_max_bookings_per_day
                if max_bookings_per_day is _UNSET else max_bookings_per_day
            ),
            service_type=normalize_service_type(service_type),
            slot_duration_minutes=(
                defaults.default_slot_duration_minutes
                if slot_duration_minutes is None else slot_duration_minutes
            ),
        )
        _validate_rule(rule)
        return rule

    def update_rule(self, rule_id: str, **changes: Any) -> AvailabilityRule:
        """Edit a rule in place.

        Existing bookings are not touched: they keep the duration and buffer
        they were made with, and only future slot generation sees the edit.
        """
        updated = self._edited_rule(rule_id, changes)
        with self._repo.transaction():
            self._check_active_conflict(updated)
            stored = self._repo.update_rule(updated)
        logger.info("Availability rule %s updated: %s", rule_id, sorted(changes))
        return stored

    def _edited_rule(self, rule_id: str, changes: dict) -> AvailabilityRule:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown rule fields: {', '.join(sorted(unknown))}", fields=sorted(unknown)
            )

        existing = self._repo.get_rule(rule_id)
        if "start_time" in changes:
            changes["start_time"] = _coerce_time(changes["start_time"], "start_time")
        if "end_time" in changes:
            changes["end_time"] = _coerce_time(changes["end_time"], "end_time")
        if "service_type" in changes:
            changes["service_type"] = normalize_service_type(changes["service_type"])

        updated = replace(existing, **changes, updated_at=datetime.now(timezone.utc))
        _validate_rule(updated)
        return updated

    def deactivate_rule(self, rule_id: str) -> AvailabilityRule:
        """Stop offering a window. The record is kept for auditability."""
        return self.update_rule(rule_id, is_available=False)

    def bulk_upsert(self, rules_data: Iterable[dict]) -> list[AvailabilityRule]:
        """Create rules without an ``id`` and update the ones that carry one.

        All or nothing: every item is validated, and checked against the
        store and the rest of the batch, before any of them is written.
        """
        staged: list[tuple[bool, AvailabilityRule]] = []
        for data in rules_data:
            data = dict(data)
            rule_id = data.pop("id", None)
            if rule_id:
                staged.append((False, self._edited_rule(rule_id, data)))
                continue
            missing = _REQUIRED_ON_CREATE - set(data)
            if missing:
                raise ValidationError(
                    f"New rules need: {', '.join(sorted(missing))}", fields=sorted(missing)
                )
            unknown = set(data) - _EDITABLE_FIELDS
            if unknown:
                raise ValidationError(
                    f"Unknown rule fields: {', '.join(sorted(unknown))}", fields=sorted(unknown)
                )
            staged.append((True, self._new_rule(**data)))

        batch = [rule for _, rule in staged]
        results = []
        with self._repo.transaction():
            for rule in batch:
                self._check_active_conflict(rule, batch)
            for is_new, rule in staged:
                results.append(self._repo.add_rule(rule) if is_new else self._repo.update_rule(rule))
        logger.info("Bulk upsert stored %d availability rule(s)", len(results))
        return results

    # ------------------------------------------------------------------ #
    # Reads (scheduling path)
    # ------------------------------------------------------------------ #

    def get_rule(self, rule_id: str) -> AvailabilityRule:
        return self._repo.get_rule(rule_id)

    def list_rules(
        self,
        day_of_week: Optional[int] = None,
        is_available: Optional[bool] = None,
    ) -> list[AvailabilityRule]:
        return self._repo.list_rules(day_of_week=day_of_week, is_available=is_available)

    def resolve_rule(self, day_of_week: int, service_type: Optional[str] = None) -> Optional[AvailabilityRule]:
        """Most specific active rule for a weekday.

        A service-specific rule overrides the generic one. When the specific
        rule exists but is deactivated, the generic rule is not consulted:
        the service is explicitly not offered that day.
        """
        service_type = normalize_service_type(service_type)
        if service_type is not None:
            specific = self._repo.list_rules(day_of_week=day_of_week, service_type=service_type)
            active = [r for r in specific if r.is_available]
            if active:
                return active[0]
            if specific:
                return None

        generic = self._repo.list_rules(day_of_week=day_of_week, service_type=None, is_available=True)
        return generic[0] if generic else None

    def buffer_for(self, day_of_week: int, service_type: Optional[str] = None) -> int:
        """Buffer applied to a scope, falling back to the configured default."""
        rule = self.resolve_rule(day_of_week, service_type)
        if rule is None:
            return self._config.scheduling.default_buffer_minutes
        return rule.buffer_minutes

    def _check_active_conflict(self, rule: AvailabilityRule, batch: Iterable[AvailabilityRule] = ()) -> None:
        """One active rule per (day, service type).

        ``batch`` holds rules about to be written together with ``rule``;
        their versions take precedence over the stored ones.
        """
        if not rule.is_available:
            return
        batch = list(batch)
        pending_ids = {other.id for other in batch}
        stored = [
            other for other in self._repo.list_rules(
                day_of_week=rule.day_of_week, service_type=rule.service_type, is_available=True,
            )
            if other.id not in pending_ids
        ]
        pending = [
            other for other in batch
            if other.is_available
            and other.day_of_week == rule.day_of_week
            and other.service_type == rule.service_type
        ]
        clashing = [other for other in stored + pending if other.id != rule.id]
        if clashing:
            other = clashing[0]
            raise ValidationError(
                f"An active rule already exists for {day_name(rule.day_of_week)} "
                f"({rule.service_type or 'all services'}): "
                f"{format_time(other.start_time)}-{format_time(other.end_time)}",
                conflicting_rule_id=other.id,
            )
