"""
Scheduling Coordinator — the single entry point for booking and quoting.

Availability queries read repository snapshots without locking. Claiming a
slot re-runs the conflict check and writes the PENDING booking inside one
critical section per (date, service type) scope, so a slot reported free
is never handed to two customers: the first commit wins and every later
one gets ``SlotNoLongerAvailable`` with alternatives. The customer's own
(customer, date) key is held alongside, so one customer booking two
services at once cannot slip past the double-booking guard.

Usage:
    coordinator = SchedulingCoordinator(InMemoryRepository(), InMemoryBillingProvider())
    coordinator.rules.create_rule(day_of_week=1, start_time="09:00", end_time="12:00",
                                  buffer_minutes=15, max_bookings_per_day=3)
    slots = coordinator.get_availability(date(2026, 10, 26))
    booking = coordinator.request_booking("cust-1", slots[0].date, slots[0].start_time)
    coordinator.confirm_booking(booking.id)
"""

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, NoReturn, Optional
from zoneinfo import ZoneInfo

from booking_engine.catalog import normalize_service_type
from booking_engine.config import AppConfig, settings
from booking_engine.errors import (
    BillingConfirmationFailed,
    CustomerDoubleBooked,
    InvalidTransition,
    SlotNoLongerAvailable,
    ValidationError,
)
from booking_engine.integrations import metrics as m
from booking_engine.integrations.billing import BillingProvider
from booking_engine.integrations.metrics import MetricsSink, NullMetricsSink
from booking_engine.integrations.notifications import (
    EventName,
    LoggingDispatcher,
    NotificationDispatcher,
    emit,
)
from booking_engine.lifecycle.state_machine import BookingLifecycle, BookingTrigger, Clock, utc_now
from booking_engine.locks import KeyedLocks
from booking_engine.persistence import Repository
from booking_engine.quotes.assignment import QuoteAssignmentService
from booking_engine.schemas.availability_schema import AvailabilityRule, Slot
from booking_engine.schemas.booking_schema import (
    Actor,
    Booking,
    BookingStatus,
    CancellationReason,
)
from booking_engine.schemas.service_request_schema import (
    Job,
    Quote,
    QuoteEstimate,
    ServiceRequest,
    Urgency,
)
from booking_engine.scheduling.conflict_checker import ConflictChecker
from booking_engine.scheduling.rule_store import AvailabilityRuleStore
from booking_engine.scheduling.slot_generator import SlotGenerator
from booking_engine.utils import format_time, parse_time

logger = logging.getLogger(__name__)

Scope = tuple[date, Optional[str]]

UPCOMING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


def _coerce_start(value: Any) -> time:
    try:
        return parse_time(value)
    except (ValueError, TypeError, AttributeError):
        raise ValidationError("Slot start must be in HH:MM format", field="start_time", value=str(value)) from None


def _customer_key(customer_id: str, on_date: date) -> tuple:
    """Lock key serializing one customer's claims on one date across scopes."""
    return ("customer", customer_id, on_date)


def _coerce_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Unknown {field_name} {value!r}; expected one of: {allowed}", field=field_name,
        ) from None


class SchedulingCoordinator:
    """Composes rule store, slot generator, conflict checker, lifecycles and quotes."""

    def __init__(
        self,
        repository: Repository,
        billing: BillingProvider,
        dispatcher: Optional[NotificationDispatcher] = None,
        metrics: Optional[MetricsSink] = None,
        config: Optional[AppConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._repo = repository
        self._billing = billing
        self._dispatcher = dispatcher or LoggingDispatcher()
        self._metrics = metrics or NullMetricsSink()
        self._config = config or settings
        self._clock = clock or utc_now
        self._tz = ZoneInfo(self._config.scheduling.business_timezone)
        self._scope_locks = KeyedLocks()

        self.rules = AvailabilityRuleStore(repository, self._config)
        self.slots = SlotGenerator(self.rules, self._config)
        self.checker = ConflictChecker()
        self.quotes = QuoteAssignmentService(repository, self._dispatcher, self._metrics, self._clock)

    @property
    def config(self) -> AppConfig:
        return self._config

    def today(self) -> date:
        """Current date in the business timezone."""
        return self._clock().astimezone(self._tz).date()

    # ------------------------------------------------------------------ #
    # Availability (lock-free reads)
    # ------------------------------------------------------------------ #

    def get_availability(
        self,
        on_date: date,
        service_type: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> list[Slot]:
        """Free, bookable slots for a date, ordered by start time."""
        service_type = normalize_service_type(service_type)
        rule = self.slots.rule_for(on_date, service_type)
        if rule is None:
            return []
        bookings = self._repo.list_bookings(on_date=on_date, service_type=service_type)
        free = self._free_slots(rule, on_date, service_type, duration_minutes, bookings)
        self._metrics.increment(m.AVAILABILITY_QUERIED, service_type=service_type or "general")
        return free

    def get_availability_for_range(
        self,
        start_date: date,
        end_date: date,
        service_type: Optional[str] = None,
    ) -> dict[date, list[Slot]]:
        if end_date < start_date:
            raise ValidationError(
                "End date must not be before start date",
                start_date=start_date.isoformat(), end_date=end_date.isoformat(),
            )
        result: dict[date, list[Slot]] = {}
        current = start_date
        while current <= end_date:
            result[current] = self.get_availability(current, service_type)
            current += timedelta(days=1)
        return result

    def find_next_available_slot(
        self,
        from_date: Optional[date] = None,
        service_type: Optional[str] = None,
    ) -> Optional[Slot]:
        """Earliest free slot on or after ``from_date`` within the search horizon."""
        current = from_date or self.today()
        for _ in range(self._config.booking.next_slot_search_days):
            free = self.get_availability(current, service_type)
            if free:
                return free[0]
            current += timedelta(days=1)
        return None

    def find_alternative_dates(
        self,
        original_date: date,
        service_type: Optional[str] = None,
    ) -> list[date]:
        """First few later dates that still have at least one free slot."""
        policy = self._config.booking
        found: list[date] = []
        current = original_date + timedelta(days=1)
        for _ in range(policy.alternative_date_search_days):
            if self.get_availability(current, service_type):
                found.append(current)
                if len(found) >= policy.max_alternative_dates:
                    break
            current += timedelta(days=1)
        return found

    def count_bookings_on_date(self, on_date: date, service_type: Optional[str] = None) -> int:
        service_type = normalize_service_type(service_type)
        bookings = self._repo.list_bookings(on_date=on_date, service_type=service_type)
        return self.checker.count_bookings_on_date(on_date, service_type, bookings)

    # ------------------------------------------------------------------ #
    # Booking commit path
    # ------------------------------------------------------------------ #

    def request_booking(
        self,
        customer_id: str,
        on_date: date,
        slot_start: Any,
        service_type: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ) -> Booking:
        """
        Claim a slot as a PENDING booking.

        The availability check and the write happen under the scope lock,
        so of several concurrent requests for the last free slot exactly
        one succeeds.

        Raises:
            ValidationError: Malformed input or outside the booking window.
            SlotNoLongerAvailable: The slot is taken, capped or no longer offered.
            CustomerDoubleBooked: The customer already holds an overlapping booking.
        """
        if not customer_id or not str(customer_id).strip():
            raise ValidationError("customer_id is required", field="customer_id")
        service_type = normalize_service_type(service_type)
        start = _coerce_start(slot_start)
        self._check_booking_window(on_date, start)

        self._metrics.increment(m.BOOKING_REQUESTED, service_type=service_type or "general")
        with self._scope_locks.hold((on_date, service_type), _customer_key(customer_id, on_date)):
            booking = self._claim(customer_id, on_date, start, service_type, duration_minutes)
            stored = self._repo.add_booking(booking)

        logger.info("Booking %s committed for %s", stored.summary(), customer_id)
        emit(
            self._dispatcher, EventName.BOOKING_REQUESTED, stored.id,
            customer_id=customer_id,
            date=stored.date.isoformat(),
            start_time=format_time(stored.start_time),
            service_type=stored.service_type,
        )
        return stored

    def _claim(
        self,
        customer_id: str,
        on_date: date,
        start: time,
        service_type: Optional[str],
        duration_minutes: Optional[int],
        exclude_booking_id: Optional[str] = None,
    ) -> Booking:
        """Validate a claim inside the scope lock and build the new booking."""
        rule = self.slots.rule_for(on_date, service_type)
        bookings = self._repo.list_bookings(on_date=on_date, service_type=service_type)

        slot = self._offered_slot(rule, on_date, start, service_type, duration_minutes)
        if rule is None or slot is None:
            self._reject(on_date, start, service_type, rule, duration_minutes, bookings, "not_offered",
                         exclude_booking_id)

        verdict = self.checker.check(on_date, slot, bookings, rule, exclude_booking_id)
        if not verdict.available:
            self._reject(on_date, start, service_type, rule, duration_minutes, bookings, verdict.reason,
                         exclude_booking_id)

        self._check_customer_overlap(customer_id, slot, exclude_booking_id)

        now = self._clock()
        booking = Booking(
            customer_id=customer_id,
            service_type=service_type,
            date=on_date,
            start_time=slot.start_time,
            duration_minutes=slot.duration_minutes,
            buffer_minutes=rule.buffer_minutes,
            rule_id=rule.id,
            created_at=now,
            updated_at=now,
        )
        BookingLifecycle(booking, self._clock)
        return booking

    def _offered_slot(
        self,
        rule: Optional[AvailabilityRule],
        on_date: date,
        start: time,
        service_type: Optional[str],
        duration_minutes: Optional[int],
    ) -> Optional[Slot]:
        if rule is None:
            return None
        for slot in self.slots.slots_for_rule(rule, on_date, service_type, duration_minutes):
            if slot.start_time == start:
                return slot
        return None

    def _reject(
        self,
        on_date: date,
        start: time,
        service_type: Optional[str],
        rule: Optional[AvailabilityRule],
        duration_minutes: Optional[int],
        bookings: list[Booking],
        reason: Optional[str],
        exclude_booking_id: Optional[str] = None,
    ) -> NoReturn:
        alternatives: list[Slot] = []
        if rule is not None:
            remaining = [b for b in bookings if b.id != exclude_booking_id]
            free = self._free_slots(rule, on_date, service_type, duration_minutes, remaining)
            alternatives = [s for s in free if s.start_time != start]
            alternatives = alternatives[:self._config.booking.max_alternative_slots]

        self._metrics.increment(m.BOOKING_REJECTED, reason=reason or "unknown")
        logger.info(
            "Slot %s %s (%s) rejected: %s; %d alternative(s)",
            on_date.isoformat(), format_time(start), service_type or "general", reason, len(alternatives),
        )
        raise SlotNoLongerAvailable(
            f"The {format_time(start)} slot on {on_date.isoformat()} is no longer available",
            alternatives=alternatives,
            date=on_date.isoformat(),
            start_time=format_time(start),
            service_type=service_type,
            reason=reason,
        )

    def _free_slots(
        self,
        rule: AvailabilityRule,
        on_date: date,
        service_type: Optional[str],
        duration_minutes: Optional[int],
        bookings: Iterable[Booking],
    ) -> list[Slot]:
        candidates = self.slots.slots_for_rule(rule, on_date, service_type, duration_minutes)
        free = self.checker.filter_available(candidates, bookings, rule)
        return [s for s in free if self._within_booking_window(s.date, s.start_time)]

    def _slot_datetime(self, on_date: date, start: time) -> datetime:
        return datetime.combine(on_date, start, tzinfo=self._tz)

    def _within_booking_window(self, on_date: date, start: time) -> bool:
        policy = self._config.booking
        now = self._clock()
        slot_at = self._slot_datetime(on_date, start)
        earliest = now + timedelta(minutes=policy.min_advance_minutes)
        latest = now + timedelta(days=policy.max_advance_days)
        return earliest <= slot_at <= latest

    def _check_booking_window(self, on_date: date, start: time) -> None:
        if self._within_booking_window(on_date, start):
            return
        policy = self._config.booking
        slot_at = self._slot_datetime(on_date, start)
        if slot_at < self._clock() + timedelta(minutes=policy.min_advance_minutes):
            message = (
                f"Bookings must start at least {policy.min_advance_minutes} minute(s) from now"
                if policy.min_advance_minutes else "Cannot book a slot in the past"
            )
        else:
            message = f"Bookings cannot be made more than {policy.max_advance_days} day(s) ahead"
        raise ValidationError(message, date=on_date.isoformat(), start_time=format_time(start))

    def _check_customer_overlap(self, customer_id: str, slot: Slot, exclude_booking_id: Optional[str]) -> None:
        """A customer cannot hold two overlapping active bookings, whatever the service."""
        held = self._repo.list_bookings(on_date=slot.date, customer_id=customer_id)
        for other in held:
            if other.id == exclude_booking_id or not other.is_blocking:
                continue
            if slot.start_minutes < other.end_minutes and other.start_minutes < slot.end_minutes:
                raise CustomerDoubleBooked(
                    f"Customer {customer_id} already has booking {other.id} at "
                    f"{format_time(other.start_time)} on {slot.date.isoformat()}",
                    customer_id=customer_id,
                    conflicting_booking_id=other.id,
                )

    # ------------------------------------------------------------------ #
    # Booking lifecycle
    # ------------------------------------------------------------------ #

    def get_booking(self, booking_id: str) -> Booking:
        return self._repo.get_booking(booking_id)

    def list_bookings(
        self,
        on_date: Optional[date] = None,
        customer_id: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        statuses = [status] if status is not None else None
        return self._repo.list_bookings(on_date=on_date, customer_id=customer_id, statuses=statuses)

    def confirm_booking(self, booking_id: str) -> Booking:
        """
        Ask the billing provider to confirm payment, then confirm the booking.

        A declined or failed confirmation cancels the PENDING booking with
        reason BILLING_FAILED, releasing its slot, before the error surfaces.
        The booking's scope stays locked from the PENDING check through the
        resulting transition, so the provider is asked at most once per
        booking and the expiry sweep cannot cancel it mid-payment.

        Raises:
            InvalidTransition: The booking is not PENDING.
            BillingConfirmationFailed: Payment was not confirmed.
        """
        booking = self._repo.get_booking(booking_id)
        with self._scope_locks.hold((booking.date, booking.service_type)):
            booking = self._repo.get_booking(booking_id)
            if not BookingLifecycle(booking, self._clock).can_transition(BookingTrigger.CONFIRM):
                raise InvalidTransition(
                    "Booking", current=booking.status.value, requested=BookingStatus.CONFIRMED.value,
                )

            try:
                paid = bool(self._billing.confirm_payment(booking_id))
            except Exception:
                logger.warning("Billing provider raised while confirming %s", booking_id, exc_info=True)
                paid = False

            if paid:
                stored = self._apply(booking_id, BookingTrigger.CONFIRM)
            else:
                self._metrics.increment(m.BILLING_FAILED)
                logger.warning("Billing confirmation failed for %s; cancelling", booking_id)
                stored = self._apply(
                    booking_id, BookingTrigger.CANCEL, "payment not confirmed",
                    cancellation_reason=CancellationReason.BILLING_FAILED, cancelled_by=Actor.SYSTEM,
                )

        if not paid:
            self._record_cancellation(stored)
            raise BillingConfirmationFailed(
                f"Payment for booking {booking_id} could not be confirmed; the booking was cancelled",
                booking_id=booking_id,
            )

        self._metrics.increment(m.BOOKING_CONFIRMED, service_type=stored.service_type or "general")
        emit(
            self._dispatcher, EventName.BOOKING_CONFIRMED, booking_id,
            customer_id=stored.customer_id,
            date=stored.date.isoformat(),
            start_time=format_time(stored.start_time),
        )
        return stored

    def check_in(self, booking_id: str) -> Booking:
        """Technician arrived on site."""
        stored = self._advance(booking_id, BookingTrigger.CHECK_IN)
        emit(self._dispatcher, EventName.BOOKING_STARTED, booking_id, customer_id=stored.customer_id)
        return stored

    def check_out(self, booking_id: str) -> Booking:
        """Technician finished the visit."""
        stored = self._advance(booking_id, BookingTrigger.CHECK_OUT)
        self._metrics.increment(m.BOOKING_COMPLETED, service_type=stored.service_type or "general")
        emit(self._dispatcher, EventName.BOOKING_COMPLETED, booking_id, customer_id=stored.customer_id)
        return stored

    def cancel_booking(
        self,
        booking_id: str,
        reason: Any = CancellationReason.CUSTOMER_REQUEST,
        actor: Any = Actor.CUSTOMER,
        note: Optional[str] = None,
    ) -> Booking:
        """Cancel a PENDING or CONFIRMED booking with a reason code."""
        reason = _coerce_enum(CancellationReason, reason, "reason")
        actor = _coerce_enum(Actor, actor, "actor")
        return self._cancel(booking_id, reason, actor, note)

    def _cancel(
        self,
        booking_id: str,
        reason: CancellationReason,
        actor: Actor,
        note: Optional[str] = None,
    ) -> Booking:
        stored = self._advance(
            booking_id, BookingTrigger.CANCEL, note or reason.value,
            cancellation_reason=reason, cancelled_by=actor,
        )
        self._record_cancellation(stored)
        return stored

    def _record_cancellation(self, stored: Booking) -> None:
        reason = stored.cancellation_reason
        self._metrics.increment(m.BOOKING_CANCELLED, reason=reason.value)
        emit(
            self._dispatcher, EventName.BOOKING_CANCELLED, stored.id,
            customer_id=stored.customer_id,
            reason=reason.value,
            actor=stored.cancelled_by.value,
        )

    def reschedule_booking(
        self,
        booking_id: str,
        new_date: date,
        new_start_time: Any,
    ) -> Booking:
        """
        Move a booking by cancelling-and-recreating it.

        The original is marked RESCHEDULED and a new PENDING booking is
        created; the two are linked both ways. Both scopes are locked, in a
        fixed order, for the duration of the swap.

        Returns:
            The new booking.
        """
        start = _coerce_start(new_start_time)
        original = self._repo.get_booking(booking_id)
        if not BookingLifecycle(original, self._clock).can_transition(BookingTrigger.RESCHEDULE):
            raise InvalidTransition(
                "Booking", current=original.status.value, requested=BookingStatus.RESCHEDULED.value,
            )
        self._check_booking_window(new_date, start)

        old_scope: Scope = (original.date, original.service_type)
        new_scope: Scope = (new_date, original.service_type)
        with self._scope_locks.hold(old_scope, new_scope, _customer_key(original.customer_id, new_date)):
            original = self._repo.get_booking(booking_id)
            replacement = self._claim(
                original.customer_id, new_date, start, original.service_type,
                original.duration_minutes, exclude_booking_id=original.id,
            )
            replacement.rescheduled_from = original.id

            BookingLifecycle(original, self._clock).transition(
                BookingTrigger.RESCHEDULE, f"moved to {replacement.id}"
            )
            original.rescheduled_to = replacement.id

            with self._repo.transaction():
                stored = self._repo.add_booking(replacement)
                self._repo.update_booking(original)

        logger.info("Booking %s rescheduled to %s", booking_id, stored.summary())
        self._metrics.increment(m.BOOKING_RESCHEDULED, service_type=stored.service_type or "general")
        emit(
            self._dispatcher, EventName.BOOKING_RESCHEDULED, booking_id,
            customer_id=stored.customer_id,
            new_booking_id=stored.id,
            date=stored.date.isoformat(),
            start_time=format_time(stored.start_time),
        )
        return stored

    def _advance(
        self,
        booking_id: str,
        trigger: BookingTrigger,
        note: Optional[str] = None,
        **changes: Any,
    ) -> Booking:
        """Apply one transition to a stored booking under its scope lock."""
        booking = self._repo.get_booking(booking_id)
        with self._scope_locks.hold((booking.date, booking.service_type)):
            return self._apply(booking_id, trigger, note, **changes)

    def _apply(
        self,
        booking_id: str,
        trigger: BookingTrigger,
        note: Optional[str] = None,
        **changes: Any,
    ) -> Booking:
        """Transition and store a booking; the caller holds its scope lock."""
        booking = self._repo.get_booking(booking_id)
        BookingLifecycle(booking, self._clock).transition(trigger, note)
        for name, value in changes.items():
            setattr(booking, name, value)
        stored = self._repo.update_booking(booking)
        logger.info("Booking %s is now %s", booking_id, stored.status.value)
        return stored

    def expire_pending_bookings(self, now: Optional[datetime] = None) -> list[Booking]:
        """Cancel PENDING bookings whose payment window has elapsed."""
        now = now or self._clock()
        cutoff = now - timedelta(minutes=self._config.booking.payment_window_minutes)
        expired: list[Booking] = []
        for booking in self._repo.list_bookings(statuses=[BookingStatus.PENDING]):
            if booking.created_at > cutoff:
                continue
            with self._scope_locks.hold((booking.date, booking.service_type)):
                if self._repo.get_booking(booking.id).status != BookingStatus.PENDING:
                    # Confirmed or cancelled since the snapshot was taken.
                    logger.debug("Booking %s left PENDING before expiry", booking.id)
                    continue
                stored = self._apply(
                    booking.id, BookingTrigger.CANCEL, "payment window elapsed",
                    cancellation_reason=CancellationReason.PAYMENT_TIMEOUT, cancelled_by=Actor.SYSTEM,
                )
            self._record_cancellation(stored)
            expired.append(stored)
            self._metrics.increment(m.PENDING_EXPIRED)
        if expired:
            logger.info("Expired %d unpaid booking(s)", len(expired))
        return expired

    # ------------------------------------------------------------------ #
    # Reporting
    # ------------------------------------------------------------------ #

    def upcoming_bookings(self, customer_id: str, limit: int = 5) -> list[Booking]:
        """The customer's next PENDING or CONFIRMED bookings, soonest first."""
        now = self._clock()
        upcoming = [
            b for b in self._repo.list_bookings(customer_id=customer_id, statuses=UPCOMING_STATUSES)
            if self._slot_datetime(b.date, b.start_time) >= now
        ]
        return upcoming[:limit]

    def booking_stats(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        service_type: Optional[str] = None,
    ) -> dict[str, Any]:
        """Counts by status plus completion and cancellation rates (percent)."""
        service_type = normalize_service_type(service_type)
        bookings = [
            b for b in self._repo.list_bookings()
            if (start_date is None or b.date >= start_date)
            and (end_date is None or b.date <= end_date)
            and (service_type is None or b.service_type == service_type)
        ]
        counts = Counter(b.status for b in bookings)
        total = len(bookings)

        def rate(status: BookingStatus) -> float:
            return round(counts[status] / total * 100, 2) if total else 0.0

        return {
            "total": total,
            "by_status": {status.value: counts[status] for status in BookingStatus},
            "completion_rate": rate(BookingStatus.COMPLETED),
            "cancellation_rate": rate(BookingStatus.CANCELLED),
        }

    # ------------------------------------------------------------------ #
    # Service requests, quotes and jobs
    # ------------------------------------------------------------------ #

    def create_service_request(
        self,
        customer_id: str,
        category: str,
        description: str = "",
        urgency: Any = Urgency.NORMAL,
    ) -> ServiceRequest:
        urgency = _coerce_enum(Urgency, urgency, "urgency")
        return self.quotes.create_service_request(customer_id, category, description, urgency)

    def get_service_request(self, request_id: str) -> ServiceRequest:
        return self.quotes.get_service_request(request_id)

    def cancel_service_request(self, request_id: str, reason: Optional[str] = None) -> ServiceRequest:
        return self.quotes.cancel_service_request(request_id, reason)

    def submit_quote(self, service_request_id: str, technician_id: str, estimate: QuoteEstimate) -> Quote:
        return self.quotes.submit_quote(service_request_id, technician_id, estimate)

    def withdraw_quote(self, quote_id: str) -> Quote:
        return self.quotes.withdraw_quote(quote_id)

    def list_quotes(self, service_request_id: str) -> list[Quote]:
        return self.quotes.list_quotes(service_request_id)

    def accept_quote(self, quote_id: str, scheduled_date: Optional[date] = None) -> Job:
        return self.quotes.accept_quote(quote_id, scheduled_date)

    def get_job(self, job_id: str) -> Job:
        return self.quotes.get_job(job_id)

    def start_job(self, job_id: str) -> Job:
        return self.quotes.start_job(job_id)

    def complete_job(self, job_id: str, actual_hours: Any) -> Job:
        return self.quotes.complete_job(job_id, actual_hours)

    def cancel_job(self, job_id: str, reason: Optional[str] = None) -> Job:
        return self.quotes.cancel_job(job_id, reason)

    def rate_job(self, job_id: str, stars: int, feedback: Optional[str] = None) -> Job:
        return self.quotes.rate_job(job_id, stars, feedback)
