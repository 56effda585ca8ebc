"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest

from booking_engine.config import ApiConfig, AppConfig, BookingPolicyConfig, SchedulingConfig
from booking_engine.coordinator import SchedulingCoordinator
from booking_engine.integrations.billing import InMemoryBillingProvider
from booking_engine.integrations.metrics import InMemoryMetricsSink
from booking_engine.integrations.notifications import InMemoryDispatcher
from booking_engine.persistence import InMemoryRepository
from booking_engine.schemas.booking_schema import Booking, BookingStatus
from booking_engine.schemas.service_request_schema import QuoteEstimate
from booking_engine.scheduling.rule_store import AvailabilityRuleStore
from booking_engine.scheduling.slot_generator import SlotGenerator
from booking_engine.utils import parse_time

# Clock pinned to Monday 2026-10-19 08:00 UTC; MONDAY is the following week.
NOW = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
MONDAY = date(2026, 10, 26)
TUESDAY = date(2026, 10, 27)


class FakeClock:
    """Settable clock so tests control 'now'."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_config(
    slots_must_fit_window: bool = False,
    min_advance_minutes: int = 0,
    max_advance_days: int = 90,
    payment_window_minutes: int = 30,
    business_timezone: str = "UTC",
) -> AppConfig:
    """Build an AppConfig independent of the process environment."""
    return AppConfig(
        scheduling=SchedulingConfig(
            default_slot_duration_minutes=60,
            default_buffer_minutes=30,
            default_max_bookings_per_day=8,
            slots_must_fit_window=slots_must_fit_window,
            business_timezone=business_timezone,
        ),
        booking=BookingPolicyConfig(
            min_advance_minutes=min_advance_minutes,
            max_advance_days=max_advance_days,
            payment_window_minutes=payment_window_minutes,
            sweep_interval_seconds=60,
            next_slot_search_days=30,
            max_alternative_slots=5,
            alternative_date_search_days=7,
            max_alternative_dates=3,
        ),
        api=ApiConfig(title="Test API", prefix="/api/v1", host="127.0.0.1", port=8000),
        log_level="DEBUG",
        service_name="booking-engine-test",
    )


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo():
    repository = InMemoryRepository()
    yield repository
    repository.reset()


@pytest.fixture
def rule_store(repo, config):
    return AvailabilityRuleStore(repo, config)


@pytest.fixture
def generator(rule_store, config):
    return SlotGenerator(rule_store, config)


@pytest.fixture
def billing():
    return InMemoryBillingProvider()


@pytest.fixture
def dispatcher():
    return InMemoryDispatcher()


@pytest.fixture
def metrics():
    return InMemoryMetricsSink()


@pytest.fixture
def coordinator(repo, billing, dispatcher, metrics, config, clock):
    return SchedulingCoordinator(
        repo, billing, dispatcher=dispatcher, metrics=metrics, config=config, clock=clock,
    )


@pytest.fixture
def monday_rule(coordinator):
    """Monday 09:00-12:00, 15 minute buffer, 60 minute slots, three per day."""
    return coordinator.rules.create_rule(
        day_of_week=1, start_time="09:00", end_time="12:00",
        buffer_minutes=15, max_bookings_per_day=3,
    )


def make_booking(
    start: str,
    on_date: date = MONDAY,
    duration_minutes: int = 60,
    buffer_minutes: int = 15,
    service_type: Optional[str] = None,
    status: BookingStatus = BookingStatus.PENDING,
    customer_id: str = "cust-x",
) -> Booking:
    """Helper to create a Booking record without going through the coordinator."""
    return Booking(
        customer_id=customer_id,
        service_type=service_type,
        date=on_date,
        start_time=parse_time(start),
        duration_minutes=duration_minutes,
        buffer_minutes=buffer_minutes,
        status=status,
    )


def make_estimate(hours: str = "2", materials: str = "40", labor: str = "160") -> QuoteEstimate:
    return QuoteEstimate(
        estimated_hours=Decimal(hours),
        materials_cost=Decimal(materials),
        labor_cost=Decimal(labor),
    )
