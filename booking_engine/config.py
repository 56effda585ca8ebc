"""
Centralized configuration with environment variable overrides.

Scheduling defaults, booking windows, sweep timing and API settings are
configurable here. Nothing is hardcoded in the scheduling or lifecycle logic.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var."""
    raw = os.getenv(env_var, default).strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class SchedulingConfig:
    """Defaults applied to availability rules and slot generation."""

    default_slot_duration_minutes: int = _safe_int("DEFAULT_SLOT_DURATION_MINUTES", "60")
    default_buffer_minutes: int = _safe_int("DEFAULT_BUFFER_MINUTES", "30")
    default_max_bookings_per_day: int = _safe_int("DEFAULT_MAX_BOOKINGS_PER_DAY", "8")
    slots_must_fit_window: bool = _safe_bool("SLOTS_MUST_FIT_WINDOW", "false")
    business_timezone: str = os.getenv("BUSINESS_TIMEZONE", "UTC")


@dataclass(frozen=True)
class BookingPolicyConfig:
    """Booking windows, payment timeouts and alternative-suggestion limits."""

    min_advance_minutes: int = _safe_int("MIN_ADVANCE_MINUTES", "0")
    max_advance_days: int = _safe_int("MAX_ADVANCE_DAYS", "90")
    payment_window_minutes: int = _safe_int("PAYMENT_WINDOW_MINUTES", "30")
    sweep_interval_seconds: int = _safe_int("SWEEP_INTERVAL_SECONDS", "60")
    next_slot_search_days: int = _safe_int("NEXT_SLOT_SEARCH_DAYS", "30")
    max_alternative_slots: int = _safe_int("MAX_ALTERNATIVE_SLOTS", "5")
    alternative_date_search_days: int = _safe_int("ALTERNATIVE_DATE_SEARCH_DAYS", "7")
    max_alternative_dates: int = _safe_int("MAX_ALTERNATIVE_DATES", "3")


@dataclass(frozen=True)
class ApiConfig:
    """HTTP surface settings."""

    title: str = os.getenv("API_TITLE", "Household Services Scheduling API")
    prefix: str = os.getenv("API_PREFIX", "/api/v1")
    host: str = os.getenv("API_HOST", "127.0.0.1")
    port: int = _safe_int("API_PORT", "8000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    booking: BookingPolicyConfig = field(default_factory=BookingPolicyConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    service_name: str = os.getenv("SERVICE_NAME", "booking-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    sched = config.scheduling
    if sched.default_slot_duration_minutes < 1:
        raise ValueError(
            "DEFAULT_SLOT_DURATION_MINUTES must be >= 1, "
            f"got {sched.default_slot_duration_minutes}"
        )
    if sched.default_buffer_minutes < 0:
        raise ValueError(
            f"DEFAULT_BUFFER_MINUTES must be >= 0, got {sched.default_buffer_minutes}"
        )
    if sched.default_max_bookings_per_day < 1:
        raise ValueError(
            "DEFAULT_MAX_BOOKINGS_PER_DAY must be >= 1, "
            f"got {sched.default_max_bookings_per_day}"
        )
    try:
        ZoneInfo(sched.business_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(
            f"BUSINESS_TIMEZONE is not a known timezone: {sched.business_timezone!r}"
        ) from None

    booking = config.booking
    if booking.min_advance_minutes < 0:
        raise ValueError(
            f"MIN_ADVANCE_MINUTES must be >= 0, got {booking.min_advance_minutes}"
        )

    for name, value in [
        ("MAX_ADVANCE_DAYS", booking.max_advance_days),
        ("PAYMENT_WINDOW_MINUTES", booking.payment_window_minutes),
        ("SWEEP_INTERVAL_SECONDS", booking.sweep_interval_seconds),
        ("NEXT_SLOT_SEARCH_DAYS", booking.next_slot_search_days),
        ("MAX_ALTERNATIVE_SLOTS", booking.max_alternative_slots),
        ("ALTERNATIVE_DATE_SEARCH_DAYS", booking.alternative_date_search_days),
        ("MAX_ALTERNATIVE_DATES", booking.max_alternative_dates),
    ]:
        if value < 1:
            raise ValueError(f"{name} must be >= 1, got {value}")

    if not config.api.prefix.startswith("/"):
        raise ValueError(f"API_PREFIX must start with '/', got {config.api.prefix!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    from booking_engine.logging_context import install_request_id_filter

    install_request_id_filter()
    logger.info("Configuration loaded for '%s'", config.service_name)
    return config


# Singleton instance
settings = load_config()
