"""
Notification events emitted on lifecycle transitions.

The core only emits; formatting and delivery (email, SMS, push) live
outside. Dispatch is fire-and-forget: a failing dispatcher is logged and
never rolls back the transition that produced the event.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)


class EventName:
    BOOKING_REQUESTED = "booking.requested"
    BOOKING_CONFIRMED = "booking.confirmed"
    BOOKING_STARTED = "booking.started"
    BOOKING_COMPLETED = "booking.completed"
    BOOKING_CANCELLED = "booking.cancelled"
    BOOKING_RESCHEDULED = "booking.rescheduled"
    SERVICE_REQUEST_CREATED = "service_request.created"
    SERVICE_REQUEST_CANCELLED = "service_request.cancelled"
    QUOTE_RECEIVED = "quote.received"
    QUOTE_WITHDRAWN = "quote.withdrawn"
    QUOTE_ACCEPTED = "quote.accepted"
    JOB_STARTED = "job.started"
    JOB_COMPLETED = "job.completed"
    JOB_CANCELLED = "job.cancelled"
    JOB_RATED = "job.rated"


@dataclass(frozen=True)
class DomainEvent:
    name: str
    entity_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NotificationDispatcher(ABC):
    @abstractmethod
    def dispatch(self, event: DomainEvent) -> None:
        """Hand the event to the delivery layer."""


class LoggingDispatcher(NotificationDispatcher):
    """Default dispatcher: records events in the log only."""

    def dispatch(self, event: DomainEvent) -> None:
        logger.info("Event %s for %s", event.name, event.entity_id)


class InMemoryDispatcher(NotificationDispatcher):
    """Collects events for assertions in tests and the demo."""

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    def dispatch(self, event: DomainEvent) -> None:
        self.events.append(event)

    def names(self) -> list[str]:
        return [e.name for e in self.events]

    def last(self, name: Optional[str] = None) -> Optional[DomainEvent]:
        for event in reversed(self.events):
            if name is None or event.name == name:
                return event
        return None


def emit(dispatcher: NotificationDispatcher, name: str, entity_id: str, **payload: Any) -> None:
    """Dispatch without letting delivery problems reach the caller."""
    event = DomainEvent(name=name, entity_id=entity_id, payload=payload)
    try:
        dispatcher.dispatch(event)
    except Exception as exc:
        logger.warning("Failed to dispatch %s for %s: %s", name, entity_id, exc)
