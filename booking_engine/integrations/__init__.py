from booking_engine.integrations.billing import BillingProvider, InMemoryBillingProvider
from booking_engine.integrations.metrics import InMemoryMetricsSink, MetricsSink, NullMetricsSink
from booking_engine.integrations.notifications import (
    DomainEvent,
    EventName,
    InMemoryDispatcher,
    LoggingDispatcher,
    NotificationDispatcher,
)

__all__ = [
    "BillingProvider", "InMemoryBillingProvider",
    "MetricsSink", "NullMetricsSink", "InMemoryMetricsSink",
    "DomainEvent", "EventName", "NotificationDispatcher",
    "LoggingDispatcher", "InMemoryDispatcher",
]
