"""
Metrics sink passed into the coordinator.

Counters are owned by whichever sink instance the caller constructs; there
are no process-wide counters. ``InMemoryMetricsSink`` doubles as a small
report generator for the console demo.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import Counter

logger = logging.getLogger(__name__)

# Counter names used by the coordinator and sweeper.
BOOKING_REQUESTED = "booking_requested"
BOOKING_REJECTED = "booking_rejected"
BOOKING_CONFIRMED = "booking_confirmed"
BOOKING_CANCELLED = "booking_cancelled"
BOOKING_RESCHEDULED = "booking_rescheduled"
BOOKING_COMPLETED = "booking_completed"
BILLING_FAILED = "billing_failed"
PENDING_EXPIRED = "pending_expired"
QUOTE_SUBMITTED = "quote_submitted"
QUOTE_ACCEPTED = "quote_accepted"
JOB_COMPLETED = "job_completed"
JOB_RATED = "job_rated"
AVAILABILITY_QUERIED = "availability_queried"


class MetricsSink(ABC):
    @abstractmethod
    def increment(self, name: str, value: int = 1, **tags: str) -> None: ...


class NullMetricsSink(MetricsSink):
    def increment(self, name: str, value: int = 1, **tags: str) -> None:
        return None


class InMemoryMetricsSink(MetricsSink):
    """Thread-safe tagged counters."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: Counter = Counter()

    def increment(self, name: str, value: int = 1, **tags: str) -> None:
        key = (name, tuple(sorted((k, str(v)) for k, v in tags.items())))
        with self._lock:
            self._counts[key] += value

    def count(self, name: str, **tags: str) -> int:
        """Sum of a counter across every tag set that includes ``tags``."""
        wanted = {(k, str(v)) for k, v in tags.items()}
        with self._lock:
            return sum(
                n for (metric, tag_items), n in self._counts.items()
                if metric == name and wanted.issubset(tag_items)
            )

    def snapshot(self) -> dict[str, int]:
        totals: Counter = Counter()
        with self._lock:
            for (metric, _), n in self._counts.items():
                totals[metric] += n
        return dict(totals)

    def format_report(self) -> str:
        """Format counter totals into a human-readable report."""
        totals = self.snapshot()
        lines = ["=" * 40, "SCHEDULING COUNTERS", "=" * 40]
        for name in sorted(totals):
            lines.append(f"  {name:<24} {totals[name]:>6}")
        lines.append("=" * 40)
        return "\n".join(lines)
