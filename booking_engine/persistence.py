"""
Persistence interface for scheduling records, plus an in-memory engine.

The scheduling core only talks to ``Repository``. Any storage engine can sit
behind it as long as reads issued inside one commit observe that commit's
writes. ``InMemoryRepository`` backs the tests, the console demo and the
default API app.
"""

import copy
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from datetime import date
from typing import Any, Callable, Generic, Iterable, Iterator, Optional, TypeVar

from booking_engine.errors import NotFound
from booking_engine.schemas.availability_schema import AvailabilityRule
from booking_engine.schemas.booking_schema import Booking, BookingStatus
from booking_engine.schemas.service_request_schema import Job, Quote, ServiceRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Distinguishes "don't filter" from "filter on None" for optional tags.
ANY: Any = object()


class Repository(ABC):
    """Create/read/update access to every record the core owns."""

    def transaction(self):
        """Group several writes so readers never see half of them."""
        return nullcontext()

    # --- Availability rules ---
    @abstractmethod
    def add_rule(self, rule: AvailabilityRule) -> AvailabilityRule: ...

    @abstractmethod
    def update_rule(self, rule: AvailabilityRule) -> AvailabilityRule: ...

    @abstractmethod
    def get_rule(self, rule_id: str) -> AvailabilityRule: ...

    @abstractmethod
    def list_rules(
        self,
        day_of_week: Optional[int] = None,
        service_type: Any = ANY,
        is_available: Optional[bool] = None,
    ) -> list[AvailabilityRule]: ...

    # --- Bookings ---
    @abstractmethod
    def add_booking(self, booking: Booking) -> Booking: ...

    @abstractmethod
    def update_booking(self, booking: Booking) -> Booking: ...

    @abstractmethod
    def get_booking(self, booking_id: str) -> Booking: ...

    @abstractmethod
    def list_bookings(
        self,
        on_date: Optional[date] = None,
        service_type: Any = ANY,
        customer_id: Optional[str] = None,
        statuses: Optional[Iterable[BookingStatus]] = None,
    ) -> list[Booking]: ...

    # --- Service requests ---
    @abstractmethod
    def add_service_request(self, request: ServiceRequest) -> ServiceRequest: ...

    @abstractmethod
    def update_service_request(self, request: ServiceRequest) -> ServiceRequest: ...

    @abstractmethod
    def get_service_request(self, request_id: str) -> ServiceRequest: ...

    # --- Quotes ---
    @abstractmethod
    def add_quote(self, quote: Quote) -> Quote: ...

    @abstractmethod
    def update_quote(self, quote: Quote) -> Quote: ...

    @abstractmethod
    def get_quote(self, quote_id: str) -> Quote: ...

    @abstractmethod
    def list_quotes(self, service_request_id: str) -> list[Quote]: ...

    # --- Jobs ---
    @abstractmethod
    def add_job(self, job: Job) -> Job: ...

    @abstractmethod
    def update_job(self, job: Job) -> Job: ...

    @abstractmethod
    def get_job(self, job_id: str) -> Job: ...

    @abstractmethod
    def list_jobs(self, service_request_id: str) -> list[Job]: ...


class _Table(Generic[T]):
    """Dict-backed table that stores and hands out copies, never aliases."""

    def __init__(self, entity: str) -> None:
        self.entity = entity
        self._rows: dict[str, T] = {}

    def insert(self, record: T) -> T:
        record_id = record.id  # type: ignore[attr-defined]
        if record_id in self._rows:
            raise ValueError(f"{self.entity} {record_id} already exists")
        self._rows[record_id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def replace(self, record: T) -> T:
        record_id = record.id  # type: ignore[attr-defined]
        if record_id not in self._rows:
            raise NotFound(self.entity, record_id)
        self._rows[record_id] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def get(self, record_id: str) -> T:
        try:
            return copy.deepcopy(self._rows[record_id])
        except KeyError:
            raise NotFound(self.entity, record_id) from None

    def select(self, predicate: Callable[[T], bool]) -> list[T]:
        return [copy.deepcopy(row) for row in self._rows.values() if predicate(row)]

    def clear(self) -> None:
        self._rows.clear()


class InMemoryRepository(Repository):
    """Thread-safe in-memory storage engine."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._rules: _Table[AvailabilityRule] = _Table("AvailabilityRule")
        self._bookings: _Table[Booking] = _Table("Booking")
        self._requests: _Table[ServiceRequest] = _Table("ServiceRequest")
        self._quotes: _Table[Quote] = _Table("Quote")
        self._jobs: _Table[Job] = _Table("Job")

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield

    # --- Availability rules ---
    def add_rule(self, rule: AvailabilityRule) -> AvailabilityRule:
        with self._lock:
            return self._rules.insert(rule)

    def update_rule(self, rule: AvailabilityRule) -> AvailabilityRule:
        with self._lock:
            return self._rules.replace(rule)

    def get_rule(self, rule_id: str) -> AvailabilityRule:
        with self._lock:
            return self._rules.get(rule_id)

    def list_rules(
        self,
        day_of_week: Optional[int] = None,
        service_type: Any = ANY,
        is_available: Optional[bool] = None,
    ) -> list[AvailabilityRule]:
        def matches(rule: AvailabilityRule) -> bool:
            if day_of_week is not None and rule.day_of_week != day_of_week:
                return False
            if service_type is not ANY and rule.service_type != service_type:
                return False
            if is_available is not None and rule.is_available != is_available:
                return False
            return True

        with self._lock:
            rules = self._rules.select(matches)
        return sorted(rules, key=lambda r: (r.day_of_week, r.start_time))

    # --- Bookings ---
    def add_booking(self, booking: Booking) -> Booking:
        with self._lock:
            return self._bookings.insert(booking)

    def update_booking(self, booking: Booking) -> Booking:
        with self._lock:
            return self._bookings.replace(booking)

    def get_booking(self, booking_id: str) -> Booking:
        with self._lock:
            return self._bookings.get(booking_id)

    def list_bookings(
        self,
        on_date: Optional[date] = None,
        service_type: Any = ANY,
        customer_id: Optional[str] = None,
        statuses: Optional[Iterable[BookingStatus]] = None,
    ) -> list[Booking]:
        wanted = frozenset(statuses) if statuses is not None else None

        def matches(booking: Booking) -> bool:
            if on_date is not None and booking.date != on_date:
                return False
            if service_type is not ANY and booking.service_type != service_type:
                return False
            if customer_id is not None and booking.customer_id != customer_id:
                return False
            if wanted is not None and booking.status not in wanted:
                return False
            return True

        with self._lock:
            bookings = self._bookings.select(matches)
        return sorted(bookings, key=lambda b: (b.date, b.start_time, b.created_at))

    # --- Service requests ---
    def add_service_request(self, request: ServiceRequest) -> ServiceRequest:
        with self._lock:
            return self._requests.insert(request)

    def update_service_request(self, request: ServiceRequest) -> ServiceRequest:
        with self._lock:
            return self._requests.replace(request)

    def get_service_request(self, request_id: str) -> ServiceRequest:
        with self._lock:
            return self._requests.get(request_id)

    # --- Quotes ---
    def add_quote(self, quote: Quote) -> Quote:
        with self._lock:
            return self._quotes.insert(quote)

    def update_quote(self, quote: Quote) -> Quote:
        with self._lock:
            return self._quotes.replace(quote)

    def get_quote(self, quote_id: str) -> Quote:
        with self._lock:
            return self._quotes.get(quote_id)

    def list_quotes(self, service_request_id: str) -> list[Quote]:
        with self._lock:
            quotes = self._quotes.select(lambda q: q.service_request_id == service_request_id)
        return sorted(quotes, key=lambda q: q.created_at)

    # --- Jobs ---
    def add_job(self, job: Job) -> Job:
        with self._lock:
            return self._jobs.insert(job)

    def update_job(self, job: Job) -> Job:
        with self._lock:
            return self._jobs.replace(job)

    def get_job(self, job_id: str) -> Job:
        with self._lock:
            return self._jobs.get(job_id)

    def list_jobs(self, service_request_id: str) -> list[Job]:
        with self._lock:
            jobs = self._jobs.select(lambda j: j.service_request_id == service_request_id)
        return sorted(jobs, key=lambda j: j.created_at)

    def reset(self) -> None:
        """Clear all tables. Used by test fixtures for isolation."""
        with self._lock:
            for table in (self._rules, self._bookings, self._requests, self._quotes, self._jobs):
                table.clear()
