"""Service requests, technician quotes and the jobs spawned from them."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from booking_engine.schemas.booking_schema import StatusEntry
from booking_engine.utils import new_id


class ServiceRequestStatus(str, Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Urgency(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    EMERGENCY = "EMERGENCY"


class JobStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


@dataclass
class ServiceRequest:
    """A customer's unscheduled ask for work, preceding quoting."""

    customer_id: str
    category: str
    description: str = ""
    urgency: Urgency = Urgency.NORMAL
    status: ServiceRequestStatus = ServiceRequestStatus.PENDING
    assigned_technician_id: Optional[str] = None
    id: str = field(default_factory=lambda: new_id("SR"))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    history: list[StatusEntry] = field(default_factory=list)


@dataclass
class QuoteEstimate:
    """What a technician submits; ``total_cost`` defaults to materials + labor."""

    estimated_hours: Decimal
    materials_cost: Decimal = Decimal("0")
    labor_cost: Decimal = Decimal("0")
    total_cost: Optional[Decimal] = None

    def resolved_total(self) -> Decimal:
        if self.total_cost is not None:
            return self.total_cost
        return self.materials_cost + self.labor_cost


@dataclass
class Quote:
    service_request_id: str
    technician_id: str
    estimated_hours: Decimal
    materials_cost: Decimal
    labor_cost: Decimal
    total_cost: Decimal
    customer_accepted: bool = False
    withdrawn: bool = False
    id: str = field(default_factory=lambda: new_id("QT"))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_open(self) -> bool:
        return not self.withdrawn and not self.customer_accepted


@dataclass
class Job:
    """Scheduled execution of exactly one accepted quote."""

    service_request_id: str
    quote_id: str
    technician_id: str
    scheduled_date: Optional[date] = None
    status: JobStatus = JobStatus.SCHEDULED
    actual_hours: Optional[Decimal] = None
    customer_rating: Optional[int] = None
    customer_feedback: Optional[str] = None
    rated_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: new_id("JB"))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    history: list[StatusEntry] = field(default_factory=list)
