"""Request and response models for the HTTP surface."""

import datetime as dt
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from booking_engine.schemas.availability_schema import AvailabilityRule, Slot
from booking_engine.schemas.booking_schema import Actor, Booking, CancellationReason, StatusEntry
from booking_engine.schemas.service_request_schema import Job, Quote, ServiceRequest, Urgency
from booking_engine.utils import day_name, format_time, minutes_to_time


# ============ AVAILABILITY ============

class SlotOut(BaseModel):
    """Single free slot."""
    date: str
    start_time: str
    end_time: str
    duration_minutes: int
    service_type: Optional[str] = None

    @classmethod
    def from_slot(cls, slot: Slot) -> "SlotOut":
        return cls(**slot.to_dict())


class AlternativeDatesOut(BaseModel):
    original_date: str
    alternatives: list[str] = Field(default_factory=list)


# ============ BOOKINGS ============

class BookingCreateRequest(BaseModel):
    """Claim a slot returned by the availability endpoint."""
    customer_id: str = Field(..., min_length=1)
    date: dt.date
    start_time: str = Field(..., description="HH:MM")
    service_type: Optional[str] = None
    duration_minutes: Optional[int] = Field(None, gt=0)


class CancelBookingRequest(BaseModel):
    reason: CancellationReason = CancellationReason.CUSTOMER_REQUEST
    actor: Actor = Actor.CUSTOMER
    note: Optional[str] = None


class RescheduleBookingRequest(BaseModel):
    new_date: dt.date
    new_start_time: str = Field(..., description="HH:MM")


class StatusEntryOut(BaseModel):
    status: str
    entered_at: dt.datetime
    trigger: Optional[str] = None
    note: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: StatusEntry) -> "StatusEntryOut":
        return cls(status=entry.status, entered_at=entry.entered_at, trigger=entry.trigger, note=entry.note)


class BookingOut(BaseModel):
    """Booking as seen by clients."""
    id: str
    customer_id: str
    service_type: Optional[str] = None
    date: str
    start_time: str
    end_time: str
    duration_minutes: int
    buffer_minutes: int
    status: str
    rule_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    rescheduled_from: Optional[str] = None
    rescheduled_to: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime
    history: list[StatusEntryOut] = Field(default_factory=list)

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingOut":
        return cls(
            id=booking.id,
            customer_id=booking.customer_id,
            service_type=booking.service_type,
            date=booking.date.isoformat(),
            start_time=format_time(booking.start_time),
            end_time=format_time(minutes_to_time(booking.end_minutes)),
            duration_minutes=booking.duration_minutes,
            buffer_minutes=booking.buffer_minutes,
            status=booking.status.value,
            rule_id=booking.rule_id,
            cancellation_reason=booking.cancellation_reason.value if booking.cancellation_reason else None,
            cancelled_by=booking.cancelled_by.value if booking.cancelled_by else None,
            rescheduled_from=booking.rescheduled_from,
            rescheduled_to=booking.rescheduled_to,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            history=[StatusEntryOut.from_entry(e) for e in booking.history],
        )


class BookingStatsOut(BaseModel):
    total: int
    by_status: dict[str, int]
    completion_rate: float
    cancellation_rate: float


# ============ SERVICE REQUESTS, QUOTES, JOBS ============

class ServiceRequestCreateRequest(BaseModel):
    customer_id: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    description: str = ""
    urgency: Urgency = Urgency.NORMAL


class ServiceRequestOut(BaseModel):
    id: str
    customer_id: str
    category: str
    description: str
    urgency: str
    status: str
    assigned_technician_id: Optional[str] = None
    created_at: dt.datetime

    @classmethod
    def from_request(cls, request: ServiceRequest) -> "ServiceRequestOut":
        return cls(
            id=request.id,
            customer_id=request.customer_id,
            category=request.category,
            description=request.description,
            urgency=request.urgency.value,
            status=request.status.value,
            assigned_technician_id=request.assigned_technician_id,
            created_at=request.created_at,
        )


class QuoteCreateRequest(BaseModel):
    """A technician's estimate; total defaults to materials + labor."""
    technician_id: str = Field(..., min_length=1)
    estimated_hours: Decimal
    materials_cost: Decimal = Decimal("0")
    labor_cost: Decimal = Decimal("0")
    total_cost: Optional[Decimal] = None


class QuoteOut(BaseModel):
    id: str
    service_request_id: str
    technician_id: str
    estimated_hours: Decimal
    materials_cost: Decimal
    labor_cost: Decimal
    total_cost: Decimal
    customer_accepted: bool
    withdrawn: bool
    created_at: dt.datetime

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteOut":
        return cls(
            id=quote.id,
            service_request_id=quote.service_request_id,
            technician_id=quote.technician_id,
            estimated_hours=quote.estimated_hours,
            materials_cost=quote.materials_cost,
            labor_cost=quote.labor_cost,
            total_cost=quote.total_cost,
            customer_accepted=quote.customer_accepted,
            withdrawn=quote.withdrawn,
            created_at=quote.created_at,
        )


class AcceptQuoteRequest(BaseModel):
    scheduled_date: Optional[dt.date] = None


class CompleteJobRequest(BaseModel):
    actual_hours: Decimal


class CancelJobRequest(BaseModel):
    reason: Optional[str] = None


class RateJobRequest(BaseModel):
    stars: int
    feedback: Optional[str] = None


class JobOut(BaseModel):
    id: str
    service_request_id: str
    quote_id: str
    technician_id: str
    scheduled_date: Optional[str] = None
    status: str
    actual_hours: Optional[Decimal] = None
    customer_rating: Optional[int] = None
    customer_feedback: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_job(cls, job: Job) -> "JobOut":
        return cls(
            id=job.id,
            service_request_id=job.service_request_id,
            quote_id=job.quote_id,
            technician_id=job.technician_id,
            scheduled_date=job.scheduled_date.isoformat() if job.scheduled_date else None,
            status=job.status.value,
            actual_hours=job.actual_hours,
            customer_rating=job.customer_rating,
            customer_feedback=job.customer_feedback,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )


# ============ ADMIN: AVAILABILITY RULES ============

class RuleCreateRequest(BaseModel):
    """Omitted numeric fields take configured defaults; an explicit
    ``max_bookings_per_day: null`` means unbounded."""
    day_of_week: int = Field(..., description="0 = Sunday ... 6 = Saturday")
    start_time: str
    end_time: str
    is_available: bool = True
    buffer_minutes: Optional[int] = None
    max_bookings_per_day: Optional[int] = None
    service_type: Optional[str] = None
    slot_duration_minutes: Optional[int] = None


class RuleUpdateRequest(BaseModel):
    day_of_week: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_available: Optional[bool] = None
    buffer_minutes: Optional[int] = None
    max_bookings_per_day: Optional[int] = None
    service_type: Optional[str] = None
    slot_duration_minutes: Optional[int] = None


class RuleUpsertRequest(RuleUpdateRequest):
    id: Optional[str] = None


class RuleOut(BaseModel):
    id: str
    day_of_week: int
    day_name: str
    start_time: str
    end_time: str
    is_available: bool
    buffer_minutes: int
    max_bookings_per_day: Optional[int] = None
    service_type: Optional[str] = None
    slot_duration_minutes: int
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_rule(cls, rule: AvailabilityRule) -> "RuleOut":
        return cls(
            id=rule.id,
            day_of_week=rule.day_of_week,
            day_name=day_name(rule.day_of_week),
            start_time=format_time(rule.start_time),
            end_time=format_time(rule.end_time),
            is_available=rule.is_available,
            buffer_minutes=rule.buffer_minutes,
            max_bookings_per_day=rule.max_bookings_per_day,
            service_type=rule.service_type,
            slot_duration_minutes=rule.slot_duration_minutes,
            created_at=rule.created_at,
            updated_at=rule.updated_at,
        )


def provided_fields(model: BaseModel) -> dict[str, Any]:
    """Only the fields the client actually sent."""
    return model.model_dump(exclude_unset=True)
