from booking_engine.schemas.availability_schema import AvailabilityRule, Slot
from booking_engine.schemas.booking_schema import (
    Actor,
    Booking,
    BookingStatus,
    CancellationReason,
    StatusEntry,
)
from booking_engine.schemas.service_request_schema import (
    Job,
    JobStatus,
    Quote,
    QuoteEstimate,
    ServiceRequest,
    ServiceRequestStatus,
    Urgency,
)

__all__ = [
    "AvailabilityRule", "Slot",
    "Actor", "Booking", "BookingStatus", "CancellationReason", "StatusEntry",
    "Job", "JobStatus", "Quote", "QuoteEstimate",
    "ServiceRequest", "ServiceRequestStatus", "Urgency",
]
