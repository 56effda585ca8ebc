"""
Typed error taxonomy for the scheduling engine.

Every failure surfaced to callers is a ``SchedulingError`` subclass with a
stable ``code`` and an HTTP-equivalent status, so presentation layers can
render specific recovery guidance instead of a generic failure.
"""

from typing import Any, Optional


class SchedulingError(Exception):
    """Base class for all domain errors."""

    code: str = "SCHEDULING_ERROR"
    http_status: int = 400

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": self.message, "details": self.details}


class ValidationError(SchedulingError):
    """Malformed input, rejected before it reaches the scheduling path."""

    code = "VALIDATION_ERROR"
    http_status = 422


class NotFound(SchedulingError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found", entity=entity, id=entity_id)


class ConflictError(SchedulingError):
    """State conflicts. Not retried automatically."""

    code = "CONFLICT"
    http_status = 409


class SlotNoLongerAvailable(ConflictError):
    """The slot was claimed or capped between query and commit.

    Recoverable: re-query availability and retry with one of
    ``alternatives`` or another slot.
    """

    code = "SLOT_NO_LONGER_AVAILABLE"

    def __init__(self, message: str, alternatives: Optional[list] = None, **details: Any) -> None:
        super().__init__(message, **details)
        self.alternatives = list(alternatives or [])
        self.details["alternatives"] = [slot.to_dict() for slot in self.alternatives]


class CustomerDoubleBooked(ConflictError):
    code = "CUSTOMER_DOUBLE_BOOKED"


class InvalidTransition(ConflictError):
    """An illegal state change was requested."""

    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot move {entity} from {current} to {requested}",
            entity=entity,
            current=current,
            requested=requested,
        )
        self.current = current
        self.requested = requested


class DuplicateQuote(ConflictError):
    code = "DUPLICATE_QUOTE"


class AlreadyAccepted(ConflictError):
    code = "ALREADY_ACCEPTED"


class QuoteWithdrawn(ConflictError):
    code = "QUOTE_WITHDRAWN"


class AlreadyRated(ConflictError):
    code = "ALREADY_RATED"


class RatingNotAllowed(ConflictError):
    code = "RATING_NOT_ALLOWED"


class BillingConfirmationFailed(SchedulingError):
    """Payment could not be confirmed; the PENDING booking has been cancelled."""

    code = "BILLING_CONFIRMATION_FAILED"
    http_status = 402
