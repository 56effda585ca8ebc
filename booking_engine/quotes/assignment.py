"""
Quote and assignment flow, from a customer's service request to a rated job.

Technicians quote on a PENDING service request; the customer accepts one
quote, which assigns the request and spawns a SCHEDULED job. The job then
runs through its own lifecycle, and completion unlocks exactly one rating.

Every mutation touching a service request (its quotes and jobs included)
runs under that request's lock, so two concurrent accepts cannot both win.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from booking_engine.errors import (
    AlreadyAccepted,
    AlreadyRated,
    DuplicateQuote,
    InvalidTransition,
    QuoteWithdrawn,
    RatingNotAllowed,
    ValidationError,
)
from booking_engine.integrations import metrics as m
from booking_engine.integrations.metrics import MetricsSink, NullMetricsSink
from booking_engine.integrations.notifications import (
    EventName,
    LoggingDispatcher,
    NotificationDispatcher,
    emit,
)
from booking_engine.lifecycle.state_machine import (
    Clock,
    JobLifecycle,
    JobTrigger,
    ServiceRequestLifecycle,
    ServiceRequestTrigger,
    utc_now,
)
from booking_engine.locks import KeyedLocks
from booking_engine.persistence import Repository
from booking_engine.schemas.service_request_schema import (
    Job,
    JobStatus,
    Quote,
    QuoteEstimate,
    ServiceRequest,
    ServiceRequestStatus,
    Urgency,
)

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _as_decimal(value: Any, field_name: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field_name} must be a number", field=field_name, value=str(value)) from None
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be finite", field=field_name, value=str(value))
    return result


def _validate_estimate(estimate: QuoteEstimate) -> QuoteEstimate:
    hours = _as_decimal(estimate.estimated_hours, "estimated_hours")
    materials = _as_decimal(estimate.materials_cost, "materials_cost")
    labor = _as_decimal(estimate.labor_cost, "labor_cost")
    total = None if estimate.total_cost is None else _as_decimal(estimate.total_cost, "total_cost")

    if hours <= 0:
        raise ValidationError("Estimated hours must be positive", field="estimated_hours")
    for name, value in [("materials_cost", materials), ("labor_cost", labor), ("total_cost", total)]:
        if value is not None and value < 0:
            raise ValidationError(f"{name} must not be negative", field=name)
    return QuoteEstimate(hours, materials, labor, total)


class QuoteAssignmentService:
    """Owns service requests, quotes and jobs."""

    def __init__(
        self,
        repository: Repository,
        dispatcher: Optional[NotificationDispatcher] = None,
        metrics: Optional[MetricsSink] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._repo = repository
        self._dispatcher = dispatcher or LoggingDispatcher()
        self._metrics = metrics or NullMetricsSink()
        self._clock = clock or utc_now
        self._locks = KeyedLocks()

    # ------------------------------------------------------------------ #
    # Service requests
    # ------------------------------------------------------------------ #

    def create_service_request(
        self,
        customer_id: str,
        category: str,
        description: str = "",
        urgency: Urgency = Urgency.NORMAL,
    ) -> ServiceRequest:
        if not customer_id or not customer_id.strip():
            raise ValidationError("customer_id is required", field="customer_id")
        if not category or not category.strip():
            raise ValidationError("category is required", field="category")

        now = self._clock()
        request = ServiceRequest(
            customer_id=customer_id,
            category=category.strip().lower(),
            description=description,
            urgency=Urgency(urgency),
            created_at=now,
            updated_at=now,
        )
        ServiceRequestLifecycle(request, self._clock)
        stored = self._repo.add_service_request(request)
        logger.info("Service request %s opened by %s (%s)", stored.id, customer_id, stored.category)
        emit(self._dispatcher, EventName.SERVICE_REQUEST_CREATED, stored.id, customer_id=customer_id)
        return stored

    def get_service_request(self, request_id: str) -> ServiceRequest:
        return self._repo.get_service_request(request_id)

    def cancel_service_request(self, request_id: str, reason: Optional[str] = None) -> ServiceRequest:
        """Cancel a request that has no work in progress; open jobs are cancelled too."""
        with self._locks.hold(request_id):
            request = self._repo.get_service_request(request_id)
            ServiceRequestLifecycle(request, self._clock).transition(ServiceRequestTrigger.CANCEL, reason)
            with self._repo.transaction():
                for job in self._repo.list_jobs(request_id):
                    if job.status == JobStatus.SCHEDULED:
                        JobLifecycle(job, self._clock).transition(JobTrigger.CANCEL, reason)
                        self._repo.update_job(job)
                stored = self._repo.update_service_request(request)
        logger.info("Service request %s cancelled", request_id)
        emit(self._dispatcher, EventName.SERVICE_REQUEST_CANCELLED, request_id, reason=reason)
        return stored

    # ------------------------------------------------------------------ #
    # Quotes
    # ------------------------------------------------------------------ #

    def submit_quote(self, service_request_id: str, technician_id: str, estimate: QuoteEstimate) -> Quote:
        """
        Attach a technician's quote to a service request.

        Raises:
            DuplicateQuote: The technician already has a live quote here.
            AlreadyAccepted: The request has already accepted a quote.
            InvalidTransition: The request is no longer open for quotes.
        """
        if not technician_id or not technician_id.strip():
            raise ValidationError("technician_id is required", field="technician_id")
        estimate = _validate_estimate(estimate)

        with self._locks.hold(service_request_id):
            request = self._repo.get_service_request(service_request_id)
            siblings = self._repo.list_quotes(service_request_id)

            accepted = [q for q in siblings if q.customer_accepted]
            if accepted:
                raise AlreadyAccepted(
                    f"Service request {service_request_id} already accepted quote {accepted[0].id}",
                    service_request_id=service_request_id,
                    accepted_quote_id=accepted[0].id,
                )
            if request.status != ServiceRequestStatus.PENDING:
                raise InvalidTransition(
                    "ServiceRequest", current=request.status.value, requested="QUOTED",
                )
            existing = [q for q in siblings if q.technician_id == technician_id and not q.withdrawn]
            if existing:
                raise DuplicateQuote(
                    f"Technician {technician_id} already quoted on {service_request_id}",
                    service_request_id=service_request_id,
                    technician_id=technician_id,
                    quote_id=existing[0].id,
                )

            quote = Quote(
                service_request_id=service_request_id,
                technician_id=technician_id,
                estimated_hours=estimate.estimated_hours,
                materials_cost=estimate.materials_cost,
                labor_cost=estimate.labor_cost,
                total_cost=estimate.resolved_total(),
                created_at=self._clock(),
            )
            stored = self._repo.add_quote(quote)

        logger.info(
            "Quote %s from %s on %s: %s", stored.id, technician_id, service_request_id, stored.total_cost
        )
        self._metrics.increment(m.QUOTE_SUBMITTED, category=request.category)
        emit(
            self._dispatcher, EventName.QUOTE_RECEIVED, stored.id,
            service_request_id=service_request_id,
            customer_id=request.customer_id,
            technician_id=technician_id,
            total_cost=str(stored.total_cost),
        )
        return stored

    def withdraw_quote(self, quote_id: str) -> Quote:
        quote = self._repo.get_quote(quote_id)
        with self._locks.hold(quote.service_request_id):
            quote = self._repo.get_quote(quote_id)
            if quote.customer_accepted:
                raise AlreadyAccepted(f"Quote {quote_id} was accepted and cannot be withdrawn", quote_id=quote_id)
            if quote.withdrawn:
                return quote
            quote.withdrawn = True
            stored = self._repo.update_quote(quote)
        logger.info("Quote %s withdrawn", quote_id)
        emit(self._dispatcher, EventName.QUOTE_WITHDRAWN, quote_id, service_request_id=quote.service_request_id)
        return stored

    def list_quotes(self, service_request_id: str) -> list[Quote]:
        self._repo.get_service_request(service_request_id)
        return self._repo.list_quotes(service_request_id)

    def accept_quote(self, quote_id: str, scheduled_date: Optional[date] = None) -> Job:
        """
        Accept one quote, assign its technician and spawn a SCHEDULED job.

        Raises:
            AlreadyAccepted: This or a sibling quote is already accepted.
            QuoteWithdrawn: The technician withdrew the quote.
        """
        quote = self._repo.get_quote(quote_id)
        request_id = quote.service_request_id

        with self._locks.hold(request_id):
            quote = self._repo.get_quote(quote_id)
            request = self._repo.get_service_request(request_id)

            accepted = [q for q in self._repo.list_quotes(request_id) if q.customer_accepted]
            if accepted:
                raise AlreadyAccepted(
                    f"Service request {request_id} already accepted quote {accepted[0].id}",
                    service_request_id=request_id,
                    accepted_quote_id=accepted[0].id,
                    technician_id=accepted[0].technician_id,
                )
            if quote.withdrawn:
                raise QuoteWithdrawn(f"Quote {quote_id} was withdrawn", quote_id=quote_id)

            ServiceRequestLifecycle(request, self._clock).transition(
                ServiceRequestTrigger.ASSIGN, f"quote {quote_id}"
            )
            request.assigned_technician_id = quote.technician_id
            quote.customer_accepted = True

            now = self._clock()
            job = Job(
                service_request_id=request_id,
                quote_id=quote_id,
                technician_id=quote.technician_id,
                scheduled_date=scheduled_date,
                created_at=now,
                updated_at=now,
            )
            JobLifecycle(job, self._clock)

            with self._repo.transaction():
                self._repo.update_quote(quote)
                self._repo.update_service_request(request)
                stored = self._repo.add_job(job)

        logger.info("Quote %s accepted; job %s scheduled for %s", quote_id, stored.id, quote.technician_id)
        self._metrics.increment(m.QUOTE_ACCEPTED, category=request.category)
        emit(
            self._dispatcher, EventName.QUOTE_ACCEPTED, quote_id,
            service_request_id=request_id,
            job_id=stored.id,
            technician_id=quote.technician_id,
        )
        return stored

    # ------------------------------------------------------------------ #
    # Jobs
    # ------------------------------------------------------------------ #

    def get_job(self, job_id: str) -> Job:
        return self._repo.get_job(job_id)

    def start_job(self, job_id: str) -> Job:
        """Technician check-in: job and its request move to IN_PROGRESS."""
        job, request = self._advance_job(job_id, JobTrigger.START, ServiceRequestTrigger.START_WORK)
        emit(self._dispatcher, EventName.JOB_STARTED, job.id, service_request_id=request.id)
        return job

    def complete_job(self, job_id: str, actual_hours: Any) -> Job:
        """Technician check-out: records hours, completes job and request."""
        hours = _as_decimal(actual_hours, "actual_hours")
        if hours < 0:
            raise ValidationError("Actual hours must not be negative", field="actual_hours")

        job, request = self._advance_job(
            job_id, JobTrigger.COMPLETE, ServiceRequestTrigger.COMPLETE, actual_hours=hours,
        )
        self._metrics.increment(m.JOB_COMPLETED, category=request.category)
        emit(
            self._dispatcher, EventName.JOB_COMPLETED, job.id,
            service_request_id=request.id,
            customer_id=request.customer_id,
            actual_hours=str(hours),
        )
        return job

    def cancel_job(self, job_id: str, reason: Optional[str] = None) -> Job:
        job, request = self._advance_job(job_id, JobTrigger.CANCEL, ServiceRequestTrigger.CANCEL, note=reason)
        emit(self._dispatcher, EventName.JOB_CANCELLED, job.id, service_request_id=request.id, reason=reason)
        return job

    def rate_job(self, job_id: str, stars: int, feedback: Optional[str] = None) -> Job:
        """
        Record the customer's one rating for a completed job.

        Raises:
            ValidationError: ``stars`` outside 1-5.
            RatingNotAllowed: The job has not completed.
            AlreadyRated: A rating was already submitted.
        """
        if isinstance(stars, bool) or not isinstance(stars, int) or not MIN_RATING <= stars <= MAX_RATING:
            raise ValidationError(
                f"Rating must be a whole number from {MIN_RATING} to {MAX_RATING}",
                field="stars", value=stars,
            )

        job = self._repo.get_job(job_id)
        with self._locks.hold(job.service_request_id):
            job = self._repo.get_job(job_id)
            if job.customer_rating is not None:
                raise AlreadyRated(f"Job {job_id} has already been rated", job_id=job_id)
            if job.status != JobStatus.COMPLETED:
                raise RatingNotAllowed(
                    f"Job {job_id} is {job.status.value}; only completed jobs can be rated",
                    job_id=job_id, status=job.status.value,
                )
            job.customer_rating = stars
            job.customer_feedback = feedback
            job.rated_at = self._clock()
            stored = self._repo.update_job(job)

        logger.info("Job %s rated %d star(s)", job_id, stars)
        self._metrics.increment(m.JOB_RATED, stars=str(stars))
        emit(self._dispatcher, EventName.JOB_RATED, job_id, stars=stars, feedback=feedback)
        return stored

    def _advance_job(
        self,
        job_id: str,
        job_trigger: JobTrigger,
        request_trigger: ServiceRequestTrigger,
        note: Optional[str] = None,
        actual_hours: Optional[Decimal] = None,
    ) -> tuple[Job, ServiceRequest]:
        job = self._repo.get_job(job_id)
        with self._locks.hold(job.service_request_id):
            job = self._repo.get_job(job_id)
            request = self._repo.get_service_request(job.service_request_id)

            JobLifecycle(job, self._clock).transition(job_trigger, note)
            ServiceRequestLifecycle(request, self._clock).transition(request_trigger, note)
            if actual_hours is not None:
                job.actual_hours = actual_hours

            with self._repo.transaction():
                stored_job = self._repo.update_job(job)
                stored_request = self._repo.update_service_request(request)

        logger.info("Job %s is now %s", job_id, stored_job.status.value)
        return stored_job, stored_request
