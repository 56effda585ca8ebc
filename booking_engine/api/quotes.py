"""Service request, quote and job endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from booking_engine.api.dependencies import get_coordinator
from booking_engine.api.schemas import (
    AcceptQuoteRequest,
    CancelJobRequest,
    CompleteJobRequest,
    JobOut,
    QuoteCreateRequest,
    QuoteOut,
    RateJobRequest,
    ServiceRequestCreateRequest,
    ServiceRequestOut,
)
from booking_engine.coordinator import SchedulingCoordinator
from booking_engine.schemas.service_request_schema import QuoteEstimate

router = APIRouter(tags=["service-requests"])


# ============ SERVICE REQUESTS ============

@router.post("/service-requests", response_model=ServiceRequestOut, status_code=status.HTTP_201_CREATED)
def create_service_request(
    body: ServiceRequestCreateRequest,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    request = coordinator.create_service_request(
        body.customer_id, body.category, body.description, body.urgency,
    )
    return ServiceRequestOut.from_request(request)


@router.get("/service-requests/{request_id}", response_model=ServiceRequestOut)
def get_service_request(request_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return ServiceRequestOut.from_request(coordinator.get_service_request(request_id))


@router.post("/service-requests/{request_id}/cancel", response_model=ServiceRequestOut)
def cancel_service_request(
    request_id: str,
    body: Optional[CancelJobRequest] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    reason = body.reason if body else None
    return ServiceRequestOut.from_request(coordinator.cancel_service_request(request_id, reason))


@router.post(
    "/service-requests/{request_id}/quotes",
    response_model=QuoteOut,
    status_code=status.HTTP_201_CREATED,
)
def submit_quote(
    request_id: str,
    body: QuoteCreateRequest,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    estimate = QuoteEstimate(
        estimated_hours=body.estimated_hours,
        materials_cost=body.materials_cost,
        labor_cost=body.labor_cost,
        total_cost=body.total_cost,
    )
    return QuoteOut.from_quote(coordinator.submit_quote(request_id, body.technician_id, estimate))


@router.get("/service-requests/{request_id}/quotes", response_model=list[QuoteOut])
def list_quotes(request_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return [QuoteOut.from_quote(q) for q in coordinator.list_quotes(request_id)]


# ============ QUOTES ============

@router.post("/quotes/{quote_id}/accept", response_model=JobOut, status_code=status.HTTP_201_CREATED)
def accept_quote(
    quote_id: str,
    body: Optional[AcceptQuoteRequest] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Accept a quote; returns the SCHEDULED job it spawned."""
    scheduled_date = body.scheduled_date if body else None
    return JobOut.from_job(coordinator.accept_quote(quote_id, scheduled_date))


@router.post("/quotes/{quote_id}/withdraw", response_model=QuoteOut)
def withdraw_quote(quote_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return QuoteOut.from_quote(coordinator.withdraw_quote(quote_id))


# ============ JOBS ============

@router.get("/jobs/{job_id}", response_model=JobOut)
def get_job(job_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return JobOut.from_job(coordinator.get_job(job_id))


@router.post("/jobs/{job_id}/start", response_model=JobOut)
def start_job(job_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return JobOut.from_job(coordinator.start_job(job_id))


@router.post("/jobs/{job_id}/complete", response_model=JobOut)
def complete_job(
    job_id: str,
    body: CompleteJobRequest,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    return JobOut.from_job(coordinator.complete_job(job_id, body.actual_hours))


@router.post("/jobs/{job_id}/cancel", response_model=JobOut)
def cancel_job(
    job_id: str,
    body: Optional[CancelJobRequest] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    reason = body.reason if body else None
    return JobOut.from_job(coordinator.cancel_job(job_id, reason))


@router.post("/jobs/{job_id}/rate", status_code=status.HTTP_204_NO_CONTENT)
def rate_job(
    job_id: str,
    body: RateJobRequest,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    coordinator.rate_job(job_id, body.stars, body.feedback)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
