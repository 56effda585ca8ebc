"""Booking endpoints: claim, confirm, check in/out, cancel, reschedule."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from booking_engine.api.dependencies import get_coordinator
from booking_engine.api.schemas import (
    BookingCreateRequest,
    BookingOut,
    CancelBookingRequest,
    RescheduleBookingRequest,
)
from booking_engine.coordinator import SchedulingCoordinator

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    body: BookingCreateRequest,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """
    Claim a slot as a PENDING booking.

    Responds 409 ``SLOT_NO_LONGER_AVAILABLE`` with ``details.alternatives``
    when another request claimed the slot first.
    """
    booking = coordinator.request_booking(
        body.customer_id, body.date, body.start_time, body.service_type, body.duration_minutes,
    )
    return BookingOut.from_booking(booking)


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return BookingOut.from_booking(coordinator.get_booking(booking_id))


@router.get("", response_model=list[BookingOut])
def list_customer_upcoming(
    customer_id: str,
    limit: int = 5,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """A customer's upcoming PENDING and CONFIRMED bookings."""
    return [BookingOut.from_booking(b) for b in coordinator.upcoming_bookings(customer_id, limit)]


@router.post("/{booking_id}/confirm", response_model=BookingOut)
def confirm_booking(booking_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    """Confirm payment with the billing provider. 402 cancels the booking."""
    return BookingOut.from_booking(coordinator.confirm_booking(booking_id))


@router.post("/{booking_id}/check-in", response_model=BookingOut)
def check_in(booking_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return BookingOut.from_booking(coordinator.check_in(booking_id))


@router.post("/{booking_id}/check-out", response_model=BookingOut)
def check_out(booking_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return BookingOut.from_booking(coordinator.check_out(booking_id))


@router.post("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(
    booking_id: str,
    body: Optional[CancelBookingRequest] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    body = body or CancelBookingRequest()
    booking = coordinator.cancel_booking(booking_id, body.reason, body.actor, body.note)
    return BookingOut.from_booking(booking)


@router.post("/{booking_id}/reschedule", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def reschedule_booking(
    booking_id: str,
    body: RescheduleBookingRequest,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Returns the new PENDING booking; the original becomes RESCHEDULED."""
    booking = coordinator.reschedule_booking(booking_id, body.new_date, body.new_start_time)
    return BookingOut.from_booking(booking)
