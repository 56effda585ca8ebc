"""Availability endpoints. Read-only; never block on the commit path."""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, Query

from booking_engine.api.dependencies import get_coordinator
from booking_engine.api.schemas import AlternativeDatesOut, SlotOut
from booking_engine.coordinator import SchedulingCoordinator

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("", response_model=list[SlotOut])
def get_availability(
    date: dt.date = Query(..., description="Calendar date, YYYY-MM-DD"),
    service_type: Optional[str] = None,
    duration_minutes: Optional[int] = Query(None, gt=0),
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Free slots for one date."""
    slots = coordinator.get_availability(date, service_type, duration_minutes)
    return [SlotOut.from_slot(s) for s in slots]


@router.get("/range", response_model=dict[str, list[SlotOut]])
def get_availability_for_range(
    start_date: dt.date,
    end_date: dt.date,
    service_type: Optional[str] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    by_date = coordinator.get_availability_for_range(start_date, end_date, service_type)
    return {
        day.isoformat(): [SlotOut.from_slot(s) for s in slots]
        for day, slots in by_date.items()
    }


@router.get("/next", response_model=Optional[SlotOut])
def get_next_available_slot(
    from_date: Optional[dt.date] = None,
    service_type: Optional[str] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Earliest free slot on or after ``from_date`` (default: today)."""
    slot = coordinator.find_next_available_slot(from_date, service_type)
    return SlotOut.from_slot(slot) if slot else None


@router.get("/alternative-dates", response_model=AlternativeDatesOut)
def get_alternative_dates(
    date: dt.date,
    service_type: Optional[str] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    found = coordinator.find_alternative_dates(date, service_type)
    return AlternativeDatesOut(
        original_date=date.isoformat(), alternatives=[d.isoformat() for d in found],
    )
