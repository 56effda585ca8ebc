"""Administrator endpoints: availability rules and booking statistics."""

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, status

from booking_engine.api.dependencies import get_coordinator
from booking_engine.api.schemas import (
    BookingStatsOut,
    RuleCreateRequest,
    RuleOut,
    RuleUpdateRequest,
    RuleUpsertRequest,
    provided_fields,
)
from booking_engine.coordinator import SchedulingCoordinator

router = APIRouter(prefix="/admin", tags=["admin"])

# Fields where an explicit null is meaningful rather than "leave unchanged".
_NULLABLE_RULE_FIELDS = frozenset({"max_bookings_per_day", "service_type"})


def _rule_changes(body: RuleUpdateRequest) -> dict:
    return {
        name: value for name, value in provided_fields(body).items()
        if value is not None or name in _NULLABLE_RULE_FIELDS
    }


@router.get("/availability-rules", response_model=list[RuleOut])
def list_rules(
    day_of_week: Optional[int] = None,
    is_available: Optional[bool] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    rules = coordinator.rules.list_rules(day_of_week=day_of_week, is_available=is_available)
    return [RuleOut.from_rule(r) for r in rules]


@router.post("/availability-rules", response_model=RuleOut, status_code=status.HTTP_201_CREATED)
def create_rule(body: RuleCreateRequest, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    data = provided_fields(body)
    # Unset numeric fields fall back to configured defaults inside the store.
    for name in ("buffer_minutes", "slot_duration_minutes"):
        if data.get(name) is None:
            data.pop(name, None)
    return RuleOut.from_rule(coordinator.rules.create_rule(**data))


@router.put("/availability-rules", response_model=list[RuleOut])
def bulk_upsert_rules(
    body: list[RuleUpsertRequest],
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    """Create rules without an ``id``, update the ones that carry one."""
    rules = coordinator.rules.bulk_upsert(_rule_changes(item) for item in body)
    return [RuleOut.from_rule(r) for r in rules]


@router.patch("/availability-rules/{rule_id}", response_model=RuleOut)
def update_rule(
    rule_id: str,
    body: RuleUpdateRequest,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    return RuleOut.from_rule(coordinator.rules.update_rule(rule_id, **_rule_changes(body)))


@router.post("/availability-rules/{rule_id}/deactivate", response_model=RuleOut)
def deactivate_rule(rule_id: str, coordinator: SchedulingCoordinator = Depends(get_coordinator)):
    return RuleOut.from_rule(coordinator.rules.deactivate_rule(rule_id))


@router.get("/bookings/stats", response_model=BookingStatsOut)
def booking_stats(
    start_date: Optional[dt.date] = None,
    end_date: Optional[dt.date] = None,
    service_type: Optional[str] = None,
    coordinator: SchedulingCoordinator = Depends(get_coordinator),
):
    return coordinator.booking_stats(start_date, end_date, service_type)
