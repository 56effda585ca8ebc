"""
Finite state machines for booking, job and service-request lifecycles.

Every lifecycle is an explicit transition table keyed by (state, trigger).
Anything not in the table is rejected with ``InvalidTransition`` naming the
current and requested state, so no status can be skipped and terminal
records stay terminal.

Usage:
    lifecycle = BookingLifecycle(booking)
    lifecycle.transition(BookingTrigger.CONFIRM)
    assert booking.status == BookingStatus.CONFIRMED
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, ClassVar, Optional

from booking_engine.errors import InvalidTransition
from booking_engine.schemas.booking_schema import BookingStatus, StatusEntry
from booking_engine.schemas.service_request_schema import JobStatus, ServiceRequestStatus

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingTrigger(str, Enum):
    """Events that move a booking."""
    CONFIRM = "confirm"
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"


class JobTrigger(str, Enum):
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


class ServiceRequestTrigger(str, Enum):
    ASSIGN = "assign"
    START_WORK = "start_work"
    COMPLETE = "complete"
    CANCEL = "cancel"


@dataclass(frozen=True)
class Transition:
    """A single valid state transition."""
    from_state: Enum
    to_state: Enum
    trigger: Enum


class LifecycleStateMachine:
    """
    Table-driven state machine operating on a record's ``status``.

    The machine mutates the record it wraps (status, ``updated_at`` and
    ``history``); persisting the record is the caller's responsibility.
    """

    ENTITY: ClassVar[str] = "record"
    TRANSITIONS: ClassVar[list[Transition]] = []
    TERMINAL_STATES: ClassVar[frozenset] = frozenset()

    def __init__(self, record: Any, clock: Optional[Clock] = None) -> None:
        self._record = record
        self._clock = clock or utc_now
        if not record.history:
            record.history.append(StatusEntry(state_value(record.status), self._clock()))

    @property
    def record(self) -> Any:
        return self._record

    @property
    def current_state(self) -> Enum:
        return self._record.status

    @classmethod
    def target_of(cls, trigger: Enum) -> Enum:
        for t in cls.TRANSITIONS:
            if t.trigger == trigger:
                return t.to_state
        raise ValueError(f"Unknown {cls.ENTITY} trigger: {trigger!r}")

    def can_transition(self, trigger: Enum) -> bool:
        return any(
            t.from_state == self.current_state and t.trigger == trigger for t in self.TRANSITIONS
        )

    def transition(self, trigger: Enum, note: Optional[str] = None) -> Enum:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.
            note: Free text stored on the history entry (e.g. a reason code).

        Returns:
            The new state.

        Raises:
            InvalidTransition: If no valid transition exists from the current state.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self.current_state and t.trigger == trigger:
                old_state = self.current_state
                now = self._clock()
                self._record.status = t.to_state
                self._record.updated_at = now
                self._record.history.append(StatusEntry(
                    status=state_value(t.to_state),
                    entered_at=now,
                    trigger=state_value(trigger),
                    note=note,
                ))
                logger.debug(
                    "%s %s: %s -> %s (trigger: %s)",
                    self.ENTITY, self._record.id,
                    state_value(old_state), state_value(t.to_state), state_value(trigger),
                )
                return t.to_state

        raise InvalidTransition(
            self.ENTITY,
            current=state_value(self.current_state),
            requested=state_value(self.target_of(trigger)),
        )

    def advance_to(self, target: Enum, note: Optional[str] = None) -> Enum:
        """Transition by naming the desired state instead of the trigger."""
        for t in self.TRANSITIONS:
            if t.from_state == self.current_state and t.to_state == target:
                return self.transition(t.trigger, note)
        raise InvalidTransition(
            self.ENTITY, current=state_value(self.current_state), requested=state_value(target),
        )

    def get_valid_triggers(self) -> list[Enum]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self.current_state]

    def get_history(self) -> list[StatusEntry]:
        return list(self._record.history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.status for entry in self._record.history]

    def is_terminal(self) -> bool:
        return self.current_state in self.TERMINAL_STATES


def state_value(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


class BookingLifecycle(LifecycleStateMachine):
    """PENDING -> CONFIRMED -> IN_PROGRESS -> COMPLETED, with exits to
    CANCELLED or RESCHEDULED before work starts."""

    ENTITY = "Booking"
    TRANSITIONS = [
        Transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingTrigger.CONFIRM),
        Transition(BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS, BookingTrigger.CHECK_IN),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, BookingTrigger.CHECK_OUT),

        Transition(BookingStatus.PENDING, BookingStatus.CANCELLED, BookingTrigger.CANCEL),
        Transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingTrigger.CANCEL),

        Transition(BookingStatus.PENDING, BookingStatus.RESCHEDULED, BookingTrigger.RESCHEDULE),
        Transition(BookingStatus.CONFIRMED, BookingStatus.RESCHEDULED, BookingTrigger.RESCHEDULE),
    ]
    TERMINAL_STATES = frozenset({
        BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.RESCHEDULED,
    })


class JobLifecycle(LifecycleStateMachine):
    ENTITY = "Job"
    TRANSITIONS = [
        Transition(JobStatus.SCHEDULED, JobStatus.IN_PROGRESS, JobTrigger.START),
        Transition(JobStatus.IN_PROGRESS, JobStatus.COMPLETED, JobTrigger.COMPLETE),
        Transition(JobStatus.SCHEDULED, JobStatus.CANCELLED, JobTrigger.CANCEL),
    ]
    TERMINAL_STATES = frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED})


class ServiceRequestLifecycle(LifecycleStateMachine):
    ENTITY = "ServiceRequest"
    TRANSITIONS = [
        Transition(ServiceRequestStatus.PENDING, ServiceRequestStatus.ASSIGNED,
                   ServiceRequestTrigger.ASSIGN),
        Transition(ServiceRequestStatus.ASSIGNED, ServiceRequestStatus.IN_PROGRESS,
                   ServiceRequestTrigger.START_WORK),
        Transition(ServiceRequestStatus.IN_PROGRESS, ServiceRequestStatus.COMPLETED,
                   ServiceRequestTrigger.COMPLETE),
        Transition(ServiceRequestStatus.PENDING, ServiceRequestStatus.CANCELLED,
                   ServiceRequestTrigger.CANCEL),
        Transition(ServiceRequestStatus.ASSIGNED, ServiceRequestStatus.CANCELLED,
                   ServiceRequestTrigger.CANCEL),
    ]
    TERMINAL_STATES = frozenset({ServiceRequestStatus.COMPLETED, ServiceRequestStatus.CANCELLED})
