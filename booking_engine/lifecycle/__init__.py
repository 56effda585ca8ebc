from booking_engine.lifecycle.state_machine import (
    BookingLifecycle,
    BookingTrigger,
    JobLifecycle,
    JobTrigger,
    LifecycleStateMachine,
    ServiceRequestLifecycle,
    ServiceRequestTrigger,
    Transition,
)

__all__ = [
    "LifecycleStateMachine",
    "Transition",
    "BookingLifecycle",
    "BookingTrigger",
    "JobLifecycle",
    "JobTrigger",
    "ServiceRequestLifecycle",
    "ServiceRequestTrigger",
]
