from fastapi import Request

from booking_engine.coordinator import SchedulingCoordinator


def get_coordinator(request: Request) -> SchedulingCoordinator:
    """The coordinator bound to this application instance."""
    return request.app.state.coordinator
