"""
FastAPI application factory.

Every ``SchedulingError`` is rendered as ``{"error", "message", "details"}``
with its own HTTP status, so clients can branch on the stable ``error``
code (e.g. re-query availability on ``SLOT_NO_LONGER_AVAILABLE``).
"""

import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from booking_engine.api import admin, availability, bookings, quotes
from booking_engine.config import AppConfig, settings
from booking_engine.coordinator import SchedulingCoordinator
from booking_engine.errors import SchedulingError
from booking_engine.integrations.billing import InMemoryBillingProvider
from booking_engine.logging_context import get_request_logger, reset_request_id, set_request_id
from booking_engine.persistence import InMemoryRepository
from booking_engine.sweeper import PendingBookingSweeper

logger = get_request_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def create_app(
    coordinator: Optional[SchedulingCoordinator] = None,
    config: Optional[AppConfig] = None,
    run_sweeper: bool = False,
) -> FastAPI:
    """
    Build the HTTP application around a coordinator.

    Args:
        coordinator: Pre-wired coordinator; defaults to in-memory storage
            and an always-approving billing provider.
        config: Settings for the API surface.
        run_sweeper: Start the pending-payment sweep for the app's lifetime.
    """
    config = config or settings
    coordinator = coordinator or SchedulingCoordinator(
        InMemoryRepository(), InMemoryBillingProvider(), config=config,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = PendingBookingSweeper(coordinator) if run_sweeper else None
        logger.info("Starting %s", config.service_name)
        if sweeper:
            sweeper.start()
        yield
        if sweeper:
            sweeper.stop()
        logger.info("Shutting down %s", config.service_name)

    app = FastAPI(
        title=config.api.title,
        description="Availability, booking lifecycle and quote assignment for household services",
        version="1.0.0",
        openapi_url=f"{config.api.prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.coordinator = coordinator

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError):
        if exc.http_status >= 500:
            logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        else:
            logger.info("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=jsonable_encoder(exc.to_dict()))

    for router in (availability.router, bookings.router, quotes.router, admin.router):
        app.include_router(router, prefix=config.api.prefix)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": config.service_name}

    return app
