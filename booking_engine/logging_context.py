"""Request-ID logging context for tracing a request across modules.

Provides a request_id-aware logger that attaches a correlation ID to every
log message, making it easy to follow a single booking request from the
HTTP layer through the coordinator and into the lifecycle machines.

Usage:
    from booking_engine.logging_context import get_request_logger, set_request_id

    set_request_id("REQ-abc123")
    logger = get_request_logger(__name__)
    logger.info("Claiming slot")  # → [REQ-abc123] Claiming slot
"""

import logging
from contextvars import ContextVar, Token

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


def set_request_id(request_id: str) -> Token:
    """Set the correlation ID for the current context."""
    return _request_id.set(request_id)


def reset_request_id(token: Token) -> None:
    """Restore the correlation ID that was active before ``set_request_id``."""
    _request_id.reset(token)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def install_request_id_filter() -> None:
    """Attach the filter to every root handler.

    Logger-level filters only see records logged on that exact logger, so
    handlers need their own copy for records propagated from child modules.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
