"""
Booking engine entry point.

Serves the HTTP API with uvicorn, or runs the offline console demo.

Usage:
    HTTP API:     python main.py serve
    Console mode: python main.py demo
"""

import logging
import sys

from booking_engine.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the HTTP API with the pending-payment sweep enabled."""
    import uvicorn

    from booking_engine.api import create_app

    app = create_app(run_sweeper=True)
    logger.info("Serving on %s:%d", settings.api.host, settings.api.port)
    uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_level=settings.log_level.lower())


def _run_console_mode() -> None:
    """Start the offline console demo (no external services required)."""
    from console_demo import ConsoleSession

    ConsoleSession().run_all()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "demo":
        _run_console_mode()
    else:
        _run_server()
