"""
Pending-payment sweep.

A PENDING booking whose billing confirmation never arrives would hold its
slot forever. The sweeper periodically asks the coordinator to cancel
every PENDING booking older than the payment window (reason
PAYMENT_TIMEOUT). One re-armed timer serves all bookings.
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from booking_engine.coordinator import SchedulingCoordinator
from booking_engine.schemas.booking_schema import Booking

logger = logging.getLogger(__name__)


class PendingBookingSweeper:
    """Periodic expiry of unpaid PENDING bookings."""

    def __init__(self, coordinator: SchedulingCoordinator, interval_seconds: Optional[float] = None) -> None:
        self._coordinator = coordinator
        self._interval = (
            interval_seconds if interval_seconds is not None
            else coordinator.config.booking.sweep_interval_seconds
        )
        if self._interval <= 0:
            raise ValueError(f"Sweep interval must be positive, got {self._interval}")
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._running = False

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._running

    def run_once(self, now: Optional[datetime] = None) -> list[Booking]:
        """Cancel every PENDING booking past its payment window. Returns them."""
        return self._coordinator.expire_pending_bookings(now)

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._arm()
        logger.info("Pending-payment sweep started (every %ss)", self._interval)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        logger.info("Pending-payment sweep stopped")

    def _arm(self) -> None:
        self._timer = threading.Timer(self._interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self) -> None:
        try:
            self.run_once()
        except Exception:
            # Keep sweeping; the next tick retries whatever failed.
            logger.exception("Pending-payment sweep failed")
        with self._lock:
            if self._running:
                self._arm()
