"""
Billing provider interface.

The core never captures payments. It only asks the provider, once per
booking, whether the booking is payable before confirming it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class BillingProvider(ABC):
    """Opaque payment collaborator."""

    @abstractmethod
    def confirm_payment(self, booking_id: str) -> bool:
        """Return True when the booking is paid for (or authorized)."""


class InMemoryBillingProvider(BillingProvider):
    """Scriptable provider for tests and the console demo.

    Every booking is payable unless listed in ``declined``.
    """

    def __init__(self, declined: Optional[Iterable[str]] = None, approve_by_default: bool = True) -> None:
        self.declined: set[str] = set(declined or [])
        self.approve_by_default = approve_by_default
        self.calls: list[str] = []

    def decline(self, booking_id: str) -> None:
        self.declined.add(booking_id)

    def confirm_payment(self, booking_id: str) -> bool:
        self.calls.append(booking_id)
        approved = self.approve_by_default and booking_id not in self.declined
        logger.info("Payment confirmation for %s: %s", booking_id, "approved" if approved else "declined")
        return approved
