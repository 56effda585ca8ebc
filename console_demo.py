"""
Offline console demo — walks the scheduling engine end to end in a terminal.

Uses the real coordinator, slot generator, conflict checker and lifecycle
machines over in-memory storage. No database, no billing gateway, no
network calls. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario race
    python console_demo.py --scenario quotes
"""

import argparse
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from decimal import Decimal

from booking_engine.config import settings
from booking_engine.coordinator import SchedulingCoordinator
from booking_engine.errors import SchedulingError, SlotNoLongerAvailable
from booking_engine.integrations.billing import InMemoryBillingProvider
from booking_engine.integrations.metrics import InMemoryMetricsSink
from booking_engine.integrations.notifications import InMemoryDispatcher
from booking_engine.lifecycle.state_machine import BookingLifecycle
from booking_engine.persistence import InMemoryRepository
from booking_engine.schemas.service_request_schema import QuoteEstimate
from booking_engine.sweeper import PendingBookingSweeper
from booking_engine.utils import day_name, day_of_week, format_time

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"


def next_weekday(start: date, weekday: int) -> date:
    """First date strictly after ``start`` falling on ``weekday`` (0 = Sunday)."""
    current = start + timedelta(days=1)
    while day_of_week(current) != weekday:
        current += timedelta(days=1)
    return current


class ConsoleSession:
    """Runs scripted scheduling scenarios against an in-memory engine."""

    SCENARIOS = ("booking", "race", "quotes", "billing", "sweep")

    def __init__(self) -> None:
        self.repo = InMemoryRepository()
        self.billing = InMemoryBillingProvider()
        self.events = InMemoryDispatcher()
        self.metrics = InMemoryMetricsSink()
        self.coordinator = SchedulingCoordinator(
            self.repo, self.billing, dispatcher=self.events, metrics=self.metrics,
        )
        self.monday = next_weekday(self.coordinator.today(), 1)
        self.coordinator.rules.create_rule(
            day_of_week=1, start_time="09:00", end_time="12:00",
            buffer_minutes=15, max_bookings_per_day=3,
        )

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def warn(self, text: str) -> None:
        print(f"{YELLOW}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show_slots(self, label: str) -> None:
        slots = self.coordinator.get_availability(self.monday)
        times = ", ".join(format_time(s.start_time) for s in slots) or "none"
        print(f"{BLUE}[{label}]{RESET} {day_name(day_of_week(self.monday))} "
              f"{self.monday.isoformat()}: {times}")

    def run_scenario(self, scenario: str) -> None:
        handler = getattr(self, f"_scenario_{scenario}", None)
        if handler is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  BOOKING ENGINE - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Service: {settings.service_name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()

        handler()

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{DIM}  Events: {', '.join(self.events.names()) or 'none'}{RESET}")
        print(self.metrics.format_report())

    def run_all(self) -> None:
        for scenario in self.SCENARIOS:
            ConsoleSession().run_scenario(scenario)

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    def _scenario_booking(self) -> None:
        self.show_slots("availability")
        booking = self.coordinator.request_booking("cust-ana", self.monday, "10:15")
        self.say(f"Requested {booking.summary()}")
        self.show_slots("after booking 10:15")

        booking = self.coordinator.confirm_booking(booking.id)
        booking = self.coordinator.check_in(booking.id)
        booking = self.coordinator.check_out(booking.id)
        trace = BookingLifecycle(booking).get_state_trace()
        self.system_log(f"State trace: {' -> '.join(trace)}")

        moved = self.coordinator.request_booking("cust-ben", self.monday, "09:00")
        new = self.coordinator.reschedule_booking(moved.id, self.monday, "11:30")
        self.say(f"Rescheduled {moved.id} -> {new.summary()}")
        self.show_slots("after reschedule")

    def _scenario_race(self) -> None:
        for customer, start in [("cust-1", "09:00"), ("cust-2", "10:15")]:
            self.coordinator.request_booking(customer, self.monday, start)
        self.show_slots("one slot left")

        def attempt(n: int) -> str:
            try:
                booking = self.coordinator.request_booking(f"racer-{n}", self.monday, "11:30")
                return f"racer-{n} won with {booking.id}"
            except SlotNoLongerAvailable as exc:
                return f"racer-{n} lost ({exc.code}, {len(exc.alternatives)} alternative(s))"

        with ThreadPoolExecutor(max_workers=8) as pool:
            for outcome in pool.map(attempt, range(8)):
                self.system_log(outcome)
        self.show_slots("after race")
        alternatives = self.coordinator.find_alternative_dates(self.monday)
        self.say(f"Alternative dates: {', '.join(d.isoformat() for d in alternatives) or 'none'}")

    def _scenario_quotes(self) -> None:
        request = self.coordinator.create_service_request(
            "cust-ana", "plumbing", "Leaking kitchen tap",
        )
        self.say(f"Service request {request.id} opened ({request.category})")
        quote_a = self.coordinator.submit_quote(
            request.id, "tech-alice",
            QuoteEstimate(Decimal("2"), materials_cost=Decimal("40"), labor_cost=Decimal("160")),
        )
        quote_b = self.coordinator.submit_quote(
            request.id, "tech-bob",
            QuoteEstimate(Decimal("3"), materials_cost=Decimal("25"), labor_cost=Decimal("210")),
        )
        self.system_log(f"Quotes: {quote_a.id} ${quote_a.total_cost}, {quote_b.id} ${quote_b.total_cost}")

        job = self.coordinator.accept_quote(quote_a.id, self.monday)
        self.say(f"Accepted {quote_a.id}; job {job.id} scheduled for {job.technician_id}")
        try:
            self.coordinator.accept_quote(quote_b.id)
        except SchedulingError as exc:
            self.warn(f"Second accept refused: {exc.code}")

        self.coordinator.start_job(job.id)
        self.coordinator.complete_job(job.id, Decimal("2.5"))
        self.coordinator.rate_job(job.id, 5, "great")
        try:
            self.coordinator.rate_job(job.id, 3)
        except SchedulingError as exc:
            self.warn(f"Second rating refused: {exc.code}")
        final = self.coordinator.get_service_request(request.id)
        self.system_log(f"Request {final.id} is {final.status.value}")

    def _scenario_billing(self) -> None:
        booking = self.coordinator.request_booking("cust-cara", self.monday, "09:00")
        self.billing.decline(booking.id)
        self.show_slots("pending payment")
        try:
            self.coordinator.confirm_booking(booking.id)
        except SchedulingError as exc:
            self.warn(f"Confirmation failed: {exc.code}")
        cancelled = self.coordinator.get_booking(booking.id)
        self.system_log(
            f"{cancelled.id} is {cancelled.status.value} ({cancelled.cancellation_reason.value})"
        )
        self.show_slots("slot released")

    def _scenario_sweep(self) -> None:
        booking = self.coordinator.request_booking("cust-dan", self.monday, "10:15")
        self.show_slots("unpaid booking")
        window = timedelta(minutes=self.coordinator.config.booking.payment_window_minutes)
        sweeper = PendingBookingSweeper(self.coordinator)
        expired = sweeper.run_once(booking.created_at + window + timedelta(minutes=1))
        for item in expired:
            self.system_log(f"Expired {item.id} ({item.cancellation_reason.value})")
        self.show_slots("after sweep")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline scheduling engine demo")
    parser.add_argument(
        "--scenario",
        choices=list(ConsoleSession.SCENARIOS),
        default=None,
        help="Play one scenario instead of all of them",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run_all()


if __name__ == "__main__":
    main()
