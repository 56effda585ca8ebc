from booking_engine.scheduling.conflict_checker import AvailabilityVerdict, ConflictChecker
from booking_engine.scheduling.rule_store import AvailabilityRuleStore
from booking_engine.scheduling.slot_generator import SlotGenerator

__all__ = [
    "AvailabilityRuleStore",
    "SlotGenerator",
    "ConflictChecker",
    "AvailabilityVerdict",
]
