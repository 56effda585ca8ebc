from booking_engine.quotes.assignment import QuoteAssignmentService

__all__ = ["QuoteAssignmentService"]
