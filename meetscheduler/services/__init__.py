"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .scheduler import (
    AvailabilityClientProtocol,
    BookingClientProtocol,
    SchedulerService,
    SuggestionClientProtocol,
)

__all__ = [
    "AvailabilityClientProtocol",
    "BookingClientProtocol",
    "SchedulerService",
    "SuggestionClientProtocol",
]
