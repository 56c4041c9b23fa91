"""
Domain-specific exception hierarchy for the meeting scheduler.
"""


class SchedulerError(Exception):
    """Base class for all application-level errors."""


class AvailabilityError(SchedulerError):
    """Raised when busy intervals cannot be fetched or parsed."""


class BookingError(SchedulerError):
    """Raised when the booking webhook rejects or cannot receive a booking."""


class SuggestionError(SchedulerError):
    """Raised when the suggestion service fails or returns garbage."""


class ConfigurationError(SchedulerError):
    """Raised when a required setting is missing for the requested operation."""
