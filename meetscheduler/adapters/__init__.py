"""
Adapters layer - External integrations (availability, booking and suggestion webhooks).
"""

from .availability_client import AvailabilityClient
from .booking_client import BookingClient
from .mock_availability_client import MockAvailabilityClient
from .suggestion_client import SuggestionClient

__all__ = ["AvailabilityClient", "BookingClient", "MockAvailabilityClient", "SuggestionClient"]
