"""
Application service for the booking flow.

The service coordinates the availability, booking and suggestion adapters
and delegates the slot calculation to the domain-level ``SlotGenerator``.
It also owns the degradation rules: an unreachable availability webhook
means an open calendar, a failed booking becomes a failed result the
attendee can retry, and failed suggestions become an empty list.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol

import pendulum
from pendulum import DateTime
from pydantic import ValidationError
from rich.console import Console

from ..domain.booking import BookingRequest, BookingResult
from ..domain.exceptions import (
    AvailabilityError,
    BookingError,
    ConfigurationError,
    SuggestionError,
)
from ..domain.models import CandidateSlot, GenerationRequest, TimeRange
from ..domain.slot_generator import SlotGenerator
from ..domain.suggestions import SuggestedTime, SuggestionRequest

console = Console()


class AvailabilityClientProtocol(Protocol):
    """Protocol describing the availability lookup needed by the service."""

    async def get_busy_intervals(self, date: DateTime) -> List[TimeRange]:
        """Return the host's busy intervals for the day containing ``date``."""


class BookingClientProtocol(Protocol):
    """Protocol describing the booking submission needed by the service."""

    async def submit_booking(self, booking: BookingRequest) -> BookingResult:
        """Submit a booking, raising ``BookingError`` on failure."""


class SuggestionClientProtocol(Protocol):
    """Protocol describing the suggestion service needed by the service."""

    async def suggest_times(self, request: SuggestionRequest) -> List[SuggestedTime]:
        """Return suggested meeting times, raising ``SuggestionError`` on failure."""


class SchedulerService:
    """
    Orchestrates busy-time retrieval, slot generation, booking and suggestions.

    Dependency inversion toward protocols makes it easy to plug in the real
    webhook adapters or stubs in tests.
    """

    def __init__(
        self,
        availability_client: AvailabilityClientProtocol | None = None,
        booking_client: BookingClientProtocol | None = None,
        suggestion_client: SuggestionClientProtocol | None = None,
        slot_generator: SlotGenerator | None = None,
        timezone: str = "Europe/Madrid",
    ) -> None:
        self._availability_client = availability_client
        self._booking_client = booking_client
        self._suggestion_client = suggestion_client
        self._slot_generator = slot_generator or SlotGenerator()
        self.timezone = timezone
        self._booking_in_flight = False

    async def fetch_busy_intervals(self, date: DateTime) -> List[TimeRange]:
        """
        Fetch the host's busy intervals for a day.

        Fails open: if the lookup errors the day is treated as free.

        Raises:
            ConfigurationError: If no availability client is configured
        """
        if self._availability_client is None:
            raise ConfigurationError("webhooks.availability_url is not configured (or use --mock).")

        try:
            return await self._availability_client.get_busy_intervals(date)
        except AvailabilityError as e:
            console.print(f"[yellow]Warning: {e}. Treating the day as free.[/yellow]")
            return []

    async def available_slots(
        self,
        *,
        date: DateTime,
        duration_minutes: int,
        now: DateTime | None = None,
        step_minutes: int = 30,
    ) -> List[CandidateSlot]:
        """Fetch busy data for ``date`` and compute the bookable slots."""
        busy_intervals = await self.fetch_busy_intervals(date)

        return self.calculate_slots(
            date=date,
            busy_intervals=busy_intervals,
            duration_minutes=duration_minutes,
            now=now or pendulum.now(self.timezone),
            step_minutes=step_minutes,
        )

    def calculate_slots(
        self,
        *,
        date: DateTime,
        busy_intervals: List[TimeRange],
        duration_minutes: int,
        now: DateTime,
        step_minutes: int = 30,
    ) -> List[CandidateSlot]:
        """Calculate bookable slots from already fetched busy data."""
        request = GenerationRequest(
            date=date,
            now=now,
            duration_minutes=duration_minutes,
            step_minutes=step_minutes,
            busy_intervals=busy_intervals,
        )
        return self._slot_generator.generate(request)

    async def book(self, booking_data: BookingRequest | Dict[str, Any]) -> BookingResult:
        """
        Validate and submit a booking.

        Never raises for invalid data or webhook failures; the returned
        result carries the message to show and the attendee may retry.
        """
        if self._booking_client is None:
            return BookingResult.failure("La reserva no está configurada.")

        if self._booking_in_flight:
            return BookingResult.failure("Ya hay una reserva en curso.")

        try:
            booking = (
                booking_data if isinstance(booking_data, BookingRequest)
                else BookingRequest.model_validate(booking_data)
            )
        except ValidationError:
            return BookingResult.failure("Datos inválidos.")

        self._booking_in_flight = True
        try:
            return await self._booking_client.submit_booking(booking)
        except BookingError as e:
            console.print(f"[yellow]Warning: Booking failed: {e.__cause__ or e}[/yellow]")
            return BookingResult.failure(str(e))
        finally:
            self._booking_in_flight = False

    async def suggest(self, request: SuggestionRequest) -> List[SuggestedTime]:
        """Ask for suggested meeting times; any failure yields an empty list."""
        if self._suggestion_client is None:
            return []

        try:
            return await self._suggestion_client.suggest_times(request)
        except SuggestionError as e:
            console.print(f"[yellow]Warning: Error fetching smart suggestions: {e}[/yellow]")
            return []
