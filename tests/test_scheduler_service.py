"""
Tests for the SchedulerService orchestration layer.
"""

import asyncio
from typing import List

import pendulum
import pytest

from meetscheduler.domain.booking import BookingRequest, BookingResult, MeetingType
from meetscheduler.domain.exceptions import (
    AvailabilityError,
    BookingError,
    ConfigurationError,
    SuggestionError,
)
from meetscheduler.domain.models import TimeRange
from meetscheduler.domain.suggestions import SuggestedTime, SuggestionRequest
from meetscheduler.services.scheduler import SchedulerService

TZ = "Europe/Madrid"


class StubAvailabilityClient:
    """Minimal stub matching AvailabilityClientProtocol."""

    def __init__(self, busy: List[TimeRange] | None = None, error: Exception | None = None):
        self._busy = busy or []
        self._error = error
        self.calls: List[str] = []

    async def get_busy_intervals(self, date):
        self.calls.append(date.to_date_string())
        if self._error:
            raise self._error
        return self._busy


class StubBookingClient:
    """Booking stub that fails a configurable number of times first."""

    def __init__(self, failures: int = 0, gate: asyncio.Event | None = None):
        self._failures = failures
        self._gate = gate
        self.submitted: List[BookingRequest] = []

    async def submit_booking(self, booking):
        if self._gate is not None:
            await self._gate.wait()
        self.submitted.append(booking)
        if self._failures:
            self._failures -= 1
            raise BookingError("Error del servidor: Bad Gateway")
        return BookingResult(
            success=True,
            message="¡Reunión agendada con éxito!",
            meeting_link="https://meet.google.com/abc-defg-hij",
            booked_name=booking.name,
            booked_start=booking.start,
        )


class StubSuggestionClient:
    def __init__(self, suggestions=None, error: Exception | None = None):
        self._suggestions = suggestions or []
        self._error = error

    async def suggest_times(self, request):
        if self._error:
            raise self._error
        return self._suggestions


def _booking_data(**overrides):
    data = {
        "name": "Ana",
        "last_name": "Ruiz",
        "email": "ana.ruiz@acme.io",
        "start": pendulum.parse("2024-11-25 10:00", tz=TZ),
        "meeting_type": MeetingType.WORK,
    }
    data.update(overrides)
    return data


def _suggestion_request() -> SuggestionRequest:
    return SuggestionRequest(
        user_timezone="America/New_York",
        host_timezone="Europe/London",
        available_days=["2024-11-26"],
    )


def test_available_slots_uses_fetched_busy_intervals():
    busy = [
        TimeRange(
            start=pendulum.parse("2024-11-25 12:00", tz=TZ),
            end=pendulum.parse("2024-11-25 13:00", tz=TZ),
        )
    ]
    client = StubAvailabilityClient(busy=busy)
    service = SchedulerService(availability_client=client, timezone=TZ)

    slots = asyncio.run(
        service.available_slots(
            date=pendulum.parse("2024-11-25", tz=TZ),
            duration_minutes=30,
            now=pendulum.parse("2024-11-25 00:00", tz=TZ),
        )
    )

    assert client.calls == ["2024-11-25"]
    assert len(slots) == 16
    assert "12:00" not in [slot.label() for slot in slots]


def test_availability_failure_fails_open():
    """An unreachable availability webhook means a free day, not an error."""
    client = StubAvailabilityClient(error=AvailabilityError("timeout"))
    service = SchedulerService(availability_client=client, timezone=TZ)

    slots = asyncio.run(
        service.available_slots(
            date=pendulum.parse("2024-11-25", tz=TZ),
            duration_minutes=30,
            now=pendulum.parse("2024-11-25 00:00", tz=TZ),
        )
    )

    assert len(slots) == 18


def test_missing_availability_client_is_a_configuration_error():
    service = SchedulerService(timezone=TZ)

    with pytest.raises(ConfigurationError):
        asyncio.run(service.fetch_busy_intervals(pendulum.parse("2024-11-25", tz=TZ)))


def test_book_success_returns_meeting_link():
    booking_client = StubBookingClient()
    service = SchedulerService(
        availability_client=StubAvailabilityClient(),
        booking_client=booking_client,
    )

    result = asyncio.run(service.book(_booking_data()))

    assert result.success
    assert result.meeting_link == "https://meet.google.com/abc-defg-hij"
    assert booking_client.submitted[0].duration_minutes == 60


def test_book_failure_is_reported_and_can_be_retried():
    booking_client = StubBookingClient(failures=1)
    service = SchedulerService(booking_client=booking_client)

    first = asyncio.run(service.book(_booking_data()))
    second = asyncio.run(service.book(_booking_data()))

    assert not first.success
    assert first.message == "Error del servidor: Bad Gateway"
    assert second.success
    assert len(booking_client.submitted) == 2


def test_book_rejects_invalid_data_without_submitting():
    booking_client = StubBookingClient()
    service = SchedulerService(booking_client=booking_client)

    result = asyncio.run(service.book(_booking_data(name="A", email="not-an-email")))

    assert not result.success
    assert result.message == "Datos inválidos."
    assert booking_client.submitted == []


def test_book_without_booking_client():
    service = SchedulerService()

    result = asyncio.run(service.book(_booking_data()))

    assert not result.success


def test_second_booking_while_one_is_pending_is_rejected():
    async def scenario():
        gate = asyncio.Event()
        booking_client = StubBookingClient(gate=gate)
        service = SchedulerService(booking_client=booking_client)

        async def release():
            await asyncio.sleep(0)
            gate.set()

        first, second, _ = await asyncio.gather(
            service.book(_booking_data()),
            service.book(_booking_data()),
            release(),
        )
        return first, second, booking_client

    first, second, booking_client = asyncio.run(scenario())

    assert first.success
    assert not second.success
    assert second.message == "Ya hay una reserva en curso."
    assert len(booking_client.submitted) == 1


def test_suggest_returns_client_suggestions():
    suggestions = [SuggestedTime(start="2024-11-26T10:00:00", end="2024-11-26T10:30:00")]
    service = SchedulerService(suggestion_client=StubSuggestionClient(suggestions=suggestions))

    assert asyncio.run(service.suggest(_suggestion_request())) == suggestions


def test_suggest_failure_yields_empty_list():
    service = SchedulerService(
        suggestion_client=StubSuggestionClient(error=SuggestionError("model unavailable"))
    )

    assert asyncio.run(service.suggest(_suggestion_request())) == []


def test_suggest_without_client_yields_empty_list():
    assert asyncio.run(SchedulerService().suggest(_suggestion_request())) == []
