"""
Client for the booking webhook.
"""

import asyncio
import secrets
from typing import Any, Dict

import requests

from ..domain.booking import BookingRequest, BookingResult
from ..domain.exceptions import BookingError

WEBHOOK_DATETIME_FORMAT = "YYYY-MM-DD HH:mm"


class BookingClient:
    """
    Submits confirmed bookings to the booking webhook.

    The webhook creates the calendar event and may answer with a
    ``meetingLink``; when it does not, a placeholder Meet link is returned.
    """

    def __init__(self, url: str, meeting_label: str = "Reunión trabajo", timeout: float = 30):
        self.url = url
        self.meeting_label = meeting_label
        self.timeout = timeout

    def build_payload(self, booking: BookingRequest) -> Dict[str, Any]:
        """Build the webhook payload for a booking. Notes are only sent when given."""
        payload = {
            "nombre": booking.name,
            "apellido": booking.last_name,
            "Tipo": self.meeting_label,
            "duracion": booking.duration_minutes,
            "inicio": booking.start.format(WEBHOOK_DATETIME_FORMAT),
            "final": booking.end.format(WEBHOOK_DATETIME_FORMAT),
            "email": booking.email,
        }
        if booking.notes:
            payload["notas"] = booking.notes

        return payload

    async def submit_booking(self, booking: BookingRequest) -> BookingResult:
        return await asyncio.to_thread(self.book, booking)

    def book(self, booking: BookingRequest) -> BookingResult:
        """
        Submit a booking.

        Raises:
            BookingError: With a user-facing message if the webhook fails
        """
        try:
            response = requests.post(
                self.url,
                json=self.build_payload(booking),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise BookingError("No se pudo agendar la reunión.") from e

        if not response.ok:
            raise BookingError(f"Error del servidor: {response.reason}")

        try:
            data = response.json()
        except ValueError:
            data = {}

        meeting_link = None
        if isinstance(data, dict):
            meeting_link = data.get("meetingLink")

        return BookingResult(
            success=True,
            message="¡Reunión agendada con éxito!",
            meeting_link=meeting_link or self._placeholder_link(),
            booked_name=booking.name,
            booked_start=booking.start,
        )

    @staticmethod
    def _placeholder_link() -> str:
        return f"https://meet.google.com/mock-{secrets.token_hex(4)[:7]}"
