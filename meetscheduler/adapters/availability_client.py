"""
Client for the host's availability webhook.
"""

import asyncio
from typing import Any, List

import pendulum
import requests
from pendulum import DateTime
from rich.console import Console

from ..domain.exceptions import AvailabilityError
from ..domain.models import TimeRange

console = Console()


def parse_busy_items(items: Any, timezone: str) -> List[TimeRange]:
    """
    Parse webhook busy items into TimeRange objects.

    Item format:
    [
        {"inicio": "2024-11-25T11:00:00.000Z", "fin": "2024-11-25T12:00:00.000Z"}
    ]

    Anything other than a list yields no busy intervals; malformed items
    are skipped with a warning.
    """
    if not isinstance(items, list):
        return []

    busy_ranges: List[TimeRange] = []

    for item in items:
        try:
            start = pendulum.parse(item["inicio"]).in_timezone(timezone)
            end = pendulum.parse(item["fin"]).in_timezone(timezone)
            busy_ranges.append(TimeRange(start=start, end=end))

        except (KeyError, TypeError, ValueError, AttributeError) as e:
            console.print(
                f"[yellow]Warning: Could not parse busy interval {item!r}: {e}[/yellow]"
            )
            continue

    return busy_ranges


class AvailabilityClient:
    """
    Fetches the host's busy intervals for a day from the availability webhook.

    The webhook takes the day's bounds as ``start``/``end`` query parameters
    and answers with a JSON array of ``{"inicio", "fin"}`` objects.
    """

    def __init__(self, url: str, timezone: str, timeout: float = 30):
        """
        Initialize the availability client.

        Args:
            url: Availability webhook URL
            timezone: IANA timezone the busy intervals are converted into
            timeout: Request timeout in seconds
        """
        self.url = url
        self.timezone = timezone
        self.timeout = timeout

    async def get_busy_intervals(self, date: DateTime) -> List[TimeRange]:
        """Return busy intervals for the calendar day containing ``date``."""
        return await asyncio.to_thread(self.fetch_busy_intervals, date)

    def fetch_busy_intervals(self, date: DateTime) -> List[TimeRange]:
        """
        Blocking variant of ``get_busy_intervals``.

        Raises:
            AvailabilityError: If the webhook is unreachable or answers with an error
        """
        day_start = date.start_of("day")
        day_end = date.end_of("day")

        params = {
            "start": day_start.in_timezone("UTC").to_iso8601_string(),
            "end": day_end.in_timezone("UTC").to_iso8601_string(),
        }

        try:
            response = requests.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as e:
            raise AvailabilityError(f"Failed to fetch availability: {e}") from e

        except ValueError as e:
            raise AvailabilityError(f"Availability webhook returned invalid JSON: {e}") from e

        return parse_busy_items(data, self.timezone)
