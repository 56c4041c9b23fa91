"""
File-backed availability client for trying the scheduler without the webhook.
"""

import json
from pathlib import Path
from typing import List

from pendulum import DateTime

from ..domain.exceptions import AvailabilityError
from ..domain.models import TimeRange
from .availability_client import parse_busy_items

DEFAULT_MOCK_DATA = Path(__file__).parent / "mock_busy_data.json"


class MockAvailabilityClient:
    """
    Mock client that serves busy intervals from a JSON file.

    The file uses the same shape as the webhook response, so recorded
    responses can be replayed as-is.
    """

    def __init__(self, timezone: str, data_file: Path | None = None):
        self.timezone = timezone
        self.data_file = data_file or DEFAULT_MOCK_DATA
        self._load_busy_data()

    def _load_busy_data(self):
        """Load mock busy data from JSON file."""
        if not self.data_file.exists():
            # Fallback to an open calendar if the file doesn't exist
            self.busy_items = []
            return

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                self.busy_items = json.load(f)
        except json.JSONDecodeError as e:
            raise AvailabilityError(f"Invalid mock data in {self.data_file}: {e}") from e

    async def get_busy_intervals(self, date: DateTime) -> List[TimeRange]:
        return self.fetch_busy_intervals(date)

    def fetch_busy_intervals(self, date: DateTime) -> List[TimeRange]:
        """Return the mock busy intervals that overlap the given day."""
        day = TimeRange(start=date.start_of("day"), end=date.end_of("day"))

        return [
            busy for busy in parse_busy_items(self.busy_items, self.timezone)
            if busy.overlaps(day)
        ]
