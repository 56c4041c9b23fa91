"""
Core business logic for generating bookable meeting slots.

Pure domain logic without any external dependencies (no API calls,
no clock reads, no I/O). The current instant is always passed in.
"""

from typing import Iterator, List

from pendulum import DateTime

from .models import CandidateSlot, GenerationRequest, TimeRange, WorkingWindow


class SlotGenerator:
    """
    Generates candidate meeting start times for a single day.

    Algorithm:
    1. Enumerate start times across the working window at a fixed step
    2. Drop starts before ``now`` and slots running past the window end
    3. Drop slots that overlap a busy interval on the same day
    4. Return survivors in ascending order
    """

    def __init__(self, working_window: WorkingWindow | None = None):
        self.working_window = working_window or WorkingWindow()

    def generate(self, request: GenerationRequest) -> List[CandidateSlot]:
        """
        Generate the ordered list of bookable slots for the requested day.

        Args:
            request: Day, busy intervals, duration, step and evaluation instant

        Returns:
            List of CandidateSlot objects ordered by start time
        """
        window = self.working_window.for_day(request.date)

        # Busy data may cover more than the requested day
        todays_busy = [
            busy for busy in request.busy_intervals
            if busy.is_on_day(request.date)
        ]

        slots: List[CandidateSlot] = []

        for start in self._enumerate_starts(window, request.step_minutes):
            slot = CandidateSlot.starting_at(start, request.duration_minutes)

            if slot.start < request.now or slot.end > window.end:
                continue

            candidate = slot.as_range()
            if any(candidate.overlaps(busy) for busy in todays_busy):
                continue

            slots.append(slot)

        return slots

    @staticmethod
    def _enumerate_starts(window: TimeRange, step_minutes: int) -> Iterator[DateTime]:
        """Yield every instant in [window.start, window.end] spaced by the step."""
        current = window.start

        while current <= window.end:
            yield current
            current = current.add(minutes=step_minutes)


def generate_slots(
    request: GenerationRequest,
    working_window: WorkingWindow | None = None
) -> List[CandidateSlot]:
    """Convenience wrapper around ``SlotGenerator.generate``."""
    return SlotGenerator(working_window).generate(request)
