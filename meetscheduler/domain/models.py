"""
Domain models for busy intervals and bookable slots.
"""

from dataclasses import dataclass, field
from datetime import time
from typing import List

from pendulum import DateTime


WEEKDAY_NAMES = {
    0: "lunes",
    1: "martes",
    2: "miércoles",
    3: "jueves",
    4: "viernes",
    5: "sábado",
    6: "domingo",
}


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable, half-open time range [start, end).

    Used for the host's busy intervals. Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "TimeRange") -> bool:
        """
        Check if this range overlaps with another.

        Boundaries are exclusive: ranges that only touch at an endpoint
        do not overlap, so meetings can be booked back-to-back.
        """
        return self.start < other.end and self.end > other.start

    def is_on_day(self, day: DateTime) -> bool:
        """
        Check whether the range starts on the same calendar day as ``day``.

        The start is read in ``day``'s timezone, so UTC busy data is judged
        by the local calendar.
        """
        start = self.start if day.tzinfo is None else self.start.in_timezone(day.tzinfo)
        return start.date() == day.date()

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"


@dataclass(frozen=True)
class CandidateSlot:
    """
    A bookable meeting slot produced by the slot generator.
    """
    start: DateTime
    end: DateTime

    @classmethod
    def starting_at(cls, start: DateTime, duration_minutes: int) -> "CandidateSlot":
        return cls(start=start, end=start.add(minutes=duration_minutes))

    def as_range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def label(self) -> str:
        """Short clock label shown in slot pickers."""
        return self.start.format("HH:mm")

    def format_display(self) -> str:
        """
        Format the slot for display.
        Format: weekday, DD.MM.YYYY | HH:MM – HH:MM (N min.)
        """
        weekday = WEEKDAY_NAMES[self.start.day_of_week]
        date_str = self.start.format("DD.MM.YYYY")
        time_str = f"{self.start.format('HH:mm')} – {self.end.format('HH:mm')}"

        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes()} min.)"


@dataclass
class WorkingWindow:
    """
    Bounds of the bookable business day, as local clock times.
    """
    start_time: time = time(9, 0)
    end_time: time = time(18, 0)

    def __post_init__(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"Working window end {self.end_time} must be after start {self.start_time}"
            )

    def for_day(self, date: DateTime) -> TimeRange:
        """Get the window as a concrete time range on the given date."""
        start = date.set(
            hour=self.start_time.hour,
            minute=self.start_time.minute,
            second=0,
            microsecond=0
        )
        end = date.set(
            hour=self.end_time.hour,
            minute=self.end_time.minute,
            second=0,
            microsecond=0
        )

        return TimeRange(start=start, end=end)


@dataclass
class GenerationRequest:
    """
    Input for a single slot generation call.

    ``now`` is the instant used to exclude slots that already started.
    """
    date: DateTime
    now: DateTime
    duration_minutes: int = 30
    step_minutes: int = 30
    busy_intervals: List[TimeRange] = field(default_factory=list)

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"duration_minutes must be positive, got {self.duration_minutes}")
        if self.step_minutes <= 0:
            raise ValueError(f"step_minutes must be positive, got {self.step_minutes}")
