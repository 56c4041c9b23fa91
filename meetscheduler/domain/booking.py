"""
Booking request and result models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, EmailStr, Field, field_validator


class MeetingType(str, Enum):
    """Meeting kinds offered to attendees, valued by their length in minutes."""
    SHORT = "30"
    WORK = "60"

    @property
    def duration_minutes(self) -> int:
        return int(self.value)

    @property
    def label(self) -> str:
        return "Reunión corta" if self is MeetingType.SHORT else "Reunión de trabajo"

    @classmethod
    def from_minutes(cls, minutes: int) -> "MeetingType":
        """Look up a meeting type by duration, e.g. ``30`` -> ``SHORT``."""
        return cls(str(minutes))


class BookingRequest(BaseModel):
    """Attendee form data for a single booking."""
    name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    email: EmailStr
    start: datetime
    meeting_type: MeetingType = MeetingType.SHORT
    notes: Optional[str] = None

    @field_validator("name", "last_name")
    @classmethod
    def strip_names(cls, value: str) -> str:
        """Reject names that are only whitespace padding."""
        value = value.strip()
        if len(value) < 2:
            raise ValueError("must contain at least 2 characters")
        return value

    @field_validator("start")
    @classmethod
    def to_pendulum(cls, value: datetime) -> DateTime:
        return pendulum.instance(value)

    @property
    def duration_minutes(self) -> int:
        return self.meeting_type.duration_minutes

    @property
    def end(self) -> DateTime:
        return self.start.add(minutes=self.duration_minutes)


class BookingResult(BaseModel):
    """Outcome of a booking attempt, shown to the attendee."""
    success: bool
    message: str
    meeting_link: Optional[str] = None
    booked_name: Optional[str] = None
    booked_start: Optional[datetime] = None

    @classmethod
    def failure(cls, message: str) -> "BookingResult":
        return cls(success=False, message=message)
