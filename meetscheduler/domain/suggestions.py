"""
Models and prompt construction for AI-assisted meeting time suggestions.
"""

from typing import List

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, Field, field_validator, model_validator

from .models import CandidateSlot

SUGGESTION_DATETIME_FORMAT = "YYYY-MM-DD[T]HH:mm:ss"
DAY_FORMAT = "YYYY-MM-DD"

PROMPT_TEMPLATE = """You are a scheduling assistant helping to find the best meeting times for a user and a host.

Consider the following information:
- User's time zone: {user_timezone}
- Host's time zone: {host_timezone}
- Common break times: {breaks}
- Typical meeting duration: {duration} minutes
- Available days: {days}

Suggest a list of optimal meeting times, taking into account time zone differences, common breaks, and the typical meeting duration. Return the start and end times in ISO format (YYYY-MM-DDTHH:mm:ss). Adhere to available days.
Format the output as a JSON array of objects, each with a start and end property.
"""


def validate_timezone_name(value: str) -> str:
    try:
        pendulum.timezone(value)
    except Exception as exc:
        raise ValueError(f"Unknown timezone: '{value}'") from exc
    return value


class BreakTime(BaseModel):
    """A recurring daily break, as HH:mm clock strings."""
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, value: str) -> str:
        """Validate a HH:mm clock string."""
        try:
            clock = pendulum.from_format(value, "HH:mm")
        except ValueError as exc:
            raise ValueError(f"Expected HH:mm, got '{value}'") from exc
        return clock.format("HH:mm")

    @model_validator(mode="after")
    def validate_order(self) -> "BreakTime":
        # Zero-padded HH:mm strings sort chronologically
        if self.end <= self.start:
            raise ValueError(f"Break end {self.end} must be after start {self.start}")
        return self

    def __str__(self) -> str:
        return f"{self.start} - {self.end}"


class SuggestionRequest(BaseModel):
    """Scheduling context sent to the suggestion service."""
    user_timezone: str
    host_timezone: str
    common_breaks: List[BreakTime] = Field(default_factory=list)
    typical_meeting_duration: int = Field(default=30, ge=15)
    available_days: List[str] = Field(default_factory=list)

    @field_validator("user_timezone", "host_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return validate_timezone_name(value)

    @field_validator("available_days")
    @classmethod
    def validate_days(cls, value: List[str]) -> List[str]:
        """Ensure every day is an ISO calendar date."""
        for day in value:
            try:
                pendulum.from_format(day, DAY_FORMAT)
            except ValueError as exc:
                raise ValueError(f"Expected YYYY-MM-DD, got '{day}'") from exc
        return value

    @classmethod
    def for_upcoming_days(
        cls,
        *,
        user_timezone: str,
        host_timezone: str,
        duration_minutes: int,
        today: DateTime,
        days_ahead: int = 3,
        common_breaks: List[BreakTime] | None = None,
    ) -> "SuggestionRequest":
        """
        Build a request covering the ``days_ahead`` days following ``today``.

        Defaults to a single lunch break from 12:00 to 13:00.
        """
        if common_breaks is None:
            common_breaks = [BreakTime(start="12:00", end="13:00")]

        days = [
            today.add(days=offset).format(DAY_FORMAT)
            for offset in range(1, days_ahead + 1)
        ]

        return cls(
            user_timezone=user_timezone,
            host_timezone=host_timezone,
            common_breaks=common_breaks,
            typical_meeting_duration=duration_minutes,
            available_days=days,
        )


class SuggestedTime(BaseModel):
    """A single suggestion as returned by the service."""
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_datetime(cls, value: str) -> str:
        try:
            pendulum.from_format(value, SUGGESTION_DATETIME_FORMAT)
        except ValueError as exc:
            raise ValueError(f"Expected YYYY-MM-DDTHH:mm:ss, got '{value}'") from exc
        return value

    def to_slot(self, timezone: str) -> CandidateSlot:
        """Interpret the suggestion as local time in ``timezone``."""
        start = pendulum.from_format(self.start, SUGGESTION_DATETIME_FORMAT, tz=timezone)
        end = pendulum.from_format(self.end, SUGGESTION_DATETIME_FORMAT, tz=timezone)
        return CandidateSlot(start=start, end=end)


def render_prompt(request: SuggestionRequest) -> str:
    """Render the scheduling-assistant prompt for a suggestion request."""
    return PROMPT_TEMPLATE.format(
        user_timezone=request.user_timezone,
        host_timezone=request.host_timezone,
        breaks=", ".join(str(b) for b in request.common_breaks),
        duration=request.typical_meeting_duration,
        days=", ".join(request.available_days),
    )
