"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import WorkingWindow
from .domain.suggestions import BreakTime, validate_timezone_name


class DefaultsConfig(BaseModel):
    """Default settings for slot generation."""
    duration_minutes: int = 30
    step_minutes: int = 30
    start_hour: int = 9
    end_hour: int = 18

    @field_validator("duration_minutes", "step_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure durations are positive."""
        if value <= 0:
            raise ValueError("duration_minutes and step_minutes must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def get_start_time(self) -> time:
        return time(hour=self.start_hour, minute=0)

    def get_end_time(self) -> time:
        return time(hour=self.end_hour, minute=0)

    def working_window(self) -> WorkingWindow:
        return WorkingWindow(start_time=self.get_start_time(), end_time=self.get_end_time())


class WebhookConfig(BaseModel):
    """Endpoints of the external availability and booking webhooks."""
    availability_url: str = ""
    booking_url: str = ""
    meeting_label: str = "Reunión trabajo"
    timeout_seconds: float = 30

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value


class SuggestionConfig(BaseModel):
    """Language-model endpoint used for smart suggestions."""
    api_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    model: str = "gpt-4o-mini"
    timeout_seconds: float = 60
    days_ahead: int = Field(default=3, ge=1)
    common_breaks: List[BreakTime] = Field(
        default_factory=lambda: [BreakTime(start="12:00", end="13:00")]
    )
    timezones: List[str] = Field(
        default_factory=lambda: [
            "America/New_York",
            "America/Chicago",
            "America/Denver",
            "America/Los_Angeles",
            "Europe/London",
            "Europe/Paris",
            "Asia/Tokyo",
        ]
    )

    @field_validator("timezones")
    @classmethod
    def validate_timezones(cls, value: List[str]) -> List[str]:
        """Timezones offered to attendees must be known IANA names."""
        if not value:
            raise ValueError("timezones must list at least one timezone")
        for name in value:
            validate_timezone_name(name)
        return value

    def timezone_choices(self, host_timezone: str) -> List[str]:
        """Configured attendee timezones, plus the host timezone if missing."""
        if host_timezone in self.timezones:
            return list(self.timezones)
        return [host_timezone] + self.timezones


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Madrid"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    webhooks: WebhookConfig = Field(default_factory=WebhookConfig)
    suggestions: SuggestionConfig = Field(default_factory=SuggestionConfig)
    mock_data_file: Optional[Path] = None

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        return validate_timezone_name(value)

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        config = cls(**data)

        # Relative mock data paths are resolved against the config file
        if config.mock_data_file and not config.mock_data_file.is_absolute():
            config.mock_data_file = config_path.parent / config.mock_data_file

        return config


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of meetscheduler/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
