"""Configuration classes for the scheduling system."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, Field, field_validator

WEEKDAY_ABBREVIATIONS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DEFAULT_WORK_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]


class DurationMode(str, Enum):
    """How task durations map onto calendar days."""

    WORKING = "working"  # Count only work days that are not holidays
    ELAPSED = "elapsed"  # Count every calendar day


class CalendarConfig(BaseModel):
    """Calendar settings that turn simulation units into dates."""

    start_date: date
    work_days: list[str] = Field(default_factory=lambda: list(DEFAULT_WORK_DAYS))
    holidays: list[date] = Field(default_factory=list)
    duration_mode: DurationMode = DurationMode.WORKING

    @field_validator("work_days")
    @classmethod
    def validate_work_days(cls, v: list[str]) -> list[str]:
        """Normalize weekday abbreviations and reject unknown or empty sets."""
        if not v:
            raise ValueError("work_days must contain at least one weekday")
        normalized: list[str] = []
        for day in v:
            abbrev = day.strip()[:3].capitalize()
            if abbrev not in WEEKDAY_ABBREVIATIONS:
                raise ValueError(
                    f"Invalid work day '{day}'. Valid values: {', '.join(WEEKDAY_ABBREVIATIONS)}"
                )
            if abbrev not in normalized:
                normalized.append(abbrev)
        return normalized
