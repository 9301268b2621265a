"""Pydantic schemas for YAML project files."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import DEFAULT_GROUP_NAME, UNBOUNDED, Bandwidth
from .scheduler.config import CalendarConfig

_UNBOUNDED_SPELLINGS = {"unbounded", "unbound"}


def coerce_bandwidth(v: Any) -> Bandwidth:
    """Accept a non-negative integer or "unbounded" (also "unbound")."""
    if isinstance(v, bool):
        raise ValueError("bandwidth must be a non-negative integer or 'unbounded'")
    if isinstance(v, str):
        text = v.strip().strip('"').lower()
        if text in _UNBOUNDED_SPELLINGS:
            return UNBOUNDED
        if not text.isdigit():
            raise ValueError(f"Invalid bandwidth '{v}': expected an integer or 'unbounded'")
        v = int(text)
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    if not isinstance(v, int) or v < 0:
        raise ValueError(f"Invalid bandwidth '{v}': expected an integer >= 0 or 'unbounded'")
    return v


def _ensure_str_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, list):
        return [str(item) for item in v]  # type: ignore[misc]
    return [str(v)]


class TaskSchema(BaseModel):
    """Schema for one task entry."""

    name: str
    duration: float | str = 1
    requires: list[str] = Field(default_factory=list)
    start_date: date | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("task name must not be empty")
        return name

    @field_validator("requires", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list."""
        return _ensure_str_list(v)


class DependencySchema(BaseModel):
    """Schema for a mapping-style dependency entry."""

    source: str
    target: str


class GroupSchema(BaseModel):
    """Schema for a bandwidth group: exactly one of ``tasks`` or ``pattern``."""

    name: str = DEFAULT_GROUP_NAME
    tasks: list[str] | None = None
    pattern: str | None = None
    bandwidth: Bandwidth = UNBOUNDED
    start_date: date | None = None

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_GROUP_NAME
        return str(v).strip()

    @field_validator("bandwidth", mode="before")
    @classmethod
    def validate_bandwidth(cls, v: Any) -> Bandwidth:
        return coerce_bandwidth(v)

    @model_validator(mode="after")
    def validate_selector(self) -> GroupSchema:
        """Ensure the group selects tasks by list or by pattern, not both."""
        if (self.tasks is None) == (self.pattern is None):
            raise ValueError(f"Group '{self.name}' must define exactly one of 'tasks' or 'pattern'")
        return self


class ProjectSchema(BaseModel):
    """Schema for the entire project file."""

    global_bandwidth: Bandwidth = UNBOUNDED
    duration_labels: dict[str, float] = Field(default_factory=dict)
    calendar: CalendarConfig | None = None
    tasks: list[TaskSchema] = Field(default_factory=list)
    dependencies: list[str | DependencySchema] = Field(default_factory=list)
    groups: list[GroupSchema] = Field(default_factory=list)

    @field_validator("global_bandwidth", mode="before")
    @classmethod
    def validate_bandwidth(cls, v: Any) -> Bandwidth:
        return coerce_bandwidth(v)
