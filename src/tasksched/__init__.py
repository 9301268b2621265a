"""tasksched - dependency- and bandwidth-aware task scheduling."""

from .models import UNBOUNDED, Dependency, GroupType, Task, TaskGroup
from .scheduler import CalendarConfig, DurationMode, SchedulingResult, schedule

__all__ = [
    "UNBOUNDED",
    "CalendarConfig",
    "Dependency",
    "DurationMode",
    "GroupType",
    "SchedulingResult",
    "Task",
    "TaskGroup",
    "schedule",
]
