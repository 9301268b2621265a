"""Scheduler package - bandwidth-constrained task scheduling.

Pipeline stages, in order:
- build_graph: adjacency, in-degrees and predecessors; unknown references
- detect_cycle: first dependency cycle, if any
- resolve_groups: last-matching bandwidth group per task
- DiscreteEventScheduler: greedy simulation under global and group bandwidth
- CalendarTranslator: optional mapping of simulation units to dates

Main entry points:
- schedule: run the whole pipeline on in-memory tasks
- SchedulingService: schedule a parsed project file
"""

from .calendar import (
    CalendarTranslator,
    add_elapsed_days,
    add_working_days,
    advance,
    count_working_days,
    is_holiday,
    is_working_day,
    next_working_day,
    span_end,
)
from .config import DEFAULT_WORK_DAYS, CalendarConfig, DurationMode
from .core import (
    Diagnostic,
    DiagnosticKind,
    RunningTask,
    ScheduledTask,
    SchedulingResult,
    Severity,
)
from .cycles import detect_cycle, find_cycle, format_cycle
from .export import dump_schedule, schedule_to_dict, write_schedule_file
from .graph import TaskGraph, build_graph
from .groups import GroupResolution, resolve_groups
from .service import SchedulingService, check_structure, schedule
from .simulation import DiscreteEventScheduler, SimulationState

__all__ = [
    # Core dataclasses
    "Diagnostic",
    "DiagnosticKind",
    "RunningTask",
    "ScheduledTask",
    "SchedulingResult",
    "Severity",
    # Configuration
    "CalendarConfig",
    "DurationMode",
    "DEFAULT_WORK_DAYS",
    # Pipeline stages
    "TaskGraph",
    "build_graph",
    "find_cycle",
    "format_cycle",
    "detect_cycle",
    "GroupResolution",
    "resolve_groups",
    "DiscreteEventScheduler",
    "SimulationState",
    # Calendar
    "CalendarTranslator",
    "add_elapsed_days",
    "add_working_days",
    "advance",
    "count_working_days",
    "is_holiday",
    "is_working_day",
    "next_working_day",
    "span_end",
    # Entry points
    "schedule",
    "check_structure",
    "SchedulingService",
    # Export
    "dump_schedule",
    "schedule_to_dict",
    "write_schedule_file",
]
