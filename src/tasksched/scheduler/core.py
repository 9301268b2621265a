"""Core dataclasses for the scheduling system."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from tasksched.models import TaskGroup


class DiagnosticKind(str, Enum):
    """Cause of a scheduling diagnostic."""

    UNKNOWN_TASK_REFERENCE = "UnknownTaskReference"  # Structural
    INVALID_GROUP_PATTERN = "InvalidGroupPattern"  # Structural
    CIRCULAR_DEPENDENCY = "CircularDependency"  # Topological
    UNSCHEDULABLE_TASK = "UnschedulableTask"  # Algorithmic


class Severity(str, Enum):
    """Diagnostic severity."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A problem found while scheduling, attributable to one cause."""

    message: str
    kind: DiagnosticKind
    severity: Severity = Severity.ERROR

    def __str__(self) -> str:
        return f"{self.severity.value}: {self.message}"


def _default_str_list() -> list[str]:
    return []


@dataclass
class ScheduledTask:
    """Output record for one input task.

    ``start_time``/``end_time`` are None while the task is unscheduled. The
    assigned group is a shared reference, never a copy.
    """

    name: str
    resolved_duration: float
    start_time: float | None = None
    end_time: float | None = None
    earliest_possible_start_time: float = 0
    assigned_group: TaskGroup | None = None
    predecessors: list[str] = field(default_factory=_default_str_list)
    start_date: date | None = None  # Calendar mode only
    end_date: date | None = None  # Calendar mode only

    @property
    def is_scheduled(self) -> bool:
        return self.end_time is not None


@dataclass(frozen=True)
class RunningTask:
    """A task occupying capacity inside the simulation."""

    name: str
    group: TaskGroup | None
    completion_time: float


def _default_task_list() -> list[ScheduledTask]:
    return []


def _default_diagnostic_list() -> list[Diagnostic]:
    return []


@dataclass
class SchedulingResult:
    """Complete result of a scheduling run."""

    scheduled_tasks: list[ScheduledTask] = field(default_factory=_default_task_list)
    diagnostics: list[Diagnostic] = field(default_factory=_default_diagnostic_list)
    warnings: list[str] = field(default_factory=_default_str_list)  # Upstream (parser) warnings

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def by_name(self) -> dict[str, ScheduledTask]:
        """Index scheduled tasks by name."""
        return {task.name: task for task in self.scheduled_tasks}

    @property
    def makespan(self) -> float | None:
        """Span from the first start to the last completion (None if nothing ran)."""
        scheduled = [t for t in self.scheduled_tasks if t.is_scheduled]
        if not scheduled:
            return None
        start = min(t.start_time for t in scheduled if t.start_time is not None)
        end = max(t.end_time for t in scheduled if t.end_time is not None)
        return end - start
