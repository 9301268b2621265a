"""Scheduling pipeline and high-level service."""

from collections.abc import Sequence
from typing import TYPE_CHECKING

from tasksched.logger import get_logger
from tasksched.models import Bandwidth, Dependency, Task, TaskGroup, format_bandwidth

from .calendar import CalendarTranslator
from .config import CalendarConfig
from .core import Diagnostic, ScheduledTask, SchedulingResult
from .cycles import detect_cycle
from .graph import TaskGraph, build_graph
from .groups import resolve_groups
from .simulation import DiscreteEventScheduler

if TYPE_CHECKING:
    from tasksched.parser import Project

logger = get_logger()


def _unscheduled_tasks(tasks: Sequence[Task], graph: TaskGraph) -> list[ScheduledTask]:
    return [
        ScheduledTask(
            name=task.name,
            resolved_duration=task.resolved_duration,
            predecessors=list(graph.predecessors[task.name]),
        )
        for task in tasks
    ]


def check_structure(
    tasks: Sequence[Task],
    dependencies: Sequence[Dependency],
    task_groups: Sequence[TaskGroup],
) -> list[Diagnostic]:
    """Run the structural and topological checks without simulating.

    Returns the diagnostics the scheduling pipeline would stop on.
    """
    graph, diagnostics = build_graph(tasks, dependencies)
    if diagnostics:
        return diagnostics
    cycle = detect_cycle(graph)
    if cycle is not None:
        return [cycle]
    resolution = resolve_groups(graph.order, task_groups)
    if resolution.diagnostic is not None:
        return [resolution.diagnostic]
    return []


def schedule(
    tasks: Sequence[Task],
    dependencies: Sequence[Dependency],
    global_bandwidth: Bandwidth,
    task_groups: Sequence[TaskGroup],
    calendar: CalendarConfig | None = None,
) -> SchedulingResult:
    """Compute a start and end for every task.

    Stages run in order and any of the first three may end the run early:
    graph building, cycle detection, group resolution, simulation, and
    (with ``calendar``) date translation. Invalid input never raises; it
    shows up in ``SchedulingResult.diagnostics``.

    Args:
        tasks: Tasks in input order (not mutated)
        dependencies: Finish-to-start edges
        global_bandwidth: Maximum concurrent tasks overall, or "unbounded"
        task_groups: Group rules in input order (last match wins)
        calendar: Optional calendar; when omitted only abstract units are produced

    Returns:
        SchedulingResult with one ScheduledTask per input task (none if a
        group pattern is invalid) and the diagnostics
    """
    logger.debug(
        f"Scheduling {len(tasks)} tasks, global bandwidth {format_bandwidth(global_bandwidth)}, "
        f"{len(task_groups)} groups"
    )

    graph, diagnostics = build_graph(tasks, dependencies)
    if diagnostics:
        return SchedulingResult(
            scheduled_tasks=_unscheduled_tasks(tasks, graph), diagnostics=diagnostics
        )

    cycle = detect_cycle(graph)
    if cycle is not None:
        logger.debug(f"  {cycle.message}")
        return SchedulingResult(scheduled_tasks=_unscheduled_tasks(tasks, graph), diagnostics=[cycle])

    resolution = resolve_groups(graph.order, task_groups)
    if resolution.diagnostic is not None:
        return SchedulingResult(scheduled_tasks=[], diagnostics=[resolution.diagnostic])

    scheduled_tasks = _unscheduled_tasks(tasks, graph)
    for scheduled in scheduled_tasks:
        scheduled.assigned_group = resolution.assignments[scheduled.name]

    translator: CalendarTranslator | None = None
    if calendar is not None:
        translator = CalendarTranslator(calendar)
        releases = translator.release_units(tasks, resolution.assignments)
        for scheduled in scheduled_tasks:
            scheduled.earliest_possible_start_time = releases[scheduled.name]

    simulation = DiscreteEventScheduler(graph, scheduled_tasks, global_bandwidth)
    diagnostics = simulation.schedule()

    if translator is not None:
        translator.apply_dates(scheduled_tasks)

    return SchedulingResult(scheduled_tasks=scheduled_tasks, diagnostics=diagnostics)


class SchedulingService:
    """Schedules a parsed project file.

    Carries the parser's warnings into the result so callers see upstream
    and engine problems together.
    """

    def __init__(self, project: "Project", calendar: CalendarConfig | None = None):
        """Initialize the service.

        Args:
            project: Parsed project definition
            calendar: Optional calendar overriding the project's own
        """
        self.project = project
        self.calendar = calendar if calendar is not None else project.calendar

    def schedule(self) -> SchedulingResult:
        """Schedule the project."""
        result = schedule(
            self.project.tasks,
            self.project.dependencies,
            self.project.global_bandwidth,
            self.project.task_groups,
            self.calendar,
        )
        result.warnings = list(self.project.warnings)
        return result

    def validate(self) -> list[Diagnostic]:
        """Run the structural and topological checks only."""
        return check_structure(
            self.project.tasks, self.project.dependencies, self.project.task_groups
        )
