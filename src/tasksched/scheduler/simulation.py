"""Discrete-event simulation that places tasks under bandwidth limits."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from tasksched.logger import checks_enabled, debug_enabled, get_logger
from tasksched.models import Bandwidth, TaskGroup, bandwidth_capacity, format_bandwidth

from .core import Diagnostic, DiagnosticKind, RunningTask, ScheduledTask
from .graph import TaskGraph

logger = get_logger()


def _default_running() -> list[RunningTask]:
    return []


def _default_ready() -> list[str]:
    return []


@dataclass
class SimulationState:
    """Working set threaded through every step of one simulation run."""

    tasks: dict[str, ScheduledTask]
    in_degree: dict[str, int]
    position: dict[str, int]  # Input order, used to break duration ties
    time: float = 0
    running: list[RunningTask] = field(default_factory=_default_running)
    ready: list[str] = field(default_factory=_default_ready)

    @property
    def unscheduled(self) -> list[ScheduledTask]:
        return [task for task in self.tasks.values() if not task.is_scheduled]


@dataclass
class Occupancy:
    """Slots in use during the current cycle."""

    global_used: int = 0
    group_used: dict[TaskGroup, int] = field(default_factory=dict)


class DiscreteEventScheduler:
    """Greedy resource-constrained scheduler over a simulated clock.

    Each cycle:
    1. Retires running tasks whose completion time has been reached
    2. Counts occupancy: ungrouped running tasks globally, grouped ones per group
    3. Sorts ready tasks by duration (longest first, ties by input order)
    4. Admits every candidate that fits in both its group and the global pool
    5. Advances the clock to the next completion or release time
    """

    def __init__(
        self,
        graph: TaskGraph,
        scheduled_tasks: Sequence[ScheduledTask],
        global_bandwidth: Bandwidth,
    ):
        """Initialize the scheduler.

        Args:
            graph: Validated, acyclic dependency graph
            scheduled_tasks: Output records in input order; mutated in place.
                ``earliest_possible_start_time`` may already hold a release time.
            global_bandwidth: Maximum number of tasks running at once
        """
        self.graph = graph
        self.scheduled_tasks = list(scheduled_tasks)
        self.global_bandwidth = global_bandwidth
        self.global_capacity = bandwidth_capacity(global_bandwidth)

    def initial_state(self) -> SimulationState:
        """Build the working set: ready tasks are those with no predecessors."""
        state = SimulationState(
            tasks={task.name: task for task in self.scheduled_tasks},
            in_degree=dict(self.graph.in_degree),
            position={task.name: i for i, task in enumerate(self.scheduled_tasks)},
        )
        state.ready = [name for name in state.tasks if state.in_degree[name] == 0]
        return state

    def schedule(self) -> list[Diagnostic]:
        """Run the simulation to completion.

        Returns:
            One UnschedulableTask diagnostic per task that could not be placed
        """
        state = self.initial_state()
        # Every cycle retires, admits, or moves to a distinct event time
        max_iterations = 4 * len(state.tasks) + 10

        iteration = 0
        while state.unscheduled and iteration < max_iterations:
            iteration += 1
            logger.debug(f"--- Scheduling cycle: time = {state.time} ---")

            self.retire_finished(state)
            occupancy = self.occupancy(state)
            candidates = self.admission_candidates(state)
            admitted = self.admit(state, candidates, occupancy)

            if not state.unscheduled:
                break
            if not self.advance_clock(state, admitted):
                break

        if state.unscheduled and iteration >= max_iterations:
            logger.warning(f"Simulation stopped after {iteration} cycles")

        return [
            Diagnostic(
                message=(
                    f'Scheduling error: Task "{task.name}" could not be scheduled. '
                    "Possible deadlock or unreachable state."
                ),
                kind=DiagnosticKind.UNSCHEDULABLE_TASK,
            )
            for task in state.unscheduled
        ]

    def retire_finished(self, state: SimulationState) -> list[RunningTask]:
        """Remove finished tasks from the running set and release their successors."""
        finished = [r for r in state.running if r.completion_time <= state.time]
        if not finished:
            return finished
        state.running = [r for r in state.running if r.completion_time > state.time]

        for record in finished:
            logger.debug(f"  Task {record.name} finished at {record.completion_time}")
            for successor_name in self.graph.successors[record.name]:
                successor = state.tasks[successor_name]
                state.in_degree[successor_name] -= 1
                successor.earliest_possible_start_time = max(
                    successor.earliest_possible_start_time, record.completion_time
                )
                if state.in_degree[successor_name] == 0 and not successor.is_scheduled:
                    state.ready.append(successor_name)
                    logger.debug(f"  Task {successor_name} became ready")
        return finished

    def occupancy(self, state: SimulationState) -> Occupancy:
        """Count running tasks at the start of a cycle.

        The global pool starts from ungrouped running tasks only; a grouped
        task takes a global slot just for the cycle that admits it.
        """
        occupancy = Occupancy(global_used=sum(1 for r in state.running if r.group is None))
        for record in state.running:
            if record.group is not None:
                occupancy.group_used[record.group] = occupancy.group_used.get(record.group, 0) + 1

        if debug_enabled():
            logger.debug(
                f"  Global occupancy: {occupancy.global_used}/"
                f"{format_bandwidth(self.global_bandwidth)}"
            )
            for group, used in occupancy.group_used.items():
                logger.debug(
                    f"  Group {group.label} occupancy: {used}/{format_bandwidth(group.bandwidth)}"
                )
        return occupancy

    def admission_candidates(self, state: SimulationState) -> list[ScheduledTask]:
        """Ready tasks that may start now, longest first, ties by input order."""
        candidates = [
            state.tasks[name]
            for name in state.ready
            if not state.tasks[name].is_scheduled
            and state.tasks[name].earliest_possible_start_time <= state.time
        ]
        candidates.sort(key=lambda t: (-t.resolved_duration, state.position[t.name]))
        if debug_enabled():
            logger.debug(
                "  Candidates: "
                + ", ".join(f"{t.name} (eps={t.earliest_possible_start_time})" for t in candidates)
            )
        return candidates

    def _has_room(self, task: ScheduledTask, occupancy: Occupancy) -> tuple[bool, str]:
        global_used = occupancy.global_used
        if global_used >= self.global_capacity:
            return (
                False,
                f"global capacity exhausted ({global_used}/"
                f"{format_bandwidth(self.global_bandwidth)})",
            )
        group = task.assigned_group
        if group is None:
            return True, "global capacity OK"

        group_used = occupancy.group_used.get(group, 0)
        if group_used >= group.capacity:
            return (
                False,
                f"group {group.label} capacity exhausted "
                f"({group_used}/{format_bandwidth(group.bandwidth)})",
            )
        return True, f"group {group.label} and global capacity OK"

    def admit(
        self,
        state: SimulationState,
        candidates: list[ScheduledTask],
        occupancy: Occupancy,
    ) -> list[str]:
        """Start every candidate that fits, consuming group and global slots.

        Returns:
            Names of the tasks started this cycle
        """
        admitted: list[str] = []
        for task in candidates:
            can_run, reason = self._has_room(task, occupancy)
            if checks_enabled():
                logger.checks(f"  Considering task {task.name}: {reason}")
            if not can_run:
                continue

            task.start_time = state.time
            task.end_time = state.time + task.resolved_duration
            occupancy.global_used += 1
            group = task.assigned_group
            if group is not None:
                occupancy.group_used[group] = occupancy.group_used.get(group, 0) + 1

            state.running.append(
                RunningTask(name=task.name, group=group, completion_time=task.end_time)
            )
            state.ready.remove(task.name)
            admitted.append(task.name)
            logger.changes(
                f"  Scheduled task {task.name} from {task.start_time} to {task.end_time}"
            )
        return admitted

    def advance_clock(self, state: SimulationState, admitted: list[str]) -> bool:
        """Move the clock to the next event time.

        The next event is the earliest running completion or the earliest
        future start time of a ready task. Returns False when no event can
        ever unblock the remaining tasks.
        """
        next_events = [r.completion_time for r in state.running]
        next_events.extend(
            state.tasks[name].earliest_possible_start_time
            for name in state.ready
            if state.tasks[name].earliest_possible_start_time > state.time
        )

        if not next_events:
            logger.debug(
                f"  Nothing running and nothing pending at {state.time} "
                f"({len(admitted)} started this cycle), stopping"
            )
            return False

        new_time = max(state.time, min(next_events))
        if new_time != state.time:
            logger.changes(f"Time: {new_time}")
        state.time = new_time
        return True
