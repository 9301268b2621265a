"""Pytest configuration and helpers for tasksched tests."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

import pytest

from tasksched.logger import reset_logger
from tasksched.models import Bandwidth, Dependency, GroupType, Task, TaskGroup, bandwidth_capacity
from tasksched.scheduler import SchedulingResult


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Reset logger handlers and level before each test for isolation."""
    reset_logger()


def make_task(
    name: str, duration: float = 1, *requires: str, start_date: date | None = None
) -> Task:
    """Create a Task with inline predecessors."""
    return Task(
        name=name, resolved_duration=duration, dependencies=tuple(requires), start_date=start_date
    )


def dep_list(*pairs: str) -> list[Dependency]:
    """Create dependencies from "A -> B" strings."""
    return [Dependency.parse(pair) for pair in pairs]


def list_group(
    *names: str, bandwidth: Bandwidth = 1, name: str = "Unnamed Group", start_date: date | None = None
) -> TaskGroup:
    return TaskGroup(
        type=GroupType.LIST,
        identifiers=names,
        bandwidth=bandwidth,
        name=name,
        start_date=start_date,
    )


def regex_group(pattern: str, bandwidth: Bandwidth = 1, name: str = "Unnamed Group") -> TaskGroup:
    return TaskGroup(type=GroupType.REGEX, identifiers=(pattern,), bandwidth=bandwidth, name=name)


def assert_valid_schedule(
    result: SchedulingResult,
    dependencies: Sequence[Dependency],
    global_bandwidth: Bandwidth,
) -> None:
    """Check dependency order and bandwidth limits of every scheduled task.

    Inline task dependencies are checked through ``predecessors``; explicit
    ones are passed in.
    """
    by_name = result.by_name()

    for task in result.scheduled_tasks:
        if not task.is_scheduled:
            continue
        assert task.start_time is not None and task.end_time is not None
        assert task.end_time == task.start_time + task.resolved_duration
        assert task.start_time >= task.earliest_possible_start_time
        for pred_name in task.predecessors:
            pred = by_name[pred_name]
            assert pred.end_time is not None, f"{task.name} ran before {pred_name} was scheduled"
            assert pred.end_time <= task.start_time, f"{task.name} started before {pred_name} ended"

    for dep in dependencies:
        source, target = by_name[dep.source], by_name[dep.target]
        if target.is_scheduled:
            assert source.end_time is not None
            assert target.start_time is not None
            assert source.end_time <= target.start_time

    # Concurrency is checked at every start instant of a task with positive duration
    timed = [
        t
        for t in result.scheduled_tasks
        if t.start_time is not None and t.end_time is not None and t.end_time > t.start_time
    ]
    for probe in timed:
        instant = probe.start_time
        running = [t for t in timed if t.start_time <= instant < t.end_time]  # type: ignore[operator]
        ungrouped = [t for t in running if t.assigned_group is None]
        assert len(ungrouped) <= bandwidth_capacity(global_bandwidth), f"global limit at {instant}"
        per_group: dict[TaskGroup, int] = {}
        for t in running:
            if t.assigned_group is not None:
                per_group[t.assigned_group] = per_group.get(t.assigned_group, 0) + 1
        for group, used in per_group.items():
            assert used <= group.capacity, f"group {group.label} limit at {instant}"


def spans(result: SchedulingResult) -> dict[str, tuple[float | None, float | None]]:
    """Map task name to (start_time, end_time)."""
    return {t.name: (t.start_time, t.end_time) for t in result.scheduled_tasks}
