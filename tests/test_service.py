"""Tests for SchedulingService on parsed projects."""

from datetime import date
from typing import Any

from tasksched.parser import Project, ProjectParser
from tasksched.scheduler import CalendarConfig, DiagnosticKind, SchedulingService


def make_project(extra: dict[str, Any] | None = None) -> Project:
    data: dict[str, Any] = {
        "global_bandwidth": 1,
        "tasks": [{"name": "a", "duration": 2}, {"name": "b", "requires": ["a"]}],
        "groups": [{"name": "g", "tasks": ["a", "missing"]}],
    }
    data.update(extra or {})
    return ProjectParser().parse_data(data)


def test_schedule_carries_parser_warnings() -> None:
    result = SchedulingService(make_project()).schedule()

    assert result.diagnostics == []
    assert result.warnings == ["Task Group 'g' references undefined task 'missing'"]
    assert result.by_name()["b"].start_time == 2


def test_project_calendar_is_used() -> None:
    project = make_project({"calendar": {"start_date": "2025-06-06"}})
    result = SchedulingService(project).schedule()

    assert result.by_name()["a"].end_date == date(2025, 6, 9)


def test_explicit_calendar_overrides_project() -> None:
    project = make_project({"calendar": {"start_date": "2025-06-06"}})
    service = SchedulingService(project, calendar=CalendarConfig(start_date=date(2025, 6, 2)))

    result = service.schedule()

    assert result.by_name()["a"].start_date == date(2025, 6, 2)


def test_validate() -> None:
    assert SchedulingService(make_project()).validate() == []

    broken = make_project({"dependencies": ["b -> a"]})
    assert [d.kind for d in SchedulingService(broken).validate()] == [
        DiagnosticKind.CIRCULAR_DEPENDENCY
    ]
