"""Tests for the YAML project parser."""

from datetime import date
from pathlib import Path
from typing import Any

import pytest

from tasksched.exceptions import MissingReferenceError, ParseError, ValidationError
from tasksched.models import UNBOUNDED, Dependency, GroupType
from tasksched.parser import Project, ProjectParser, load_project
from tasksched.scheduler import DurationMode
from tasksched.schemas import coerce_bandwidth


def parse(data: dict[str, Any]) -> Project:
    return ProjectParser().parse_data(data)


class TestTasks:
    """Test task parsing and duration resolution."""

    def test_minimal_task(self) -> None:
        project = parse({"tasks": [{"name": "A"}]})

        assert len(project.tasks) == 1
        task = project.tasks[0]
        assert task.name == "A"
        assert task.resolved_duration == 1
        assert task.dependencies == ()
        assert project.global_bandwidth == UNBOUNDED

    def test_duration_labels(self) -> None:
        project = parse(
            {
                "duration_labels": {"S": 1, "M": 3, "L": 8},
                "tasks": [
                    {"name": "a", "duration": "M"},
                    {"name": "b", "duration": 2.5},
                    {"name": "c", "duration": "4"},
                ],
            }
        )
        assert [t.resolved_duration for t in project.tasks] == [3, 2.5, 4]
        assert project.duration_labels == {"S": 1, "M": 3, "L": 8}

    def test_undefined_label(self) -> None:
        with pytest.raises(MissingReferenceError, match="Undefined duration label 'XL'"):
            parse({"duration_labels": {"S": 1}, "tasks": [{"name": "a", "duration": "XL"}]})

    def test_negative_duration(self) -> None:
        with pytest.raises(ValidationError, match="Task 'a': Duration must not be negative"):
            parse({"tasks": [{"name": "a", "duration": -1}]})

    def test_duplicate_task_names(self) -> None:
        with pytest.raises(ValidationError, match="Duplicate task name 'a'"):
            parse({"tasks": [{"name": "a"}, {"name": " a "}]})

    def test_requires_accepts_single_string(self) -> None:
        project = parse({"tasks": [{"name": "a"}, {"name": "b", "requires": "a"}]})
        assert project.tasks[1].dependencies == ("a",)

    def test_requires_self(self) -> None:
        with pytest.raises(ValidationError, match="cannot depend on itself"):
            parse({"tasks": [{"name": "a", "requires": ["a"]}]})

    def test_task_start_date(self) -> None:
        project = parse({"tasks": [{"name": "a", "start_date": "2025-06-10"}]})
        assert project.tasks[0].start_date == date(2025, 6, 10)

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Invalid project structure"):
            parse({"tasks": [{"name": "  "}]})


class TestDependencies:
    """Test the top-level dependency list."""

    def test_arrow_and_mapping_forms(self) -> None:
        project = parse(
            {
                "tasks": [{"name": "a"}, {"name": "b"}, {"name": "c"}],
                "dependencies": ["a -> b", {"source": "b", "target": "c"}, "a -> b"],
            }
        )
        assert project.dependencies == [Dependency("a", "b"), Dependency("b", "c")]

    def test_unknown_names_are_left_to_the_scheduler(self) -> None:
        project = parse({"tasks": [{"name": "a"}], "dependencies": ["a -> ghost"]})
        assert project.dependencies == [Dependency("a", "ghost")]

    def test_malformed_dependency(self) -> None:
        with pytest.raises(ValidationError, match="expected 'source -> target'"):
            parse({"tasks": [{"name": "a"}], "dependencies": ["a b"]})

    def test_self_dependency(self) -> None:
        with pytest.raises(ValidationError, match="cannot depend on itself"):
            parse({"tasks": [{"name": "a"}], "dependencies": ["a -> a"]})


class TestGroups:
    """Test bandwidth group parsing and warnings."""

    def test_list_and_regex_groups(self) -> None:
        project = parse(
            {
                "tasks": [{"name": "api-auth"}, {"name": "docs"}],
                "groups": [
                    {"name": "Backend", "pattern": "^api", "bandwidth": 2},
                    {"tasks": ["docs"], "start_date": "2025-06-09"},
                ],
            }
        )
        backend, docs = project.task_groups
        assert backend.type == GroupType.REGEX
        assert backend.pattern == "^api"
        assert backend.bandwidth == 2
        assert docs.type == GroupType.LIST
        assert docs.name == "Unnamed Group"
        assert docs.bandwidth == UNBOUNDED
        assert docs.start_date == date(2025, 6, 9)

    def test_group_needs_exactly_one_selector(self) -> None:
        with pytest.raises(ValidationError, match="exactly one of 'tasks' or 'pattern'"):
            parse({"groups": [{"name": "g", "tasks": ["a"], "pattern": "a"}]})
        with pytest.raises(ValidationError, match="exactly one of 'tasks' or 'pattern'"):
            parse({"groups": [{"name": "g"}]})

    def test_invalid_regex_is_left_to_the_scheduler(self) -> None:
        project = parse({"groups": [{"pattern": "("}]})
        assert project.task_groups[0].pattern == "("

    def test_undefined_member_warning(self) -> None:
        project = parse({"tasks": [{"name": "a"}], "groups": [{"name": "g", "tasks": ["a", "z"]}]})
        assert project.warnings == ["Task Group 'g' references undefined task 'z'"]

    def test_task_in_two_groups_warning(self) -> None:
        project = parse(
            {
                "tasks": [{"name": "a"}],
                "groups": [{"name": "g1", "tasks": ["a"]}, {"name": "g2", "tasks": ["a"]}],
            }
        )
        assert project.warnings == [
            "Task 'a' is listed in groups 'g1' and 'g2'; the last group wins"
        ]


class TestBandwidth:
    """Test bandwidth coercion."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [(0, 0), (3, 3), ("5", 5), (2.0, 2), ("unbounded", UNBOUNDED), ("Unbound", UNBOUNDED)],
    )
    def test_accepted_values(self, raw: Any, expected: Any) -> None:
        assert coerce_bandwidth(raw) == expected

    @pytest.mark.parametrize("raw", [-1, "lots", True, 1.5])
    def test_rejected_values(self, raw: Any) -> None:
        with pytest.raises(ValueError):
            coerce_bandwidth(raw)

    def test_global_bandwidth(self) -> None:
        assert parse({"global_bandwidth": 4}).global_bandwidth == 4
        with pytest.raises(ValidationError):
            parse({"global_bandwidth": -2})


class TestCalendarSection:
    """Test the optional calendar block."""

    def test_calendar(self) -> None:
        project = parse(
            {
                "calendar": {
                    "start_date": "2025-06-02",
                    "work_days": ["Mon", "Tue", "Wed"],
                    "holidays": ["2025-06-04"],
                    "duration_mode": "elapsed",
                }
            }
        )
        assert project.calendar is not None
        assert project.calendar.start_date == date(2025, 6, 2)
        assert project.calendar.work_days == ["Mon", "Tue", "Wed"]
        assert project.calendar.holidays == [date(2025, 6, 4)]
        assert project.calendar.duration_mode == DurationMode.ELAPSED

    def test_no_calendar(self) -> None:
        assert parse({}).calendar is None


class TestFiles:
    """Test reading project files from disk."""

    def test_load_project(self, tmp_path: Path) -> None:
        path = tmp_path / "project.yaml"
        path.write_text(
            "global_bandwidth: 2\n"
            "tasks:\n"
            "  - name: a\n"
            "    duration: 2\n"
            "  - name: b\n"
            "    requires: [a]\n"
        )
        project = load_project(path)
        assert [t.name for t in project.tasks] == ["a", "b"]
        assert project.global_bandwidth == 2

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="File not found"):
            load_project(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("tasks: [unclosed\n")
        with pytest.raises(ParseError, match="Failed to parse YAML"):
            load_project(path)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ParseError, match="dictionary at the root"):
            load_project(path)
