"""YAML parser for tasksched project files.

The parser is the engine's upstream collaborator: it guarantees unique task
names, resolves duration labels to numbers and collects non-fatal warnings.
Dependency references are left for the engine to validate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import MissingReferenceError, ParseError, ValidationError
from .logger import get_logger
from .models import Bandwidth, Dependency, GroupType, Task, TaskGroup
from .scheduler.config import CalendarConfig
from .schemas import DependencySchema, GroupSchema, ProjectSchema, TaskSchema

logger = get_logger()


@dataclass
class Project:
    """A parsed project, ready to hand to the scheduler."""

    tasks: list[Task]
    dependencies: list[Dependency]
    global_bandwidth: Bandwidth
    task_groups: list[TaskGroup]
    calendar: CalendarConfig | None = None
    duration_labels: dict[str, float] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


class ProjectParser:
    """Parser for project YAML files."""

    def parse_file(self, file_path: Path | str) -> Project:
        """Parse a YAML file into a Project."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> Project:
        """Validate loaded YAML data and convert it to domain models."""
        try:
            schema = ProjectSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid project structure: {e}") from e

        tasks = self._build_tasks(schema.tasks, schema.duration_labels)
        dependencies = self._build_dependencies(schema.dependencies)
        groups = [self._build_group(group) for group in schema.groups]
        warnings = self._group_warnings(groups, {task.name for task in tasks})
        for warning in warnings:
            logger.warning(f"WARNING: {warning}")

        return Project(
            tasks=tasks,
            dependencies=dependencies,
            global_bandwidth=schema.global_bandwidth,
            task_groups=groups,
            calendar=schema.calendar,
            duration_labels=dict(schema.duration_labels),
            warnings=warnings,
        )

    def resolve_duration(self, duration: float | str, labels: dict[str, float]) -> float:
        """Resolve a numeric duration or a duration label.

        Raises:
            MissingReferenceError: If the label is not defined
            ValidationError: If the duration is negative
        """
        if isinstance(duration, str):
            text = duration.strip()
            try:
                value = float(text)
            except ValueError:
                if text not in labels:
                    raise MissingReferenceError(
                        f"Undefined duration label '{text}'. "
                        f"Defined labels: {', '.join(labels) or 'none'}"
                    ) from None
                value = labels[text]
        else:
            value = float(duration)

        if value < 0:
            raise ValidationError(f"Duration must not be negative, got {value}")
        return value

    def _build_tasks(self, task_schemas: list[TaskSchema], labels: dict[str, float]) -> list[Task]:
        tasks: list[Task] = []
        seen: set[str] = set()
        for task_schema in task_schemas:
            name = task_schema.name
            if name in seen:
                raise ValidationError(f"Duplicate task name '{name}'")
            seen.add(name)

            requires = list(dict.fromkeys(dep.strip() for dep in task_schema.requires))
            if name in requires:
                raise ValidationError(f"Task '{name}' cannot depend on itself")

            try:
                duration = self.resolve_duration(task_schema.duration, labels)
            except ValidationError as e:
                raise type(e)(f"Task '{name}': {e}") from e

            tasks.append(
                Task(
                    name=name,
                    resolved_duration=duration,
                    dependencies=tuple(requires),
                    start_date=task_schema.start_date,
                )
            )
        return tasks

    def _build_dependencies(self, entries: list[str | DependencySchema]) -> list[Dependency]:
        dependencies: list[Dependency] = []
        for entry in entries:
            if isinstance(entry, DependencySchema):
                dep = Dependency(source=entry.source.strip(), target=entry.target.strip())
            else:
                try:
                    dep = Dependency.parse(entry)
                except ValueError as e:
                    raise ValidationError(str(e)) from e
            if dep.source == dep.target:
                raise ValidationError(f"Task '{dep.source}' cannot depend on itself")
            if dep not in dependencies:
                dependencies.append(dep)
        return dependencies

    def _build_group(self, group: GroupSchema) -> TaskGroup:
        if group.pattern is not None:
            return TaskGroup(
                name=group.name,
                type=GroupType.REGEX,
                identifiers=(group.pattern,),
                bandwidth=group.bandwidth,
                start_date=group.start_date,
            )
        return TaskGroup(
            name=group.name,
            type=GroupType.LIST,
            identifiers=tuple(name.strip() for name in group.tasks or []),
            bandwidth=group.bandwidth,
            start_date=group.start_date,
        )

    def _group_warnings(self, groups: list[TaskGroup], task_names: set[str]) -> list[str]:
        """Warn about list groups naming unknown tasks and tasks listed twice."""
        warnings: list[str] = []
        last_group: dict[str, TaskGroup] = {}
        for group in groups:
            if group.type != GroupType.LIST:
                continue
            for name in group.identifiers:
                if name not in task_names:
                    warnings.append(f"Task Group '{group.label}' references undefined task '{name}'")
                    continue
                earlier = last_group.get(name)
                if earlier is not None and earlier is not group:
                    warnings.append(
                        f"Task '{name}' is listed in groups '{earlier.label}' and "
                        f"'{group.label}'; the last group wins"
                    )
                last_group[name] = group
        return warnings


def load_project(path: Path | str) -> Project:
    """Load a project file (convenience wrapper around ProjectParser)."""
    return ProjectParser().parse_file(path)
