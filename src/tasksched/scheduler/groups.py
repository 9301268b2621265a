"""Bandwidth group resolution."""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from tasksched.logger import get_logger
from tasksched.models import GroupType, TaskGroup

from .core import Diagnostic, DiagnosticKind

logger = get_logger()


def _default_assignments() -> dict[str, TaskGroup | None]:
    return {}


@dataclass
class GroupResolution:
    """Outcome of matching tasks against group definitions.

    When ``diagnostic`` is set, a group pattern was invalid and the run must
    stop; ``assignments`` is then empty.
    """

    assignments: dict[str, TaskGroup | None] = field(default_factory=_default_assignments)
    diagnostic: Diagnostic | None = None

    @property
    def failed(self) -> bool:
        return self.diagnostic is not None


def _compile_pattern(group: TaskGroup) -> re.Pattern[str] | Diagnostic:
    pattern = group.pattern
    if pattern is None:
        return Diagnostic(
            message=f'Invalid regex in Task Group "{group.name}": no pattern given',
            kind=DiagnosticKind.INVALID_GROUP_PATTERN,
        )
    try:
        return re.compile(pattern)
    except re.error as e:
        return Diagnostic(
            message=f'Invalid regex in Task Group "{pattern}": {e}',
            kind=DiagnosticKind.INVALID_GROUP_PATTERN,
        )


def resolve_groups(task_names: Sequence[str], groups: Sequence[TaskGroup]) -> GroupResolution:
    """Assign each task the last group (in input order) that matches it.

    ``list`` groups match exact names; ``regex`` groups search their pattern
    in the task name. Tasks matching nothing get None.
    """
    assignments: dict[str, TaskGroup | None] = dict.fromkeys(task_names)

    for group in groups:
        regex: re.Pattern[str] | None = None
        if group.type == GroupType.REGEX:
            compiled = _compile_pattern(group)
            if isinstance(compiled, Diagnostic):
                logger.debug(f"  {compiled.message}")
                return GroupResolution(diagnostic=compiled)
            regex = compiled

        for name in task_names:
            if regex is not None:
                matches = regex.search(name) is not None
            else:
                matches = name in group.members
            if not matches:
                continue

            previous = assignments[name]
            if previous is not None:
                logger.debug(
                    f"  Task {name}: group {group.label} overrides earlier group {previous.label}"
                )
            assignments[name] = group

    return GroupResolution(assignments=assignments)
