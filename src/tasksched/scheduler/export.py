"""Schedule export to YAML.

The exported document is versioned so downstream renderers can detect
format changes.
"""

from pathlib import Path
from typing import Any

import yaml

from .core import SchedulingResult

SCHEDULE_FILE_VERSION = 1


def schedule_to_dict(result: SchedulingResult) -> dict[str, Any]:
    """Convert a scheduling result to plain YAML-serializable data.

    Unscheduled tasks keep null times. Dates are ISO strings and only
    present in calendar mode.
    """
    tasks: dict[str, dict[str, Any]] = {}
    for task in result.scheduled_tasks:
        entry: dict[str, Any] = {
            "duration": task.resolved_duration,
            "start_time": task.start_time,
            "end_time": task.end_time,
            "group": task.assigned_group.label if task.assigned_group else None,
            "predecessors": list(task.predecessors),
        }
        if task.start_date is not None and task.end_date is not None:
            entry["start_date"] = task.start_date.isoformat()
            entry["end_date"] = task.end_date.isoformat()
        tasks[task.name] = entry

    output: dict[str, Any] = {
        "version": SCHEDULE_FILE_VERSION,
        "tasks": tasks,
        "diagnostics": [
            {"message": d.message, "kind": d.kind.value, "severity": d.severity.value}
            for d in result.diagnostics
        ],
    }
    if result.warnings:
        output["warnings"] = list(result.warnings)
    return output


def dump_schedule(result: SchedulingResult) -> str:
    """Render a scheduling result as a YAML document."""
    return yaml.safe_dump(schedule_to_dict(result), default_flow_style=False, sort_keys=False)


def write_schedule_file(path: Path, result: SchedulingResult) -> None:
    """Write a scheduling result to a YAML file."""
    with path.open("w", encoding="utf-8") as f:
        f.write(dump_schedule(result))
