"""Command-line interface for tasksched."""

from __future__ import annotations

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from .exceptions import TaskschedError
from .logger import changes_enabled, setup_logger
from .parser import load_project
from .scheduler import (
    DEFAULT_WORK_DAYS,
    CalendarConfig,
    Diagnostic,
    DurationMode,
    SchedulingResult,
    SchedulingService,
    Severity,
    dump_schedule,
    span_end,
)

app = typer.Typer(
    name="tasksched",
    help="Schedule tasks under dependency and bandwidth constraints",
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output formats for the schedule command."""

    TEXT = "text"
    YAML = "yaml"


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
) -> None:
    """Global options for tasksched commands."""
    setup_logger(verbose)


def _parse_date(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        typer.echo(f"Error: Invalid {option} '{value}'. Use YYYY-MM-DD format.", err=True)
        raise typer.Exit(1) from None


def _parse_optional_date(value: str | None, option: str) -> date | None:
    return None if value is None else _parse_date(value, option)


def _format_time(value: float | None) -> str:
    if value is None:
        return "-"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_schedule_table(result: SchedulingResult) -> str:
    """Render scheduled tasks as a plain-text table."""
    with_dates = any(task.start_date is not None for task in result.scheduled_tasks)
    header = ["Task", "Start", "End", "Group"]
    if with_dates:
        header += ["Start date", "End date"]

    rows: list[list[str]] = [header]
    for task in result.scheduled_tasks:
        row = [
            task.name,
            _format_time(task.start_time),
            _format_time(task.end_time),
            task.assigned_group.label if task.assigned_group else "-",
        ]
        if with_dates:
            row += [
                task.start_date.isoformat() if task.start_date else "-",
                task.end_date.isoformat() if task.end_date else "-",
            ]
        rows.append(row)

    widths = [max(len(row[i]) for row in rows) for i in range(len(header))]
    lines = ["  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip() for row in rows]
    makespan = result.makespan
    if makespan is not None:
        lines.append("")
        lines.append(f"Makespan: {_format_time(makespan)}")
    return "\n".join(lines)


def _echo_problems(warnings: list[str], diagnostics: list[Diagnostic]) -> None:
    for warning in warnings:
        typer.echo(f"Warning: {warning}", err=True)
    for diagnostic in diagnostics:
        prefix = "Error" if diagnostic.severity == Severity.ERROR else "Warning"
        typer.echo(f"{prefix} [{diagnostic.kind.value}]: {diagnostic.message}", err=True)


@app.command()
def schedule(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
    *,
    format: Annotated[  # noqa: A002 - 'format' is appropriate name for CLI option
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TEXT,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    start_date: Annotated[
        str | None,
        typer.Option("--start-date", help="Override the calendar start date (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Compute start and end times for every task in a project."""
    override = _parse_optional_date(start_date, "start date")

    try:
        project = load_project(file)
    except TaskschedError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    calendar = project.calendar
    if override is not None:
        if calendar is None:
            calendar = CalendarConfig(start_date=override)
        else:
            calendar = calendar.model_copy(update={"start_date": override})

    result = SchedulingService(project, calendar=calendar).schedule()
    if changes_enabled():
        placed = sum(1 for task in result.scheduled_tasks if task.is_scheduled)
        typer.echo(f"Scheduled {placed} of {len(result.scheduled_tasks)} tasks", err=True)

    rendered = dump_schedule(result) if format == OutputFormat.YAML else format_schedule_table(result)
    if output:
        output.write_text(rendered if rendered.endswith("\n") else rendered + "\n", encoding="utf-8")
        typer.echo(f"Schedule written to {output}")
    else:
        typer.echo(rendered)

    _echo_problems(result.warnings, result.diagnostics)
    if result.has_errors:
        raise typer.Exit(1)


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")] = Path(
        "project.yaml"
    ),
) -> None:
    """Validate references, cycles and group patterns without scheduling."""
    try:
        project = load_project(file)
    except TaskschedError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    diagnostics = SchedulingService(project).validate()
    _echo_problems(project.warnings, diagnostics)
    if diagnostics:
        raise typer.Exit(1)
    typer.echo(f"OK: {len(project.tasks)} tasks, {len(project.task_groups)} groups")


@app.command()
def calendar(
    start: Annotated[str, typer.Argument(help="First day of the span (YYYY-MM-DD)")],
    days: Annotated[int, typer.Argument(help="Duration in days", min=0)],
    *,
    mode: Annotated[
        DurationMode, typer.Option("--mode", "-m", help="Count working or elapsed days")
    ] = DurationMode.WORKING,
    work_days: Annotated[
        str,
        typer.Option("--work-days", help="Comma-separated weekday abbreviations"),
    ] = ",".join(DEFAULT_WORK_DAYS),
    holidays: Annotated[
        list[str] | None,
        typer.Option("--holiday", help="Holiday date (YYYY-MM-DD), repeatable"),
    ] = None,
) -> None:
    """Print the last day of a span of DAYS starting at START."""
    start_day = _parse_date(start, "start date")
    holiday_dates = [_parse_date(h, "holiday") for h in holidays or []]

    try:
        config = CalendarConfig(
            start_date=start_day,
            work_days=[day for day in work_days.split(",") if day.strip()],
            holidays=holiday_dates,
            duration_mode=mode,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    end = span_end(start_day, days, config.work_days, set(config.holidays), config.duration_mode)
    typer.echo(end.isoformat())
