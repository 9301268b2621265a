"""Calendar arithmetic: working days, holidays, and unit-to-date translation.

The module-level functions are pure: their result depends only on their
arguments, so they can be tested without running a simulation.
"""

import math
from collections.abc import Collection, Iterable
from datetime import date, datetime, timedelta

from tasksched.logger import get_logger
from tasksched.models import Task, TaskGroup

from .config import WEEKDAY_ABBREVIATIONS, CalendarConfig, DurationMode
from .core import ScheduledTask

logger = get_logger()

_ONE_DAY = timedelta(days=1)


def _as_date(day: date) -> date:
    """Drop the time-of-day component if a datetime is passed."""
    if isinstance(day, datetime):
        return day.date()
    return day


def weekday_abbreviation(day: date) -> str:
    """Return the 3-letter English weekday abbreviation (locale independent)."""
    return WEEKDAY_ABBREVIATIONS[day.weekday()]


def is_working_day(day: date, work_days: Collection[str]) -> bool:
    """Check whether the weekday of ``day`` is in the configured work week."""
    return weekday_abbreviation(day) in work_days


def is_holiday(day: date, holidays: Collection[date]) -> bool:
    """Check whether the calendar date of ``day`` is listed as a holiday."""
    return _as_date(day) in holidays


def _counts(day: date, work_days: Collection[str], holidays: Collection[date]) -> bool:
    return is_working_day(day, work_days) and not is_holiday(day, holidays)


def _require_work_days(work_days: Collection[str]) -> None:
    if not any(abbrev in work_days for abbrev in WEEKDAY_ABBREVIATIONS):
        raise ValueError("At least one valid work day is required for working-day arithmetic")


def next_working_day(day: date, work_days: Collection[str], holidays: Collection[date]) -> date:
    """Return ``day`` if it is a working day, otherwise the next working day."""
    _require_work_days(work_days)
    current = _as_date(day)
    while not _counts(current, work_days, holidays):
        current += _ONE_DAY
    return current


def advance(
    start: date,
    units: int,
    work_days: Collection[str],
    holidays: Collection[date],
    mode: DurationMode = DurationMode.WORKING,
) -> date:
    """Move ``units`` counted days forward from ``start``.

    Working mode walks day by day and counts a day only when it is a work day
    and not a holiday. Elapsed mode counts every calendar day.
    """
    start = _as_date(start)
    if mode == DurationMode.ELAPSED:
        return start + timedelta(days=units)

    _require_work_days(work_days)
    current = start
    counted = 0
    while counted < units:
        current += _ONE_DAY
        if _counts(current, work_days, holidays):
            counted += 1
    return current


def add_working_days(
    start: date, days: int, work_days: Collection[str], holidays: Collection[date]
) -> date:
    """Return the last day of a span of ``days`` working days beginning at ``start``.

    ``start`` counts as the first day when it is a working day; a one-day task
    starting Monday ends Monday. Zero days returns ``start`` unchanged.
    """
    if days <= 0:
        return _as_date(start)
    first = next_working_day(start, work_days, holidays)
    return advance(first, days - 1, work_days, holidays, DurationMode.WORKING)


def add_elapsed_days(start: date, days: int) -> date:
    """Add calendar days unconditionally."""
    return _as_date(start) + timedelta(days=days)


def span_end(
    start: date,
    days: int,
    work_days: Collection[str],
    holidays: Collection[date],
    mode: DurationMode = DurationMode.WORKING,
) -> date:
    """Return the last day occupied by a task of ``days`` units starting at ``start``."""
    if mode == DurationMode.ELAPSED:
        return add_elapsed_days(start, max(days - 1, 0))
    return add_working_days(start, days, work_days, holidays)


def count_working_days(
    start: date, end: date, work_days: Collection[str], holidays: Collection[date]
) -> int:
    """Count working days in the half-open range ``[start, end)``."""
    current = _as_date(start)
    end = _as_date(end)
    count = 0
    while current < end:
        if _counts(current, work_days, holidays):
            count += 1
        current += _ONE_DAY
    return count


class CalendarTranslator:
    """Pins simulation units to calendar dates.

    Unit 0 is the earliest effective start date of any task. Each task's own
    effective start (task > group > global) becomes a release unit that the
    simulation must not start it before.
    """

    def __init__(self, config: CalendarConfig) -> None:
        self.config = config
        self.work_days = frozenset(config.work_days)
        self.holidays = frozenset(config.holidays)
        self.mode = config.duration_mode
        self.origin: date | None = None
        # Cache of unit -> date; valid for the lifetime of one origin
        self._date_cache: dict[int, date] = {}

    def effective_start_date(self, task: Task, group: TaskGroup | None) -> date:
        """Resolve the start date with precedence task > group > global."""
        if task.start_date is not None:
            return _as_date(task.start_date)
        if group is not None and group.start_date is not None:
            return _as_date(group.start_date)
        return self.config.start_date

    def _anchor(self, day: date) -> date:
        if self.mode == DurationMode.WORKING:
            return next_working_day(day, self.work_days, self.holidays)
        return day

    def release_units(
        self, tasks: Iterable[Task], assignments: dict[str, TaskGroup | None]
    ) -> dict[str, int]:
        """Compute each task's release unit and fix the calendar origin.

        Args:
            tasks: Tasks in input order
            assignments: Task name -> effective bandwidth group

        Returns:
            Task name -> earliest unit at which the task may start
        """
        anchors = {
            task.name: self._anchor(self.effective_start_date(task, assignments.get(task.name)))
            for task in tasks
        }
        self.origin = min(anchors.values(), default=self._anchor(self.config.start_date))
        self._date_cache = {0: self.origin}
        logger.debug(f"  Calendar origin (unit 0): {self.origin} ({self.mode.value} mode)")

        releases: dict[str, int] = {}
        for name, anchor in anchors.items():
            if self.mode == DurationMode.WORKING:
                releases[name] = count_working_days(
                    self.origin, anchor, self.work_days, self.holidays
                )
            else:
                releases[name] = (anchor - self.origin).days
        return releases

    def date_for_unit(self, unit: int) -> date:
        """Return the calendar date occupied by simulation unit ``unit``."""
        if self.origin is None:
            raise RuntimeError("release_units() must run before translating units to dates")
        if unit not in self._date_cache:
            # Walk from the closest cached unit below
            base = max(u for u in self._date_cache if u <= unit)
            self._date_cache[unit] = advance(
                self._date_cache[base], unit - base, self.work_days, self.holidays, self.mode
            )
        return self._date_cache[unit]

    def apply_dates(self, scheduled_tasks: Iterable[ScheduledTask]) -> None:
        """Fill ``start_date``/``end_date`` on every scheduled task.

        The end date is the last day the task occupies, so a two-unit task
        starting Wednesday ends Thursday.
        """
        for task in scheduled_tasks:
            if task.start_time is None or task.end_time is None:
                continue
            start_unit = math.floor(task.start_time)
            task.start_date = self.date_for_unit(start_unit)
            if task.end_time <= task.start_time:
                task.end_date = task.start_date
            else:
                end_unit = max(start_unit, math.ceil(task.end_time) - 1)
                task.end_date = self.date_for_unit(end_unit)
