"""Dependency date constraints: earliest permissible actual start/end of a work.

Every predecessor constraint must hold at once, so the binding constraint is
the latest candidate date. Dates are compared at calendar-day granularity and
lag is plain calendar-day addition.

Nothing in this module raises on bad input: an unparseable or missing date,
or a dependency of unrecognised kind, simply contributes no candidate.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from .logger import get_logger
from .models import DependencyConstraint, WorkDateInfo, WorkDependency

if TYPE_CHECKING:
    from .models import DateValue, Project

logger = get_logger()


def parse_date(value: DateValue | datetime) -> date | None:
    """Parse a date string, date or datetime into a calendar date.

    Args:
        value: ISO date ("2024-01-10"), ISO datetime ("2024-01-10T08:00"),
               date/datetime object, or None

    Returns:
        The calendar day, or None if absent or unparseable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def effective_start(dates: WorkDateInfo) -> date | None:
    """Actual start if recorded, else planned start."""
    return parse_date(dates.actual_start_date) or parse_date(dates.plan_start_date)


def effective_end(dates: WorkDateInfo) -> date | None:
    """Actual end if recorded, else planned end."""
    return parse_date(dates.actual_end_date) or parse_date(dates.plan_end_date)


def _candidate(constraint: DependencyConstraint, *, for_start: bool) -> date | None:
    """Date implied by one constraint, if it governs the requested side.

    Constraints of an unrecognised kind imply nothing.
    """
    kind = constraint.kind
    if kind is None:
        return None
    if not (kind.constrains_start if for_start else kind.constrains_end):
        return None

    if kind.from_predecessor_start:
        # SS / SF: predecessor start + lag
        anchor = effective_start(constraint.predecessor_dates)
        offset = constraint.lag_days
    else:
        # FS / FF: the day after predecessor end, + lag
        anchor = effective_end(constraint.predecessor_dates)
        offset = 1 + constraint.lag_days

    if anchor is None:
        return None
    try:
        return anchor + timedelta(days=offset)
    except OverflowError:
        return None


def _latest(candidates: Iterable[date | None]) -> date | None:
    present = [c for c in candidates if c is not None]
    return max(present) if present else None


def compute_min_start_date(constraints: list[DependencyConstraint]) -> date | None:
    """Earliest permissible actual start of a work.

    FS contributes predecessor end + 1 + lag, SS contributes predecessor
    start + lag. FF and SF do not constrain the start.

    Args:
        constraints: Incoming constraints of the successor work

    Returns:
        The latest candidate, or None if no constraint yields one
    """
    if not constraints:
        return None
    return _latest(_candidate(c, for_start=True) for c in constraints)


def compute_min_end_date(
    constraints: list[DependencyConstraint], actual_start_date: DateValue | datetime
) -> date | None:
    """Earliest permissible actual end of a work.

    FF contributes predecessor end + 1 + lag, SF contributes predecessor
    start + lag. FS and SS do not constrain the end. The work's own actual
    start overrides the dependency floor when it is later, since an end can
    never precede its start.

    Args:
        constraints: Incoming constraints of the successor work
        actual_start_date: The successor's chosen actual start, if any

    Returns:
        The later of the dependency floor and the actual start; None only if
        both are absent
    """
    dep_min = _latest(_candidate(c, for_start=False) for c in constraints)
    start = parse_date(actual_start_date)
    if start is not None and (dep_min is None or start > dep_min):
        return start
    return dep_min


def _calendar_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_date_blocked(day: date | datetime, min_allowed_date: date | datetime | None) -> bool:
    """Whether ``day`` falls on a calendar day before ``min_allowed_date``.

    Time of day is ignored on both sides.
    """
    if min_allowed_date is None:
        return False
    return _calendar_day(day) < _calendar_day(min_allowed_date)


def get_disabled_days(
    min_allowed_date: date | datetime | None,
) -> Callable[[date | datetime], bool]:
    """Build a "day disabled" predicate for a date-selection control."""
    if min_allowed_date is None:
        return lambda _day: False
    return lambda day: is_date_blocked(day, min_allowed_date)


def constraints_for_work(
    work_id: int,
    dependencies: Iterable[WorkDependency],
    date_infos: Mapping[int, WorkDateInfo],
) -> list[DependencyConstraint]:
    """Build the incoming constraints of a work from dependency records.

    Records whose predecessor has no date snapshot are skipped.

    Args:
        work_id: The successor work
        dependencies: All dependency records of the project
        date_infos: Work ID -> date snapshot

    Returns:
        One constraint per resolvable incoming record
    """
    constraints: list[DependencyConstraint] = []
    for dep in dependencies:
        if dep.work_id != work_id:
            continue
        predecessor = date_infos.get(dep.depends_on_work_id)
        if predecessor is None:
            logger.checks(
                f"Work {work_id}: predecessor {dep.depends_on_work_id} unknown, "
                f"ignoring dependency {dep.id}"
            )
            continue
        constraints.append(
            DependencyConstraint(
                dependency_type=dep.dependency_type,
                lag_days=dep.lag_days,
                predecessor_work_id=dep.depends_on_work_id,
                predecessor_dates=predecessor,
            )
        )
    return constraints


@dataclass(slots=True, frozen=True)
class MinDates:
    """Minimum permissible actual dates of a work."""

    min_start: date | None
    min_end: date | None


def min_dates_for_work(
    project: Project, work_id: int, actual_start_date: DateValue | datetime = None
) -> MinDates:
    """Minimum actual start/end of a work in a loaded project.

    Args:
        project: The project holding works and dependency records
        work_id: The successor work
        actual_start_date: Chosen actual start; defaults to the recorded one

    Returns:
        MinDates for the work (both None for an unknown work)
    """
    work = project.get_work(work_id)
    if work is None:
        return MinDates(min_start=None, min_end=None)

    constraints = constraints_for_work(work_id, project.dependencies, project.date_infos())
    if actual_start_date is None:
        actual_start_date = work.actual_start_date

    result = MinDates(
        min_start=compute_min_start_date(constraints),
        min_end=compute_min_end_date(constraints, actual_start_date),
    )
    logger.checks(
        f"Work {work_id}: {len(constraints)} constraint(s), "
        f"min start {result.min_start}, min end {result.min_end}"
    )
    return result
