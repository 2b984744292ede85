"""Time axis of the schedule grid: window, buckets, and date -> pixel mapping."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from .constraints import parse_date
from .models import DateValue, Work, WorkDateInfo

DAYS_PER_WEEK = 7
WINDOW_LEAD_DAYS = 7  # Days shown before the earliest work date
WINDOW_TAIL_DAYS = 14  # Days shown after the latest work date
EMPTY_WINDOW_DAYS = 60  # Window length when no work has a date


class ViewMode(str, Enum):
    """Granularity of the time axis."""

    DAYS = "days"
    WEEKS = "weeks"


@dataclass(slots=True, frozen=True)
class DateRange:
    """Inclusive calendar window of the time axis."""

    start: date
    end: date


@dataclass(slots=True, frozen=True)
class CellState:
    """How one grid cell relates to a work's planned and actual ranges."""

    in_plan: bool = False
    in_actual: bool = False
    is_delay: bool = False
    is_ahead: bool = False


def start_of_week(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


def end_of_week(day: date) -> date:
    """Sunday of the week containing ``day``."""
    return start_of_week(day) + timedelta(days=DAYS_PER_WEEK - 1)


def _as_day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def compute_date_range(works: Iterable[Work], today: date | None = None) -> DateRange:
    """Compute the visible window covering every planned and actual work date.

    The window starts on the Monday a week before the earliest date and ends
    on the Sunday two weeks after the latest. Without any valid date it spans
    the current week through the week sixty days from now.

    Args:
        works: Works shown in the grid
        today: Reference date for the empty case (defaults to today)

    Returns:
        The Monday-to-Sunday aligned DateRange
    """
    found: list[date] = []
    for work in works:
        for value in (
            work.plan_start_date,
            work.plan_end_date,
            work.actual_start_date,
            work.actual_end_date,
        ):
            parsed = parse_date(value)
            if parsed is not None:
                found.append(parsed)

    if not found:
        today = today or date.today()  # noqa: DTZ011
        return DateRange(
            start=start_of_week(today),
            end=end_of_week(today + timedelta(days=EMPTY_WINDOW_DAYS)),
        )

    return DateRange(
        start=start_of_week(min(found) - timedelta(days=WINDOW_LEAD_DAYS)),
        end=end_of_week(max(found) + timedelta(days=WINDOW_TAIL_DAYS)),
    )


def build_time_units(date_range: DateRange, view_mode: ViewMode) -> list[date]:
    """Build the ordered buckets of the time axis.

    Args:
        date_range: Window to cover
        view_mode: DAYS gives one unit per day, WEEKS one Monday per week

    Returns:
        List of bucket start dates
    """
    if date_range.end < date_range.start:
        return []

    if view_mode == ViewMode.DAYS:
        count = (date_range.end - date_range.start).days + 1
        return [date_range.start + timedelta(days=i) for i in range(count)]

    units: list[date] = []
    current = start_of_week(date_range.start)
    while current <= date_range.end:
        units.append(current)
        current += timedelta(days=DAYS_PER_WEEK)
    return units


def x_position_of(
    value: DateValue | datetime,
    time_units: list[date],
    cell_width: float,
    view_mode: ViewMode,
) -> float | None:
    """Map a date to its horizontal pixel position on the time axis.

    Day mode returns the centre of the matching day cell. When no unit
    matches exactly, the day offset from the first unit is used as the index
    if it lies inside the axis. Week mode finds the Monday-start bucket
    containing the date and places the marker at the centre of that day
    within the week column.

    Args:
        value: Date to place (ISO string, date, datetime or None)
        time_units: Ordered bucket start dates
        cell_width: Width of one bucket in pixels
        view_mode: Granularity of ``time_units``

    Returns:
        X coordinate in pixels, or None when absent or outside the window
    """
    day = parse_date(value)
    if day is None or not time_units:
        return None

    if view_mode == ViewMode.DAYS:
        for index, unit in enumerate(time_units):
            if _as_day(unit) == day:
                return index * cell_width + cell_width / 2
        # Assumes a contiguous axis; an axis with gaps maps to the wrong column
        offset = (day - _as_day(time_units[0])).days
        if 0 <= offset < len(time_units):
            return offset * cell_width + cell_width / 2
        return None

    for index, unit in enumerate(time_units):
        week_start = _as_day(unit)
        if week_start <= day <= end_of_week(week_start):
            days_into_week = (day - week_start).days
            return index * cell_width + (days_into_week + 0.5) / DAYS_PER_WEEK * cell_width
    return None


def _overlaps(unit_start: date, unit_end: date, start: date, end: date) -> bool:
    return (
        start <= unit_start <= end
        or start <= unit_end <= end
        or (unit_start < start and unit_end > end)
    )


def classify_cell(unit: date, view_mode: ViewMode, dates: WorkDateInfo) -> CellState:
    """Classify a grid cell against a work's planned and actual ranges.

    A delay span runs from the planned end to a later actual end; an ahead
    span runs from an earlier actual end to the planned end.
    """
    unit_start = _as_day(unit)
    unit_end = end_of_week(unit_start) if view_mode == ViewMode.WEEKS else unit_start

    plan_start = parse_date(dates.plan_start_date)
    plan_end = parse_date(dates.plan_end_date)
    actual_start = parse_date(dates.actual_start_date)
    actual_end = parse_date(dates.actual_end_date)

    in_plan = (
        plan_start is not None
        and plan_end is not None
        and _overlaps(unit_start, unit_end, plan_start, plan_end)
    )
    in_actual = (
        actual_start is not None
        and actual_end is not None
        and _overlaps(unit_start, unit_end, actual_start, actual_end)
    )

    is_delay = is_ahead = False
    if plan_end is not None and actual_end is not None:
        is_delay = actual_end > plan_end and plan_end <= unit_start <= actual_end
        is_ahead = actual_end < plan_end and actual_end <= unit_start <= plan_end

    return CellState(in_plan=in_plan, in_actual=in_actual, is_delay=is_delay, is_ahead=is_ahead)
