"""Connector routing between predecessor and successor rows."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .logger import checks_enabled, get_logger
from .models import DependencyType, WorkDependency

if TYPE_CHECKING:
    from .layout import WorkPosition

logger = get_logger()

Point = tuple[float, float]

ARROWHEAD_GAP = 6  # Room left before the end point for the arrowhead marker
ALIGNED_ROW_TOLERANCE = 5  # Rows closer than this are drawn as one straight segment
FORWARD_CLEARANCE = 30  # Minimum horizontal gap for the simple three-segment route
ELBOW_OFFSET = 20  # Vertical leg column of the three-segment route
DETOUR_OFFSET = 25  # Vertical leg columns of the five-segment route
LABEL_RAISE = 3  # Lag label sits this far above the path midpoint


@dataclass(slots=True, frozen=True)
class Arrow:
    """A routed connector for one dependency edge."""

    dependency_id: int
    dependency_type: DependencyType
    lag_days: int
    points: tuple[Point, ...]
    label: str | None
    label_position: Point

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    @property
    def path_data(self) -> str:
        return path_data(self.points)


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def path_data(points: Iterable[Point]) -> str:
    """Format a polyline as SVG path data ("M x y L x y ...")."""
    commands: list[str] = []
    for index, (x, y) in enumerate(points):
        commands.append(f"{'M' if index == 0 else 'L'} {format_number(x)} {format_number(y)}")
    return " ".join(commands)


def _prefer_actual(actual: float | None, planned: float | None) -> float | None:
    return actual if actual is not None else planned


def resolve_anchors(
    dependency_type: DependencyType, source: WorkPosition, target: WorkPosition
) -> tuple[float, float] | None:
    """Resolve the horizontal anchors of an edge.

    The predecessor side uses its start for SS/SF and its end for FS/FF; the
    successor side uses its start for FS/SS and its end for FF/SF. Each side
    prefers the actual date and falls back to the planned one.

    Returns:
        (start_x, end_x), or None when either anchor is missing
    """
    if dependency_type.from_predecessor_start:
        start_x = _prefer_actual(source.actual_start_x, source.plan_start_x)
    else:
        start_x = _prefer_actual(source.actual_end_x, source.plan_end_x)

    if dependency_type.constrains_start:
        end_x = _prefer_actual(target.actual_start_x, target.plan_start_x)
    else:
        end_x = _prefer_actual(target.actual_end_x, target.plan_end_x)

    if start_x is None or end_x is None:
        return None
    return start_x, end_x


def route_path(start: Point, end: Point) -> list[Point]:
    """Route an orthogonal polyline from ``start`` to ``end``.

    - Rows effectively aligned: one horizontal segment.
    - End comfortably to the right: right, vertical, right through a column
      just right of the start.
    - Otherwise: out to the right of the start, down to the row midpoint,
      back left past the end column, then into the end row.

    The last point stops short of ``end`` to leave room for the arrowhead.
    """
    sx, sy = start
    ex, ey = end
    tip = ex - ARROWHEAD_GAP

    if abs(ey - sy) < ALIGNED_ROW_TOLERANCE:
        return [(sx, sy), (tip, ey)]

    if ex > sx + FORWARD_CLEARANCE:
        elbow_x = sx + ELBOW_OFFSET
        return [(sx, sy), (elbow_x, sy), (elbow_x, ey), (tip, ey)]

    out_x = sx + DETOUR_OFFSET
    back_x = ex - DETOUR_OFFSET
    mid_y = (sy + ey) / 2
    return [
        (sx, sy),
        (out_x, sy),
        (out_x, mid_y),
        (back_x, mid_y),
        (back_x, ey),
        (tip, ey),
    ]


def lag_label(lag_days: int, suffix: str = "d") -> str | None:
    """Label for a dependency lag; only strictly positive lag is labelled."""
    if lag_days > 0:
        return f"+{lag_days}{suffix}"
    return None


def build_arrow(
    dependency: WorkDependency,
    positions: Mapping[int, WorkPosition],
    lag_suffix: str = "d",
) -> Arrow | None:
    """Route one dependency edge.

    Returns:
        The arrow, or None for a missing work or anchor, or an unrecognised kind
    """
    source = positions.get(dependency.depends_on_work_id)
    target = positions.get(dependency.work_id)
    if source is None or target is None:
        return None

    kind = dependency.kind
    if kind is None:
        return None

    anchors = resolve_anchors(kind, source, target)
    if anchors is None:
        return None
    start_x, end_x = anchors

    start = (start_x, source.top + source.height / 2)
    end = (end_x, target.top + target.height / 2)
    return Arrow(
        dependency_id=dependency.id,
        dependency_type=kind,
        lag_days=dependency.lag_days,
        points=tuple(route_path(start, end)),
        label=lag_label(dependency.lag_days, lag_suffix),
        label_position=((start[0] + end[0]) / 2, (start[1] + end[1]) / 2 - LABEL_RAISE),
    )


def synthesize_arrows(
    dependencies: Iterable[WorkDependency],
    positions: Mapping[int, WorkPosition],
    lag_suffix: str = "d",
) -> list[Arrow]:
    """Route every drawable dependency edge.

    Edges referencing a work without a position, or whose anchor dates fall
    outside the time axis, are skipped.
    """
    arrows: list[Arrow] = []
    if not positions:
        return arrows

    for dependency in dependencies:
        arrow = build_arrow(dependency, positions, lag_suffix)
        if arrow is None:
            if checks_enabled():
                logger.checks(f"Skipping dependency {dependency.id} ({dependency}): no anchor")
            continue
        arrows.append(arrow)
    return arrows
