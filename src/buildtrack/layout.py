"""Arrow layout engine: row geometry capture and connector recomputation.

The engine watches a live schedule grid through an explicit subscription on
its layout events. Every event runs one full synchronous pass that rebuilds
the work positions and arrows from scratch and replaces the previous snapshot
in a single assignment.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Protocol

from .logger import debug_enabled, get_logger
from .models import WorkDependency
from .routing import Arrow, synthesize_arrows
from .timeaxis import ViewMode, x_position_of

logger = get_logger()

# Row attributes read by capture_positions
ATTR_WORK_ID = "data-work-id"
ATTR_PLAN_START = "data-plan-start"
ATTR_PLAN_END = "data-plan-end"
ATTR_ACTUAL_START = "data-actual-start"
ATTR_ACTUAL_END = "data-actual-end"


class LayoutEventKind(str, Enum):
    """Notifications that invalidate the current layout."""

    RESIZE = "resize"
    MUTATION = "mutation"
    SCROLL = "scroll"


LayoutListener = Callable[[LayoutEventKind], None]


class LayoutEvents:
    """Subscription registry for layout-changed notifications."""

    def __init__(self) -> None:
        self._listeners: list[LayoutListener] = []

    def subscribe(self, listener: LayoutListener) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, kind: LayoutEventKind) -> None:
        for listener in list(self._listeners):
            listener(kind)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


@dataclass(slots=True, frozen=True)
class RowElement:
    """A rendered grid row: its tag attributes and bounding box."""

    attributes: dict[str, str]
    top: float
    height: float

    def get_attribute(self, name: str) -> str | None:
        return self.attributes.get(name)


class ScheduleGridView(Protocol):
    """The live schedule grid as seen by the layout engine."""

    events: LayoutEvents

    @property
    def is_mounted(self) -> bool: ...

    @property
    def has_body(self) -> bool: ...

    @property
    def bounding_top(self) -> float: ...

    @property
    def scroll_top(self) -> float: ...

    @property
    def scroll_height(self) -> float: ...

    def rows(self) -> list[RowElement]: ...


@dataclass(slots=True, frozen=True)
class WorkPosition:
    """Geometry of one work row for the current layout pass."""

    work_id: int
    top: float
    height: float
    plan_start_x: float | None = None
    plan_end_x: float | None = None
    actual_start_x: float | None = None
    actual_end_x: float | None = None


def _default_positions() -> dict[int, WorkPosition]:
    return {}


def _default_arrows() -> list[Arrow]:
    return []


@dataclass(slots=True, frozen=True)
class LayoutSnapshot:
    """Output of one layout pass."""

    positions: dict[int, WorkPosition] = field(default_factory=_default_positions)
    content_height: float = 0.0
    arrows: list[Arrow] = field(default_factory=_default_arrows)


def _parse_work_id(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        work_id = int(raw.strip())
    except ValueError:
        return None
    return work_id if work_id > 0 else None


def capture_positions(
    grid: ScheduleGridView,
    time_units: list[date],
    cell_width: float,
    view_mode: ViewMode,
) -> dict[int, WorkPosition] | None:
    """Read the geometry of every tagged work row in the grid.

    Row tops are made relative to the scrollable content (not the viewport).

    Args:
        grid: The live schedule grid
        time_units: Buckets of the time axis
        cell_width: Bucket width in pixels
        view_mode: Granularity of ``time_units``

    Returns:
        Work ID -> WorkPosition, or None when the grid cannot be read
    """
    if not grid.is_mounted or not grid.has_body:
        return None

    origin = grid.bounding_top
    scroll_top = grid.scroll_top

    def to_x(raw: str | None) -> float | None:
        return x_position_of(raw or None, time_units, cell_width, view_mode)

    positions: dict[int, WorkPosition] = {}
    for row in grid.rows():
        work_id = _parse_work_id(row.get_attribute(ATTR_WORK_ID))
        if work_id is None:
            continue
        positions[work_id] = WorkPosition(
            work_id=work_id,
            top=row.top - origin + scroll_top,
            height=row.height,
            plan_start_x=to_x(row.get_attribute(ATTR_PLAN_START)),
            plan_end_x=to_x(row.get_attribute(ATTR_PLAN_END)),
            actual_start_x=to_x(row.get_attribute(ATTR_ACTUAL_START)),
            actual_end_x=to_x(row.get_attribute(ATTR_ACTUAL_END)),
        )
    return positions


class ArrowLayoutEngine:
    """Keeps dependency arrows in sync with a live schedule grid."""

    def __init__(  # noqa: PLR0913 - mirrors the inputs of a layout pass
        self,
        grid: ScheduleGridView,
        dependencies: Iterable[WorkDependency],
        time_units: list[date],
        cell_width: float,
        view_mode: ViewMode = ViewMode.DAYS,
        *,
        lag_suffix: str = "d",
    ):
        self.grid = grid
        self.dependencies = list(dependencies)
        self.time_units = list(time_units)
        self.cell_width = cell_width
        self.view_mode = view_mode
        self.lag_suffix = lag_suffix
        self.snapshot = LayoutSnapshot()
        self.passes = 0
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def positions(self) -> dict[int, WorkPosition]:
        return self.snapshot.positions

    @property
    def arrows(self) -> list[Arrow]:
        return self.snapshot.arrows

    @property
    def content_height(self) -> float:
        return self.snapshot.content_height

    @property
    def overlay_width(self) -> float:
        """Width of the overlay: the full time axis."""
        return len(self.time_units) * self.cell_width

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self) -> None:
        """Subscribe to the grid's layout events and run an initial pass."""
        if self._unsubscribe is None:
            self._unsubscribe = self.grid.events.subscribe(self._on_layout_event)
        self.recompute()

    def detach(self) -> None:
        """Stop listening to the grid."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def set_dependencies(self, dependencies: Iterable[WorkDependency]) -> None:
        self.dependencies = list(dependencies)
        self.recompute()

    def set_time_axis(self, time_units: list[date], cell_width: float | None = None) -> None:
        self.time_units = list(time_units)
        if cell_width is not None:
            self.cell_width = cell_width
        self.recompute()

    def set_view_mode(self, view_mode: ViewMode, time_units: list[date]) -> None:
        """Switch granularity; the buckets change with it."""
        self.view_mode = view_mode
        self.time_units = list(time_units)
        self.recompute()

    def _on_layout_event(self, kind: LayoutEventKind) -> None:
        logger.debug(f"Layout event: {kind.value}")
        self.recompute()

    def recompute(self) -> bool:
        """Run one full layout pass.

        Returns:
            False when the grid could not be read and the pass was skipped
        """
        positions = capture_positions(self.grid, self.time_units, self.cell_width, self.view_mode)
        if positions is None:
            logger.debug("Layout pass skipped: grid not mounted")
            return False

        arrows = (
            synthesize_arrows(self.dependencies, positions, self.lag_suffix)
            if self.dependencies
            else []
        )
        self.snapshot = LayoutSnapshot(
            positions=positions,
            content_height=self.grid.scroll_height,
            arrows=arrows,
        )
        self.passes += 1

        if debug_enabled():
            logger.debug(
                f"Layout pass {self.passes}: {len(positions)} row(s), "
                f"{len(arrows)}/{len(self.dependencies)} arrow(s), "
                f"height {self.snapshot.content_height:g}"
            )
        return True
