"""In-memory schedule grid for rendering outside a browser."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from .layout import (
    ATTR_ACTUAL_END,
    ATTR_ACTUAL_START,
    ATTR_PLAN_END,
    ATTR_PLAN_START,
    ATTR_WORK_ID,
    LayoutEventKind,
    LayoutEvents,
    RowElement,
)
from .models import Project, Work

DEFAULT_ROW_HEIGHT = 40.0
DEFAULT_HEADER_HEIGHT = 48.0


def _attr(value: str | date | None) -> str:
    if value is None:
        return ""
    return value.isoformat() if isinstance(value, date) else str(value)


class StaticScheduleGrid:
    """A schedule grid laid out at a fixed row height below a header row.

    Implements the ScheduleGridView protocol. Row boxes are reported relative
    to the page like a browser's bounding rectangles, so they move up as the
    grid scrolls.
    """

    def __init__(  # noqa: PLR0913 - layout options are keyword-only
        self,
        works: Iterable[Work],
        *,
        row_height: float = DEFAULT_ROW_HEIGHT,
        header_height: float = DEFAULT_HEADER_HEIGHT,
        viewport_top: float = 0.0,
        viewport_height: float | None = None,
        hidden_group_ids: Iterable[int] | None = None,
    ):
        self.events = LayoutEvents()
        self.row_height = row_height
        self.header_height = header_height
        self.viewport_top = viewport_top
        self.viewport_height = viewport_height
        self.hidden_group_ids: set[int] = set(hidden_group_ids or ())
        self._works = list(works)
        self._scroll_top = 0.0
        self._mounted = True

    @classmethod
    def from_project(cls, project: Project, **kwargs: object) -> StaticScheduleGrid:
        """Build a grid showing every work of a project in display order."""
        return cls(project.all_works(), **kwargs)  # type: ignore[arg-type]

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def has_body(self) -> bool:
        return self._mounted

    @property
    def bounding_top(self) -> float:
        return self.viewport_top

    @property
    def scroll_top(self) -> float:
        return self._scroll_top

    @property
    def scroll_height(self) -> float:
        return self.header_height + len(self.visible_works()) * self.row_height

    def visible_works(self) -> list[Work]:
        return [w for w in self._works if w.group_id not in self.hidden_group_ids]

    def rows(self) -> list[RowElement]:
        first_row_top = self.viewport_top + self.header_height - self._scroll_top
        return [
            RowElement(
                attributes={
                    ATTR_WORK_ID: str(work.id),
                    ATTR_PLAN_START: _attr(work.plan_start_date),
                    ATTR_PLAN_END: _attr(work.plan_end_date),
                    ATTR_ACTUAL_START: _attr(work.actual_start_date),
                    ATTR_ACTUAL_END: _attr(work.actual_end_date),
                },
                top=first_row_top + index * self.row_height,
                height=self.row_height,
            )
            for index, work in enumerate(self.visible_works())
        ]

    def set_works(self, works: Iterable[Work]) -> None:
        self._works = list(works)
        self.events.emit(LayoutEventKind.MUTATION)

    def update_work(self, work: Work) -> None:
        """Replace the row of ``work`` (matched by ID) with its new dates."""
        self._works = [work if w.id == work.id else w for w in self._works]
        self.events.emit(LayoutEventKind.MUTATION)

    def collapse_group(self, group_id: int) -> None:
        self.hidden_group_ids.add(group_id)
        self.events.emit(LayoutEventKind.MUTATION)

    def expand_group(self, group_id: int) -> None:
        self.hidden_group_ids.discard(group_id)
        self.events.emit(LayoutEventKind.MUTATION)

    def scroll_to(self, top: float) -> None:
        """Scroll the container, clamped to the scrollable range."""
        max_scroll = self.scroll_height
        if self.viewport_height is not None:
            max_scroll = max(0.0, self.scroll_height - self.viewport_height)
        self._scroll_top = min(max(0.0, top), max_scroll)
        self.events.emit(LayoutEventKind.SCROLL)

    def resize(self, viewport_height: float) -> None:
        self.viewport_height = viewport_height
        self.events.emit(LayoutEventKind.RESIZE)

    def unmount(self) -> None:
        self._mounted = False
