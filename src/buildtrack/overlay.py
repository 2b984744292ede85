"""SVG rendering of the dependency overlay and schedule bars."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from html import escape

from .config import ArrowsConfig, ChartConfig
from .layout import ArrowLayoutEngine
from .models import Work
from .routing import Arrow, format_number
from .timeaxis import CellState, ViewMode, classify_cell

SVG_NS = "http://www.w3.org/2000/svg"
OVERLAY_Z_INDEX = 25

# Bar colours per cell state
PLAN_COLOR = "#3b82f6"
ACTUAL_COLOR = "#f59e0b"
DELAY_COLOR = "#ef4444"
AHEAD_COLOR = "#22c55e"
GRID_LINE_COLOR = "#e5e7eb"

LABEL_WIDTH = 28
LABEL_HEIGHT = 16


def _rect(x: float, y: float, width: float, height: float, fill: str) -> str:
    return (
        f'<rect x="{format_number(x)}" y="{format_number(y)}" '
        f'width="{format_number(width)}" height="{format_number(height)}" fill="{fill}" />'
    )


def _render_arrow(arrow: Arrow, config: ArrowsConfig) -> list[str]:
    color = escape(config.color_for(arrow.dependency_type), quote=True)
    marker_id = f"arrow-{arrow.dependency_id}"
    lines = [
        f'  <g data-dependency-id="{arrow.dependency_id}" '
        f'data-dependency-type="{arrow.dependency_type.value}">',
        "    <defs>",
        f'      <marker id="{marker_id}" markerWidth="6" markerHeight="6" '
        'refX="5" refY="3" orient="auto">',
        f'        <path d="M 0 0 L 6 3 L 0 6 z" fill="{color}" />',
        "      </marker>",
        "    </defs>",
        f'    <path d="{arrow.path_data}" stroke="{color}" '
        f'stroke-width="{format_number(config.stroke_width)}" fill="none" '
        f'marker-end="url(#{marker_id})" opacity="{format_number(config.opacity)}" '
        'stroke-linejoin="round" />',
    ]

    if arrow.label:
        label_x, label_y = arrow.label_position
        box_x = format_number(label_x - LABEL_WIDTH / 2)
        box_y = format_number(label_y - LABEL_HEIGHT / 2)
        lines.append(
            f'    <rect x="{box_x}" y="{box_y}" width="{LABEL_WIDTH}" height="{LABEL_HEIGHT}" '
            f'rx="3" fill="white" stroke="{color}" stroke-width="1" opacity="0.95" />'
        )
        lines.append(
            f'    <text x="{format_number(label_x)}" y="{format_number(label_y + 4)}" '
            f'text-anchor="middle" font-size="10" fill="{color}" font-weight="600">'
            f"{escape(arrow.label)}</text>"
        )

    lines.append("  </g>")
    return lines


def render_overlay_svg(
    arrows: Iterable[Arrow],
    width: float,
    height: float,
    config: ArrowsConfig | None = None,
) -> str:
    """Render the arrow overlay as a standalone SVG element.

    The overlay is positioned absolutely over the grid's top-left corner and
    does not intercept pointer events.

    Args:
        arrows: Routed arrows of the current layout pass
        width: Width of the full time axis in pixels
        height: Height of the scrollable content (0 = fill the container)
        config: Arrow appearance; defaults if omitted

    Returns:
        SVG markup
    """
    config = config or ArrowsConfig()
    height_attr = format_number(height) if height else "100%"
    lines = [
        f'<svg xmlns="{SVG_NS}" width="{format_number(width)}" height="{height_attr}" '
        f'style="position: absolute; top: 0; left: 0; pointer-events: none; '
        f'z-index: {OVERLAY_Z_INDEX}; overflow: visible">'
    ]
    for arrow in arrows:
        lines.extend(_render_arrow(arrow, config))
    lines.append("</svg>")
    return "\n".join(lines)


def _actual_color(state: CellState) -> str | None:
    if state.is_delay:
        return DELAY_COLOR
    if state.is_ahead:
        return AHEAD_COLOR
    if state.in_actual:
        return ACTUAL_COLOR
    return None


def _render_bars(  # noqa: PLR0913 - bar drawing needs the full grid geometry
    lines: list[str],
    work: Work,
    top: float,
    height: float,
    time_units: list[date],
    cell_width: float,
    view_mode: ViewMode,
) -> None:
    """Planned range in the upper half of the row, actual range in the lower."""
    half = height / 2
    dates = work.date_info
    for index, unit in enumerate(time_units):
        state = classify_cell(unit, view_mode, dates)
        x = index * cell_width
        if state.in_plan:
            lines.append("    " + _rect(x, top, cell_width, half, PLAN_COLOR))
        color = _actual_color(state)
        if color:
            lines.append("    " + _rect(x, top + half, cell_width, half, color))


def render_schedule_svg(
    engine: ArrowLayoutEngine,
    works: Iterable[Work],
    *,
    chart: ChartConfig | None = None,
    arrows: ArrowsConfig | None = None,
    title: str | None = None,
) -> str:
    """Render a complete chart: time header, work bars and the arrow overlay.

    Rows are drawn at the positions captured by the engine's last pass;
    works without a position (hidden rows) are left out.
    """
    chart = chart or ChartConfig()
    arrows = arrows or ArrowsConfig()
    width = engine.overlay_width
    height = engine.content_height
    cell_width = engine.cell_width

    lines = [
        f'<svg xmlns="{SVG_NS}" width="{format_number(width)}" '
        f'height="{format_number(height)}">'
    ]
    if title:
        lines.append(f"  <title>{escape(title)}</title>")

    lines.append('  <g class="time-axis">')
    label_y = format_number(chart.header_height / 2)
    for index, unit in enumerate(engine.time_units):
        x = index * cell_width
        lines.append(
            f'    <line x1="{format_number(x)}" y1="0" x2="{format_number(x)}" '
            f'y2="{format_number(height)}" stroke="{GRID_LINE_COLOR}" />'
        )
        lines.append(
            f'    <text x="{format_number(x + cell_width / 2)}" y="{label_y}" '
            f'text-anchor="middle" font-size="9">{unit.strftime("%d.%m")}</text>'
        )
    lines.append("  </g>")

    if chart.show_bars:
        lines.append('  <g class="bars">')
        for work in works:
            position = engine.positions.get(work.id)
            if position is None:
                continue
            lines.append(f'   <g data-work-id="{work.id}">')
            _render_bars(
                lines,
                work,
                position.top,
                position.height,
                engine.time_units,
                cell_width,
                engine.view_mode,
            )
            lines.append("   </g>")
        lines.append("  </g>")

    lines.append('  <g class="dependencies">')
    for arrow in engine.arrows:
        lines.extend(_render_arrow(arrow, arrows))
    lines.append("  </g>")
    lines.append("</svg>")
    return "\n".join(lines)
