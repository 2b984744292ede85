"""Command-line interface for buildtrack."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from .config import BuildtrackConfig, discover_config
from .constraints import get_disabled_days, min_dates_for_work
from .dependencies import available_predecessors
from .exceptions import BuildtrackError
from .grid import StaticScheduleGrid
from .layout import ArrowLayoutEngine
from .loader import load_project
from .logger import get_logger, setup_logger
from .models import Project, dependency_type_label
from .overlay import render_overlay_svg, render_schedule_svg
from .session import ProjectSession, YamlSessionStore
from .timeaxis import ViewMode, build_time_units, compute_date_range

app = typer.Typer(
    name="buildtrack",
    help="Construction schedule dependency constraints and arrow layout",
    add_completion=False,
)
session_app = typer.Typer(help="Remember the current project between runs")
app.add_typer(session_app, name="session")

logger = get_logger()


class DateField(str, Enum):
    """Which actual date of a work a picker edits."""

    START = "start"
    END = "end"


@dataclass
class CliState:
    """Options shared by every command."""

    config_path: Path | None = None


ProjectArg = Annotated[
    Path | None,
    typer.Argument(help="Path to the project YAML file (default: current session project)"),
]


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: buildtrack_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for buildtrack commands."""
    setup_logger(verbose)
    ctx.obj = CliState(config_path=config)


def _state(ctx: typer.Context) -> CliState:
    return ctx.obj if isinstance(ctx.obj, CliState) else CliState()


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _config(ctx: typer.Context, project_path: Path | None) -> BuildtrackConfig:
    try:
        return discover_config(project_path, _state(ctx).config_path)
    except (FileNotFoundError, ValueError) as e:
        raise _fail(str(e)) from e


def _session(config: BuildtrackConfig) -> ProjectSession:
    return ProjectSession.restore(YamlSessionStore(config.session.store_path))


def _resolve_project_path(ctx: typer.Context, file: Path | None) -> Path:
    if file is not None:
        return file
    current = _session(_config(ctx, None)).current_project
    if current is None:
        raise _fail("No project given and no current project (see 'buildtrack session switch')")
    return current


def _load(ctx: typer.Context, file: Path | None) -> tuple[Project, Path]:
    path = _resolve_project_path(ctx, file)
    try:
        return load_project(path), path
    except BuildtrackError as e:
        raise _fail(str(e)) from e


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise _fail(f"Invalid date format '{value}'. Use YYYY-MM-DD") from e


def _build_engine(
    project: Project,
    config: BuildtrackConfig,
    view: ViewMode | None,
    cell_width: float | None,
) -> tuple[StaticScheduleGrid, ArrowLayoutEngine]:
    view_mode = view or config.chart.view_mode
    time_units = build_time_units(compute_date_range(project.all_works()), view_mode)
    grid = StaticScheduleGrid.from_project(
        project,
        row_height=config.chart.row_height,
        header_height=config.chart.header_height,
    )
    engine = ArrowLayoutEngine(
        grid,
        project.dependencies,
        time_units,
        cell_width or config.chart.cell_width,
        view_mode,
        lag_suffix=config.arrows.lag_suffix,
    )
    engine.attach()
    return grid, engine


def _show(value: date | None) -> str:
    return value.isoformat() if value else "-"


@app.command()
def validate(ctx: typer.Context, file: ProjectArg = None) -> None:
    """Load a project and check references and cycles."""
    project, path = _load(ctx, file)
    typer.echo(
        f"{path}: OK ({len(project.blocks)} block(s), {len(project.all_groups())} group(s), "
        f"{len(project.all_works())} work(s), {len(project.dependencies)} dependenc(ies))"
    )


@app.command("min-dates")
def min_dates(
    ctx: typer.Context,
    work_id: Annotated[int, typer.Argument(help="Work to evaluate")],
    file: ProjectArg = None,
    *,
    actual_start: Annotated[
        str | None,
        typer.Option("--actual-start", help="Chosen actual start (YYYY-MM-DD)"),
    ] = None,
) -> None:
    """Show the earliest permissible actual start and end of a work."""
    project, _ = _load(ctx, file)
    if project.get_work(work_id) is None:
        raise _fail(f"Unknown work: {work_id}")

    start = _parse_day(actual_start) if actual_start else None
    result = min_dates_for_work(project, work_id, start)
    typer.echo(f"min_start: {_show(result.min_start)}")
    typer.echo(f"min_end: {_show(result.min_end)}")


@app.command()
def blocked(
    ctx: typer.Context,
    work_id: Annotated[int, typer.Argument(help="Work whose date picker is checked")],
    day: Annotated[str, typer.Argument(help="Date to check (YYYY-MM-DD)")],
    file: ProjectArg = None,
    *,
    field: Annotated[
        DateField, typer.Option("--field", help="Actual date being picked")
    ] = DateField.START,
) -> None:
    """Check whether a date may be picked as a work's actual start or end."""
    project, _ = _load(ctx, file)
    if project.get_work(work_id) is None:
        raise _fail(f"Unknown work: {work_id}")

    target = _parse_day(day)
    result = min_dates_for_work(project, work_id)
    minimum = result.min_start if field == DateField.START else result.min_end
    is_disabled = get_disabled_days(minimum)
    if is_disabled(target):
        typer.echo(f"blocked (earliest allowed: {_show(minimum)})")
    else:
        typer.echo("allowed")


@app.command()
def positions(
    ctx: typer.Context,
    file: ProjectArg = None,
    *,
    view: Annotated[ViewMode | None, typer.Option("--view", help="Time axis granularity")] = None,
    cell_width: Annotated[
        float | None, typer.Option("--cell-width", help="Time unit width in pixels", min=1)
    ] = None,
) -> None:
    """Print the row geometry and date anchors of every work."""
    project, path = _load(ctx, file)
    config = _config(ctx, path)
    _, engine = _build_engine(project, config, view, cell_width)

    def x(value: float | None) -> str:
        return "-" if value is None else f"{value:g}"

    for position in engine.positions.values():
        typer.echo(
            f"{position.work_id}: top={position.top:g} height={position.height:g} "
            f"plan=[{x(position.plan_start_x)}, {x(position.plan_end_x)}] "
            f"actual=[{x(position.actual_start_x)}, {x(position.actual_end_x)}]"
        )
    for arrow in engine.arrows:
        label = f" {arrow.label}" if arrow.label else ""
        typer.echo(
            f"dependency {arrow.dependency_id} {arrow.dependency_type.value}{label}: "
            f"{arrow.path_data}"
        )


@app.command()
def overlay(  # noqa: PLR0913 - CLI command needs multiple options
    ctx: typer.Context,
    file: ProjectArg = None,
    *,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    view: Annotated[ViewMode | None, typer.Option("--view", help="Time axis granularity")] = None,
    cell_width: Annotated[
        float | None, typer.Option("--cell-width", help="Time unit width in pixels", min=1)
    ] = None,
    arrows_only: Annotated[
        bool,
        typer.Option("--arrows-only", help="Render only the transparent arrow overlay"),
    ] = False,
) -> None:
    """Render the schedule chart, or just its dependency arrow overlay, as SVG."""
    project, path = _load(ctx, file)
    config = _config(ctx, path)
    _, engine = _build_engine(project, config, view, cell_width)

    if not arrows_only:
        svg = render_schedule_svg(
            engine,
            project.all_works(),
            chart=config.chart,
            arrows=config.arrows,
            title=project.metadata.name,
        )
    else:
        svg = render_overlay_svg(
            engine.arrows, engine.overlay_width, engine.content_height, config.arrows
        )

    if output:
        output.write_text(svg + "\n", encoding="utf-8")
        logger.changes(f"Wrote {len(engine.arrows)} arrow(s) to {output}")
        typer.echo(f"Overlay written to {output}")
    else:
        typer.echo(svg)


@app.command()
def dependencies(
    ctx: typer.Context,
    work_id: Annotated[int, typer.Argument(help="Work to inspect")],
    file: ProjectArg = None,
) -> None:
    """List a work's predecessors, its successors, and the works still available as predecessors."""
    project, _ = _load(ctx, file)
    work = project.get_work(work_id)
    if work is None:
        raise _fail(f"Unknown work: {work_id}")

    typer.echo(f"{work.id} {work.name}")
    incoming = project.dependencies_of(work_id)
    if not incoming:
        typer.echo("  no predecessors")
    for dep in incoming:
        predecessor = project.get_work(dep.depends_on_work_id)
        name = predecessor.name if predecessor else f"ID: {dep.depends_on_work_id}"
        lag = f" lag {dep.lag_days:+d}d" if dep.lag_days else ""
        typer.echo(f"  [{dep.id}] {dependency_type_label(dep.dependency_type)} {name}{lag}")

    successors = sorted({d.work_id for d in project.dependents_of(work_id)})
    typer.echo(f"successors: {', '.join(str(s) for s in successors) or '-'}")

    candidates = available_predecessors(project, work_id)
    typer.echo(f"available predecessors: {', '.join(str(w.id) for w in candidates) or '-'}")


@session_app.command("show")
def session_show(ctx: typer.Context) -> None:
    """Show the current project."""
    session = _session(_config(ctx, None))
    typer.echo(str(session.current_project) if session.current_project else "no current project")


@session_app.command("switch")
def session_switch(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Project YAML file to make current")],
) -> None:
    """Make a project the current one."""
    project, path = _load(ctx, file)
    session = _session(_config(ctx, path))
    session.switch(path)
    typer.echo(f"Current project: {project.metadata.name} ({path})")


def main() -> int:
    """Main entry point."""
    app()
    return 0


if __name__ == "__main__":
    main()
