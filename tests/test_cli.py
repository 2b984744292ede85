"""Tests for CLI commands."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from buildtrack.cli import app

runner = CliRunner()

EXAMPLE = str(Path(__file__).parent.parent / "examples" / "project.yaml")


@pytest.fixture
def session_config(tmp_path: Path) -> str:
    """Config file keeping session state inside the temporary directory."""
    path = tmp_path / "buildtrack_config.yaml"
    path.write_text(f"session:\n  store_path: {tmp_path / 'session.yaml'}\n", encoding="utf-8")
    return str(path)


class TestValidateCommand:
    """Test the validate command."""

    def test_valid_project(self) -> None:
        """Counts are reported for a valid project."""
        result = runner.invoke(app, ["validate", EXAMPLE])

        assert result.exit_code == 0
        assert "OK (1 block(s), 3 group(s), 5 work(s), 4 dependenc(ies))" in result.stdout

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing project file is an error."""
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Error: File not found" in result.output

    def test_cycle(self, tmp_path: Path) -> None:
        """Cycles are reported with their path."""
        path = tmp_path / "cycle.yaml"
        path.write_text(
            """
groups:
  - id: 1
    name: G
    works:
      - {id: 1, name: A}
      - {id: 2, name: B}
dependencies:
  - {work: 1, depends_on: 2}
  - {work: 2, depends_on: 1}
""",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Circular dependency detected: 1 -> 2 -> 1" in result.output


class TestMinDatesCommand:
    """Test the min-dates command."""

    def test_start_and_end_constraints(self) -> None:
        """FS constrains the start, FF with negative lag the end."""
        result = runner.invoke(app, ["min-dates", "111", EXAMPLE])

        assert result.exit_code == 0
        assert "min_start: 2024-01-27" in result.stdout
        assert "min_end: 2024-01-08" in result.stdout

    def test_start_to_start_with_lag(self) -> None:
        result = runner.invoke(app, ["min-dates", "110", EXAMPLE])

        assert result.exit_code == 0
        assert "min_start: 2024-01-12" in result.stdout
        assert "min_end: -" in result.stdout

    def test_chosen_actual_start(self) -> None:
        """A chosen actual start raises the minimum end."""
        result = runner.invoke(app, ["min-dates", "110", EXAMPLE, "--actual-start", "2024-01-20"])

        assert result.exit_code == 0
        assert "min_end: 2024-01-20" in result.stdout

    def test_unknown_work(self) -> None:
        result = runner.invoke(app, ["min-dates", "999", EXAMPLE])

        assert result.exit_code == 1
        assert "Unknown work: 999" in result.output


class TestBlockedCommand:
    """Test the blocked command."""

    def test_blocked_day(self) -> None:
        result = runner.invoke(app, ["blocked", "110", "2024-01-11", EXAMPLE])

        assert result.exit_code == 0
        assert "blocked (earliest allowed: 2024-01-12)" in result.stdout

    def test_allowed_day(self) -> None:
        result = runner.invoke(app, ["blocked", "110", "2024-01-12", EXAMPLE])

        assert result.exit_code == 0
        assert result.stdout.strip() == "allowed"

    def test_end_field(self) -> None:
        """The end picker uses the minimum end."""
        result = runner.invoke(app, ["blocked", "111", "2024-01-07", EXAMPLE, "--field", "end"])

        assert result.exit_code == 0
        assert "blocked (earliest allowed: 2024-01-08)" in result.stdout

    def test_unconstrained_work(self) -> None:
        """Nothing is blocked for a work without predecessors."""
        result = runner.invoke(app, ["blocked", "100", "1999-01-01", EXAMPLE])

        assert result.exit_code == 0
        assert "allowed" in result.stdout

    def test_invalid_date(self) -> None:
        result = runner.invoke(app, ["blocked", "110", "2024-13-01", EXAMPLE])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output


class TestPositionsCommand:
    """Test the positions command."""

    def test_rows_and_arrows(self) -> None:
        """Geometry follows the config next to the project file."""
        result = runner.invoke(app, ["positions", EXAMPLE])

        assert result.exit_code == 0
        assert "100: top=40 height=36 plan=[240, 368] actual=[272, 464]" in result.stdout
        assert "110: top=112 height=36" in result.stdout
        assert "actual=[-, -]" in result.stdout
        assert "dependency 1 FS: M 464 58 L 484 58 L 484 94 L 490 94" in result.stdout
        assert "dependency 2 SS +3d: " in result.stdout

    def test_week_view(self) -> None:
        result = runner.invoke(app, ["positions", EXAMPLE, "--view", "weeks"])

        assert result.exit_code == 0
        assert result.stdout.count("dependency ") == 4


class TestOverlayCommand:
    """Test the overlay command."""

    def test_chart_to_file(self, tmp_path: Path) -> None:
        """Test writing the full chart to a file."""
        output = tmp_path / "chart.svg"

        result = runner.invoke(app, ["overlay", EXAMPLE, "-o", str(output)])

        assert result.exit_code == 0
        assert "Overlay written to" in result.stdout
        svg = output.read_text(encoding="utf-8")
        assert "<title>Residential Block A</title>" in svg
        assert 'class="bars"' in svg
        assert 'data-dependency-id="4"' in svg
        assert "#2563eb" in svg
        assert ">+3d</text>" in svg

    def test_arrows_only(self) -> None:
        result = runner.invoke(app, ["overlay", EXAMPLE, "--arrows-only"])

        assert result.exit_code == 0
        assert "pointer-events: none" in result.stdout
        assert 'class="bars"' not in result.stdout
        assert result.stdout.count("<g data-dependency-id=") == 4


class TestDependenciesCommand:
    """Test the dependencies command."""

    def test_lists_predecessors(self) -> None:
        result = runner.invoke(app, ["dependencies", "111", EXAMPLE])

        assert result.exit_code == 0
        assert "111 Concrete pour" in result.stdout
        assert "[3] FS Formwork" in result.stdout
        assert "[4] FF Temporary power lag -2d" in result.stdout
        assert "available predecessors: 100, 101" in result.stdout
        assert "successors: -" in result.stdout

    def test_no_predecessors(self) -> None:
        result = runner.invoke(app, ["dependencies", "100", EXAMPLE])

        assert result.exit_code == 0
        assert "no predecessors" in result.stdout
        assert "successors: 101" in result.stdout


class TestSessionCommands:
    """Test the current-project session."""

    def test_no_current_project(self, session_config: str) -> None:
        result = runner.invoke(app, ["-c", session_config, "validate"])

        assert result.exit_code == 1
        assert "No project given" in result.output

    def test_switch_then_use(self, session_config: str) -> None:
        """Commands without a project argument use the session's project."""
        switched = runner.invoke(app, ["-c", session_config, "session", "switch", EXAMPLE])
        assert switched.exit_code == 0
        assert "Current project: Residential Block A" in switched.stdout

        shown = runner.invoke(app, ["-c", session_config, "session", "show"])
        assert shown.stdout.strip() == EXAMPLE

        result = runner.invoke(app, ["-c", session_config, "min-dates", "110"])
        assert result.exit_code == 0
        assert "min_start: 2024-01-12" in result.stdout

    def test_show_empty(self, session_config: str) -> None:
        result = runner.invoke(app, ["-c", session_config, "session", "show"])

        assert result.exit_code == 0
        assert "no current project" in result.stdout


class TestVerbosity:
    """Test the --verbose option."""

    def test_changes_level(self) -> None:
        result = runner.invoke(app, ["-v", "1", "validate", EXAMPLE])

        assert result.exit_code == 0
        assert "Loaded Residential Block A: 5 work(s), 4 dependenc(ies)" in result.output
