"""Configuration loader for chart, arrow and session settings.

A single buildtrack_config.yaml file holds all settings; every section is
optional and falls back to the defaults below.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from .models import DependencyType
from .timeaxis import ViewMode

CONFIG_FILENAME = "buildtrack_config.yaml"

DEPENDENCY_COLORS: dict[DependencyType, str] = {
    DependencyType.FS: "#3b82f6",
    DependencyType.SS: "#22c55e",
    DependencyType.FF: "#f97316",
    DependencyType.SF: "#a855f7",
}
FALLBACK_COLOR = "#888"


def _default_colors() -> dict[DependencyType, str]:
    return dict(DEPENDENCY_COLORS)


class ChartConfig(BaseModel):
    """Geometry of the schedule grid."""

    view_mode: ViewMode = ViewMode.DAYS
    cell_width: float = Field(default=40.0, gt=0)
    row_height: float = Field(default=40.0, gt=0)
    header_height: float = Field(default=48.0, ge=0)
    show_bars: bool = True


class ArrowsConfig(BaseModel):
    """Appearance of dependency connectors."""

    colors: dict[DependencyType, str] = Field(default_factory=_default_colors)
    lag_suffix: str = "d"
    stroke_width: float = Field(default=2.0, gt=0)
    opacity: float = Field(default=0.7, ge=0, le=1)

    @field_validator("colors", mode="before")
    @classmethod
    def normalize_kinds(cls, v: Any) -> Any:
        """Accept lower-case kinds as keys."""
        if isinstance(v, dict):
            return {str(k).strip().upper(): color for k, color in v.items()}  # type: ignore[misc]
        return v

    def color_for(self, kind: DependencyType) -> str:
        return self.colors.get(kind) or DEPENDENCY_COLORS.get(kind, FALLBACK_COLOR)


class SessionConfig(BaseModel):
    """Where the current-project choice is kept between runs."""

    store_path: Path = Path(".buildtrack_session.yaml")


class BuildtrackConfig(BaseModel):
    """Complete configuration."""

    chart: ChartConfig = Field(default_factory=ChartConfig)
    arrows: ArrowsConfig = Field(default_factory=ArrowsConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)


def load_config(config_path: Path | str) -> BuildtrackConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to buildtrack_config.yaml

    Returns:
        Validated BuildtrackConfig

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config is empty or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValueError("Empty configuration file")
    if not isinstance(data, dict):
        raise ValueError("Configuration must be a mapping")

    return BuildtrackConfig.model_validate(data)


def discover_config(
    project_path: Path | str | None = None,
    config_path: Path | None = None,
) -> BuildtrackConfig:
    """Find and load the configuration.

    Search order:
    1. Explicit config_path argument
    2. project directory / buildtrack_config.yaml
    3. Current directory / buildtrack_config.yaml
    4. Built-in defaults
    """
    if config_path is not None:
        return load_config(config_path)

    if project_path is not None:
        dir_config = Path(project_path).parent / CONFIG_FILENAME
        if dir_config.exists():
            return load_config(dir_config)

    cwd_config = Path(CONFIG_FILENAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return BuildtrackConfig()
