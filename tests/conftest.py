"""Pytest configuration and fixtures for buildtrack tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from buildtrack.logger import reset_logger
from buildtrack.models import (
    Block,
    DependencyType,
    Project,
    ProjectMetadata,
    Work,
    WorkDependency,
    WorkGroup,
)


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Keep logger configuration from leaking between tests."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def make_work() -> Callable[..., Work]:
    """Factory for works with sensible defaults."""

    def _make(work_id: int, group_id: int = 1, **kwargs: Any) -> Work:
        kwargs.setdefault("name", f"Work {work_id}")
        return Work(id=work_id, group_id=group_id, **kwargs)

    return _make


@pytest.fixture
def sample_project(make_work: Callable[..., Work]) -> Project:
    """Three works in a chain plus one in a block-less group.

    1 (Jan 1-5, actual Jan 2-8) -FS-> 2 (plan Jan 8-12) -SS+2-> 3 (plan Jan 10-15)
    4 (plan Jan 3-4) -FF-> 3
    """
    earthworks = WorkGroup(
        id=1,
        name="Earthworks",
        block_id=1,
        works=[
            make_work(
                1,
                plan_start_date="2024-01-01",
                plan_end_date="2024-01-05",
                actual_start_date="2024-01-02",
                actual_end_date="2024-01-08",
                order=0,
            ),
            make_work(2, plan_start_date="2024-01-08", plan_end_date="2024-01-12", order=1),
        ],
    )
    foundation = WorkGroup(
        id=2,
        name="Foundation",
        block_id=1,
        order=1,
        works=[make_work(3, group_id=2, plan_start_date="2024-01-10", plan_end_date="2024-01-15")],
    )
    utilities = WorkGroup(
        id=3,
        name="Utilities",
        works=[make_work(4, group_id=3, plan_start_date="2024-01-03", plan_end_date="2024-01-04")],
    )
    return Project(
        metadata=ProjectMetadata(name="Sample"),
        blocks=[Block(id=1, name="Block A", groups=[earthworks, foundation])],
        groups=[utilities],
        dependencies=[
            WorkDependency(id=1, work_id=2, depends_on_work_id=1),
            WorkDependency(
                id=2, work_id=3, depends_on_work_id=2, dependency_type=DependencyType.SS, lag_days=2
            ),
            WorkDependency(
                id=3, work_id=3, depends_on_work_id=4, dependency_type=DependencyType.FF
            ),
        ],
    )


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write YAML text to a file in the temporary directory."""

    def _write(content: str, name: str = "project.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
