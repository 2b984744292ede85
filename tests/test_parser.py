"""Tests for the project YAML parser and loader."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from buildtrack.exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    ParseError,
    ValidationError,
)
from buildtrack.loader import find_cycle, load_project, validate_project
from buildtrack.models import DependencyType, WorkDependency
from buildtrack.parser import ProjectParser

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"

WriteYaml = Callable[..., Path]

MINIMAL = """
groups:
  - id: 1
    name: Earthworks
    works:
      - id: 1
        name: Clearing
        plan_start: 2024-01-01
        plan_end: 2024-01-05
      - id: 2
        name: Excavation
        plan_start: "2024-01-08"
"""


class TestProjectParser:
    """Tests for ProjectParser."""

    def test_parse_minimal(self, write_yaml: WriteYaml) -> None:
        project = ProjectParser().parse_file(write_yaml(MINIMAL))

        assert project.metadata.name == "Project"
        assert [w.id for w in project.all_works()] == [1, 2]
        assert project.dependencies == []

    def test_unquoted_dates_become_strings(self, write_yaml: WriteYaml) -> None:
        project = ProjectParser().parse_file(write_yaml(MINIMAL))

        work = project.get_work(1)
        assert work is not None
        assert work.plan_start_date == "2024-01-01"
        assert work.actual_start_date is None

    def test_order_defaults_to_position(self, write_yaml: WriteYaml) -> None:
        project = ProjectParser().parse_file(write_yaml(MINIMAL))

        assert [w.order for w in project.all_works()] == [0, 1]

    def test_explicit_order(self) -> None:
        data = {
            "groups": [
                {
                    "id": 1,
                    "name": "G",
                    "works": [
                        {"id": 1, "name": "Late", "order": 5},
                        {"id": 2, "name": "Early", "order": 1},
                    ],
                }
            ]
        }

        project = ProjectParser().parse_data(data)

        assert [w.id for w in project.all_works()] == [2, 1]

    def test_block_groups_come_first(self) -> None:
        data = {
            "groups": [{"id": 9, "name": "Loose", "works": [{"id": 90, "name": "Power"}]}],
            "blocks": [
                {
                    "id": 1,
                    "name": "Block",
                    "groups": [{"id": 1, "name": "G", "works": [{"id": 10, "name": "Dig"}]}],
                }
            ],
        }

        project = ProjectParser().parse_data(data)

        assert [g.id for g in project.all_groups()] == [1, 9]
        assert project.all_groups()[0].block_id == 1
        assert project.all_groups()[1].block_id is None

    def test_dependencies(self) -> None:
        data = {
            "groups": [
                {"id": 1, "name": "G", "works": [{"id": 1, "name": "A"}, {"id": 2, "name": "B"}]}
            ],
            "dependencies": [
                {"work": 2, "depends_on": 1, "type": "ss", "lag_days": -2},
                {"id": 5, "work": 2, "depends_on": 1},
                {"work": 1, "depends_on": 2, "type": "FF"},
            ],
        }

        project = ProjectParser().parse_data(data)

        assert project.dependencies == [
            WorkDependency(6, 2, 1, DependencyType.SS, -2),
            WorkDependency(5, 2, 1, DependencyType.FS, 0),
            WorkDependency(7, 1, 2, DependencyType.FF, 0),
        ]

    def test_unknown_dependency_type(self) -> None:
        data = {"dependencies": [{"work": 2, "depends_on": 1, "type": "XX"}]}

        with pytest.raises(ValidationError, match="Invalid project structure"):
            ProjectParser().parse_data(data)

    def test_progress_out_of_range(self) -> None:
        work = {"id": 1, "name": "A", "progress": 120}
        data = {"groups": [{"id": 1, "name": "G", "works": [work]}]}

        with pytest.raises(ValidationError):
            ProjectParser().parse_data(data)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="File not found"):
            ProjectParser().parse_file(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, write_yaml: WriteYaml) -> None:
        with pytest.raises(ParseError, match="Failed to parse YAML"):
            ProjectParser().parse_file(write_yaml("groups: [unclosed"))

    def test_root_must_be_mapping(self, write_yaml: WriteYaml) -> None:
        with pytest.raises(ParseError, match="dictionary at the root"):
            ProjectParser().parse_file(write_yaml("- just\n- a list\n"))


class TestLoadProject:
    """Tests for load_project validation."""

    def test_example_project(self) -> None:
        project = load_project(EXAMPLES_DIR / "project.yaml")

        assert project.metadata.name == "Residential Block A"
        assert project.metadata.last_updated == "2024-03-01"
        assert [w.id for w in project.all_works()] == [100, 101, 110, 111, 200]
        assert len(project.dependencies) == 4

    def test_duplicate_work_id(self, write_yaml: WriteYaml) -> None:
        content = MINIMAL + "      - id: 1\n        name: Again\n"

        with pytest.raises(ValidationError, match="Duplicate work id: 1"):
            load_project(write_yaml(content))

    def test_duplicate_block_id(self) -> None:
        data = {
            "blocks": [
                {"id": 1, "name": "Block A", "groups": [{"id": 1, "name": "G"}]},
                {"id": 1, "name": "Block B", "groups": [{"id": 2, "name": "H"}]},
            ]
        }
        project = ProjectParser().parse_data(data)

        with pytest.raises(ValidationError, match="Duplicate block id: 1"):
            validate_project(project)

    def test_unknown_work_reference(self, write_yaml: WriteYaml) -> None:
        content = MINIMAL + "dependencies:\n  - work: 2\n    depends_on: 42\n"

        with pytest.raises(MissingReferenceError, match="unknown work: 42") as exc_info:
            load_project(write_yaml(content))

        assert exc_info.value.reference == 42

    def test_self_dependency(self, write_yaml: WriteYaml) -> None:
        content = MINIMAL + "dependencies:\n  - work: 2\n    depends_on: 2\n"

        with pytest.raises(ValidationError, match="cannot depend on itself"):
            load_project(write_yaml(content))

    def test_duplicate_pair(self, write_yaml: WriteYaml) -> None:
        content = (
            MINIMAL
            + "dependencies:\n"
            + "  - work: 2\n    depends_on: 1\n"
            + "  - work: 2\n    depends_on: 1\n    type: SS\n"
        )

        with pytest.raises(ValidationError, match="already depends on"):
            load_project(write_yaml(content))

    def test_cycle(self, write_yaml: WriteYaml) -> None:
        content = (
            MINIMAL
            + "dependencies:\n"
            + "  - work: 2\n    depends_on: 1\n"
            + "  - work: 1\n    depends_on: 2\n"
        )

        with pytest.raises(CircularDependencyError, match="1 -> 2 -> 1"):
            load_project(write_yaml(content))


class TestFindCycle:
    """Tests for cycle detection."""

    def test_acyclic(self) -> None:
        deps = [WorkDependency(1, 2, 1), WorkDependency(2, 3, 2), WorkDependency(3, 3, 1)]

        assert find_cycle(deps) is None

    def test_three_node_cycle(self) -> None:
        deps = [WorkDependency(1, 2, 1), WorkDependency(2, 3, 2), WorkDependency(3, 1, 3)]

        assert find_cycle(deps) == [1, 3, 2, 1]
