"""YAML parser for buildtrack project files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import (
    Block,
    Project,
    ProjectMetadata,
    Work,
    WorkDependency,
    WorkGroup,
)
from .schemas import DependencySchema, ProjectSchema, WorkGroupSchema


class ProjectParser:
    """Parser for project YAML files.

    This parser only handles YAML parsing and model creation. For loading
    with reference and cycle validation, use load_project() from
    buildtrack.loader.
    """

    def parse_file(self, file_path: Path | str) -> Project:
        """Parse a YAML file into a Project."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> Project:
        """Parse already-loaded YAML data into a Project."""
        try:
            schema = ProjectSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid project structure: {e}") from e

        metadata = ProjectMetadata(
            name=schema.metadata.name,
            version=schema.metadata.version,
            last_updated=schema.metadata.last_updated,
        )

        blocks: list[Block] = []
        for block_index, block_data in enumerate(schema.blocks):
            order = block_data.order if block_data.order is not None else block_index
            blocks.append(
                Block(
                    id=block_data.id,
                    name=block_data.name,
                    order=order,
                    groups=[
                        self._convert_group(group_data, group_index, block_data.id)
                        for group_index, group_data in enumerate(block_data.groups)
                    ],
                )
            )

        groups = [
            self._convert_group(group_data, group_index, None)
            for group_index, group_data in enumerate(schema.groups)
        ]

        return Project(
            metadata=metadata,
            blocks=blocks,
            groups=groups,
            dependencies=self._convert_dependencies(schema.dependencies),
        )

    def _convert_group(
        self, group_data: WorkGroupSchema, index: int, block_id: int | None
    ) -> WorkGroup:
        works = [
            Work(
                id=work_data.id,
                group_id=group_data.id,
                name=work_data.name,
                plan_start_date=work_data.plan_start,
                plan_end_date=work_data.plan_end,
                actual_start_date=work_data.actual_start,
                actual_end_date=work_data.actual_end,
                progress_percentage=work_data.progress,
                responsible_person=work_data.responsible,
                order=work_data.order if work_data.order is not None else work_index,
            )
            for work_index, work_data in enumerate(group_data.works)
        ]
        return WorkGroup(
            id=group_data.id,
            name=group_data.name,
            block_id=block_id,
            order=group_data.order if group_data.order is not None else index,
            works=works,
        )

    def _convert_dependencies(self, records: list[DependencySchema]) -> list[WorkDependency]:
        """Convert dependency records, numbering the ones without an explicit id."""
        next_id = max((r.id for r in records if r.id is not None), default=0) + 1
        dependencies: list[WorkDependency] = []
        for record in records:
            if record.id is None:
                dep_id = next_id
                next_id += 1
            else:
                dep_id = record.id
            dependencies.append(
                WorkDependency(
                    id=dep_id,
                    work_id=record.work,
                    depends_on_work_id=record.depends_on,
                    dependency_type=record.type,
                    lag_days=record.lag_days,
                )
            )
        return dependencies
