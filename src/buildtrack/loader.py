"""Project loading with full validation."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from .exceptions import CircularDependencyError, MissingReferenceError, ValidationError
from .logger import get_logger
from .models import Project, WorkDependency
from .parser import ProjectParser

logger = get_logger()


def load_project(path: Path | str) -> Project:
    """Load and validate a project file.

    Args:
        path: Path to the project YAML file

    Returns:
        Fully validated Project
    """
    project = ProjectParser().parse_file(path)
    validate_project(project)
    logger.changes(
        f"Loaded {project.metadata.name}: {len(project.all_works())} work(s), "
        f"{len(project.dependencies)} dependenc(ies) from {path}"
    )
    return project


def validate_project(project: Project) -> None:  # noqa: PLR0912 - one pass per rule
    """Validate ID uniqueness, dependency references, and cycles."""
    seen_blocks: set[int] = set()
    for block in project.blocks:
        if block.id in seen_blocks:
            raise ValidationError(f"Duplicate block id: {block.id}")
        seen_blocks.add(block.id)

    seen_groups: set[int] = set()
    for group in project.all_groups():
        if group.id in seen_groups:
            raise ValidationError(f"Duplicate work group id: {group.id}")
        seen_groups.add(group.id)

    seen_works: set[int] = set()
    for work in project.all_works():
        if work.id in seen_works:
            raise ValidationError(f"Duplicate work id: {work.id}")
        seen_works.add(work.id)

    seen_deps: set[int] = set()
    seen_pairs: set[tuple[int, int]] = set()
    for dep in project.dependencies:
        if dep.id in seen_deps:
            raise ValidationError(f"Duplicate dependency id: {dep.id}")
        seen_deps.add(dep.id)

        if dep.work_id not in seen_works:
            raise MissingReferenceError(
                f"Dependency {dep.id} targets unknown work: {dep.work_id}", dep.work_id
            )
        if dep.depends_on_work_id not in seen_works:
            raise MissingReferenceError(
                f"Dependency {dep.id} depends on unknown work: {dep.depends_on_work_id}",
                dep.depends_on_work_id,
            )
        if dep.work_id == dep.depends_on_work_id:
            raise ValidationError(f"Work {dep.work_id} cannot depend on itself")

        pair = (dep.work_id, dep.depends_on_work_id)
        if pair in seen_pairs:
            raise ValidationError(
                f"Work {dep.work_id} already depends on work {dep.depends_on_work_id}"
            )
        seen_pairs.add(pair)

    cycle = find_cycle(project.dependencies)
    if cycle:
        path = " -> ".join(str(work_id) for work_id in cycle)
        raise CircularDependencyError(f"Circular dependency detected: {path}", cycle)


def find_cycle(dependencies: Iterable[WorkDependency]) -> list[int] | None:
    """Find a dependency cycle among works.

    Returns:
        The cycle as a list of work IDs (first repeated at the end), or None
    """
    requires: dict[int, list[int]] = {}
    for dep in dependencies:
        requires.setdefault(dep.work_id, []).append(dep.depends_on_work_id)

    visited: set[int] = set()
    for work_id in sorted(requires):
        path: list[int] = []
        if _has_cycle(requires, work_id, visited, path):
            start = path.index(path[-1])
            return path[start:]
    return None


def _has_cycle(
    requires: dict[int, list[int]],
    work_id: int,
    visited: set[int],
    path: list[int],
) -> bool:
    """Depth-first search; on success ``path`` ends with the repeated work."""
    if work_id in path:
        path.append(work_id)
        return True

    if work_id in visited:
        return False

    visited.add(work_id)
    path.append(work_id)
    for dep_id in requires.get(work_id, []):
        if _has_cycle(requires, dep_id, visited, path):
            return True
    path.pop()
    return False
