"""Adding and removing work dependencies."""

from __future__ import annotations

from .exceptions import CircularDependencyError, MissingReferenceError, ValidationError
from .loader import find_cycle
from .logger import get_logger
from .models import DependencyType, Project, Work, WorkDependency, parse_dependency_type

logger = get_logger()


def available_predecessors(project: Project, work_id: int) -> list[Work]:
    """Works that can still be added as predecessors of ``work_id``.

    Excludes the work itself and works it already depends on.
    """
    existing = {d.depends_on_work_id for d in project.dependencies_of(work_id)}
    return [w for w in project.all_works() if w.id != work_id and w.id not in existing]


def add_dependency(
    project: Project,
    work_id: int,
    depends_on_work_id: int,
    dependency_type: DependencyType | str = DependencyType.FS,
    lag_days: int = 0,
) -> WorkDependency:
    """Record that ``work_id`` depends on ``depends_on_work_id``.

    Args:
        project: Project to modify in place
        work_id: Successor work
        depends_on_work_id: Predecessor work
        dependency_type: FS, SS, FF or SF
        lag_days: Signed lag in days

    Returns:
        The new dependency record

    Raises:
        MissingReferenceError: If either work does not exist
        ValidationError: For a self or duplicate dependency, or an unknown kind
        CircularDependencyError: If the new edge would close a cycle
    """
    all_ids = project.get_all_work_ids()
    for ref in (work_id, depends_on_work_id):
        if ref not in all_ids:
            raise MissingReferenceError(f"Unknown work: {ref}", ref)
    if work_id == depends_on_work_id:
        raise ValidationError(f"Work {work_id} cannot depend on itself")
    if any(d.depends_on_work_id == depends_on_work_id for d in project.dependencies_of(work_id)):
        raise ValidationError(f"Work {work_id} already depends on work {depends_on_work_id}")

    kind = parse_dependency_type(dependency_type)
    if kind is None:
        raise ValidationError(f"Unknown dependency type: {dependency_type}")

    dependency = WorkDependency(
        id=max((d.id for d in project.dependencies), default=0) + 1,
        work_id=work_id,
        depends_on_work_id=depends_on_work_id,
        dependency_type=kind,
        lag_days=lag_days,
    )

    cycle = find_cycle([*project.dependencies, dependency])
    if cycle:
        path = " -> ".join(str(w) for w in cycle)
        raise CircularDependencyError(f"Dependency would create a cycle: {path}", cycle)

    project.dependencies.append(dependency)
    logger.changes(f"Added dependency {dependency.id}: {dependency}")
    return dependency


def remove_dependency(project: Project, dependency_id: int) -> WorkDependency:
    """Remove a dependency record by ID.

    Raises:
        MissingReferenceError: If no record has that ID
    """
    for index, dependency in enumerate(project.dependencies):
        if dependency.id == dependency_id:
            del project.dependencies[index]
            logger.changes(f"Removed dependency {dependency_id}: {dependency}")
            return dependency
    raise MissingReferenceError(f"Unknown dependency: {dependency_id}", dependency_id)
