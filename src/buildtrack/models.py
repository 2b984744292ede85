"""Data models for buildtrack."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

DateValue = str | date | None
"""A calendar date as supplied by the data layer: ISO string, date, or absent."""


class DependencyType(str, Enum):
    """The four work-to-work dependency kinds.

    FS and SS constrain the successor's start; FF and SF constrain its end.
    """

    FS = "FS"  # finish -> start
    SS = "SS"  # start -> start
    FF = "FF"  # finish -> finish
    SF = "SF"  # start -> finish

    @property
    def constrains_start(self) -> bool:
        return self in (DependencyType.FS, DependencyType.SS)

    @property
    def constrains_end(self) -> bool:
        return self in (DependencyType.FF, DependencyType.SF)

    @property
    def from_predecessor_start(self) -> bool:
        """Whether the predecessor's start (rather than its end) is the anchor."""
        return self in (DependencyType.SS, DependencyType.SF)


def parse_dependency_type(value: object) -> DependencyType | None:
    """Resolve a dependency kind given as a member or a string ("FS", "fs").

    Returns:
        The kind, or None when the value names no known kind
    """
    if isinstance(value, DependencyType):
        return value
    if isinstance(value, str):
        try:
            return DependencyType(value.strip().upper())
        except ValueError:
            return None
    return None


def dependency_type_label(value: object) -> str:
    """Display text of a kind, including unrecognised raw values."""
    kind = parse_dependency_type(value)
    return kind.value if kind is not None else str(value)


def _normalize_kind(record: DependencyConstraint | WorkDependency) -> None:
    # Unknown kinds are kept as given; evaluators skip them
    kind = parse_dependency_type(record.dependency_type)
    if kind is not None:
        object.__setattr__(record, "dependency_type", kind)


@dataclass(slots=True, frozen=True)
class WorkDateInfo:
    """Snapshot of one work's planned and actual dates."""

    work_id: int
    plan_start_date: DateValue = None
    plan_end_date: DateValue = None
    actual_start_date: DateValue = None
    actual_end_date: DateValue = None


@dataclass(slots=True, frozen=True)
class DependencyConstraint:
    """One incoming dependency edge, resolved against its predecessor's dates.

    ``dependency_type`` accepts a kind name such as "FS" and is stored as a
    DependencyType when it names a known kind.
    """

    dependency_type: DependencyType | str
    lag_days: int
    predecessor_work_id: int
    predecessor_dates: WorkDateInfo

    def __post_init__(self) -> None:
        _normalize_kind(self)

    @property
    def kind(self) -> DependencyType | None:
        return parse_dependency_type(self.dependency_type)


@dataclass(slots=True, frozen=True)
class WorkDependency:
    """A dependency record as kept by the data layer.

    ``work_id`` is the successor, ``depends_on_work_id`` the predecessor.
    """

    id: int
    work_id: int
    depends_on_work_id: int
    dependency_type: DependencyType | str = DependencyType.FS
    lag_days: int = 0

    def __post_init__(self) -> None:
        _normalize_kind(self)

    @property
    def kind(self) -> DependencyType | None:
        return parse_dependency_type(self.dependency_type)

    def __str__(self) -> str:
        lag = f" {self.lag_days:+d}d" if self.lag_days else ""
        kind = dependency_type_label(self.dependency_type)
        return f"{self.depends_on_work_id} -{kind}-> {self.work_id}{lag}"


def _default_works() -> list[Work]:
    return []


def _default_groups() -> list[WorkGroup]:
    return []


def _default_blocks() -> list[Block]:
    return []


def _default_dependencies() -> list[WorkDependency]:
    return []


@dataclass
class Work:
    """A single schedulable task."""

    id: int
    group_id: int
    name: str
    plan_start_date: str | None = None
    plan_end_date: str | None = None
    actual_start_date: str | None = None
    actual_end_date: str | None = None
    progress_percentage: int = 0
    responsible_person: str = ""
    order: int = 0

    @property
    def date_info(self) -> WorkDateInfo:
        return WorkDateInfo(
            work_id=self.id,
            plan_start_date=self.plan_start_date,
            plan_end_date=self.plan_end_date,
            actual_start_date=self.actual_start_date,
            actual_end_date=self.actual_end_date,
        )


@dataclass
class WorkGroup:
    """A group of works (e.g. "Earthworks"), optionally inside a block."""

    id: int
    name: str
    block_id: int | None = None
    order: int = 0
    works: list[Work] = field(default_factory=_default_works)


@dataclass
class Block:
    """Top level of the work breakdown structure."""

    id: int
    name: str
    order: int = 0
    groups: list[WorkGroup] = field(default_factory=_default_groups)


@dataclass
class ProjectMetadata:
    """Metadata for a project file."""

    name: str = "Project"
    version: str = "1.0"
    last_updated: str | None = None


@dataclass
class Project:
    """Complete project: work breakdown plus the dependency edge list."""

    metadata: ProjectMetadata
    blocks: list[Block] = field(default_factory=_default_blocks)
    groups: list[WorkGroup] = field(default_factory=_default_groups)  # groups without a block
    dependencies: list[WorkDependency] = field(default_factory=_default_dependencies)

    def all_groups(self) -> list[WorkGroup]:
        """All groups in display order: block groups first, then block-less groups."""
        result: list[WorkGroup] = []
        for block in sorted(self.blocks, key=lambda b: b.order):
            result.extend(sorted(block.groups, key=lambda g: g.order))
        result.extend(sorted(self.groups, key=lambda g: g.order))
        return result

    def all_works(self) -> list[Work]:
        """All works in display order."""
        result: list[Work] = []
        for group in self.all_groups():
            result.extend(sorted(group.works, key=lambda w: w.order))
        return result

    def get_all_work_ids(self) -> set[int]:
        return {work.id for work in self.all_works()}

    def get_work(self, work_id: int) -> Work | None:
        """Get a work by its ID."""
        for work in self.all_works():
            if work.id == work_id:
                return work
        return None

    def dependencies_of(self, work_id: int) -> list[WorkDependency]:
        """Incoming dependencies: records where ``work_id`` is the successor."""
        return [d for d in self.dependencies if d.work_id == work_id]

    def dependents_of(self, work_id: int) -> list[WorkDependency]:
        """Outgoing dependencies: records where ``work_id`` is the predecessor."""
        return [d for d in self.dependencies if d.depends_on_work_id == work_id]

    def date_infos(self) -> dict[int, WorkDateInfo]:
        """Map of work ID to its date snapshot."""
        return {work.id: work.date_info for work in self.all_works()}
