"""Pydantic schemas for project YAML validation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .models import DependencyType


def _coerce_date(v: Any) -> str | None:
    """YAML loads unquoted dates as date objects; keep them as ISO strings."""
    if v is None:
        return None
    text = str(v).strip()
    return text or None


class WorkSchema(BaseModel):
    """Schema for one work."""

    id: int = Field(gt=0)
    name: str
    plan_start: str | None = None
    plan_end: str | None = None
    actual_start: str | None = None
    actual_end: str | None = None
    progress: int = Field(default=0, ge=0, le=100)
    responsible: str = ""
    order: int | None = None

    @field_validator("plan_start", "plan_end", "actual_start", "actual_end", mode="before")
    @classmethod
    def coerce_date_to_string(cls, v: Any) -> str | None:
        """Convert date objects to string."""
        return _coerce_date(v)


class WorkGroupSchema(BaseModel):
    """Schema for a work group."""

    id: int = Field(gt=0)
    name: str
    order: int | None = None
    works: list[WorkSchema] = Field(default_factory=list)


class BlockSchema(BaseModel):
    """Schema for a block of work groups."""

    id: int = Field(gt=0)
    name: str
    order: int | None = None
    groups: list[WorkGroupSchema] = Field(default_factory=list)


class DependencySchema(BaseModel):
    """Schema for one dependency record."""

    id: int | None = None
    work: int
    depends_on: int
    type: DependencyType = DependencyType.FS
    lag_days: int = 0

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        """Accept lower-case kinds ("fs")."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


class MetadataSchema(BaseModel):
    """Schema for project metadata."""

    name: str = "Project"
    version: str = "1.0"
    last_updated: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version_to_string(cls, v: Any) -> str:
        """Ensure version is a string."""
        return str(v)

    @field_validator("last_updated", mode="before")
    @classmethod
    def coerce_date_to_string(cls, v: Any) -> str | None:
        """Convert date objects to string."""
        return _coerce_date(v)


class ProjectSchema(BaseModel):
    """Schema for the entire project YAML file."""

    metadata: MetadataSchema = Field(default_factory=MetadataSchema)
    blocks: list[BlockSchema] = Field(default_factory=list)
    groups: list[WorkGroupSchema] = Field(default_factory=list)  # groups without a block
    dependencies: list[DependencySchema] = Field(default_factory=list)
