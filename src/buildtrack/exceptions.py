"""Custom exceptions for buildtrack."""

from __future__ import annotations


class BuildtrackError(Exception):
    """Base exception for all buildtrack errors."""


class ValidationError(BuildtrackError):
    """Raised when a project or a dependency edit breaks a schedule rule."""


class CircularDependencyError(ValidationError):
    """Raised when dependencies would form a cycle.

    Attributes:
        cycle: Work IDs along the cycle, the first repeated at the end
    """

    def __init__(self, message: str, cycle: list[int] | None = None):
        super().__init__(message)
        self.cycle = cycle or []


class MissingReferenceError(ValidationError):
    """Raised when a work or dependency ID does not exist.

    Attributes:
        reference: The ID that could not be resolved
    """

    def __init__(self, message: str, reference: int | None = None):
        super().__init__(message)
        self.reference = reference


class ParseError(BuildtrackError):
    """Raised when a project file cannot be read as YAML."""
