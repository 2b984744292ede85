"""Current-project session state, passed explicitly instead of held globally."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import yaml

from .logger import get_logger

CURRENT_PROJECT_KEY = "current_project"

logger = get_logger()


class SessionStore(Protocol):
    """Key-value persistence for session continuity across restarts."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str | None) -> None: ...


class YamlSessionStore:
    """SessionStore backed by a small YAML file."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf-8") as f:
            data: Any = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}  # type: ignore[return-value]

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str | None) -> None:
        data = self._read()
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, sort_keys=True)


@dataclass
class ProjectSession:
    """Which project the user is working on."""

    store: SessionStore
    current_project: Path | None = None

    @classmethod
    def restore(cls, store: SessionStore) -> ProjectSession:
        """Rebuild the session from persisted state."""
        saved = store.get(CURRENT_PROJECT_KEY)
        return cls(store=store, current_project=Path(saved) if saved else None)

    def switch(self, project_path: Path | str) -> None:
        """Make ``project_path`` the current project and persist the choice."""
        self.current_project = Path(project_path)
        self.store.set(CURRENT_PROJECT_KEY, str(self.current_project))
        logger.changes(f"Current project: {self.current_project}")

    def clear(self) -> None:
        self.current_project = None
        self.store.set(CURRENT_PROJECT_KEY, None)
