"""Persistence of ManagerState in ai/ai-manager.json."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ai_manager.core.errors import SchemaError, Violation
from ai_manager.core.fs import BackupOptions, write_file_always
from ai_manager.types.state import ManagerState

logger = logging.getLogger(__name__)

AGENTS_TARGET = "ai/agents.md"
STATE_TARGET = "ai/ai-manager.json"


class StateStore:
    """Reads and writes the state file of one project.

    Serialization is canonical: fixed key order, two-space indent and a
    trailing newline, so logically identical states produce identical bytes.
    """

    def __init__(self, project_root: str | Path) -> None:
        self._root = Path(project_root)

    @property
    def path(self) -> Path:
        return self._root / STATE_TARGET

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> ManagerState | None:
        """Return the saved state, or None if the project has none yet."""
        if not self.path.is_file():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SchemaError(self.path, [Violation("", f"invalid JSON: {exc}")]) from exc
        if not isinstance(data, dict):
            raise SchemaError(self.path, [Violation("", "expected object")])
        try:
            return ManagerState.from_dict(data)
        except (KeyError, TypeError, AttributeError) as exc:
            raise SchemaError(self.path, [Violation("", f"malformed state: {exc!r}")]) from exc

    @staticmethod
    def dumps(state: ManagerState) -> str:
        return json.dumps(state.to_dict(), indent=2, ensure_ascii=False) + "\n"

    def save(self, state: ManagerState, backup: BackupOptions | None = None) -> Path:
        write_file_always(self.path, self.dumps(state), backup or BackupOptions.disabled())
        logger.info("Saved state to %s", self.path)
        return self.path
