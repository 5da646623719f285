"""Exception types raised by ai-manager."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Violation:
    """A single schema violation, located by a dotted path into the data."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


class ManagerError(Exception):
    """Base class for errors reported to the user."""


class SchemaError(ManagerError):
    """Raised when registry or state data fails validation."""

    def __init__(self, source: str | Path, violations: list[Violation]) -> None:
        self.source = str(source)
        self.violations = list(violations)
        details = "; ".join(str(v) for v in self.violations)
        super().__init__(f"Invalid {self.source}: {details}")


class NotInitializedError(ManagerError):
    """Raised when an operation needs existing state and there is none."""

    def __init__(self, project_root: str | Path) -> None:
        self.project_root = str(project_root)
        super().__init__(
            f"Project at {self.project_root} is not initialized. Run: ai-manager init"
        )


class AlreadyInitializedError(ManagerError):
    """Raised when init is requested for a project that already has output."""

    def __init__(self, project_root: str | Path) -> None:
        self.project_root = str(project_root)
        super().__init__(f"Project at {self.project_root} is already initialized.")


class UnknownItemError(ManagerError):
    """Raised when a requested skill or harness id is not in the registry."""

    def __init__(self, kind: str, item_id: str, available: list[str]) -> None:
        self.kind = kind
        self.item_id = item_id
        self.available = list(available)
        listing = ", ".join(self.available) or "(none)"
        super().__init__(f"Unknown {kind}: {item_id!r}. Available: {listing}")


class TemplateError(ManagerError):
    """Raised when a template cannot be compiled."""

    def __init__(self, path: str | Path, message: str, lineno: int | None = None) -> None:
        self.path = str(path)
        self.lineno = lineno
        where = f"{self.path}:{lineno}" if lineno else self.path
        super().__init__(f"Template error in {where}: {message}")


class SelectionCancelledError(ManagerError):
    """Raised when the user aborts an interactive prompt."""

    def __init__(self) -> None:
        super().__init__("Cancelled")
