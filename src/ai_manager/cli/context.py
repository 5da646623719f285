"""Per-invocation CLI state and error handling shared by all commands."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Coroutine, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from ai_manager.cli import output
from ai_manager.core.config import resolve_backup_default
from ai_manager.core.errors import (
    ManagerError,
    SchemaError,
    SelectionCancelledError,
    TemplateError,
    UnknownItemError,
)
from ai_manager.core.manager import ProjectManager
from ai_manager.core.project import detect_project_root

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXIT_USER_ERROR = 1
EXIT_INVALID_DATA = 2
EXIT_CANCELLED = 130


@dataclass(slots=True)
class CliContext:
    """Options from the top-level group, passed to subcommands via ``ctx.obj``."""

    version: str
    start_dir: Path
    registry_root: Path
    _manager: ProjectManager | None = field(default=None, repr=False)

    def manager(self) -> ProjectManager:
        """The invocation's ProjectManager (registry loaded at most once)."""
        if self._manager is None:
            project_root = detect_project_root(self.start_dir)
            logger.debug("Project root: %s, registry: %s", project_root, self.registry_root)
            self._manager = ProjectManager(project_root, self.registry_root)
        return self._manager

    @staticmethod
    def backup(flag: bool) -> bool:
        return resolve_backup_default(flag)

    @staticmethod
    def check_ids(
        kind: str, ids: Sequence[str], allowed: Sequence[str], known: Sequence[str],
    ) -> list[str]:
        """Filter ids given on the command line to the ones usable right now.

        Ids the registry does not know raise UnknownItemError; known ids that
        are not currently a valid choice are skipped with a warning.
        """
        selected: list[str] = []
        for item_id in dict.fromkeys(ids):
            if item_id not in known:
                raise UnknownItemError(kind, item_id, list(known))
            if item_id not in allowed:
                output.print_warning(f"Skipping {kind} {item_id}: not available for this action.")
                continue
            selected.append(item_id)
        return selected


@contextmanager
def handle_errors() -> Iterator[None]:
    """Map ai-manager errors raised inside the block to messages and exit codes."""
    try:
        yield
    except SelectionCancelledError:
        output.print_warning("Cancelled. Nothing was changed.")
        sys.exit(EXIT_CANCELLED)
    except SchemaError as exc:
        output.print_schema_error(exc)
        sys.exit(EXIT_INVALID_DATA)
    except TemplateError as exc:
        output.print_error(str(exc))
        sys.exit(EXIT_INVALID_DATA)
    except ManagerError as exc:
        output.print_error(str(exc))
        sys.exit(EXIT_USER_ERROR)


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a manager coroutine to completion with the same error mapping."""
    with handle_errors():
        return asyncio.run(coro)
