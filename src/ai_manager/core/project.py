"""Project root detection and project fact scanning."""

from __future__ import annotations

import logging
from pathlib import Path

from ai_manager.types.state import ProjectFacts

logger = logging.getLogger(__name__)

# Lockfile -> package manager, first match wins
_LOCKFILES = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
    ("bun.lockb", "bun"),
    ("uv.lock", "uv"),
    ("poetry.lock", "poetry"),
    ("Pipfile.lock", "pipenv"),
)

_CONFIG_FILES = ("pyproject.toml", "setup.cfg", "package.json")
_CONFIG_PREFIXES = ("tsconfig",)

FRONTEND_DIR_CANDIDATES = ("web", "frontend", "client")
BACKEND_DIR_CANDIDATES = ("api", "backend", "server")


def detect_project_root(start: str | Path) -> Path:
    """Walk up from *start* to the nearest directory holding ``.git``.

    Falls back to *start* itself when no repository is found.
    """
    origin = Path(start).resolve()
    current = origin if origin.is_dir() else origin.parent
    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            return origin
        current = parent


def scan_project_facts(project_root: str | Path) -> ProjectFacts | None:
    """Top-level facts about the project, or None if nothing was found."""
    root = Path(project_root)
    entries = sorted(root.iterdir(), key=lambda p: p.name)
    files = [p.name for p in entries if p.is_file()]
    directories = tuple(p.name for p in entries if p.is_dir() and p.name != ".git")

    package_manager = next((pm for lock, pm in _LOCKFILES if lock in files), None)
    config_files = tuple(
        name for name in files
        if name in _CONFIG_FILES
        or (name.startswith(_CONFIG_PREFIXES) and name.endswith(".json"))
    )

    facts = ProjectFacts(
        package_manager=package_manager,
        config_files=config_files,
        directories=directories,
    )
    logger.debug("Scanned project facts for %s: %s", root, facts)
    return None if facts.is_empty() else facts


def detect_directory_default(project_root: str | Path, candidates: tuple[str, ...]) -> str:
    """First existing candidate directory as ``/name``, else ``/``."""
    root = Path(project_root)
    for name in candidates:
        if (root / name).is_dir():
            return f"/{name}"
    return "/"
