"""Filesystem writes with optional pre-overwrite backups."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUPS_DIR = Path("ai") / ".backups"


def isoformat_z(moment: datetime) -> str:
    """UTC ISO-8601 timestamp with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class BackupOptions:
    """Where (and whether) to copy files before they are overwritten or removed.

    ``backup_root`` is a per-invocation directory under ``ai/.backups``; each
    backed-up file lands at the same project-relative path beneath it.
    """

    enabled: bool = False
    project_root: Path | None = None
    backup_root: Path | None = None

    @classmethod
    def create(
        cls, project_root: str | Path, enabled: bool, now: datetime | None = None,
    ) -> BackupOptions:
        if not enabled:
            return cls(enabled=False)
        root = Path(project_root)
        stamp = isoformat_z(now or datetime.now(UTC)).replace(":", "-").replace(".", "-")
        return cls(enabled=True, project_root=root, backup_root=root / BACKUPS_DIR / stamp)

    @classmethod
    def disabled(cls) -> BackupOptions:
        return cls(enabled=False)

    def backup_path(self, target: Path) -> Path | None:
        """Location inside the backup root that mirrors *target*."""
        if not self.enabled or self.backup_root is None or self.project_root is None:
            return None
        if target.is_relative_to(self.project_root):
            relative = target.relative_to(self.project_root)
        else:
            relative = target.relative_to(target.anchor)
        return self.backup_root / relative


def backup_existing_file(target: str | Path, backup: BackupOptions) -> Path | None:
    """Copy *target* into the backup root if backups are on and it exists.

    A file is copied at most once per backup root: the first copy holds the
    bytes from before this invocation touched it. Returns the backup path, or
    None when nothing was copied.
    """
    path = Path(target)
    dest = backup.backup_path(path)
    if dest is None or not path.is_file():
        return None
    if dest.exists():
        logger.debug("Keeping earlier backup of %s", path)
        return None
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(path.read_bytes())
    logger.debug("Backed up %s -> %s", path, dest)
    return dest


def write_file_always(target: str | Path, contents: str, backup: BackupOptions) -> Path | None:
    """Back up any existing file at *target*, then overwrite it.

    Parent directories are created as needed. Returns the backup path, if any.
    """
    path = Path(target)
    backed_up = backup_existing_file(path, backup)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    logger.debug("Wrote %s", path)
    return backed_up


def remove_file(target: str | Path, backup: BackupOptions) -> tuple[bool, Path | None]:
    """Back up and delete *target*.

    A missing file is a no-op. Returns ``(removed, backup_path)``.
    """
    path = Path(target)
    if not path.exists() and not path.is_symlink():
        return False, None
    backed_up = backup_existing_file(path, backup)
    path.unlink()
    logger.debug("Removed %s", path)
    return True, backed_up
