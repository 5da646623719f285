"""Registry discovery: skills/<id>/skill.json and harnesses/<id>/harness.json."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ai_manager.core.errors import SchemaError, Violation
from ai_manager.registry.schema import duplicate_ids, validate_harness, validate_skill
from ai_manager.types.manifests import HarnessManifest, Registry, SkillManifest

logger = logging.getLogger(__name__)

SKILL_MANIFEST = "skill.json"
HARNESS_MANIFEST = "harness.json"


def _list_directories(root: Path) -> list[Path]:
    """Immediate subdirectories of *root*; empty if *root* does not exist."""
    if not root.is_dir():
        return []
    return sorted(p for p in root.iterdir() if p.is_dir())


def _read_manifest(path: Path, check: Callable[[Any], list[Violation]]) -> dict[str, Any]:
    """Read and validate a single manifest file."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise SchemaError(path, [Violation("", "manifest file not found")]) from None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SchemaError(path, [Violation("", f"invalid JSON: {exc}")]) from exc

    violations = check(data)
    if violations:
        raise SchemaError(path, violations)
    return data


async def load_skills(registry_root: str | Path) -> list[SkillManifest]:
    """Load every skill manifest under ``<root>/skills``, sorted by id."""
    skills_root = Path(registry_root) / "skills"
    dirs = _list_directories(skills_root)
    payloads = await asyncio.gather(*(
        asyncio.to_thread(_read_manifest, d / SKILL_MANIFEST, validate_skill)
        for d in dirs
    ))
    manifests = [SkillManifest.from_dict(p) for p in payloads]
    return sorted(manifests, key=lambda m: m.id)


async def load_harnesses(registry_root: str | Path) -> list[HarnessManifest]:
    """Load every harness manifest under ``<root>/harnesses``, sorted by id."""
    harness_root = Path(registry_root) / "harnesses"
    dirs = _list_directories(harness_root)
    payloads = await asyncio.gather(*(
        asyncio.to_thread(_read_manifest, d / HARNESS_MANIFEST, validate_harness)
        for d in dirs
    ))
    manifests = [HarnessManifest.from_dict(p) for p in payloads]
    return sorted(manifests, key=lambda m: m.id)


def assert_unique_ids(
    skills: list[SkillManifest], harnesses: list[HarnessManifest], source: str | Path,
) -> None:
    """Raise SchemaError if either list repeats an id."""
    violations: list[Violation] = []
    for dupe in duplicate_ids([s.id for s in skills]):
        violations.append(Violation("skills", f"duplicate skill id {dupe!r}"))
    for dupe in duplicate_ids([h.id for h in harnesses]):
        violations.append(Violation("harnesses", f"duplicate harness id {dupe!r}"))
    if violations:
        raise SchemaError(source, violations)


async def load_registry(registry_root: str | Path) -> Registry:
    """Load and validate the whole registry.

    Any invalid manifest or duplicate id aborts the load; a partial registry
    is never returned.
    """
    root = Path(registry_root).resolve()
    skills, harnesses = await asyncio.gather(load_skills(root), load_harnesses(root))
    assert_unique_ids(skills, harnesses, root)
    logger.info(
        "Loaded registry %s (%d skills, %d harnesses)", root, len(skills), len(harnesses),
    )
    return Registry(root=root, skills=tuple(skills), harnesses=tuple(harnesses))


def load_registry_sync(registry_root: str | Path) -> Registry:
    """Blocking wrapper around :func:`load_registry`."""
    return asyncio.run(load_registry(registry_root))
