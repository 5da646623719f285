"""Test fixtures: a small on-disk registry and a throwaway project."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from ai_manager.core.manager import ProjectManager
from ai_manager.registry.loader import load_registry_sync
from ai_manager.types.manifests import Registry

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)
LATER = datetime(2026, 1, 3, 0, 0, 0, tzinfo=UTC)

BASE_TEMPLATE = (
    "# {{ projectName }}\n"
    "\n"
    "## Harnesses\n"
    "{{ harnessNotes }}\n"
    "\n"
    "## Plan\n"
    "{{ planSection }}\n"
    "## Skills\n"
    "{{ skillIndexTable }}\n"
    "\n"
    "## Guides\n"
    "{{ skillGuides }}\n"
    "## Activation\n"
    "{{ activationRules }}\n"
)


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")


def write_skill(
    root: Path,
    skill_id: str,
    *,
    questions: list[dict[str, Any]] | None = None,
    outputs: list[dict[str, str]] | None = None,
    snippet: str = "Guide for {{ skill.name }}.\n",
    activation: str | None = None,
    extra: dict[str, Any] | None = None,
    directory: str | None = None,
) -> Path:
    """Write skills/<dir>/skill.json plus its templates."""
    skill_dir = root / "skills" / (directory or skill_id)
    skill_dir.mkdir(parents=True, exist_ok=True)
    if outputs is None:
        outputs = [{"target": f"ai/skills/{skill_id}-skill.md", "template": "skill.md.j2"}]
        (skill_dir / "skill.md.j2").write_text(
            "# {{ skill.name }}\n{% for k, v in answers.items() %}{{ k }}={{ v }}\n{% endfor %}"
        )
    manifest: dict[str, Any] = {
        "id": skill_id,
        "name": skill_id.replace("-", " ").title(),
        "description": f"The {skill_id} skill",
        "version": "1.0.0",
        "questions": questions or [],
        "outputs": outputs,
        "agentsSnippetTemplate": "snippet.md.j2",
    }
    (skill_dir / "snippet.md.j2").write_text(snippet)
    if activation is not None:
        manifest["activationRulesTemplate"] = "activation.md.j2"
        (skill_dir / "activation.md.j2").write_text(activation)
    manifest.update(extra or {})
    write_json(skill_dir / "skill.json", manifest)
    return skill_dir


def write_harness(
    root: Path,
    harness_id: str,
    outputs: dict[str, str],
    *,
    directory: str | None = None,
) -> Path:
    """Write harnesses/<dir>/harness.json; *outputs* maps target -> template text."""
    harness_dir = root / "harnesses" / (directory or harness_id)
    harness_dir.mkdir(parents=True, exist_ok=True)
    declared = []
    for i, (target, text) in enumerate(outputs.items()):
        template = f"out{i}.j2"
        (harness_dir / template).write_text(text)
        declared.append({"target": target, "template": template})
    write_json(harness_dir / "harness.json", {
        "id": harness_id,
        "name": harness_id.title(),
        "version": "2.0.0",
        "outputs": declared,
    })
    return harness_dir


def build_registry(root: Path) -> Path:
    """Registry with skills {frontend-design, planner} and harnesses {cursor, codex}."""
    templates = root / "templates"
    templates.mkdir(parents=True, exist_ok=True)
    (templates / "agents.base.md.j2").write_text(BASE_TEMPLATE)
    (templates / "agents.generated.md.j2").write_text("<!-- generated -->\n{{ content }}")

    write_skill(
        root,
        "frontend-design",
        questions=[{
            "id": "frontendDir",
            "label": "Frontend directory",
            "type": "path",
            "required": True,
            "default": "/",
            "validation": {"pattern": "^/", "message": "Must start with /"},
        }],
        snippet="Frontend lives in {{ answers.frontendDir }}.\n",
        activation="- Use the {{ skill.id }} skill when changing files under "
                   "{{ answers.frontendDir }}\n",
    )
    write_skill(root, "planner", snippet="Plan before you code.\n")
    write_harness(root, "cursor", {".cursor/rules/ai-manager.mdc": "Cursor: {{ harness.name }}\n"})
    write_harness(root, "codex", {"AGENTS.md": "See ai/agents.md ({{ harness.id }})\n"})
    return root


@pytest.fixture
def registry_root(tmp_path: Path) -> Path:
    return build_registry(tmp_path / "registry")


@pytest.fixture
def registry(registry_root: Path) -> Registry:
    return load_registry_sync(registry_root)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """An empty project directory with a .git marker."""
    root = tmp_path / "project"
    root.mkdir()
    (root / ".git").mkdir()
    (root / "README.md").write_text("# Project\n")
    return root


@pytest.fixture
def manager(project_root: Path, registry_root: Path) -> ProjectManager:
    return ProjectManager(project_root, registry_root)


def snapshot(root: Path) -> dict[str, bytes]:
    """Every file under *root* (excluding .git and backups) -> contents."""
    files: dict[str, bytes] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        if not path.is_file() or rel.startswith((".git/", "ai/.backups/")):
            continue
        files[rel] = path.read_bytes()
    return files
