"""Tests for ProjectManager operations."""

from __future__ import annotations

from pathlib import Path

import pytest

from ai_manager.core.errors import (
    AlreadyInitializedError,
    NotInitializedError,
    SchemaError,
    UnknownItemError,
)
from ai_manager.core.manager import ProjectManager
from ai_manager.core.state import AGENTS_TARGET, STATE_TARGET
from tests.conftest import FIXED_NOW, LATER

CURSOR_TARGET = ".cursor/rules/ai-manager.mdc"
FRONTEND_TARGET = "ai/skills/frontend-design-skill.md"


async def _init(manager: ProjectManager, **kwargs):
    return await manager.init(
        {"frontend-design": {"frontendDir": "/web"}}, ["cursor"], now=FIXED_NOW, **kwargs,
    )


class TestInit:
    @pytest.mark.asyncio
    async def test_init_writes_outputs(self, manager: ProjectManager, project_root: Path):
        result = await _init(manager)
        assert manager.is_initialized()
        for target in (AGENTS_TARGET, STATE_TARGET, FRONTEND_TARGET, CURSOR_TARGET):
            assert (project_root / target).is_file()
        assert result.state.skill_ids == ["frontend-design"]
        assert result.state.skills[0].answers == {"frontendDir": "/web"}
        assert result.state.skills[0].version == "1.0.0"
        assert result.state.harnesses[0].version == "2.0.0"

    @pytest.mark.asyncio
    async def test_init_records_facts(self, manager: ProjectManager, project_root: Path):
        (project_root / "web").mkdir()
        (project_root / "package.json").write_text("{}")
        (project_root / "pnpm-lock.yaml").write_text("")
        result = await _init(manager)
        facts = result.state.facts
        assert facts.package_manager == "pnpm"
        assert facts.config_files == ("package.json",)
        assert facts.directories == ("web",)

    @pytest.mark.asyncio
    async def test_init_twice_refused(self, manager: ProjectManager):
        await _init(manager)
        with pytest.raises(AlreadyInitializedError):
            await _init(manager)

    @pytest.mark.asyncio
    async def test_init_after_partial_state(self, manager: ProjectManager, project_root: Path):
        await _init(manager)
        (project_root / AGENTS_TARGET).unlink()
        assert not manager.is_initialized()
        result = await manager.init({}, [], now=LATER)
        assert result.state.skill_ids == []

    @pytest.mark.asyncio
    async def test_defaults_filled(self, manager: ProjectManager):
        result = await manager.init({"frontend-design": {}}, [], now=FIXED_NOW)
        assert result.state.skills[0].answers == {"frontendDir": "/"}

    @pytest.mark.asyncio
    async def test_invalid_answer(self, manager: ProjectManager, project_root: Path):
        with pytest.raises(SchemaError):
            await manager.init({"frontend-design": {"frontendDir": "web"}}, [])
        assert not (project_root / "ai").exists()

    @pytest.mark.asyncio
    async def test_unknown_ids(self, manager: ProjectManager):
        with pytest.raises(UnknownItemError) as exc_info:
            await manager.init({"ghost": {}}, [])
        assert exc_info.value.available == ["frontend-design", "planner"]
        with pytest.raises(UnknownItemError):
            await manager.init({}, ["phantom"])


class TestChanges:
    @pytest.mark.asyncio
    async def test_requires_state(self, manager: ProjectManager):
        with pytest.raises(NotInitializedError):
            await manager.add_skills({"planner": {}})
        with pytest.raises(NotInitializedError):
            await manager.available_harnesses("add")

    @pytest.mark.asyncio
    async def test_add_skill_appends(self, manager: ProjectManager, project_root: Path):
        await _init(manager)
        result = await manager.add_skills({"planner": {}}, now=LATER)
        assert result.state.skill_ids == ["frontend-design", "planner"]
        assert (project_root / "ai/skills/planner-skill.md").is_file()
        assert "Plan before you code." in (project_root / AGENTS_TARGET).read_text()

    @pytest.mark.asyncio
    async def test_add_selected_skill_keeps_answers(self, manager: ProjectManager):
        await _init(manager)
        result = await manager.add_skills({"frontend-design": {"frontendDir": "/x"}}, now=LATER)
        assert result.state.skill_ids == ["frontend-design"]
        assert result.state.skills[0].answers == {"frontendDir": "/web"}

    @pytest.mark.asyncio
    async def test_remove_skill(self, manager: ProjectManager, project_root: Path):
        await _init(manager)
        result = await manager.remove_skills(["frontend-design"], now=LATER)
        assert result.state.skill_ids == []
        assert result.applied.removed == [FRONTEND_TARGET]
        assert not (project_root / FRONTEND_TARGET).exists()

    @pytest.mark.asyncio
    async def test_add_and_remove_harness(self, manager: ProjectManager, project_root: Path):
        await _init(manager)
        result = await manager.add_harnesses(["codex", "cursor"], now=LATER)
        assert result.state.harness_ids == ["cursor", "codex"]
        assert (project_root / "AGENTS.md").is_file()

        result = await manager.remove_harnesses(["cursor"], now=LATER)
        assert result.state.harness_ids == ["codex"]
        assert not (project_root / CURSOR_TARGET).exists()
        assert (project_root / "AGENTS.md").is_file()

    @pytest.mark.asyncio
    async def test_remove_with_backup(self, manager: ProjectManager, project_root: Path):
        await _init(manager)
        await manager.remove_harnesses(["cursor"], backup=True, now=LATER)
        backups = project_root / "ai" / ".backups" / "2026-01-03T00-00-00-000Z"
        assert (backups / CURSOR_TARGET).read_text() == "Cursor: Cursor\n"

    @pytest.mark.asyncio
    async def test_remove_unknown_ids_raise(self, manager: ProjectManager, project_root: Path):
        await _init(manager)
        before = (project_root / STATE_TARGET).read_text()
        with pytest.raises(UnknownItemError) as exc_info:
            await manager.remove_skills(["frontend-design", "ghost"], now=LATER)
        assert exc_info.value.item_id == "ghost"
        with pytest.raises(UnknownItemError):
            await manager.remove_harnesses(["phantom"], now=LATER)
        assert (project_root / STATE_TARGET).read_text() == before
        assert (project_root / FRONTEND_TARGET).is_file()

    @pytest.mark.asyncio
    async def test_remove_unselected_warns(self, manager: ProjectManager, caplog):
        await _init(manager)
        with caplog.at_level("WARNING", logger="ai_manager.core.manager"):
            result = await manager.remove_skills(["planner"], now=LATER)
            await manager.remove_harnesses(["codex"], now=LATER)
        assert result.state.skill_ids == ["frontend-design"]
        assert result.applied.removed == []
        assert "Skill 'planner' is not selected" in caplog.text
        assert "Harness 'codex' is not selected" in caplog.text

    @pytest.mark.asyncio
    async def test_remove_retired_harness(
        self, manager: ProjectManager, project_root: Path, registry_root: Path,
    ):
        await _init(manager)
        state_path = project_root / STATE_TARGET
        state_path.write_text(state_path.read_text().replace('"cursor"', '"retired"'))
        other = ProjectManager(project_root, registry_root)
        result = await other.remove_harnesses(["retired"], now=LATER)
        assert result.state.harness_ids == []

    @pytest.mark.asyncio
    async def test_created_at_preserved(self, manager: ProjectManager):
        await _init(manager)
        result = await manager.add_harnesses(["codex"], now=LATER)
        assert result.state.created_at == "2026-01-02T03:04:05.678Z"
        assert result.state.updated_at == "2026-01-03T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_available_choices(self, manager: ProjectManager):
        await _init(manager)
        assert [s.id for s in await manager.available_skills("add")] == ["planner"]
        assert [s.id for s in await manager.available_skills("remove")] == ["frontend-design"]
        assert [h.id for h in await manager.available_harnesses("add")] == ["codex"]
        assert [h.id for h in await manager.available_harnesses("remove")] == ["cursor"]


class TestReporting:
    @pytest.mark.asyncio
    async def test_status_uninitialized(self, manager: ProjectManager):
        status = await manager.status()
        assert status.initialized is False
        assert status.state is None
        assert status.registry_skills == 2
        assert status.registry_harnesses == 2

    @pytest.mark.asyncio
    async def test_status_initialized(self, manager: ProjectManager):
        await _init(manager)
        status = await manager.status()
        assert status.initialized is True
        assert status.state.harness_ids == ["cursor"]

    @pytest.mark.asyncio
    async def test_doctor_all_ok(self, manager: ProjectManager):
        await _init(manager)
        checks = await manager.doctor()
        assert [c.label for c in checks] == [
            "Agents", "State", "Skill frontend-design", "Harness cursor",
        ]
        assert all(c.ok for c in checks)

    @pytest.mark.asyncio
    async def test_doctor_missing_file(self, manager: ProjectManager, project_root: Path):
        await _init(manager)
        (project_root / CURSOR_TARGET).unlink()
        failing = [c for c in await manager.doctor() if not c.ok]
        assert [(c.label, c.detail) for c in failing] == [("Harness cursor", CURSOR_TARGET)]

    @pytest.mark.asyncio
    async def test_doctor_missing_in_registry(
        self, manager: ProjectManager, project_root: Path, registry_root: Path,
    ):
        await _init(manager)
        other = ProjectManager(project_root, registry_root)
        state_path = project_root / STATE_TARGET
        state_path.write_text(state_path.read_text().replace('"cursor"', '"retired"'))
        checks = await other.doctor()
        assert ("Harness retired", False, "Missing in registry") in [
            (c.label, c.ok, c.detail) for c in checks
        ]
