"""Project-level operations: init, add/remove skills and harnesses, status, doctor."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal

from ai_manager.core.errors import AlreadyInitializedError, NotInitializedError, UnknownItemError
from ai_manager.core.fs import BackupOptions
from ai_manager.core.project import scan_project_facts
from ai_manager.core.reconcile import ApplyResult, ReconcilePlan, apply_plan, reconcile
from ai_manager.core.state import AGENTS_TARGET, STATE_TARGET, StateStore
from ai_manager.registry.loader import load_registry
from ai_manager.registry.schema import resolve_answers
from ai_manager.types.manifests import HarnessManifest, Registry, SkillManifest
from ai_manager.types.state import ManagerState, ProjectFacts, SelectedHarness, SelectedSkill

logger = logging.getLogger(__name__)

Action = Literal["add", "remove"]


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of one state-changing operation."""

    plan: ReconcilePlan
    applied: ApplyResult

    @property
    def state(self) -> ManagerState:
        return self.plan.next_state


@dataclass(frozen=True, slots=True)
class ProjectStatus:
    """Snapshot shown by ``ai-manager status``."""

    project_root: Path
    initialized: bool
    state: ManagerState | None
    registry_skills: int
    registry_harnesses: int


@dataclass(frozen=True, slots=True)
class DoctorCheck:
    """One row of the doctor report."""

    label: str
    ok: bool
    detail: str


class ProjectManager:
    """Applies skill/harness selections to one project directory.

    The registry is loaded once per manager instance, i.e. once per CLI
    invocation.  The persisted state is the only record of what has been
    generated; the project tree is never scanned to infer it.
    """

    def __init__(
        self,
        project_root: str | Path,
        registry_root: str | Path,
        *,
        registry: Registry | None = None,
    ) -> None:
        self.project_root = Path(project_root).resolve()
        self.registry_root = Path(registry_root)
        self.store = StateStore(self.project_root)
        self._registry = registry

    async def registry(self) -> Registry:
        if self._registry is None:
            self._registry = await load_registry(self.registry_root)
        return self._registry

    # -- State ---------------------------------------------------------------

    def is_initialized(self) -> bool:
        """Both agents.md and the state file exist."""
        return (self.project_root / AGENTS_TARGET).is_file() and self.store.exists()

    def load_state(self) -> ManagerState | None:
        return self.store.load()

    def require_state(self) -> ManagerState:
        state = self.store.load()
        if state is None:
            raise NotInitializedError(self.project_root)
        return state

    # -- Choices -------------------------------------------------------------

    async def available_skills(self, action: Action) -> list[SkillManifest]:
        """Skills that can be added (not selected) or removed (selected)."""
        registry = await self.registry()
        current = set(self.require_state().skill_ids)
        if action == "add":
            return [s for s in registry.skills if s.id not in current]
        return [s for s in registry.skills if s.id in current]

    async def available_harnesses(self, action: Action) -> list[HarnessManifest]:
        """Harnesses that can be added (not selected) or removed (selected)."""
        registry = await self.registry()
        current = set(self.require_state().harness_ids)
        if action == "add":
            return [h for h in registry.harnesses if h.id not in current]
        return [h for h in registry.harnesses if h.id in current]

    # -- Operations ----------------------------------------------------------

    async def init(
        self,
        skill_answers: Mapping[str, Mapping[str, str]],
        harness_ids: Iterable[str],
        *,
        backup: bool = False,
        now: datetime | None = None,
    ) -> OperationResult:
        """First-time generation for the project.

        Refused when agents.md and the state file are both already present.
        """
        if self.is_initialized():
            raise AlreadyInitializedError(self.project_root)
        registry = await self.registry()
        skills = self._select_skills(registry, skill_answers)
        harnesses = self._select_harnesses(registry, harness_ids)
        facts = scan_project_facts(self.project_root)
        return await self._apply(None, skills, harnesses, backup=backup, now=now, facts=facts)

    async def add_skills(
        self,
        skill_answers: Mapping[str, Mapping[str, str]],
        *,
        backup: bool = False,
        now: datetime | None = None,
    ) -> OperationResult:
        """Append skills to the selection; already-selected ids are skipped."""
        state = self.require_state()
        registry = await self.registry()
        current = set(state.skill_ids)
        fresh = {k: v for k, v in skill_answers.items() if k not in current}
        for skipped in sorted(set(skill_answers) - set(fresh)):
            logger.info("Skill '%s' is already selected", skipped)
        skills = [*state.skills, *self._select_skills(registry, fresh)]
        return await self._apply(state, skills, list(state.harnesses), backup=backup, now=now)

    async def remove_skills(
        self,
        skill_ids: Iterable[str],
        *,
        backup: bool = False,
        now: datetime | None = None,
    ) -> OperationResult:
        """Drop skills from the selection and delete their stale outputs.

        Ids the registry does not know raise :class:`UnknownItemError` unless
        they are selected; known ids that are not selected are skipped.
        """
        state = self.require_state()
        registry = await self.registry()
        dropped = self._removable(
            "skill", skill_ids, state.skill_ids, [s.id for s in registry.skills],
        )
        skills = [s for s in state.skills if s.id not in dropped]
        return await self._apply(state, skills, list(state.harnesses), backup=backup, now=now)

    async def add_harnesses(
        self,
        harness_ids: Iterable[str],
        *,
        backup: bool = False,
        now: datetime | None = None,
    ) -> OperationResult:
        """Append harnesses to the selection; already-selected ids are skipped."""
        state = self.require_state()
        registry = await self.registry()
        current = set(state.harness_ids)
        fresh = [h for h in dict.fromkeys(harness_ids) if h not in current]
        harnesses = [*state.harnesses, *self._select_harnesses(registry, fresh)]
        return await self._apply(state, list(state.skills), harnesses, backup=backup, now=now)

    async def remove_harnesses(
        self,
        harness_ids: Iterable[str],
        *,
        backup: bool = False,
        now: datetime | None = None,
    ) -> OperationResult:
        """Drop harnesses from the selection and delete their stale outputs.

        Same id rules as :meth:`remove_skills`.
        """
        state = self.require_state()
        registry = await self.registry()
        dropped = self._removable(
            "harness", harness_ids, state.harness_ids, [h.id for h in registry.harnesses],
        )
        harnesses = [h for h in state.harnesses if h.id not in dropped]
        return await self._apply(state, list(state.skills), harnesses, backup=backup, now=now)

    async def _apply(
        self,
        prev_state: ManagerState | None,
        skills: list[SelectedSkill],
        harnesses: list[SelectedHarness],
        *,
        backup: bool,
        now: datetime | None,
        facts: ProjectFacts | None = None,
    ) -> OperationResult:
        registry = await self.registry()
        moment = now or datetime.now(UTC)
        plan = await reconcile(
            prev_state,
            skills,
            harnesses,
            registry,
            project_root=self.project_root,
            facts=facts,
            now=moment,
        )
        options = BackupOptions.create(self.project_root, backup, moment)
        applied = apply_plan(self.project_root, plan, options)
        return OperationResult(plan=plan, applied=applied)

    @staticmethod
    def _removable(
        kind: str, requested: Iterable[str], selected: list[str], known: list[str],
    ) -> set[str]:
        """Selected ids out of *requested*; ids nobody knows are an error."""
        current = set(selected)
        ids = list(dict.fromkeys(requested))
        for item_id in ids:
            if item_id not in current and item_id not in known:
                raise UnknownItemError(kind, item_id, known)
        dropped: set[str] = set()
        for item_id in ids:
            if item_id in current:
                dropped.add(item_id)
            else:
                logger.warning("%s '%s' is not selected; skipping", kind.capitalize(), item_id)
        return dropped

    @staticmethod
    def _select_skills(
        registry: Registry, skill_answers: Mapping[str, Mapping[str, str]],
    ) -> list[SelectedSkill]:
        selected: list[SelectedSkill] = []
        for skill_id, answers in skill_answers.items():
            manifest = registry.get_skill(skill_id)
            if manifest is None:
                raise UnknownItemError("skill", skill_id, [s.id for s in registry.skills])
            selected.append(SelectedSkill(
                id=manifest.id,
                version=manifest.version,
                answers=resolve_answers(manifest, dict(answers)),
            ))
        return selected

    @staticmethod
    def _select_harnesses(
        registry: Registry, harness_ids: Iterable[str],
    ) -> list[SelectedHarness]:
        selected: list[SelectedHarness] = []
        for harness_id in dict.fromkeys(harness_ids):
            manifest = registry.get_harness(harness_id)
            if manifest is None:
                raise UnknownItemError("harness", harness_id, [h.id for h in registry.harnesses])
            selected.append(SelectedHarness(id=manifest.id, version=manifest.version))
        return selected

    # -- Reporting -----------------------------------------------------------

    async def status(self) -> ProjectStatus:
        registry = await self.registry()
        return ProjectStatus(
            project_root=self.project_root,
            initialized=self.is_initialized(),
            state=self.load_state(),
            registry_skills=len(registry.skills),
            registry_harnesses=len(registry.harnesses),
        )

    async def doctor(self) -> list[DoctorCheck]:
        """Check that every output the saved selection declares is on disk."""
        state = self.require_state()
        registry = await self.registry()

        checks = [
            self._file_check("Agents", AGENTS_TARGET),
            self._file_check("State", STATE_TARGET),
        ]
        for skill in state.skills:
            manifest = registry.get_skill(skill.id)
            if manifest is None:
                checks.append(DoctorCheck(f"Skill {skill.id}", False, "Missing in registry"))
                continue
            checks.extend(self._file_check(f"Skill {skill.id}", o.target) for o in manifest.outputs)
        for harness in state.harnesses:
            manifest = registry.get_harness(harness.id)
            if manifest is None:
                checks.append(DoctorCheck(f"Harness {harness.id}", False, "Missing in registry"))
                continue
            checks.extend(
                self._file_check(f"Harness {harness.id}", o.target) for o in manifest.outputs
            )
        return checks

    def _file_check(self, label: str, target: str) -> DoctorCheck:
        return DoctorCheck(label, (self.project_root / target).is_file(), target)
