"""Output reconciliation: from (previous state, desired selection) to file changes.

:func:`reconcile` is pure with respect to the project directory: it reads
templates from the registry but never looks at, writes or deletes project
files.  Which files are stale is decided only by comparing the declared
target sets of the previous and desired selections.  :func:`apply_plan`
then performs the removals and writes, in a fixed order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path

from ai_manager.core.fs import BackupOptions, isoformat_z, remove_file, write_file_always
from ai_manager.core.state import AGENTS_TARGET, STATE_TARGET, StateStore
from ai_manager.render.agents import AgentsAssemblyInput, build_agents_markdown
from ai_manager.render.renderer import render_template_file_async
from ai_manager.types.manifests import Registry, SkillManifest
from ai_manager.types.state import ManagerState, ProjectFacts, SelectedHarness, SelectedSkill

logger = logging.getLogger(__name__)

GENERATED_TEMPLATE = "agents.generated.md.j2"
FIXED_TARGETS = (AGENTS_TARGET, STATE_TARGET)


@dataclass(frozen=True, slots=True)
class PlannedWrite:
    """Rendered contents for one project-relative target."""

    target: str
    contents: str


@dataclass(frozen=True, slots=True)
class ReconcilePlan:
    """Everything one reconciliation will do, computed before touching disk."""

    writes: tuple[PlannedWrite, ...]
    removals: frozenset[str]
    next_state: ManagerState

    @property
    def targets(self) -> set[str]:
        return {w.target for w in self.writes}


@dataclass(slots=True)
class ApplyResult:
    """What apply_plan actually did."""

    written: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    backed_up: list[Path] = field(default_factory=list)


def collect_output_targets(
    registry: Registry, skill_ids: Iterable[str], harness_ids: Iterable[str],
) -> set[str]:
    """Every target the given selection produces, plus the two fixed files.

    Ids unknown to the registry contribute no targets.
    """
    targets: set[str] = set(FIXED_TARGETS)
    for skill_id in skill_ids:
        skill = registry.get_skill(skill_id)
        if skill is None:
            logger.warning("Skill '%s' is not in the registry; ignoring its outputs", skill_id)
            continue
        targets.update(o.target for o in skill.outputs)
    for harness_id in harness_ids:
        harness = registry.get_harness(harness_id)
        if harness is None:
            logger.warning("Harness '%s' is not in the registry; ignoring its outputs", harness_id)
            continue
        targets.update(o.target for o in harness.outputs)
    return targets


def stale_targets(
    registry: Registry,
    prev_state: ManagerState | None,
    skill_ids: Iterable[str],
    harness_ids: Iterable[str],
) -> set[str]:
    """Targets produced by *prev_state* that the new selection no longer produces."""
    if prev_state is None:
        return set()
    previous = collect_output_targets(registry, prev_state.skill_ids, prev_state.harness_ids)
    following = collect_output_targets(registry, skill_ids, harness_ids)
    return previous - following


async def render_outputs(
    registry: Registry,
    project_name: str,
    skills: list[SelectedSkill],
    harnesses: list[SelectedHarness],
) -> list[PlannedWrite]:
    """Render agents.md and every declared output of the selection.

    The order is agents.md, then skill outputs, then harness outputs, each in
    selection order.
    """
    selected: list[tuple[SkillManifest, SelectedSkill]] = []
    for chosen in skills:
        manifest = registry.get_skill(chosen.id)
        if manifest is not None:
            selected.append((manifest, chosen))

    agents_body = await build_agents_markdown(AgentsAssemblyInput(
        project_name=project_name,
        registry=registry,
        skills=[m for m, _ in selected],
        harness_ids=[h.id for h in harnesses],
        skill_answers={c.id: dict(c.answers) for _, c in selected},
    ))

    targets: list[str] = [AGENTS_TARGET]
    jobs = [render_template_file_async(
        registry.templates_dir / GENERATED_TEMPLATE, {"content": agents_body},
    )]
    for manifest, chosen in selected:
        context = {"skill": manifest.to_context(), "answers": dict(chosen.answers)}
        for output in manifest.outputs:
            targets.append(output.target)
            jobs.append(render_template_file_async(
                registry.skill_dir(manifest.id) / output.template, context,
            ))
    for chosen_harness in harnesses:
        harness = registry.get_harness(chosen_harness.id)
        if harness is None:
            continue
        context = {"harness": harness.to_context()}
        for output in harness.outputs:
            targets.append(output.target)
            jobs.append(render_template_file_async(
                registry.harness_dir(harness.id) / output.template, context,
            ))

    rendered = await asyncio.gather(*jobs)
    by_target: dict[str, str] = {}
    for target, contents in zip(targets, rendered, strict=True):
        if by_target.get(target, contents) != contents:
            logger.warning("Several outputs target %s; the last one declared wins", target)
        by_target[target] = contents
    return [PlannedWrite(t, c) for t, c in by_target.items()]


async def reconcile(
    prev_state: ManagerState | None,
    desired_skills: list[SelectedSkill],
    desired_harnesses: list[SelectedHarness],
    registry: Registry,
    *,
    project_root: str | Path,
    facts: ProjectFacts | None = None,
    now: datetime | None = None,
) -> ReconcilePlan:
    """Compute the writes, removals and next state for a desired selection.

    With ``prev_state=None`` (first initialization) nothing is stale. The
    state file is always the last planned write.
    """
    from ai_manager import __version__

    root = Path(project_root)
    timestamp = isoformat_z(now or datetime.now(UTC))
    skills = list(desired_skills)
    harnesses = list(desired_harnesses)

    removals = stale_targets(
        registry, prev_state, [s.id for s in skills], [h.id for h in harnesses],
    )

    if prev_state is None:
        next_state = ManagerState(
            version=__version__,
            created_at=timestamp,
            updated_at=timestamp,
            project_root=str(root),
            skills=tuple(skills),
            harnesses=tuple(harnesses),
            facts=facts,
        )
    else:
        next_state = replace(
            prev_state.with_selection(skills, harnesses, timestamp),
            version=__version__,
            facts=facts if facts is not None else prev_state.facts,
        )

    writes = await render_outputs(registry, root.name, skills, harnesses)
    writes.append(PlannedWrite(STATE_TARGET, StateStore.dumps(next_state)))

    logger.info(
        "Planned %d writes and %d removals for %s", len(writes), len(removals), root,
    )
    return ReconcilePlan(writes=tuple(writes), removals=frozenset(removals), next_state=next_state)


def apply_plan(
    project_root: str | Path, plan: ReconcilePlan, backup: BackupOptions,
) -> ApplyResult:
    """Remove stale files, then write every planned output.

    Operations run one at a time: removals (sorted), then writes in plan
    order, so the state file is only replaced once everything else succeeded.
    Nothing is rolled back on failure; re-running the same operation is the
    recovery path.
    """
    root = Path(project_root)
    result = ApplyResult()

    for target in sorted(plan.removals):
        removed, backed_up = remove_file(root / target, backup)
        if removed:
            result.removed.append(target)
            logger.info("Removed stale output %s", target)
        if backed_up is not None:
            result.backed_up.append(backed_up)

    for write in plan.writes:
        backed_up = write_file_always(root / write.target, write.contents, backup)
        result.written.append(write.target)
        if backed_up is not None:
            result.backed_up.append(backed_up)

    logger.info(
        "Applied plan: %d written, %d removed, %d backed up",
        len(result.written), len(result.removed), len(result.backed_up),
    )
    return result
