"""Assembly of the aggregate ai/agents.md document."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from ai_manager.render.renderer import render_template_file, render_template_file_async
from ai_manager.types.manifests import Registry, SkillManifest

PLANNER_SKILL_ID = "planner"
BASE_TEMPLATE = "agents.base.md.j2"
NO_SKILLS_PLACEHOLDER = "No skills selected."
NO_HARNESSES_PLACEHOLDER = "- None"


@dataclass(slots=True)
class AgentsAssemblyInput:
    """Everything needed to build agents.md for one selection."""

    project_name: str
    registry: Registry
    skills: list[SkillManifest]  # Selected manifests, in selection order
    harness_ids: list[str] = field(default_factory=list)
    skill_answers: dict[str, dict[str, str]] = field(default_factory=dict)


def build_skill_index_table(skills: list[SkillManifest]) -> str:
    """Markdown table of the selected skills."""
    if not skills:
        return NO_SKILLS_PLACEHOLDER
    rows = [f"| {s.id} | {s.name} | {s.description} |" for s in skills]
    return "\n".join(["| Id | Name | Description |", "| --- | --- | --- |", *rows])


def build_harness_notes(harness_ids: list[str]) -> str:
    if not harness_ids:
        return NO_HARNESSES_PLACEHOLDER
    return "\n".join(f"- {h}" for h in harness_ids)


async def build_agents_markdown(data: AgentsAssemblyInput) -> str:
    """Render agents.md for the selection in *data*.

    Guide snippets and activation rules render concurrently; gather keeps
    them in selection order, so the output is deterministic.
    """
    registry = data.registry
    planner = next((s for s in data.skills if s.id == PLANNER_SKILL_ID), None)
    guide_skills = [s for s in data.skills if s.id != PLANNER_SKILL_ID]

    def context(skill: SkillManifest) -> dict:
        return {
            "skill": skill.to_context(),
            "answers": dict(data.skill_answers.get(skill.id, {})),
        }

    snippets = asyncio.gather(*(
        render_template_file_async(
            registry.skill_dir(s.id) / s.agents_snippet_template, context(s),
        )
        for s in guide_skills
    ))
    activation_rules = asyncio.gather(*(
        render_template_file_async(
            registry.skill_dir(s.id) / s.activation_rules_template, context(s),
        )
        for s in data.skills
        if s.activation_rules_template
    ))
    guide_texts, rule_texts = await asyncio.gather(snippets, activation_rules)

    plan_section = ""
    if planner is not None:
        plan_section = await render_template_file_async(
            registry.skill_dir(planner.id) / planner.agents_snippet_template,
            {"skill": planner.to_context(), "answers": {}},
        )

    return render_template_file(
        registry.templates_dir / BASE_TEMPLATE,
        {
            "projectName": data.project_name,
            "harnessNotes": build_harness_notes(data.harness_ids),
            "planSection": plan_section,
            "skillIndexTable": build_skill_index_table(data.skills),
            "skillGuides": "\n\n".join(guide_texts),
            "activationRules": "\n\n".join(rule_texts),
        },
    )
