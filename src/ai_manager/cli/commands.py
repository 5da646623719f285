"""CLI subcommands for ai-manager (status, init, doctor, skills, harnesses)."""

from __future__ import annotations

from collections.abc import Sequence

import click

from ai_manager.cli import output
from ai_manager.cli.context import EXIT_USER_ERROR, CliContext, handle_errors, run_async
from ai_manager.cli.prompts import ask_skill_questions, parse_answer_options, select_many
from ai_manager.core.manager import Action

_BACKUP_OPTION = click.option(
    "--backup", is_flag=True, default=False, help="Copy files to ai/.backups before changing them",
)


@click.group()
def skills_cmd() -> None:
    """Manage skills."""


@skills_cmd.command("list")
@click.pass_obj
def skills_list(obj: CliContext) -> None:
    """List available skills."""
    registry = run_async(obj.manager().registry())
    output.print_header(obj.version)
    output.print_skills(registry.skills)


@skills_cmd.command("add")
@click.argument("ids", nargs=-1)
@click.option("--answer", "answers", multiple=True, help="Preset answer: SKILL.QUESTION=VALUE")
@_BACKUP_OPTION
@click.pass_obj
def skills_add(
    obj: CliContext, ids: tuple[str, ...], answers: tuple[str, ...], backup: bool,
) -> None:
    """Add skills (prompts for any not given as IDS)."""
    with handle_errors():
        _change_skills(obj, "add", ids, answers, backup)


@skills_cmd.command("remove")
@click.argument("ids", nargs=-1)
@_BACKUP_OPTION
@click.pass_obj
def skills_remove(obj: CliContext, ids: tuple[str, ...], backup: bool) -> None:
    """Remove skills and delete the files only they produced."""
    with handle_errors():
        _change_skills(obj, "remove", ids, (), backup)


def _change_skills(
    obj: CliContext,
    action: Action,
    ids: Sequence[str],
    answer_options: Sequence[str],
    backup: bool,
) -> None:
    manager = obj.manager()
    choices = run_async(manager.available_skills(action))
    if not choices:
        output.print_warning("No skills available.")
        return

    if ids:
        registry = run_async(manager.registry())
        selected = obj.check_ids(
            "skill", ids, [c.id for c in choices], [s.id for s in registry.skills],
        )
    else:
        selected = select_many(
            "Add skills" if action == "add" else "Remove skills",
            [(c.id, c.name) for c in choices],
        )
    if not selected:
        return

    backup = obj.backup(backup)
    if action == "add":
        presets = parse_answer_options(answer_options)
        by_id = {c.id: c for c in choices}
        skill_answers = {
            skill_id: ask_skill_questions(
                by_id[skill_id], manager.project_root, presets.get(skill_id),
            )
            for skill_id in selected
        }
        result = run_async(manager.add_skills(skill_answers, backup=backup))
    else:
        result = run_async(manager.remove_skills(selected, backup=backup))
    output.print_result(result, "Skills updated.", manager.project_root)


@click.group()
def harnesses_cmd() -> None:
    """Manage harnesses."""


@harnesses_cmd.command("list")
@click.pass_obj
def harnesses_list(obj: CliContext) -> None:
    """List available harnesses."""
    registry = run_async(obj.manager().registry())
    output.print_header(obj.version)
    output.print_harnesses(registry.harnesses)


@harnesses_cmd.command("add")
@click.argument("ids", nargs=-1)
@_BACKUP_OPTION
@click.pass_obj
def harnesses_add(obj: CliContext, ids: tuple[str, ...], backup: bool) -> None:
    """Add harnesses (prompts for any not given as IDS)."""
    with handle_errors():
        _change_harnesses(obj, "add", ids, backup)


@harnesses_cmd.command("remove")
@click.argument("ids", nargs=-1)
@_BACKUP_OPTION
@click.pass_obj
def harnesses_remove(obj: CliContext, ids: tuple[str, ...], backup: bool) -> None:
    """Remove harnesses and delete the files only they produced."""
    with handle_errors():
        _change_harnesses(obj, "remove", ids, backup)


def _change_harnesses(
    obj: CliContext, action: Action, ids: Sequence[str], backup: bool,
) -> None:
    manager = obj.manager()
    choices = run_async(manager.available_harnesses(action))
    if not choices:
        output.print_warning("No harnesses available.")
        return

    if ids:
        registry = run_async(manager.registry())
        selected = obj.check_ids(
            "harness", ids, [c.id for c in choices], [h.id for h in registry.harnesses],
        )
    else:
        selected = select_many(
            "Add harnesses" if action == "add" else "Remove harnesses",
            [(c.id, c.name) for c in choices],
        )
    if not selected:
        return

    backup = obj.backup(backup)
    if action == "add":
        result = run_async(manager.add_harnesses(selected, backup=backup))
    else:
        result = run_async(manager.remove_harnesses(selected, backup=backup))
    output.print_result(result, "Harnesses updated.", manager.project_root)


@click.command("status")
@click.pass_obj
def status_cmd(obj: CliContext) -> None:
    """Show what is applied to this project."""
    status = run_async(obj.manager().status())
    output.print_header(obj.version)
    output.print_status(status)


@click.command("init")
@click.option("--skill", "skill_ids", multiple=True, help="Skill to select (skips the prompt)")
@click.option(
    "--harness", "harness_ids", multiple=True, help="Harness to select (skips the prompt)",
)
@click.option("--answer", "answers", multiple=True, help="Preset answer: SKILL.QUESTION=VALUE")
@_BACKUP_OPTION
@click.pass_obj
def init_cmd(
    obj: CliContext,
    skill_ids: tuple[str, ...],
    harness_ids: tuple[str, ...],
    answers: tuple[str, ...],
    backup: bool,
) -> None:
    """Initialize ai-manager for this project."""
    manager = obj.manager()
    if manager.is_initialized():
        output.print_warning("Already initialized. Use 'skills' or 'harnesses' to change it.")
        raise SystemExit(EXIT_USER_ERROR)
    with handle_errors():
        _init(obj, skill_ids, harness_ids, answers, backup)


def _init(
    obj: CliContext,
    skill_ids: Sequence[str],
    harness_ids: Sequence[str],
    answer_options: Sequence[str],
    backup: bool,
) -> None:
    manager = obj.manager()
    registry = run_async(manager.registry())
    all_skills = [s.id for s in registry.skills]
    all_harnesses = [h.id for h in registry.harnesses]

    if skill_ids:
        chosen_skills = obj.check_ids("skill", skill_ids, all_skills, all_skills)
    else:
        chosen_skills = select_many("Select skills", [(s.id, s.name) for s in registry.skills])

    presets = parse_answer_options(answer_options)
    skill_answers: dict[str, dict[str, str]] = {}
    for skill_id in chosen_skills:
        skill = registry.get_skill(skill_id)
        skill_answers[skill_id] = ask_skill_questions(
            skill, manager.project_root, presets.get(skill_id),
        )

    if harness_ids:
        chosen_harnesses = obj.check_ids("harness", harness_ids, all_harnesses, all_harnesses)
    else:
        chosen_harnesses = select_many(
            "Select harnesses", [(h.id, h.name) for h in registry.harnesses],
        )

    result = run_async(
        manager.init(skill_answers, chosen_harnesses, backup=obj.backup(backup)),
    )
    output.print_result(result, "Init complete. Try: ai-manager status", manager.project_root)


@click.command("doctor")
@click.pass_obj
def doctor_cmd(obj: CliContext) -> None:
    """Check that every generated file is in place."""
    manager = obj.manager()
    output.print_header(obj.version)
    checks = run_async(manager.doctor())
    output.print_doctor(checks)
    if not all(c.ok for c in checks):
        raise SystemExit(EXIT_USER_ERROR)
