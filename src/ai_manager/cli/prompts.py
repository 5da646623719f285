"""Interactive selection and skill questions (click prompts)."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path

import click

from ai_manager.core.errors import SelectionCancelledError
from ai_manager.core.project import (
    BACKEND_DIR_CANDIDATES,
    FRONTEND_DIR_CANDIDATES,
    detect_directory_default,
)
from ai_manager.registry.schema import answer_error
from ai_manager.types.manifests import Question, QuestionType, SkillManifest

# (skill id, question id) -> candidate directories for a detected default
_DIRECTORY_DEFAULTS: dict[tuple[str, str], tuple[str, ...]] = {
    ("frontend-design", "frontendDir"): FRONTEND_DIR_CANDIDATES,
    ("backend", "backendDir"): BACKEND_DIR_CANDIDATES,
}


def _prompt(text: str, **kwargs) -> str:
    try:
        return click.prompt(text, **kwargs)
    except click.Abort:
        raise SelectionCancelledError() from None


def parse_selection(raw: str, ids: Sequence[str]) -> list[str]:
    """Parse ``"1,3"`` or ``"planner, tester"`` into ids, in choice order.

    Raises ValueError naming the first token that matches nothing.
    """
    picked: set[str] = set()
    for token in (t.strip() for t in raw.replace(" ", ",").split(",")):
        if not token:
            continue
        if token.isdigit() and 1 <= int(token) <= len(ids):
            picked.add(ids[int(token) - 1])
        elif token in ids:
            picked.add(token)
        else:
            raise ValueError(f"Unknown choice: {token}")
    return [i for i in ids if i in picked]


def select_many(message: str, choices: Sequence[tuple[str, str]]) -> list[str]:
    """Let the user pick any number of ``(id, title)`` choices.

    An empty answer selects nothing.
    """
    ids = [choice_id for choice_id, _ in choices]
    click.echo(message)
    for index, (choice_id, title) in enumerate(choices, start=1):
        click.echo(f"  {index}) {title} ({choice_id})")
    while True:
        raw = _prompt(
            "Numbers or ids, comma-separated (blank for none)",
            default="",
            show_default=False,
        )
        try:
            return parse_selection(raw, ids)
        except ValueError as exc:
            click.echo(f"  {exc}", err=True)


def question_default(skill: SkillManifest, question: Question, project_root: Path) -> str:
    candidates = _DIRECTORY_DEFAULTS.get((skill.id, question.id))
    if candidates:
        return detect_directory_default(project_root, candidates)
    return question.default or ""


def ask_question(skill: SkillManifest, question: Question, project_root: Path) -> str:
    """Prompt until the answer passes the question's validation."""
    default = question_default(skill, question, project_root)
    kwargs: dict = {"default": default, "show_default": bool(default)}
    if question.type is QuestionType.SELECT:
        kwargs["type"] = click.Choice(list(question.options))
        if default not in question.options:
            kwargs["default"] = question.options[0]
            kwargs["show_default"] = True
    while True:
        value = str(_prompt(question.label, **kwargs)).strip()
        error = answer_error(question, value)
        if error is None:
            return value
        click.echo(f"  {error}", err=True)


def ask_skill_questions(
    skill: SkillManifest,
    project_root: Path,
    preset: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Collect answers for every question of *skill*.

    Answers already in *preset* are used as given and not asked again.
    """
    preset = preset or {}
    answers: dict[str, str] = {}
    for question in skill.questions:
        if question.id in preset:
            answers[question.id] = preset[question.id]
        else:
            answers[question.id] = ask_question(skill, question, project_root)
    return answers


def parse_answer_options(values: Sequence[str]) -> dict[str, dict[str, str]]:
    """Turn ``--answer skill.question=value`` options into nested answers."""
    answers: dict[str, dict[str, str]] = {}
    for item in values:
        key, sep, value = item.partition("=")
        skill_id, dot, question_id = key.partition(".")
        if not sep or not dot or not skill_id or not question_id:
            raise click.BadParameter(
                f"expected SKILL.QUESTION=VALUE, got {item!r}", param_hint="--answer",
            )
        answers.setdefault(skill_id, {})[question_id] = value
    return answers
