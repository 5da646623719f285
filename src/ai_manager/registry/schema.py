"""Declarative manifest schemas and the validation pass that checks them.

A schema maps field names to :class:`FieldSpec` entries.  :func:`validate`
walks data against a schema and returns every violation it finds rather than
stopping at the first one, so a broken manifest is reported in full.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

from ai_manager.core.errors import SchemaError, Violation
from ai_manager.core.state import AGENTS_TARGET, STATE_TARGET
from ai_manager.types.manifests import Question, QuestionType, SkillManifest

_TYPE_NAMES = {
    "string": str,
    "boolean": bool,
    "object": dict,
    "array": list,
}

_RESERVED_TARGETS = frozenset({AGENTS_TARGET, STATE_TARGET})


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Expected shape of one field."""

    kind: str  # "string", "boolean", "object" or "array"
    required: bool = True
    choices: tuple[str, ...] = ()
    schema: dict[str, FieldSpec] | None = None  # For objects, or array items
    items: str | None = None  # Item kind for arrays of scalars
    non_empty: bool = False


Schema = dict[str, FieldSpec]

VALIDATION_SCHEMA: Schema = {
    "pattern": FieldSpec("string", required=False),
    "message": FieldSpec("string", required=False),
}

QUESTION_SCHEMA: Schema = {
    "id": FieldSpec("string", non_empty=True),
    "label": FieldSpec("string"),
    "type": FieldSpec("string", choices=("input", "select", "path")),
    "required": FieldSpec("boolean", required=False),
    "options": FieldSpec("array", required=False, items="string"),
    "default": FieldSpec("string", required=False),
    "validation": FieldSpec("object", required=False, schema=VALIDATION_SCHEMA),
}

OUTPUT_SCHEMA: Schema = {
    "target": FieldSpec("string", non_empty=True),
    "template": FieldSpec("string", non_empty=True),
}

SKILL_SCHEMA: Schema = {
    "id": FieldSpec("string", non_empty=True),
    "name": FieldSpec("string"),
    "description": FieldSpec("string"),
    "version": FieldSpec("string"),
    "questions": FieldSpec("array", required=False, schema=QUESTION_SCHEMA),
    "outputs": FieldSpec("array", required=False, schema=OUTPUT_SCHEMA),
    "agentsSnippetTemplate": FieldSpec("string", non_empty=True),
    "activationRulesTemplate": FieldSpec("string", required=False),
}

HARNESS_SCHEMA: Schema = {
    "id": FieldSpec("string", non_empty=True),
    "name": FieldSpec("string"),
    "version": FieldSpec("string"),
    "outputs": FieldSpec("array", required=False, schema=OUTPUT_SCHEMA),
}


def validate(data: Any, schema: Schema, path: str = "") -> list[Violation]:
    """Check *data* against *schema*. Returns all violations found."""
    if not isinstance(data, dict):
        return [Violation(path, f"expected object, got {_describe(data)}")]

    violations: list[Violation] = []
    for name, spec in schema.items():
        field_path = _join(path, name)
        if name not in data or data[name] is None:
            if spec.required:
                violations.append(Violation(field_path, "required field missing"))
            continue
        violations.extend(_check_field(data[name], spec, field_path))
    return violations


def _check_field(value: Any, spec: FieldSpec, path: str) -> list[Violation]:
    if not _is_kind(value, spec.kind):
        return [Violation(path, f"expected {spec.kind}, got {_describe(value)}")]

    violations: list[Violation] = []
    if spec.non_empty and not value:
        violations.append(Violation(path, "must not be empty"))
    if spec.choices and value not in spec.choices:
        allowed = ", ".join(spec.choices)
        violations.append(Violation(path, f"must be one of: {allowed}"))

    if spec.kind == "object" and spec.schema is not None:
        violations.extend(validate(value, spec.schema, path))
    elif spec.kind == "array":
        for i, item in enumerate(value):
            item_path = f"{path}[{i}]"
            if spec.schema is not None:
                violations.extend(validate(item, spec.schema, item_path))
            elif spec.items is not None and not _is_kind(item, spec.items):
                violations.append(
                    Violation(item_path, f"expected {spec.items}, got {_describe(item)}")
                )
    return violations


def validate_skill(data: Any) -> list[Violation]:
    """Validate a skill.json payload, including cross-field rules."""
    violations = validate(data, SKILL_SCHEMA)
    if violations:
        return violations

    seen: set[str] = set()
    for i, question in enumerate(data.get("questions") or []):
        path = f"questions[{i}]"
        if question["id"] in seen:
            violations.append(Violation(f"{path}.id", f"duplicate question id {question['id']!r}"))
        seen.add(question["id"])
        if question["type"] == "select" and not question.get("options"):
            violations.append(Violation(f"{path}.options", "select questions need options"))
        pattern = (question.get("validation") or {}).get("pattern")
        if pattern is not None:
            try:
                re.compile(pattern)
            except re.error as exc:
                violations.append(
                    Violation(f"{path}.validation.pattern", f"invalid regex: {exc}")
                )
    violations.extend(_check_targets(data))
    return violations


def validate_harness(data: Any) -> list[Violation]:
    """Validate a harness.json payload."""
    violations = validate(data, HARNESS_SCHEMA)
    if violations:
        return violations
    return _check_targets(data)


def _check_targets(data: dict[str, Any]) -> list[Violation]:
    """Output targets must stay inside the project and off the generated files."""
    violations: list[Violation] = []
    for i, output in enumerate(data.get("outputs") or []):
        target = PurePosixPath(output["target"].replace("\\", "/"))
        if target.is_absolute() or ".." in target.parts:
            violations.append(
                Violation(f"outputs[{i}].target", "must be a relative path inside the project")
            )
        elif target.as_posix() in _RESERVED_TARGETS:
            violations.append(
                Violation(f"outputs[{i}].target", f"{target.as_posix()} is written by ai-manager")
            )
    return violations


def answer_error(question: Question, value: str) -> str | None:
    """Why *value* is not an acceptable answer to *question*, or None."""
    if not value:
        return "Required" if question.required else None
    if question.type is QuestionType.SELECT and value not in question.options:
        return f"Choose one of: {', '.join(question.options)}"
    validation = question.validation
    if validation is not None and validation.pattern:
        if not re.search(validation.pattern, value):
            return validation.message or "Invalid value"
    return None


def resolve_answers(skill: SkillManifest, answers: dict[str, str]) -> dict[str, str]:
    """Fill defaults for unanswered questions and check every answer.

    Raises SchemaError listing each unacceptable answer.
    """
    resolved: dict[str, str] = {}
    violations: list[Violation] = []
    for question in skill.questions:
        value = answers.get(question.id)
        if value is None:
            value = question.default or ""
        error = answer_error(question, value)
        if error is not None:
            violations.append(Violation(question.id, error))
            continue
        resolved[question.id] = value
    if violations:
        raise SchemaError(f"answers for skill {skill.id!r}", violations)
    return resolved


def duplicate_ids(ids: list[str]) -> list[str]:
    """Return ids that occur more than once, in first-seen order."""
    seen: set[str] = set()
    dupes: list[str] = []
    for item_id in ids:
        if item_id in seen and item_id not in dupes:
            dupes.append(item_id)
        seen.add(item_id)
    return dupes


def _is_kind(value: Any, kind: str) -> bool:
    return isinstance(value, _TYPE_NAMES[kind])


def _describe(value: Any) -> str:
    for name, typ in _TYPE_NAMES.items():
        if isinstance(value, typ):
            return name
    if value is None:
        return "null"
    return type(value).__name__


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name
