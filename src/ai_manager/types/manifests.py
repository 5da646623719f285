"""Skill and harness definition types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class QuestionType(Enum):
    """Kinds of input a skill question can ask for."""

    INPUT = "input"
    SELECT = "select"
    PATH = "path"


@dataclass(frozen=True, slots=True)
class QuestionValidation:
    """Regex constraint an answer must satisfy."""

    pattern: str | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class Question:
    """One piece of user input a skill needs."""

    id: str
    label: str
    type: QuestionType
    required: bool = True
    options: tuple[str, ...] = ()
    default: str | None = None
    validation: QuestionValidation | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        validation = data.get("validation")
        return cls(
            id=data["id"],
            label=data["label"],
            type=QuestionType(data["type"]),
            required=data.get("required", True),
            options=tuple(data.get("options", ())),
            default=data.get("default"),
            validation=QuestionValidation(
                pattern=validation.get("pattern"),
                message=validation.get("message"),
            ) if validation else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "required": self.required,
        }
        if self.options:
            data["options"] = list(self.options)
        if self.default is not None:
            data["default"] = self.default
        if self.validation is not None:
            data["validation"] = {
                k: v for k, v in (
                    ("pattern", self.validation.pattern),
                    ("message", self.validation.message),
                ) if v is not None
            }
        return data


@dataclass(frozen=True, slots=True)
class OutputTemplate:
    """A file a definition produces, and the template that generates it."""

    target: str  # Relative to the project root
    template: str  # Relative to the definition directory

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OutputTemplate:
        return cls(target=data["target"], template=data["template"])

    def to_dict(self) -> dict[str, str]:
        return {"target": self.target, "template": self.template}


@dataclass(frozen=True, slots=True)
class SkillManifest:
    """Parsed skill.json."""

    id: str
    name: str
    description: str
    version: str
    agents_snippet_template: str
    questions: tuple[Question, ...] = ()
    outputs: tuple[OutputTemplate, ...] = ()
    activation_rules_template: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillManifest:
        """Build from already-validated manifest data."""
        return cls(
            id=data["id"],
            name=data["name"],
            description=data["description"],
            version=data["version"],
            agents_snippet_template=data["agentsSnippetTemplate"],
            questions=tuple(Question.from_dict(q) for q in data.get("questions", ())),
            outputs=tuple(OutputTemplate.from_dict(o) for o in data.get("outputs", ())),
            activation_rules_template=data.get("activationRulesTemplate"),
        )

    def to_context(self) -> dict[str, Any]:
        """Template context view, keyed the way skill.json spells it."""
        ctx: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "questions": [q.to_dict() for q in self.questions],
            "outputs": [o.to_dict() for o in self.outputs],
            "agentsSnippetTemplate": self.agents_snippet_template,
        }
        if self.activation_rules_template is not None:
            ctx["activationRulesTemplate"] = self.activation_rules_template
        return ctx


@dataclass(frozen=True, slots=True)
class HarnessManifest:
    """Parsed harness.json."""

    id: str
    name: str
    version: str
    outputs: tuple[OutputTemplate, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HarnessManifest:
        return cls(
            id=data["id"],
            name=data["name"],
            version=data["version"],
            outputs=tuple(OutputTemplate.from_dict(o) for o in data.get("outputs", ())),
        )

    def to_context(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "outputs": [o.to_dict() for o in self.outputs],
        }


@dataclass(frozen=True, slots=True)
class Registry:
    """All skill and harness definitions found under one registry root.

    Both lists are sorted by id and free of duplicate ids.
    """

    root: Path
    skills: tuple[SkillManifest, ...] = ()
    harnesses: tuple[HarnessManifest, ...] = ()
    _skill_index: dict[str, SkillManifest] = field(
        default_factory=dict, init=False, repr=False, compare=False,
    )
    _harness_index: dict[str, HarnessManifest] = field(
        default_factory=dict, init=False, repr=False, compare=False,
    )

    def __post_init__(self) -> None:
        self._skill_index.update((s.id, s) for s in self.skills)
        self._harness_index.update((h.id, h) for h in self.harnesses)

    def get_skill(self, skill_id: str) -> SkillManifest | None:
        return self._skill_index.get(skill_id)

    def get_harness(self, harness_id: str) -> HarnessManifest | None:
        return self._harness_index.get(harness_id)

    def skill_dir(self, skill_id: str) -> Path:
        return self.root / "skills" / skill_id

    def harness_dir(self, harness_id: str) -> Path:
        return self.root / "harnesses" / harness_id

    @property
    def templates_dir(self) -> Path:
        return self.root / "templates"
