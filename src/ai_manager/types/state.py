"""Persisted selection state types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class SelectedSkill:
    """A skill applied to a project, with the answers it was rendered with."""

    id: str
    version: str
    answers: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "version": self.version, "answers": dict(self.answers)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SelectedSkill:
        answers = data.get("answers") or {}
        return cls(
            id=data["id"],
            version=data["version"],
            answers={str(k): str(v) for k, v in answers.items()},
        )


@dataclass(frozen=True, slots=True)
class SelectedHarness:
    """A harness applied to a project."""

    id: str
    version: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "version": self.version}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SelectedHarness:
        return cls(id=data["id"], version=data["version"])


@dataclass(frozen=True, slots=True)
class ProjectFacts:
    """Facts detected about the project when it was initialized."""

    package_manager: str | None = None
    config_files: tuple[str, ...] = ()
    directories: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.package_manager or self.config_files or self.directories)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.package_manager:
            data["packageManager"] = self.package_manager
        if self.config_files:
            data["configFiles"] = list(self.config_files)
        if self.directories:
            data["directories"] = list(self.directories)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectFacts:
        return cls(
            package_manager=data.get("packageManager"),
            config_files=tuple(data.get("configFiles", ())),
            directories=tuple(data.get("directories", ())),
        )


@dataclass(frozen=True, slots=True)
class ManagerState:
    """The single persisted record of what has been applied to a project."""

    version: str
    created_at: str
    updated_at: str
    project_root: str
    skills: tuple[SelectedSkill, ...] = ()
    harnesses: tuple[SelectedHarness, ...] = ()
    facts: ProjectFacts | None = None

    @property
    def skill_ids(self) -> list[str]:
        return [s.id for s in self.skills]

    @property
    def harness_ids(self) -> list[str]:
        return [h.id for h in self.harnesses]

    def get_skill(self, skill_id: str) -> SelectedSkill | None:
        return next((s for s in self.skills if s.id == skill_id), None)

    def with_selection(
        self,
        skills: tuple[SelectedSkill, ...] | list[SelectedSkill],
        harnesses: tuple[SelectedHarness, ...] | list[SelectedHarness],
        updated_at: str,
    ) -> ManagerState:
        """Return a copy with the selection replaced and ``updated_at`` bumped."""
        return replace(
            self,
            skills=tuple(skills),
            harnesses=tuple(harnesses),
            updated_at=updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the fixed key order used on disk."""
        data: dict[str, Any] = {
            "version": self.version,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "projectRoot": self.project_root,
        }
        if self.facts is not None and not self.facts.is_empty():
            data["facts"] = self.facts.to_dict()
        data["skills"] = [s.to_dict() for s in self.skills]
        data["harnesses"] = [h.to_dict() for h in self.harnesses]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManagerState:
        facts = data.get("facts")
        return cls(
            version=data["version"],
            created_at=data["createdAt"],
            updated_at=data["updatedAt"],
            project_root=data["projectRoot"],
            skills=tuple(SelectedSkill.from_dict(s) for s in data.get("skills", ())),
            harnesses=tuple(SelectedHarness.from_dict(h) for h in data.get("harnesses", ())),
            facts=ProjectFacts.from_dict(facts) if facts else None,
        )
