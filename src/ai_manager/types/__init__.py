"""Type definitions for ai-manager."""

from ai_manager.types.manifests import (
    HarnessManifest,
    OutputTemplate,
    Question,
    QuestionType,
    QuestionValidation,
    Registry,
    SkillManifest,
)
from ai_manager.types.state import (
    ManagerState,
    ProjectFacts,
    SelectedHarness,
    SelectedSkill,
)

__all__ = [
    "HarnessManifest",
    "ManagerState",
    "OutputTemplate",
    "ProjectFacts",
    "Question",
    "QuestionType",
    "QuestionValidation",
    "Registry",
    "SelectedHarness",
    "SelectedSkill",
    "SkillManifest",
]
