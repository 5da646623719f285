"""ai-manager: generate and keep in sync AI agent instruction files.

Usage:
    import asyncio
    from ai_manager import ProjectManager, resolve_registry_root

    manager = ProjectManager("path/to/project", resolve_registry_root())
    asyncio.run(manager.init({"planner": {}}, ["codex"]))
"""

__version__ = "0.1.0"

from ai_manager.core.config import resolve_registry_root  # noqa: E402
from ai_manager.core.errors import (  # noqa: E402
    AlreadyInitializedError,
    ManagerError,
    NotInitializedError,
    SchemaError,
    SelectionCancelledError,
    TemplateError,
    UnknownItemError,
)
from ai_manager.core.fs import BackupOptions  # noqa: E402
from ai_manager.core.manager import ProjectManager  # noqa: E402
from ai_manager.core.reconcile import (  # noqa: E402
    apply_plan,
    collect_output_targets,
    reconcile,
)
from ai_manager.core.state import StateStore  # noqa: E402
from ai_manager.registry.loader import load_registry, load_registry_sync  # noqa: E402
from ai_manager.render.agents import build_agents_markdown  # noqa: E402
from ai_manager.types import (  # noqa: E402
    HarnessManifest,
    ManagerState,
    Registry,
    SelectedHarness,
    SelectedSkill,
    SkillManifest,
)

__all__ = [
    # Operations
    "ProjectManager",
    "apply_plan",
    "build_agents_markdown",
    "collect_output_targets",
    "load_registry",
    "load_registry_sync",
    "reconcile",
    "resolve_registry_root",
    # Types
    "BackupOptions",
    "HarnessManifest",
    "ManagerState",
    "Registry",
    "SelectedHarness",
    "SelectedSkill",
    "SkillManifest",
    "StateStore",
    # Errors
    "AlreadyInitializedError",
    "ManagerError",
    "NotInitializedError",
    "SchemaError",
    "SelectionCancelledError",
    "TemplateError",
    "UnknownItemError",
]
