"""Configuration loading (env vars, ~/.config/ai-manager/config.toml)."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from current directory (and parents), won't override existing env vars
load_dotenv()

BUILTIN_REGISTRY = Path(__file__).resolve().parent.parent / "builtin_registry"

_TRUTHY = ("1", "true", "yes", "on")


def config_path() -> Path:
    """Location of the user-level config file."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "ai-manager" / "config.toml"


def load_env_config() -> dict[str, Any]:
    """Load configuration from environment variables."""
    config: dict[str, Any] = {}

    if registry := os.environ.get("AI_MANAGER_REGISTRY"):
        config["registry"] = registry
    if backup := os.environ.get("AI_MANAGER_BACKUP"):
        config["backup"] = backup.strip().lower() in _TRUTHY
    if project_root := os.environ.get("AI_MANAGER_PROJECT_ROOT"):
        config["project_root"] = project_root

    return config


def load_toml_config(path: Path | None = None) -> dict[str, Any]:
    """Load the ``[defaults]`` table of the config file if it exists."""
    toml_path = path or config_path()
    if not toml_path.is_file():
        return {}
    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", toml_path, exc)
        return {}
    defaults = data.get("defaults", {})
    return defaults if isinstance(defaults, dict) else {}


def resolve_registry_root(explicit: str | Path | None = None) -> Path:
    """Registry root from flag, env, config file, or the built-in registry."""
    if explicit:
        return Path(explicit).expanduser().resolve()
    if registry := load_env_config().get("registry"):
        return Path(registry).expanduser().resolve()
    if registry := load_toml_config().get("registry"):
        return Path(str(registry)).expanduser().resolve()
    return BUILTIN_REGISTRY


def resolve_backup_default(explicit: bool = False) -> bool:
    """Whether backups are on when --backup was not given."""
    if explicit:
        return True
    env = load_env_config()
    if "backup" in env:
        return bool(env["backup"])
    return bool(load_toml_config().get("backup", False))


def resolve_project_start(explicit: str | Path | None = None) -> Path:
    """Directory to start project root detection from."""
    if explicit:
        return Path(explicit).expanduser().resolve()
    if project_root := load_env_config().get("project_root"):
        return Path(project_root).expanduser().resolve()
    return Path.cwd()
