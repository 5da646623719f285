"""Tests for configuration resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from ai_manager.core.config import (
    BUILTIN_REGISTRY,
    config_path,
    load_env_config,
    load_toml_config,
    resolve_backup_default,
    resolve_project_start,
    resolve_registry_root,
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    for name in ("AI_MANAGER_REGISTRY", "AI_MANAGER_BACKUP", "AI_MANAGER_PROJECT_ROOT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


def _write_config(text: str) -> Path:
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestEnvConfig:
    def test_empty(self):
        assert load_env_config() == {}

    def test_values(self, monkeypatch):
        monkeypatch.setenv("AI_MANAGER_REGISTRY", "/reg")
        monkeypatch.setenv("AI_MANAGER_BACKUP", "Yes")
        monkeypatch.setenv("AI_MANAGER_PROJECT_ROOT", "/proj")
        assert load_env_config() == {
            "registry": "/reg", "backup": True, "project_root": "/proj",
        }

    def test_backup_falsy(self, monkeypatch):
        monkeypatch.setenv("AI_MANAGER_BACKUP", "0")
        assert load_env_config()["backup"] is False


class TestTomlConfig:
    def test_path_under_xdg(self, tmp_path: Path):
        assert config_path() == tmp_path / "config" / "ai-manager" / "config.toml"

    def test_missing(self):
        assert load_toml_config() == {}

    def test_defaults_table(self):
        _write_config('[defaults]\nregistry = "/from/toml"\nbackup = true\n')
        assert load_toml_config() == {"registry": "/from/toml", "backup": True}

    def test_invalid_toml_ignored(self):
        _write_config("[defaults\n")
        assert load_toml_config() == {}


class TestResolution:
    def test_registry_default_is_builtin(self):
        assert resolve_registry_root() == BUILTIN_REGISTRY
        assert (BUILTIN_REGISTRY / "templates").is_dir()

    def test_registry_precedence(self, monkeypatch, tmp_path: Path):
        _write_config(f'[defaults]\nregistry = "{tmp_path / "toml"}"\n')
        assert resolve_registry_root() == (tmp_path / "toml").resolve()
        monkeypatch.setenv("AI_MANAGER_REGISTRY", str(tmp_path / "env"))
        assert resolve_registry_root() == (tmp_path / "env").resolve()
        assert resolve_registry_root(tmp_path / "flag") == (tmp_path / "flag").resolve()

    def test_backup_precedence(self, monkeypatch):
        assert resolve_backup_default() is False
        _write_config("[defaults]\nbackup = true\n")
        assert resolve_backup_default() is True
        monkeypatch.setenv("AI_MANAGER_BACKUP", "false")
        assert resolve_backup_default() is False
        assert resolve_backup_default(True) is True

    def test_project_start(self, monkeypatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        assert resolve_project_start().resolve() == tmp_path.resolve()
        monkeypatch.setenv("AI_MANAGER_PROJECT_ROOT", str(tmp_path / "p"))
        assert resolve_project_start() == (tmp_path / "p").resolve()
        assert resolve_project_start(tmp_path / "x") == (tmp_path / "x").resolve()
