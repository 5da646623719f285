"""Skill and harness registry."""

from ai_manager.registry.loader import load_registry, load_registry_sync
from ai_manager.registry.schema import FieldSpec, validate, validate_harness, validate_skill

__all__ = [
    "FieldSpec",
    "load_registry",
    "load_registry_sync",
    "validate",
    "validate_harness",
    "validate_skill",
]
