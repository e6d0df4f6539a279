"""Module registry: schemas and YAML persistence."""

from knowmap_core.registry.schemas import Module, ModuleRegistry, ModuleRelationships
from knowmap_core.registry.store import (
    dump_registry,
    load_registry,
    load_registry_optional,
    parse_registry,
    save_registry,
)

__all__ = [
    "Module",
    "ModuleRegistry",
    "ModuleRelationships",
    "dump_registry",
    "load_registry",
    "load_registry_optional",
    "parse_registry",
    "save_registry",
]
