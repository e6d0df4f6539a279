"""Pydantic schemas for the persisted module registry (``module-map.yaml``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class ModuleRelationships(BaseModel):
    """Module dependency edges; ``used_by`` mirrors other modules' ``depends_on``."""

    depends_on: list[str] = Field(default_factory=list)
    used_by: list[str] = Field(default_factory=list)

    @field_validator("depends_on", "used_by", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def dedupe(self) -> None:
        self.depends_on = _dedupe(self.depends_on)
        self.used_by = _dedupe(self.used_by)


class Module(BaseModel):
    """One logical unit of the scanned codebase."""

    name: str
    description: str = ""
    paths: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    relationships: ModuleRelationships = Field(default_factory=ModuleRelationships)

    @field_validator("paths", "keywords", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("relationships", mode="before")
    @classmethod
    def _none_relationships(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    def resolved_paths(self) -> list[str]:
        """Path globs, falling back to ``<name>/**`` when none are recorded."""
        return list(self.paths) if self.paths else [f"{self.name}/**"]

    @classmethod
    def synthesized(cls, name: str) -> Module:
        """Registry entry for a module known only by name."""
        return cls(
            name=name,
            description=f"{name} module",
            paths=[f"src/{name}/**"],
            keywords=[name.lower()],
        )


class ModuleRegistry(BaseModel):
    """Ordered collection of every known module of a project."""

    modules: list[Module] = Field(default_factory=list)

    @field_validator("modules", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def names(self) -> list[str]:
        return [module.name for module in self.modules]

    def find(self, name: str) -> Module | None:
        """Case-insensitive exact lookup."""
        wanted = name.lower()
        return next((m for m in self.modules if m.name.lower() == wanted), None)

    def add_missing(self, names: list[str]) -> list[str]:
        """Append synthesized entries for names not registered yet."""
        added = []
        for name in names:
            if self.find(name) is None:
                self.modules.append(Module.synthesized(name))
                added.append(name)
        return added

    def remove(self, names: list[str]) -> list[str]:
        """Drop modules whose names match ``names`` case-insensitively."""
        removed_keys = {name.lower() for name in names}
        removed = [m.name for m in self.modules if m.name.lower() in removed_keys]
        self.modules = [m for m in self.modules if m.name.lower() not in removed_keys]
        return removed

    def to_yaml_payload(self) -> dict[str, Any]:
        return {"modules": [module.model_dump(mode="json") for module in self.modules]}
