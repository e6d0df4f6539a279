"""Project configuration (``.knowmap.yaml``) models, loading and path resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from knowmap_core.errors import ConfigInvalidError, ConfigNotFoundError
from knowmap_core.fs_utils import atomic_write

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".knowmap.yaml"
REGISTRY_FILENAME = "module-map.yaml"
INDEX_FILENAME = "_index.md"
DEFAULT_BASE_DIR = "docs"
DEFAULT_KNOWLEDGE_DIR = "ai-knowledge"


class ProjectInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    version: str | None = None


class TechStack(BaseModel):
    language: str | None = None
    framework: str | None = None
    package_manager: str | None = None

    def is_empty(self) -> bool:
        return not (self.language or self.framework or self.package_manager)


class KnowledgeConfig(BaseModel):
    base_path: str | None = None
    files: list[str] | None = None


class ProjectConfig(BaseModel):
    """Validated contents of ``.knowmap.yaml``. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    version: str | None = None
    project: ProjectInfo
    tech_stack: TechStack | None = None
    paths: dict[str, str] = Field(default_factory=dict)
    exclude: list[str] = Field(default_factory=list)
    knowledge: KnowledgeConfig | None = None

    @classmethod
    def default_for(cls, cwd: Path) -> ProjectConfig:
        return cls(project=ProjectInfo(name=cwd.resolve().name))


@dataclass(frozen=True)
class BasePaths:
    """Absolute locations derived from a project config."""

    base_dir: Path
    knowledge_path: Path
    specs_path: Path

    @property
    def registry_path(self) -> Path:
        return self.knowledge_path / REGISTRY_FILENAME

    @property
    def index_path(self) -> Path:
        return self.knowledge_path / INDEX_FILENAME

    def module_doc_path(self, module_name: str) -> Path:
        return self.knowledge_path / "modules" / module_name / "README.md"


def resolve_config_path(cwd: str | Path = ".") -> Path:
    return Path(cwd).resolve() / CONFIG_FILENAME


def resolve_base_paths(config: ProjectConfig, cwd: str | Path) -> BasePaths:
    """Derive the standard paths.

    Resolution: ``paths.base_dir`` -> ``docs``; ``knowledge.base_path`` ->
    ``<base_dir>/ai-knowledge``.
    """
    root = Path(cwd).resolve()
    base_dir = config.paths.get("base_dir") or DEFAULT_BASE_DIR
    knowledge = config.knowledge.base_path if config.knowledge else None
    knowledge_path = knowledge or f"{base_dir}/{DEFAULT_KNOWLEDGE_DIR}"
    return BasePaths(
        base_dir=(root / base_dir).resolve(),
        knowledge_path=(root / knowledge_path).resolve(),
        specs_path=(root / base_dir / "specs").resolve(),
    )


def _format_issues(error: ValidationError) -> str:
    issues = []
    for issue in error.errors():
        loc = ".".join(str(part) for part in issue["loc"])
        issues.append(f"{loc}: {issue['msg']}" if loc else issue["msg"])
    return "; ".join(issues)


def validate_config(raw_yaml: str, source_path: str | None = None) -> ProjectConfig:
    """Parse and validate raw YAML text as a project config."""
    try:
        data = yaml.safe_load(raw_yaml)
    except yaml.YAMLError as e:
        raise ConfigInvalidError(f"{source_path or '<string>'}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigInvalidError(f"{source_path or '<string>'}: expected a mapping at the document root")

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigInvalidError(_format_issues(e)) from e


def read_config(cwd: str | Path = ".") -> ProjectConfig:
    """Read ``.knowmap.yaml``; raises ConfigNotFoundError when it is missing."""
    config_path = resolve_config_path(cwd)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigNotFoundError(str(config_path)) from e
    return validate_config(raw, str(config_path))


def load_project_config(cwd: str | Path = ".") -> ProjectConfig:
    """Like read_config, but falls back to defaults when no config file exists."""
    try:
        return read_config(cwd)
    except ConfigNotFoundError:
        logger.debug("No %s in %s; using default project config", CONFIG_FILENAME, cwd)
        return ProjectConfig.default_for(Path(cwd))


def config_to_dict(config: ProjectConfig) -> dict[str, Any]:
    return config.model_dump(mode="json", exclude_none=True)


def write_config(config: ProjectConfig, cwd: str | Path = ".") -> Path:
    """Write ``config`` to ``.knowmap.yaml`` atomically."""
    config_path = resolve_config_path(cwd)
    content = yaml.safe_dump(
        config_to_dict(config),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    atomic_write(config_path, content)
    return config_path
