"""Shared helpers for writing knowledge-base documents."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Literal

from knowmap_core.config import TechStack
from knowmap_core.fs_utils import atomic_write, read_text_if_exists
from knowmap_core.merging import merge_content
from knowmap_core.registry.schemas import Module, ModuleRelationships

logger = logging.getLogger(__name__)

FileAction = Literal["created", "updated", "deprecated"]
ModuleStatus = Literal["Active", "Deprecated"]

# Checked in order; the first matching basename suffix wins.
_SUFFIX_DESCRIPTIONS: tuple[tuple[str, str], ...] = (
    (".test.ts", "Test file"),
    (".spec.ts", "Test file"),
    (".service.ts", "Service implementation"),
    (".controller.ts", "Controller implementation"),
    (".model.ts", "Data model"),
    (".schema.ts", "Schema definition"),
    (".dto.ts", "Data transfer object"),
    (".middleware.ts", "Middleware function"),
    (".guard.ts", "Guard implementation"),
    (".pipe.ts", "Pipe implementation"),
    (".config.ts", "Configuration"),
    (".types.ts", "Type definitions"),
    (".utils.ts", "Utility functions"),
    (".hbs", "Handlebars template"),
    (".j2", "Jinja2 template"),
)

_EXTENSION_DESCRIPTIONS: dict[str, str] = {
    ".ts": "TypeScript source",
    ".js": "JavaScript source",
    ".tsx": "React component",
    ".jsx": "React component",
    ".vue": "Vue component",
    ".py": "Python source",
    ".go": "Go source",
    ".rs": "Rust source",
    ".md": "Documentation",
    ".yaml": "YAML configuration",
    ".yml": "YAML configuration",
    ".json": "JSON configuration",
    ".css": "Stylesheet",
    ".scss": "SCSS stylesheet",
    ".html": "HTML template",
}


@dataclass(frozen=True)
class GeneratedFile:
    """Record of one file written (or, in a dry run, that would be written)."""

    path: str
    action: FileAction


@dataclass
class ModuleSummary:
    name: str
    description: str
    file_count: int
    keywords: list[str] = field(default_factory=list)
    relationships: ModuleRelationships = field(default_factory=ModuleRelationships)


@dataclass(frozen=True)
class IndexRow:
    name: str
    description: str
    keywords: tuple[str, ...] = ()
    status: ModuleStatus = "Active"


def infer_file_description(file_path: str) -> str:
    """Short description of a file from its name alone."""
    name = PurePosixPath(file_path).name
    if name in ("index.ts", "index.js"):
        return "Module entry point"
    for suffix, description in _SUFFIX_DESCRIPTIONS:
        if name.endswith(suffix):
            return description
    return _EXTENSION_DESCRIPTIONS.get(PurePosixPath(name).suffix, "Source file")


def build_directory_tree(files: Iterable[str], max_depth: int) -> str:
    """Indented listing of the directories holding ``files``, ``max_depth`` levels deep."""
    dirs: set[tuple[str, ...]] = set()
    for path in files:
        parts = path.split("/")[:-1]
        for level in range(1, min(len(parts), max_depth) + 1):
            dirs.add(tuple(parts[:level]))
    return "\n".join(f"{'  ' * (len(d) - 1)}{d[-1]}/" for d in sorted(dirs))


def build_key_files(files: list[str], limit: int) -> list[dict[str, str]]:
    return [{"path": path, "description": infer_file_description(path)} for path in files[:limit]]


def module_doc_context(module: Module, key_files: list[dict[str, str]]) -> dict[str, Any]:
    paths = module.resolved_paths()
    return {
        "module_name": module.name,
        "description": module.description or f"{module.name} module",
        "path": paths[0],
        "keywords": list(module.keywords),
        "relationships": module.relationships or ModuleRelationships(),
        "key_files": key_files,
        "public_api": [],
    }


def index_context(
    project_name: str,
    tech_stack: TechStack | None,
    knowledge_base_path: str,
    rows: list[IndexRow],
) -> dict[str, Any]:
    return {
        "project_name": project_name,
        "tech_stack": tech_stack,
        "knowledge_base_path": knowledge_base_path,
        "modules": [
            {
                "name": row.name,
                "description": row.description,
                "keywords": list(row.keywords),
                "status": row.status,
            }
            for row in rows
        ],
    }


def write_merged_document(
    path: Path,
    rendered: str,
    display_path: str,
    *,
    dry_run: bool = False,
) -> GeneratedFile:
    """Merge ``rendered`` into the document at ``path`` and write it.

    The action is ``updated`` when a document already existed, ``created``
    otherwise. With ``dry_run`` nothing is written.
    """
    existing = read_text_if_exists(path)
    action: FileAction = "created" if existing is None else "updated"
    if not dry_run:
        final = merge_content(rendered, existing) if existing else rendered
        atomic_write(path, final)
        logger.info("%s %s", action.capitalize(), display_path)
    return GeneratedFile(path=display_path, action=action)
