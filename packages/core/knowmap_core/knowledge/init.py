"""Knowledge-base bootstrap: a raw project scan plus skeleton documents.

``raw-scan.md`` is regenerated on every run. ``_index.md`` and
``_conventions.md`` are only written when missing, and ``modules/`` is
never touched. The knowledge base itself is left out of the scan.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from knowmap_core.config import CONFIG_FILENAME, load_project_config, resolve_base_paths
from knowmap_core.detection import detect_entry_points
from knowmap_core.fs_utils import atomic_write
from knowmap_core.knowledge.documents import build_directory_tree, index_context, write_merged_document
from knowmap_core.pathing import relative_display_path
from knowmap_core.rendering import (
    CONVENTIONS_TEMPLATE,
    INDEX_TEMPLATE,
    RAW_SCAN_TEMPLATE,
    DocumentRenderer,
    TemplateRenderer,
)
from knowmap_core.scanner import match_glob, scan_dir
from knowmap_core.settings import get_settings
from knowmap_core.tech_stack import Dependency, collect_dependencies, detect_tech_stack
from knowmap_core.telemetry import traced_operation

logger = logging.getLogger(__name__)

RAW_SCAN_FILENAME = "raw-scan.md"
CONVENTIONS_FILENAME = "_conventions.md"

# Matched against basenames.
CONFIG_FILE_PATTERNS: tuple[str, ...] = (
    CONFIG_FILENAME,
    "tsconfig.json",
    "tsconfig.*.json",
    "package.json",
    ".eslintrc*",
    "eslint.config*",
    ".prettierrc*",
    "prettier.config*",
    "vitest.config*",
    "vite.config*",
    "next.config*",
    "nuxt.config*",
    "webpack.config*",
    "rollup.config*",
    "jest.config*",
    ".babelrc*",
    "babel.config*",
    "tailwind.config*",
    "postcss.config*",
    "docker-compose*",
    "Dockerfile",
    ".dockerignore",
    ".gitignore",
    "Makefile",
    "pyproject.toml",
    "requirements.txt",
    "go.mod",
    "go.sum",
    "Cargo.toml",
)


@dataclass
class KnowledgeInitResult:
    total_files: int = 0
    scan_depth: int = 0
    entry_points: list[str] = field(default_factory=list)
    dependencies: list[Dependency] = field(default_factory=list)
    config_files: list[str] = field(default_factory=list)
    output_files: list[str] = field(default_factory=list)
    dry_run: bool = False


def manifest_entry_points(root: Path) -> list[str]:
    """``main`` and ``bin`` targets declared in package.json."""
    package_json = root / "package.json"
    if not package_json.exists():
        return []
    try:
        pkg = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", package_json, e)
        return []
    if not isinstance(pkg, dict):
        return []

    entries: list[str] = []
    if isinstance(pkg.get("main"), str):
        entries.append(pkg["main"])
    bin_field = pkg.get("bin")
    if isinstance(bin_field, str):
        entries.append(bin_field)
    elif isinstance(bin_field, dict):
        entries.extend(str(target) for target in bin_field.values())
    return entries


def collect_config_files(files: Iterable[str]) -> list[str]:
    return [
        path for path in files if any(match_glob(PurePosixPath(path).name, p) for p in CONFIG_FILE_PATTERNS)
    ]


@traced_operation("knowmap.knowledge_init")
def run_knowledge_init(
    cwd: str | Path = ".",
    *,
    depth: int | None = None,
    dry_run: bool = False,
    renderer: DocumentRenderer | None = None,
) -> KnowledgeInitResult:
    root = Path(cwd).resolve()
    depth = depth if depth is not None else get_settings().scan_max_depth
    config = load_project_config(root)
    paths = resolve_base_paths(config, root)
    renderer = renderer or TemplateRenderer.from_settings()
    knowledge_base_path = relative_display_path(paths.knowledge_path, root)

    scan = scan_dir("**", cwd=root, depth=depth, exclude=[*config.exclude, f"{knowledge_base_path}/**"])
    tech_stack = detect_tech_stack(root)
    entry_points = list(dict.fromkeys([*manifest_entry_points(root), *detect_entry_points(scan.files)]))
    dependencies = collect_dependencies(root)
    config_files = collect_config_files(scan.files)

    result = KnowledgeInitResult(
        total_files=scan.count,
        scan_depth=depth,
        entry_points=entry_points,
        dependencies=dependencies,
        config_files=config_files,
        dry_run=dry_run,
    )
    if dry_run:
        return result

    raw_scan_path = paths.knowledge_path / RAW_SCAN_FILENAME
    rendered = renderer.render(
        RAW_SCAN_TEMPLATE,
        {
            "project_name": config.project.name,
            "tech_stack": tech_stack,
            "entry_points": entry_points,
            "directory_tree": build_directory_tree(scan.files, depth),
            "dependencies": dependencies,
            "config_files": config_files,
            "file_stats": {"total_files": scan.count, "scan_depth": depth},
        },
    )
    written = write_merged_document(raw_scan_path, rendered, relative_display_path(raw_scan_path, root))
    result.output_files.append(written.path)

    if not paths.index_path.exists():
        atomic_write(
            paths.index_path,
            renderer.render(INDEX_TEMPLATE, index_context(config.project.name, tech_stack, knowledge_base_path, [])),
        )
        result.output_files.append(relative_display_path(paths.index_path, root))

    conventions_path = paths.knowledge_path / CONVENTIONS_FILENAME
    if not conventions_path.exists():
        atomic_write(
            conventions_path,
            renderer.render(CONVENTIONS_TEMPLATE, {"project_name": config.project.name, "tech_stack": tech_stack}),
        )
        result.output_files.append(relative_display_path(conventions_path, root))

    logger.info("Knowledge init wrote %d files under %s", len(result.output_files), knowledge_base_path)
    return result
