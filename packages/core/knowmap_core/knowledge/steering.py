"""Steering: detect modules and record them for the knowledge base.

Writes ``module-map.yaml`` and ``architecture.md`` and refreshes the
``tech_stack`` and ``paths`` sections of ``.knowmap.yaml``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from knowmap_core.config import (
    CONFIG_FILENAME,
    ProjectConfig,
    TechStack,
    load_project_config,
    resolve_base_paths,
    write_config,
)
from knowmap_core.detection import DetectionResult, detect_modules
from knowmap_core.detection.relationships import module_files
from knowmap_core.knowledge.documents import ModuleSummary, build_directory_tree, write_merged_document
from knowmap_core.pathing import relative_display_path
from knowmap_core.registry import ModuleRegistry, save_registry
from knowmap_core.rendering import ARCHITECTURE_TEMPLATE, DocumentRenderer, TemplateRenderer
from knowmap_core.scanner import scan_dir
from knowmap_core.settings import get_settings
from knowmap_core.tech_stack import detect_tech_stack
from knowmap_core.telemetry import traced_operation

logger = logging.getLogger(__name__)

ARCHITECTURE_FILENAME = "architecture.md"
ARCHITECTURE_TREE_DEPTH = 3


@dataclass
class SteeringResult:
    file_count: int = 0
    architecture: str = "unknown"
    entry_points: list[str] = field(default_factory=list)
    modules: list[ModuleSummary] = field(default_factory=list)
    output_files: list[str] = field(default_factory=list)
    dry_run: bool = False

    @property
    def module_count(self) -> int:
        return len(self.modules)


def merge_tech_stack(detected: TechStack, configured: TechStack | None) -> TechStack:
    """Detected values win; configured values fill the gaps."""
    configured = configured or TechStack()
    return TechStack(
        language=detected.language or configured.language,
        framework=detected.framework or configured.framework,
        package_manager=detected.package_manager or configured.package_manager,
    )


def paths_from_detection(detection: DetectionResult, current: dict[str, str]) -> dict[str, str]:
    """``{module: first glob}``; a configured ``base_dir`` is kept."""
    paths = {"base_dir": current["base_dir"]} if "base_dir" in current else {}
    for module in detection.modules:
        paths[module.name] = module.resolved_paths()[0]
    return paths


@traced_operation("knowmap.steering")
def run_steering(
    cwd: str | Path = ".",
    *,
    depth: int | None = None,
    dry_run: bool = False,
    renderer: DocumentRenderer | None = None,
) -> SteeringResult:
    root = Path(cwd).resolve()
    depth = depth if depth is not None else get_settings().scan_max_depth
    config = load_project_config(root)
    paths = resolve_base_paths(config, root)

    knowledge_glob = f"{relative_display_path(paths.knowledge_path, root)}/**"
    scan = scan_dir("**", cwd=root, depth=depth, exclude=[*config.exclude, knowledge_glob])
    detection = detect_modules(scan.files, root, registry_path=paths.registry_path)
    tech_stack = detect_tech_stack(root)

    summaries = [
        ModuleSummary(
            name=module.name,
            description=module.description,
            file_count=len(module_files(module, scan.files)),
            keywords=list(module.keywords),
            relationships=module.relationships,
        )
        for module in detection.modules
    ]
    result = SteeringResult(
        file_count=scan.count,
        architecture=detection.architecture,
        entry_points=detection.entry_points,
        modules=summaries,
        dry_run=dry_run,
    )
    if dry_run:
        return result

    save_registry(ModuleRegistry(modules=detection.modules), paths.registry_path)
    result.output_files.append(relative_display_path(paths.registry_path, root))

    renderer = renderer or TemplateRenderer.from_settings()
    architecture_path = paths.knowledge_path / ARCHITECTURE_FILENAME
    rendered = renderer.render(
        ARCHITECTURE_TEMPLATE,
        {
            "project_name": config.project.name,
            "architecture": detection.architecture,
            "tech_stack": tech_stack,
            "file_count": scan.count,
            "directory_tree": build_directory_tree(scan.files, ARCHITECTURE_TREE_DEPTH),
            "entry_points": detection.entry_points,
            "modules": summaries,
        },
    )
    written = write_merged_document(architecture_path, rendered, relative_display_path(architecture_path, root))
    result.output_files.append(written.path)

    updated: ProjectConfig = config.model_copy(
        update={
            "tech_stack": merge_tech_stack(tech_stack, config.tech_stack),
            "paths": paths_from_detection(detection, config.paths),
        }
    )
    write_config(updated, root)
    result.output_files.append(CONFIG_FILENAME)

    logger.info(
        "Steering found %d modules in %d files (architecture: %s)",
        result.module_count,
        result.file_count,
        result.architecture,
    )
    return result
