"""Full knowledge-base generation from the module registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from knowmap_core.config import load_project_config, resolve_base_paths
from knowmap_core.errors import PrerequisiteError
from knowmap_core.knowledge.documents import (
    GeneratedFile,
    IndexRow,
    ModuleSummary,
    build_key_files,
    index_context,
    module_doc_context,
    write_merged_document,
)
from knowmap_core.pathing import relative_display_path
from knowmap_core.registry import load_registry
from knowmap_core.rendering import INDEX_TEMPLATE, MODULE_README_TEMPLATE, DocumentRenderer, TemplateRenderer
from knowmap_core.scanner import scan_dir
from knowmap_core.settings import get_settings
from knowmap_core.telemetry import traced_operation

logger = logging.getLogger(__name__)


@dataclass
class KnowledgeResult:
    module_count: int = 0
    modules: list[ModuleSummary] = field(default_factory=list)
    generated_files: list[GeneratedFile] = field(default_factory=list)
    dry_run: bool = False


@traced_operation("knowmap.knowledge_generate")
def run_knowledge_generate(
    cwd: str | Path = ".",
    *,
    dry_run: bool = False,
    renderer: DocumentRenderer | None = None,
) -> KnowledgeResult:
    """Write a README for every registered module, then the index.

    Requires ``module-map.yaml``; run steering first.
    """
    root = Path(cwd).resolve()
    settings = get_settings()
    config = load_project_config(root)
    paths = resolve_base_paths(config, root)
    renderer = renderer or TemplateRenderer.from_settings()

    try:
        registry = load_registry(paths.registry_path)
    except FileNotFoundError as e:
        raise PrerequisiteError(
            f"module registry not found: {relative_display_path(paths.registry_path, root)}",
            suggestion="Run `knowmap steering` to detect modules first.",
        ) from e

    result = KnowledgeResult(module_count=len(registry.modules), dry_run=dry_run)
    for module in registry.modules:
        scan = scan_dir(
            module.resolved_paths(),
            cwd=root,
            depth=settings.scan_max_depth,
            exclude=config.exclude,
        )
        key_files = build_key_files(scan.files, settings.key_files_limit)
        result.modules.append(
            ModuleSummary(
                name=module.name,
                description=module.description or f"{module.name} module",
                file_count=len(key_files),
                keywords=list(module.keywords),
                relationships=module.relationships,
            )
        )

        rendered = renderer.render(MODULE_README_TEMPLATE, module_doc_context(module, key_files))
        doc_path = paths.module_doc_path(module.name)
        result.generated_files.append(
            write_merged_document(doc_path, rendered, relative_display_path(doc_path, root), dry_run=dry_run)
        )

    rows = [
        IndexRow(
            name=module.name,
            description=module.description or f"{module.name} module",
            keywords=tuple(module.keywords),
        )
        for module in registry.modules
    ]
    rendered_index = renderer.render(
        INDEX_TEMPLATE,
        index_context(
            config.project.name,
            config.tech_stack,
            relative_display_path(paths.knowledge_path, root),
            rows,
        ),
    )
    result.generated_files.append(
        write_merged_document(
            paths.index_path,
            rendered_index,
            relative_display_path(paths.index_path, root),
            dry_run=dry_run,
        )
    )

    logger.info("Generated knowledge for %d modules%s", result.module_count, " (dry run)" if dry_run else "")
    return result
