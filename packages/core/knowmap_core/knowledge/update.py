"""Incremental knowledge-base updates driven by a delta-spec or a module list.

Two modes, selected by ``KnowledgeUpdateOptions``:

- delta mode (``delta_spec_path``): ADDED and MODIFIED modules get their
  documents regenerated, REMOVED modules get a deprecation banner, and the
  registry gains the added modules and drops the removed ones.
- manual mode (``manual_modules``): the named modules are regenerated.

Both modes finish by rebuilding the module table of ``_index.md``. User
sections of every rewritten document are preserved.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from knowmap_core.config import ProjectConfig, load_project_config, resolve_base_paths
from knowmap_core.errors import KnowmapError, PrerequisiteError
from knowmap_core.fs_utils import atomic_write, read_text_if_exists
from knowmap_core.knowledge.delta_spec import DeltaEntry, DeltaSpecResult, parse_delta_spec
from knowmap_core.knowledge.documents import (
    GeneratedFile,
    IndexRow,
    build_key_files,
    index_context,
    module_doc_context,
    write_merged_document,
)
from knowmap_core.pathing import relative_display_path
from knowmap_core.registry import ModuleRegistry, load_registry_optional, save_registry
from knowmap_core.registry.schemas import Module
from knowmap_core.rendering import INDEX_TEMPLATE, MODULE_README_TEMPLATE, DocumentRenderer, TemplateRenderer
from knowmap_core.scanner import scan_dir
from knowmap_core.settings import get_settings
from knowmap_core.telemetry import trace_operation

logger = logging.getLogger(__name__)

DEPRECATION_MARKER = "> **DEPRECATED**"


def deprecation_banner(reason: str) -> str:
    return f"{DEPRECATION_MARKER}: This module was removed. Reason: {reason}\n\n"


@dataclass
class KnowledgeUpdateOptions:
    delta_spec_path: str | Path | None = None
    manual_modules: list[str] | None = None
    best_effort: bool = False

    def __post_init__(self) -> None:
        if self.delta_spec_path is not None and self.manual_modules is not None:
            raise ValueError("delta_spec_path and manual_modules are mutually exclusive")


@dataclass(frozen=True)
class ModuleFailure:
    module: str
    message: str


@dataclass
class KnowledgeUpdateResult:
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deprecated: list[str] = field(default_factory=list)
    generated_files: list[GeneratedFile] = field(default_factory=list)
    failures: list[ModuleFailure] = field(default_factory=list)


class KnowledgeUpdater:
    """Applies knowledge updates for the project rooted at ``cwd``.

    Args:
        cwd: Project root
        renderer: Document renderer; defaults to the built-in templates
        config: Project config; read from ``.knowmap.yaml`` when omitted
    """

    def __init__(
        self,
        cwd: str | Path = ".",
        *,
        renderer: DocumentRenderer | None = None,
        config: ProjectConfig | None = None,
    ) -> None:
        self.cwd = Path(cwd).resolve()
        self.config = config or load_project_config(self.cwd)
        self.paths = resolve_base_paths(self.config, self.cwd)
        self.renderer = renderer or TemplateRenderer.from_settings()
        self.settings = get_settings()

    def _display(self, path: Path) -> str:
        return relative_display_path(path, self.cwd)

    def load_registry(self) -> ModuleRegistry | None:
        return load_registry_optional(self.paths.registry_path)

    def resolve_module(self, name: str, registry: ModuleRegistry | None) -> Module:
        """Registry entry for ``name``, or a bare module under ``src/<name>``."""
        registered = registry.find(name) if registry is not None else None
        if registered is not None:
            return registered.model_copy(deep=True)
        return Module(name=name, description=f"{name} module", paths=[f"src/{name}/**"])

    def update_module_readme(self, module: Module) -> GeneratedFile:
        """Regenerate the module's README from its current source files."""
        scan = scan_dir(
            module.resolved_paths(),
            cwd=self.cwd,
            depth=self.settings.scan_max_depth,
            exclude=self.config.exclude,
        )
        context = module_doc_context(module, build_key_files(scan.files, self.settings.key_files_limit))
        rendered = self.renderer.render(MODULE_README_TEMPLATE, context)
        doc_path = self.paths.module_doc_path(module.name)
        return write_merged_document(doc_path, rendered, self._display(doc_path))

    def mark_module_deprecated(self, module_name: str, reason: str) -> GeneratedFile | None:
        """Prepend a deprecation banner to the module's README.

        Returns None when the module has no README. The banner is added at
        most once; the README itself is never deleted.
        """
        doc_path = self.paths.module_doc_path(module_name)
        display = self._display(doc_path)
        content = read_text_if_exists(doc_path)
        if content is None:
            logger.debug("No README for removed module %s; nothing to deprecate", module_name)
            return None

        if DEPRECATION_MARKER in content:
            logger.debug("%s is already marked deprecated", display)
        else:
            atomic_write(doc_path, deprecation_banner(reason) + content)
            logger.info("Deprecated %s", display)
        return GeneratedFile(path=display, action="deprecated")

    def update_registry(
        self,
        registry: ModuleRegistry | None,
        added: list[str],
        removed: list[str],
    ) -> GeneratedFile | None:
        """Add missing modules and drop removed ones; None when there is no registry."""
        if registry is None:
            logger.debug("No module registry at %s; skipping registry update", self.paths.registry_path)
            return None

        registry.add_missing(added)
        registry.remove(removed)
        save_registry(registry, self.paths.registry_path)
        return GeneratedFile(path=self._display(self.paths.registry_path), action="updated")

    def index_rows(
        self,
        registry: ModuleRegistry | None,
        result: KnowledgeUpdateResult,
        removed: list[str],
    ) -> list[IndexRow]:
        removed_keys = {name.lower() for name in removed}

        if registry is None:
            rows = [IndexRow(name, f"{name} module") for name in [*result.created, *result.updated]]
            rows.extend(IndexRow(name, f"{name} module", status="Deprecated") for name in removed)
            return rows

        rows = [
            IndexRow(
                name=module.name,
                description=module.description or f"{module.name} module",
                keywords=tuple(module.keywords),
                status="Deprecated" if module.name.lower() in removed_keys else "Active",
            )
            for module in registry.modules
        ]
        rows.extend(
            IndexRow(name, f"{name} module", status="Deprecated") for name in removed if registry.find(name) is None
        )
        return rows

    def update_index(self, rows: list[IndexRow]) -> GeneratedFile | None:
        """Rebuild the index module table; None when there are no rows."""
        if not rows:
            return None
        context = index_context(
            self.config.project.name,
            self.config.tech_stack,
            self._display(self.paths.knowledge_path),
            rows,
        )
        rendered = self.renderer.render(INDEX_TEMPLATE, context)
        return write_merged_document(self.paths.index_path, rendered, self._display(self.paths.index_path))

    def _guarded(
        self,
        result: KnowledgeUpdateResult,
        module_name: str,
        best_effort: bool,
        action: Callable[[], GeneratedFile | None],
    ) -> GeneratedFile | None:
        if not best_effort:
            return action()
        try:
            return action()
        except KnowmapError as e:
            logger.warning("Skipping module %s: %s", module_name, e.message)
            result.failures.append(ModuleFailure(module=module_name, message=e.message))
            return None

    def _read_delta_spec(self, delta_spec_path: str | Path) -> DeltaSpecResult:
        path = Path(delta_spec_path)
        if not path.is_absolute():
            path = self.cwd / path
        content = read_text_if_exists(path)
        if content is None:
            raise PrerequisiteError(
                f"delta-spec not found: {delta_spec_path}",
                suggestion="Pass the path of an existing delta-spec document.",
            )
        return parse_delta_spec(content)

    def _apply_delta(
        self,
        delta: DeltaSpecResult,
        registry: ModuleRegistry | None,
        result: KnowledgeUpdateResult,
        best_effort: bool,
    ) -> list[str]:
        processed: set[str] = set()

        def regenerate(entry: DeltaEntry, *, added: bool) -> None:
            module = self.resolve_module(entry.module, registry)
            if module.name in processed:
                return
            processed.add(module.name)
            file = self._guarded(result, module.name, best_effort, lambda: self.update_module_readme(module))
            if file is None:
                return
            result.generated_files.append(file)
            if added and file.action == "created":
                result.created.append(module.name)
            else:
                result.updated.append(module.name)

        for entry in delta.added:
            regenerate(entry, added=True)
        for entry in delta.modified:
            regenerate(entry, added=False)

        removed: list[str] = []
        for entry in delta.removed:
            name = self.resolve_module(entry.module, registry).name
            if name in removed:
                continue
            removed.append(name)
            file = self._guarded(
                result,
                name,
                best_effort,
                lambda: self.mark_module_deprecated(name, entry.description),
            )
            if file is not None:
                result.generated_files.append(file)
                result.deprecated.append(name)

        added = list(dict.fromkeys(self.resolve_module(e.module, registry).name for e in delta.added))
        if added or removed:
            registry_file = self.update_registry(registry, added, removed)
            if registry_file is not None:
                result.generated_files.append(registry_file)
        return removed

    def _apply_manual(
        self,
        module_names: list[str],
        registry: ModuleRegistry | None,
        result: KnowledgeUpdateResult,
        best_effort: bool,
    ) -> None:
        for raw_name in dict.fromkeys(module_names):
            module = self.resolve_module(raw_name, registry)
            file = self._guarded(result, module.name, best_effort, lambda: self.update_module_readme(module))
            if file is None:
                continue
            result.generated_files.append(file)
            if file.action == "created":
                result.created.append(module.name)
            else:
                result.updated.append(module.name)

    def execute(self, options: KnowledgeUpdateOptions) -> KnowledgeUpdateResult:
        result = KnowledgeUpdateResult()
        registry = self.load_registry()
        removed: list[str] = []

        mode = "delta" if options.delta_spec_path is not None else "manual"
        with trace_operation("knowmap.knowledge_update", mode=mode) as span:
            if options.delta_spec_path is not None:
                delta = self._read_delta_spec(options.delta_spec_path)
                if delta.is_empty():
                    logger.warning("No requirement entries found in %s", options.delta_spec_path)
                removed = self._apply_delta(delta, registry, result, options.best_effort)
            elif options.manual_modules:
                self._apply_manual(options.manual_modules, registry, result, options.best_effort)

            index_file = self.update_index(self.index_rows(registry, result, removed))
            if index_file is not None:
                result.generated_files.append(index_file)

            span.set_attribute("knowmap.files_written", len(result.generated_files))
            span.set_attribute("knowmap.failures", len(result.failures))

        logger.info(
            "Knowledge update: %d created, %d updated, %d deprecated, %d failed",
            len(result.created),
            len(result.updated),
            len(result.deprecated),
            len(result.failures),
        )
        return result


def execute(
    options: KnowledgeUpdateOptions,
    cwd: str | Path = ".",
    *,
    renderer: DocumentRenderer | None = None,
) -> KnowledgeUpdateResult:
    """Run a knowledge update for the project at ``cwd``."""
    return KnowledgeUpdater(cwd, renderer=renderer).execute(options)
