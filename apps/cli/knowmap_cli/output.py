"""Console output for CLI commands."""

from __future__ import annotations

import sys
import traceback
from typing import Literal, TextIO

from knowmap_core.bootstrap import InitResult
from knowmap_core.errors import KnowmapError
from knowmap_core.knowledge import (
    GeneratedFile,
    KnowledgeInitResult,
    KnowledgeResult,
    KnowledgeUpdateResult,
    ModuleSummary,
    SteeringResult,
)

Verbosity = Literal["quiet", "normal", "verbose"]


def _files(files: list[GeneratedFile], out: TextIO) -> None:
    for file in files:
        print(f"  {file.action:<10} {file.path}", file=out)


def _paths(paths: list[str], out: TextIO, label: str = "written") -> None:
    for path in paths:
        print(f"  {label:<10} {path}", file=out)


def _modules(modules: list[ModuleSummary], out: TextIO) -> None:
    for module in modules:
        print(f"  - {module.name} ({module.file_count} files): {module.description}", file=out)
        if module.relationships.depends_on:
            print(f"      depends on: {', '.join(module.relationships.depends_on)}", file=out)
        if module.relationships.used_by:
            print(f"      used by: {', '.join(module.relationships.used_by)}", file=out)


def print_init(result: InitResult, verbosity: Verbosity, out: TextIO | None = None) -> None:
    if verbosity == "quiet":
        return
    out = out or sys.stdout
    print(f"Initialized knowmap project '{result.project_name}'", file=out)
    _paths(result.created_files, out, "created")
    if verbosity == "verbose":
        stack = result.tech_stack
        print(
            f"Tech stack: language={stack.language or '-'} framework={stack.framework or '-'} "
            f"package_manager={stack.package_manager or '-'}",
            file=out,
        )


def print_steering(result: SteeringResult, verbosity: Verbosity, out: TextIO | None = None) -> None:
    if verbosity == "quiet":
        return
    out = out or sys.stdout
    prefix = "[dry run] " if result.dry_run else ""
    print(
        f"{prefix}Detected {result.module_count} modules in {result.file_count} files "
        f"(architecture: {result.architecture})",
        file=out,
    )
    _paths(result.output_files, out)
    if verbosity == "verbose":
        _modules(result.modules, out)
        if result.entry_points:
            print(f"Entry points: {', '.join(result.entry_points)}", file=out)


def print_knowledge_init(result: KnowledgeInitResult, verbosity: Verbosity, out: TextIO | None = None) -> None:
    if verbosity == "quiet":
        return
    out = out or sys.stdout
    prefix = "[dry run] " if result.dry_run else ""
    print(f"{prefix}Scanned {result.total_files} files (depth {result.scan_depth})", file=out)
    _paths(result.output_files, out)
    if verbosity == "verbose":
        print(f"Entry points: {', '.join(result.entry_points) or '-'}", file=out)
        print(f"Dependencies: {len(result.dependencies)}", file=out)
        print(f"Config files: {', '.join(result.config_files) or '-'}", file=out)


def print_knowledge_generate(result: KnowledgeResult, verbosity: Verbosity, out: TextIO | None = None) -> None:
    if verbosity == "quiet":
        return
    out = out or sys.stdout
    prefix = "[dry run] " if result.dry_run else ""
    print(f"{prefix}Generated knowledge for {result.module_count} modules", file=out)
    _files(result.generated_files, out)
    if verbosity == "verbose":
        _modules(result.modules, out)


def print_knowledge_update(result: KnowledgeUpdateResult, verbosity: Verbosity, out: TextIO | None = None) -> None:
    if verbosity == "quiet":
        return
    out = out or sys.stdout
    print(
        f"Knowledge updated: {len(result.created)} created, {len(result.updated)} updated, "
        f"{len(result.deprecated)} deprecated",
        file=out,
    )
    _files(result.generated_files, out)
    for failure in result.failures:
        print(f"  failed     {failure.module}: {failure.message}", file=out)


def print_error(error: KnowmapError, verbosity: Verbosity, err: TextIO | None = None) -> None:
    err = err or sys.stderr
    print(f"Error [{error.code}]: {error.message}", file=err)
    if error.suggestion:
        print(f"Suggestion: {error.suggestion}", file=err)
    if verbosity == "verbose":
        traceback.print_exception(error, file=err)
