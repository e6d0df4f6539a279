"""Module detection from a scanned file list.

Detection runs these steps in order:

1. Registry priority: an existing ``module-map.yaml`` is returned verbatim.
2. Directory grouping into candidate modules.
3. Architecture pattern recognition.
4. Keyword generation.
5. Conflict resolution (same-name candidates are merged).
6. Relationship inference from sampled imports.
7. Entry-point detection.

Architecture and entry points are recomputed from the file list on every
call, including when the registry short-circuits step 2 onwards.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from knowmap_core.config import DEFAULT_BASE_DIR, DEFAULT_KNOWLEDGE_DIR, REGISTRY_FILENAME
from knowmap_core.detection.catalog import (
    ARCHITECTURE_CONTAINER_DIRS,
    ARCHITECTURE_PATTERNS,
    CONTAINER_DIRS,
    ENTRY_POINT_PATTERNS,
    MIN_ARCHITECTURE_SCORE,
    MODULE_INDICATORS,
    UNKNOWN_ARCHITECTURE,
    infer_description,
)
from knowmap_core.detection.relationships import FileReader, infer_relationships, make_file_reader
from knowmap_core.errors import ModuleDetectionError
from knowmap_core.registry import ModuleRegistry, load_registry_optional
from knowmap_core.registry.schemas import Module
from knowmap_core.settings import get_settings
from knowmap_core.telemetry import traced_operation

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")


@dataclass
class DetectionResult:
    modules: list[Module] = field(default_factory=list)
    architecture: str = UNKNOWN_ARCHITECTURE
    entry_points: list[str] = field(default_factory=list)


def _module_dir(parts: list[str]) -> str:
    if parts[0] in CONTAINER_DIRS and len(parts) >= 3:
        return parts[1]
    return parts[0]


def group_files_by_directory(files: Iterable[str]) -> dict[str, list[str]]:
    """Group files by top-level directory, looking through container dirs.

    Root-level files belong to no group. ``src/cli/main.ts`` groups under
    ``cli`` while ``src/index.ts`` groups under ``src``.
    """
    groups: dict[str, list[str]] = {}
    for path in files:
        parts = path.split("/")
        if len(parts) < 2:
            continue
        groups.setdefault(_module_dir(parts), []).append(path)
    return groups


def infer_base_path(paths: list[str]) -> str:
    """Longest directory prefix shared by ``paths``."""
    if not paths:
        return ""
    first = paths[0].split("/")
    if len(paths) == 1:
        return "/".join(first[:-1]) or first[0]

    common: list[str] = []
    for segment_index in range(len(first) - 1):
        prefix = "/".join(first[: segment_index + 1])
        if all(p.startswith(prefix + "/") for p in paths):
            common = first[: segment_index + 1]
        else:
            break
    return "/".join(common) or first[0]


def top_level_dirs(files: Iterable[str]) -> set[str]:
    dirs: set[str] = set()
    for path in files:
        parts = path.split("/")
        if len(parts) < 2:
            continue
        if parts[0] in ARCHITECTURE_CONTAINER_DIRS and len(parts) >= 3:
            dirs.add(parts[1].lower())
        else:
            dirs.add(parts[0].lower())
    return dirs


def detect_architecture(files: Iterable[str]) -> str:
    """Label the layout with the best fully-present architecture pattern.

    A pattern scores its indicator count when every indicator directory
    exists, otherwise zero. The best score must reach
    ``MIN_ARCHITECTURE_SCORE``; on equal scores the earlier catalogue entry
    wins.
    """
    present = top_level_dirs(files)
    best, best_score = UNKNOWN_ARCHITECTURE, 0
    for pattern, indicators in ARCHITECTURE_PATTERNS:
        if not all(indicator in present for indicator in indicators):
            continue
        score = len(indicators)
        if score > best_score:
            best, best_score = pattern, score
    return best if best_score >= MIN_ARCHITECTURE_SCORE else UNKNOWN_ARCHITECTURE


def generate_keywords(name: str, paths: Iterable[str]) -> list[str]:
    keywords = [name.lower()]
    kebab = _CAMEL_BOUNDARY_RE.sub(r"\1-\2", name).lower()
    keywords.extend(part for part in re.split(r"[-_]", kebab) if len(part) >= 3)
    for pattern in paths:
        for segment in pattern.split("/"):
            if segment in ("*", "**") or "." in segment or len(segment) < 3:
                continue
            keywords.append(segment.lower())
    return list(dict.fromkeys(keywords))


def resolve_conflicts(modules: list[Module]) -> list[Module]:
    """Merge same-name modules, keeping first-seen order."""
    merged: dict[str, Module] = {}
    for module in modules:
        existing = merged.get(module.name)
        if existing is None:
            merged[module.name] = module.model_copy(deep=True)
            continue
        existing.paths = list(dict.fromkeys([*existing.paths, *module.paths]))
        existing.keywords = list(dict.fromkeys([*existing.keywords, *module.keywords]))
    return list(merged.values())


def detect_entry_points(files: Iterable[str]) -> list[str]:
    matches = (path for path in files if any(p.search(path) for p in ENTRY_POINT_PATTERNS))
    return list(dict.fromkeys(matches))


def build_candidate_modules(files: list[str]) -> list[Module]:
    candidates: list[Module] = []
    for name, group in group_files_by_directory(files).items():
        if len(group) < 2 and name not in MODULE_INDICATORS:
            continue
        paths = [f"{infer_base_path(group)}/**"]
        candidates.append(
            Module(
                name=name,
                description=infer_description(name),
                paths=paths,
                keywords=generate_keywords(name, paths),
            )
        )
    return candidates


class ModuleDetector:
    """Detects modules for one project root.

    Args:
        cwd: Project root; sampled files are read relative to it
        registry: Registry to honour instead of grouping, if already loaded
        registry_path: Where to look for a registry when ``registry`` is None.
            Defaults to ``<cwd>/docs/ai-knowledge/module-map.yaml``
        sample_size: Files read per module for relationship inference
        read_file: Override for reading sampled files
    """

    def __init__(
        self,
        cwd: str | Path = ".",
        *,
        registry: ModuleRegistry | None = None,
        registry_path: str | Path | None = None,
        sample_size: int | None = None,
        read_file: FileReader | None = None,
    ) -> None:
        self.cwd = Path(cwd)
        self.registry = registry
        self.registry_path = (
            Path(registry_path)
            if registry_path is not None
            else self.cwd / DEFAULT_BASE_DIR / DEFAULT_KNOWLEDGE_DIR / REGISTRY_FILENAME
        )
        self.sample_size = sample_size if sample_size is not None else get_settings().relationship_sample_size
        self.read_file = read_file or make_file_reader(self.cwd)

    def detect(self, files: list[str]) -> DetectionResult:
        try:
            return self._detect(list(files))
        except ModuleDetectionError:
            raise
        except Exception as e:
            raise ModuleDetectionError(str(e)) from e

    def _detect(self, files: list[str]) -> DetectionResult:
        architecture = detect_architecture(files)
        entry_points = detect_entry_points(files)

        registry = self.registry if self.registry is not None else load_registry_optional(self.registry_path)
        if registry is not None:
            logger.info("Using %d modules from existing registry", len(registry.modules))
            return DetectionResult(
                modules=[module.model_copy(deep=True) for module in registry.modules],
                architecture=architecture,
                entry_points=entry_points,
            )

        modules = resolve_conflicts(build_candidate_modules(files))
        infer_relationships(modules, files, self.read_file, self.sample_size)

        logger.info("Detected %d modules (architecture: %s)", len(modules), architecture)
        return DetectionResult(modules=modules, architecture=architecture, entry_points=entry_points)


@traced_operation("knowmap.detect_modules")
def detect_modules(
    files: list[str],
    cwd: str | Path = ".",
    *,
    registry: ModuleRegistry | None = None,
    registry_path: str | Path | None = None,
    sample_size: int | None = None,
    read_file: FileReader | None = None,
) -> DetectionResult:
    """Detect modules, architecture and entry points for ``files``."""
    detector = ModuleDetector(
        cwd,
        registry=registry,
        registry_path=registry_path,
        sample_size=sample_size,
        read_file=read_file,
    )
    return detector.detect(files)
