"""Module, architecture and entry-point detection."""

from knowmap_core.detection.detector import (
    DetectionResult,
    ModuleDetector,
    detect_architecture,
    detect_entry_points,
    detect_modules,
    generate_keywords,
    group_files_by_directory,
    infer_base_path,
    resolve_conflicts,
)
from knowmap_core.detection.relationships import extract_imports, infer_relationships

__all__ = [
    "DetectionResult",
    "ModuleDetector",
    "detect_architecture",
    "detect_entry_points",
    "detect_modules",
    "extract_imports",
    "generate_keywords",
    "group_files_by_directory",
    "infer_base_path",
    "infer_relationships",
    "resolve_conflicts",
]
