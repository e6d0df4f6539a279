"""Import-based relationship inference between detected modules.

Imports are found with line patterns over raw file text, not a parser. Only
the first ``sample_size`` files of each module are read; a module whose
imports all live in later files gets no edges.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from knowmap_core.pathing import glob_base, path_in_glob_base
from knowmap_core.registry.schemas import Module

logger = logging.getLogger(__name__)

FileReader = Callable[[str], "str | None"]

_STRING_IMPORT_RE = re.compile(r"""(?:import|from)\s+['"]([^'"]+)['"]""")
_PYTHON_IMPORT_RE = re.compile(r"^\s*(?:from\s+(\.*[\w.]*)\s+import\b|import\s+([\w.]+))", re.MULTILINE)
_SOURCE_SUFFIX_RE = re.compile(r"\.(?:[cm]?[jt]sx?|py)$")


def make_file_reader(cwd: str | Path) -> FileReader:
    """Reader returning a file's text under ``cwd``, or None when unreadable."""
    root = Path(cwd)

    def read(rel_path: str) -> str | None:
        try:
            return (root / rel_path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug("Skipping %s during import sampling: %s", rel_path, e)
            return None

    return read


def extract_python_imports(text: str) -> list[str]:
    """Absolute ``from a.b import`` / ``import a.b`` targets, as ``a/b``.

    Relative imports are skipped.
    """
    targets = []
    for from_target, import_target in _PYTHON_IMPORT_RE.findall(text):
        dotted = from_target or import_target
        if dotted and not dotted.startswith("."):
            targets.append(dotted.replace(".", "/"))
    return targets


def extract_imports(text: str, file_path: str = "") -> list[str]:
    """Import targets found in ``text``.

    Quoted ``import``/``from`` literals are read in every file. In ``.py``
    files, absolute Python imports are also read (see
    :func:`extract_python_imports`).
    """
    targets = _STRING_IMPORT_RE.findall(text)
    if file_path.endswith(".py"):
        targets.extend(extract_python_imports(text))
    return targets


def normalize_import(target: str) -> str:
    """Strip relative prefixes and a source suffix: ``../lib/x.js`` -> ``lib/x``."""
    normalized = target
    while normalized.startswith(("./", "../")):
        normalized = normalized[2:] if normalized.startswith("./") else normalized[3:]
    return _SOURCE_SUFFIX_RE.sub("", normalized)


def module_files(module: Module, files: list[str]) -> list[str]:
    """Files under any of the module's glob bases, in scan order."""
    patterns = module.resolved_paths()
    return [f for f in files if any(path_in_glob_base(f, pattern) for pattern in patterns)]


def _references(imports: list[str], other: Module, other_files: list[str]) -> bool:
    bases = [base for base in (glob_base(p) for p in other.resolved_paths()) if base]
    for raw in imports:
        if other.name in raw:
            return True
        target = normalize_import(raw)
        if not target:
            continue
        if any(target in path for path in other_files):
            return True
        if any(base in target for base in bases):
            return True
    return False


def _python_references(imports: list[str], other: Module, other_files: list[str]) -> bool:
    # Dotted names are short (``re``, ``os``), so only whole path segments count.
    for target in imports:
        if other.name in target.split("/"):
            return True
        wrapped = f"/{target}/"
        if any(wrapped in f"/{_SOURCE_SUFFIX_RE.sub('', path)}/" for path in other_files):
            return True
    return False


def infer_relationships(
    modules: list[Module],
    files: list[str],
    read_file: FileReader,
    sample_size: int = 20,
) -> None:
    """Fill ``depends_on``/``used_by`` on ``modules`` in place."""
    files_by_module = {module.name: module_files(module, files) for module in modules}

    for module in modules:
        imports: list[str] = []
        python_imports: list[str] = []
        for path in files_by_module[module.name][:sample_size]:
            text = read_file(path)
            if text is None:
                continue
            imports.extend(_STRING_IMPORT_RE.findall(text))
            if path.endswith(".py"):
                python_imports.extend(extract_python_imports(text))
        if not imports and not python_imports:
            continue

        for other in modules:
            if other.name == module.name:
                continue
            other_files = files_by_module[other.name]
            if not other_files:
                continue
            if _references(imports, other, other_files) or _python_references(
                python_imports, other, other_files
            ):
                module.relationships.depends_on.append(other.name)
                other.relationships.used_by.append(module.name)

    for module in modules:
        module.relationships.dedupe()
