"""Recursive file scanner with glob include/exclude patterns."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from knowmap_core.errors import ScanError
from knowmap_core.pathing import canonicalize_repo_relative_path

logger = logging.getLogger(__name__)

DEFAULT_IGNORE: tuple[str, ...] = (
    "node_modules/**",
    ".git/**",
    "dist/**",
    "build/**",
    "coverage/**",
    ".next/**",
    ".nuxt/**",
    "__pycache__/**",
    ".venv/**",
    "venv/**",
)

# Always excluded, whatever the caller passes.
SENSITIVE_PATTERNS: tuple[str, ...] = (
    "**/*.env*",
    "**/*credential*",
    "**/*secret*",
    "**/*.key",
    "**/*.pem",
)


@dataclass
class ScanResult:
    """Sorted repo-relative file paths matched by a scan."""

    files: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.files)


@lru_cache(maxsize=512)
def _compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob into a regex over POSIX paths.

    ``**`` spans any number of segments (including none), ``*`` and ``?``
    stay inside one segment.
    """
    normalized = canonicalize_repo_relative_path(pattern) or "**"
    out: list[str] = []
    i = 0
    while i < len(normalized):
        ch = normalized[i]
        if normalized.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif normalized.startswith("**", i):
            out.append(".*")
            i += 2
        elif ch == "*":
            out.append("[^/]*")
            i += 1
        elif ch == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(ch))
            i += 1
    return re.compile("".join(out) + r"\Z")


def match_glob(path: str, pattern: str) -> bool:
    """Match a repo-relative path against a glob.

    Patterns without a ``/`` match the basename at any depth, so ``*.env*``
    behaves like ``**/*.env*``. A pattern naming a directory
    (``node_modules``) also matches everything beneath it.
    """
    normalized_path = canonicalize_repo_relative_path(path)
    if "/" not in pattern.strip("/"):
        name = pattern.strip("/")
        if any(_compile_glob(name).match(part) for part in normalized_path.split("/")):
            return True
    return _compile_glob(pattern).match(normalized_path) is not None


def _matches_any(path: str, patterns: Iterable[str]) -> bool:
    return any(match_glob(path, pattern) for pattern in patterns)


def _dir_ignored(rel_dir: str, patterns: Iterable[str]) -> bool:
    for pattern in patterns:
        stripped = pattern[:-3] if pattern.endswith("/**") else pattern
        if match_glob(rel_dir, stripped):
            return True
    return False


def scan_dir(
    patterns: str | Iterable[str] = "**",
    *,
    cwd: str | Path = ".",
    depth: int = 10,
    exclude: Iterable[str] = (),
) -> ScanResult:
    """Scan ``cwd`` for files matching ``patterns``.

    Built-in ignores and sensitive-file patterns always apply in addition to
    ``exclude``. Hidden files and directories are skipped. A missing root
    yields an empty result.
    """
    include = [patterns] if isinstance(patterns, str) else list(patterns)
    ignore = [*DEFAULT_IGNORE, *SENSITIVE_PATTERNS, *exclude]
    root = Path(cwd)

    if not root.is_dir():
        logger.debug("Scan root %s does not exist; returning empty result", root)
        return ScanResult()

    matched: list[str] = []

    def _on_error(err: OSError) -> None:
        raise ScanError(str(root), str(err)) from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error, followlinks=False):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir
        level = 0 if not rel_dir else rel_dir.count("/") + 1

        kept_dirs = []
        for name in sorted(dirnames):
            if name.startswith("."):
                continue
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if _dir_ignored(rel, ignore):
                continue
            kept_dirs.append(name)
        # Files below ``depth`` levels are never reached.
        dirnames[:] = kept_dirs if level + 1 < depth else []

        for name in filenames:
            if name.startswith("."):
                continue
            rel = f"{rel_dir}/{name}" if rel_dir else name
            if _matches_any(rel, ignore):
                continue
            if _matches_any(rel, include):
                matched.append(rel)

    matched.sort()
    return ScanResult(files=matched)
