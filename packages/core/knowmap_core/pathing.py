"""Shared path helpers for repo-relative file paths and module globs."""

from __future__ import annotations

from pathlib import Path, PurePosixPath


def canonicalize_repo_relative_path(path: str) -> str:
    """Canonicalize a repo-relative path.

    Rules:
    - normalize path separators to "/"
    - strip leading "./" segments
    - strip leading "/" so paths remain repo-relative
    - collapse redundant separators/segments via PurePosixPath
    """
    normalized = path.strip().replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    normalized = str(PurePosixPath(normalized))
    if normalized == ".":
        return ""
    return normalized.lstrip("/")


def glob_base(pattern: str) -> str:
    """Return the literal directory prefix of a module glob (``src/a/**`` -> ``src/a``)."""
    parts: list[str] = []
    for segment in canonicalize_repo_relative_path(pattern).split("/"):
        if any(ch in segment for ch in "*?["):
            break
        parts.append(segment)
    return "/".join(part for part in parts if part)


def path_in_glob_base(file_path: str, pattern: str) -> bool:
    """True when ``file_path`` lives under the literal prefix of ``pattern``."""
    base = glob_base(pattern)
    if not base:
        return True
    return file_path == base or file_path.startswith(base + "/")


def relative_display_path(path: Path, cwd: Path) -> str:
    """POSIX path of ``path`` relative to ``cwd`` when possible, else absolute."""
    try:
        return path.resolve().relative_to(cwd.resolve()).as_posix()
    except ValueError:
        return path.resolve().as_posix()
