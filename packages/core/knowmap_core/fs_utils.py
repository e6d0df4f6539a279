"""Filesystem helpers: directory creation and atomic writes."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from knowmap_core.errors import WriteError

logger = logging.getLogger(__name__)


def ensure_dir(path: str | Path) -> Path:
    """Create ``path`` (and parents) if needed."""
    directory = Path(path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise WriteError(str(directory), str(e)) from e
    return directory


def atomic_write(path: str | Path, content: str) -> None:
    """Write ``content`` to a sibling temp file, then rename it over ``path``.

    Readers observe either the old or the new content, never a partial file.
    """
    target = Path(path)
    ensure_dir(target.parent)
    tmp_path = target.with_name(f"{target.name}.tmp.{os.getpid()}")
    try:
        tmp_path.write_text(content, encoding="utf-8")
        os.replace(tmp_path, target)
    except OSError as e:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove temp file %s", tmp_path)
        raise WriteError(str(target), str(e)) from e


def read_text_if_exists(path: str | Path) -> str | None:
    """Return the file's text, or None when it does not exist."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
