from pathlib import Path

import pytest
from knowmap_core.errors import WriteError
from knowmap_core.fs_utils import atomic_write, ensure_dir, read_text_if_exists


def test_atomic_write_creates_parents_and_replaces(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "doc.md"

    atomic_write(target, "first")
    atomic_write(target, "second")

    assert target.read_text(encoding="utf-8") == "second"
    assert [p.name for p in target.parent.iterdir()] == ["doc.md"]


def test_atomic_write_failure_is_a_write_error(tmp_path: Path) -> None:
    target = tmp_path / "doc.md"
    target.mkdir()

    with pytest.raises(WriteError) as exc_info:
        atomic_write(target, "content")

    assert exc_info.value.path == str(target)
    assert not any(p.name.startswith("doc.md.tmp") for p in tmp_path.iterdir())


def test_ensure_dir_over_a_file_is_a_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    assert ensure_dir(tmp_path / "new" / "dir").is_dir()
    with pytest.raises(WriteError):
        ensure_dir(blocker / "child")


def test_read_text_if_exists(tmp_path: Path) -> None:
    present = tmp_path / "present.md"
    present.write_text("hello", encoding="utf-8")

    assert read_text_if_exists(present) == "hello"
    assert read_text_if_exists(tmp_path / "absent.md") is None
