"""Tests for marker-based document merging."""

import pytest
from knowmap_core.merging import (
    AUTO_END,
    AUTO_START,
    USER_END,
    USER_START,
    extract_user_sections,
    merge_content,
    parse_sections,
)


def _doc(auto: str, *users: str, title: str = "# Doc") -> str:
    parts = [title, "", AUTO_START, auto, AUTO_END]
    for user in users:
        parts += ["", "## Notes", "", USER_START, user, USER_END]
    return "\n".join(parts) + "\n"


SAMPLES = [
    "",
    "plain text only",
    "trailing newline\n",
    _doc("generated", "mine"),
    _doc("generated", "one", "two"),
    f"{USER_END}\nstray end marker\n{AUTO_END}",
    f"{AUTO_START}\nunterminated auto\n",
    f"{AUTO_START}\n{AUTO_START}\nnested\n{AUTO_END}\n{AUTO_END}\n",
    f"{AUTO_START}\n{USER_START}\nmixed\n{USER_END}\n{AUTO_END}",
    f"  {USER_START}  \nindented markers\n  {USER_END}\n",
    "\n\n\n",
]


@pytest.mark.parametrize("doc", SAMPLES)
def test_sections_join_back_to_the_original_document(doc: str) -> None:
    sections = parse_sections(doc)
    assert "\n".join(section.content for section in sections) == doc


def test_parse_sections_types_and_marker_ownership() -> None:
    doc = f"# T\n{AUTO_START}\nA\n{AUTO_END}\n\n{USER_START}\nU\n{USER_END}\n"

    sections = parse_sections(doc)

    assert [s.type for s in sections] == ["static", "auto", "static", "user", "static"]
    assert sections[1].content == f"{AUTO_START}\nA\n{AUTO_END}"
    assert sections[3].content == f"{USER_START}\nU\n{USER_END}"


def test_end_marker_outside_its_section_is_static_text() -> None:
    doc = f"before\n{USER_END}\nafter"

    sections = parse_sections(doc)

    assert len(sections) == 1
    assert sections[0].type == "static"


def test_unterminated_section_is_flushed_at_end_of_input() -> None:
    sections = parse_sections(f"{USER_START}\nstill open")

    assert [s.type for s in sections] == ["user"]


def test_extract_user_sections_includes_markers() -> None:
    doc = _doc("generated", "first", "second")

    assert extract_user_sections(doc) == [
        f"{USER_START}\nfirst\n{USER_END}",
        f"{USER_START}\nsecond\n{USER_END}",
    ]


class TestMergeContent:
    """Merging a fresh render with the persisted document."""

    def test_first_run_returns_new_content(self) -> None:
        new = _doc("fresh", "placeholder")
        assert merge_content(new, "") == new
        assert merge_content(new, "  \n\t") == new

    def test_existing_without_user_sections_returns_new_content(self) -> None:
        new = _doc("fresh", "placeholder")
        assert merge_content(new, "# Old doc\nno markers here\n") == new

    def test_user_sections_survive_and_placeholders_do_not(self) -> None:
        existing = _doc("stale", "keep-1", "keep-2")
        new = _doc("fresh", "placeholder-a", "placeholder-b")

        merged = merge_content(new, existing)

        assert "keep-1" in merged
        assert "keep-2" in merged
        assert "placeholder-a" not in merged
        assert "placeholder-b" not in merged

    def test_auto_sections_always_come_from_new_content(self) -> None:
        existing = _doc("stale auto text", "kept")
        new = _doc("fresh auto text", "placeholder")

        merged = merge_content(new, existing)

        auto = [s.content for s in parse_sections(merged) if s.type == "auto"]
        expected = [s.content for s in parse_sections(new) if s.type == "auto"]
        assert auto == expected
        assert "stale auto text" not in merged

    def test_static_text_comes_from_new_content(self) -> None:
        existing = _doc("auto", "kept", title="# Old title")
        new = _doc("auto", "placeholder", title="# New title")

        merged = merge_content(new, existing)

        assert merged.startswith("# New title")
        assert "# Old title" not in merged

    def test_fewer_existing_user_sections_replace_only_the_prefix(self) -> None:
        existing = _doc("auto", "keep-1")
        new = _doc("auto", "placeholder-1", "placeholder-2")

        merged = merge_content(new, existing)

        assert extract_user_sections(merged) == [
            f"{USER_START}\nkeep-1\n{USER_END}",
            f"{USER_START}\nplaceholder-2\n{USER_END}",
        ]

    def test_extra_existing_user_sections_are_dropped(self) -> None:
        existing = _doc("auto", "keep-1", "keep-2", "keep-3")
        new = _doc("auto", "placeholder-1", "placeholder-2")

        merged = merge_content(new, existing)

        assert extract_user_sections(merged) == [
            f"{USER_START}\nkeep-1\n{USER_END}",
            f"{USER_START}\nkeep-2\n{USER_END}",
        ]

    def test_multiline_user_content_is_kept_verbatim(self) -> None:
        user = "line one\n\n  - indented bullet\n<!-- a comment -->"
        existing = _doc("auto", user)
        new = _doc("auto", "placeholder")

        assert user in merge_content(new, existing)

    @pytest.mark.parametrize(
        "existing",
        [
            "",
            "no markers",
            _doc("stale", "kept"),
            _doc("stale", "a", "b", "c"),
        ],
    )
    def test_merge_is_idempotent(self, existing: str) -> None:
        new = _doc("fresh", "placeholder-1", "placeholder-2")

        once = merge_content(new, existing)

        assert merge_content(new, once) == once
