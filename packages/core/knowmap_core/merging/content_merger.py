"""Marker-delimited document merging.

Generated documents carry two kinds of delimited regions::

    <!-- knowmap:auto-start -->
    (regenerated on every run)
    <!-- knowmap:auto-end -->

    <!-- knowmap:user-start -->
    (written by people, preserved across runs)
    <!-- knowmap:user-end -->

Everything outside a region is static text owned by the template.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

AUTO_START = "<!-- knowmap:auto-start -->"
AUTO_END = "<!-- knowmap:auto-end -->"
USER_START = "<!-- knowmap:user-start -->"
USER_END = "<!-- knowmap:user-end -->"

SectionType = Literal["auto", "user", "static"]

_START_MARKERS: dict[str, SectionType] = {AUTO_START: "auto", USER_START: "user"}
_END_MARKERS: dict[str, SectionType] = {AUTO_END: "auto", USER_END: "user"}


@dataclass(frozen=True)
class ContentSection:
    """A contiguous run of document lines; delimited sections include their marker lines."""

    type: SectionType
    content: str


def parse_sections(content: str) -> list[ContentSection]:
    """Split a document into auto, user and static sections.

    Joining every section's ``content`` with ``"\\n"`` reproduces the input
    exactly. An end marker that does not close the open section is plain
    text, so unbalanced or nested markers degrade to static content.
    """
    sections: list[ContentSection] = []
    current: list[str] = []
    current_type: SectionType = "static"

    for line in content.split("\n"):
        marker = line.strip()

        start_type = _START_MARKERS.get(marker)
        if start_type is not None and current_type != start_type:
            if current:
                sections.append(ContentSection(current_type, "\n".join(current)))
            current = [line]
            current_type = start_type
            continue

        if _END_MARKERS.get(marker) == current_type:
            current.append(line)
            sections.append(ContentSection(current_type, "\n".join(current)))
            current = []
            current_type = "static"
            continue

        current.append(line)

    if current:
        sections.append(ContentSection(current_type, "\n".join(current)))

    return sections


def extract_user_sections(content: str) -> list[str]:
    """User section contents, markers included, in document order."""
    return [section.content for section in parse_sections(content) if section.type == "user"]


def merge_content(new_content: str, existing_content: str) -> str:
    """Merge a freshly rendered document with the previously persisted one.

    The n-th user section of ``new_content`` is replaced by the n-th user
    section of ``existing_content``; pairing is positional. Auto and static
    sections always come from ``new_content``. When there is no existing
    document, or it has no user sections, ``new_content`` is returned as is.
    """
    if not existing_content or not existing_content.strip():
        return new_content

    preserved = extract_user_sections(existing_content)
    if not preserved:
        return new_content

    merged: list[str] = []
    user_index = 0
    for section in parse_sections(new_content):
        if section.type == "user" and user_index < len(preserved):
            merged.append(preserved[user_index])
            user_index += 1
        else:
            merged.append(section.content)

    return "\n".join(merged)
