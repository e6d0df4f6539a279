"""Auto/user section merging for generated documents."""

from knowmap_core.merging.content_merger import (
    AUTO_END,
    AUTO_START,
    USER_END,
    USER_START,
    ContentSection,
    extract_user_sections,
    merge_content,
    parse_sections,
)

__all__ = [
    "AUTO_END",
    "AUTO_START",
    "USER_END",
    "USER_START",
    "ContentSection",
    "extract_user_sections",
    "merge_content",
    "parse_sections",
]
