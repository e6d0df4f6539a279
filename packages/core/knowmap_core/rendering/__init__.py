"""Template rendering for generated documents."""

from knowmap_core.rendering.renderer import (
    ARCHITECTURE_TEMPLATE,
    CONVENTIONS_TEMPLATE,
    INDEX_TEMPLATE,
    MODULE_README_TEMPLATE,
    RAW_SCAN_TEMPLATE,
    DocumentRenderer,
    TemplateRenderer,
    join_or,
)

__all__ = [
    "ARCHITECTURE_TEMPLATE",
    "CONVENTIONS_TEMPLATE",
    "INDEX_TEMPLATE",
    "MODULE_README_TEMPLATE",
    "RAW_SCAN_TEMPLATE",
    "DocumentRenderer",
    "TemplateRenderer",
    "join_or",
]
