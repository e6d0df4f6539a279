"""Jinja2-backed document renderer."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol

import jinja2
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

from knowmap_core.errors import TemplateError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")

MODULE_README_TEMPLATE = "module_readme.md.j2"
INDEX_TEMPLATE = "index.md.j2"
ARCHITECTURE_TEMPLATE = "architecture.md.j2"
RAW_SCAN_TEMPLATE = "raw_scan.md.j2"
CONVENTIONS_TEMPLATE = "conventions.md.j2"


class DocumentRenderer(Protocol):
    """Anything that turns a template id and a context into text."""

    def render(self, template_id: str, context: dict[str, Any]) -> str: ...


def join_or(items: Iterable[Any] | None, sep: str = ", ", fallback: str = "None") -> str:
    """Join ``items`` with ``sep``; ``fallback`` when there are none."""
    values = [str(item) for item in items or ()]
    return sep.join(values) if values else fallback


class TemplateRenderer:
    """Renders the document templates.

    Templates in ``templates_dir`` shadow the built-in ones of the same
    name; anything not overridden falls back to the package templates.
    """

    def __init__(self, templates_dir: str | Path | None = None) -> None:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(DEFAULT_TEMPLATES_DIR))
        self.templates_dirs = list(dict.fromkeys(directories))
        self._env = Environment(
            loader=FileSystemLoader(self.templates_dirs),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["join_or"] = join_or

    @classmethod
    def from_settings(cls) -> TemplateRenderer:
        from knowmap_core.settings import get_settings

        return cls(get_settings().templates_dir)

    def render(self, template_id: str, context: dict[str, Any]) -> str:
        try:
            template = self._env.get_template(template_id)
        except TemplateNotFound as e:
            raise TemplateError(template_id, f"template not found in {', '.join(self.templates_dirs)}") from e
        except jinja2.TemplateError as e:
            raise TemplateError(template_id, str(e)) from e

        try:
            return template.render(**context)
        except jinja2.TemplateError as e:
            raise TemplateError(template_id, str(e)) from e
