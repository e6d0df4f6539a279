"""Project initialization: ``.knowmap.yaml`` plus the knowledge-base skeleton."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from knowmap_core.config import (
    CONFIG_FILENAME,
    KnowledgeConfig,
    ProjectConfig,
    ProjectInfo,
    TechStack,
    resolve_base_paths,
    resolve_config_path,
    write_config,
)
from knowmap_core.errors import AlreadyExistsError
from knowmap_core.fs_utils import atomic_write, ensure_dir
from knowmap_core.knowledge.documents import index_context
from knowmap_core.knowledge.init import CONVENTIONS_FILENAME
from knowmap_core.pathing import relative_display_path
from knowmap_core.rendering import CONVENTIONS_TEMPLATE, INDEX_TEMPLATE, DocumentRenderer, TemplateRenderer
from knowmap_core.tech_stack import detect_tech_stack
from knowmap_core.telemetry import traced_operation

logger = logging.getLogger(__name__)

CONFIG_VERSION = "1.0"
DEFAULT_KNOWLEDGE_BASE_PATH = "docs/ai-knowledge"
DEFAULT_EXCLUDES: tuple[str, ...] = ("*.env*", "*credential*", "*secret*", "node_modules", ".git")


@dataclass
class InitResult:
    project_name: str
    tech_stack: TechStack
    created_files: list[str] = field(default_factory=list)


@traced_operation("knowmap.init_project")
def init_project(
    cwd: str | Path = ".",
    *,
    name: str | None = None,
    renderer: DocumentRenderer | None = None,
) -> InitResult:
    """Create ``.knowmap.yaml`` and the empty knowledge base.

    Raises:
        AlreadyExistsError: The project already has a ``.knowmap.yaml``
    """
    root = Path(cwd).resolve()
    if resolve_config_path(root).exists():
        raise AlreadyExistsError(CONFIG_FILENAME)

    project_name = name or root.name
    tech_stack = detect_tech_stack(root)
    config = ProjectConfig(
        version=CONFIG_VERSION,
        project=ProjectInfo(name=project_name),
        tech_stack=tech_stack,
        paths={},
        exclude=list(DEFAULT_EXCLUDES),
        knowledge=KnowledgeConfig(base_path=DEFAULT_KNOWLEDGE_BASE_PATH),
    )

    created: list[str] = []
    write_config(config, root)
    created.append(CONFIG_FILENAME)

    paths = resolve_base_paths(config, root)
    ensure_dir(paths.knowledge_path / "modules")
    ensure_dir(paths.specs_path)

    renderer = renderer or TemplateRenderer.from_settings()
    knowledge_base_path = relative_display_path(paths.knowledge_path, root)

    atomic_write(
        paths.index_path,
        renderer.render(INDEX_TEMPLATE, index_context(project_name, tech_stack, knowledge_base_path, [])),
    )
    created.append(relative_display_path(paths.index_path, root))

    conventions_path = paths.knowledge_path / CONVENTIONS_FILENAME
    atomic_write(
        conventions_path,
        renderer.render(CONVENTIONS_TEMPLATE, {"project_name": project_name, "tech_stack": tech_stack}),
    )
    created.append(relative_display_path(conventions_path, root))

    logger.info("Initialized knowmap project %s in %s", project_name, root)
    return InitResult(project_name=project_name, tech_stack=tech_stack, created_files=created)
