"""Reading and writing the module registry YAML document."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from knowmap_core.errors import RegistryParseError
from knowmap_core.fs_utils import atomic_write
from knowmap_core.registry.schemas import ModuleRegistry

logger = logging.getLogger(__name__)


def parse_registry(content: str, source_path: str = "<string>") -> ModuleRegistry:
    """Parse registry YAML text; raises RegistryParseError when malformed."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise RegistryParseError(source_path, str(e)) from e

    if not isinstance(data, dict):
        raise RegistryParseError(source_path, "expected a mapping with a 'modules' list")

    try:
        return ModuleRegistry.model_validate(data)
    except ValidationError as e:
        raise RegistryParseError(source_path, str(e)) from e


def dump_registry(registry: ModuleRegistry) -> str:
    return yaml.safe_dump(
        registry.to_yaml_payload(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )


def load_registry(path: str | Path) -> ModuleRegistry:
    """Load the registry at ``path``.

    Raises FileNotFoundError when absent and RegistryParseError when malformed.
    """
    registry_path = Path(path)
    content = registry_path.read_text(encoding="utf-8")
    return parse_registry(content, str(registry_path))


def load_registry_optional(path: str | Path | None) -> ModuleRegistry | None:
    """Load the registry when it is only optional context.

    Returns None when the file is absent, unreadable or malformed.
    """
    if path is None:
        return None
    try:
        return load_registry(path)
    except FileNotFoundError:
        logger.debug("No module registry at %s", path)
        return None
    except (OSError, RegistryParseError) as e:
        logger.warning("Ignoring unreadable module registry %s: %s", path, e)
        return None


def save_registry(registry: ModuleRegistry, path: str | Path) -> None:
    atomic_write(path, dump_registry(registry))
    logger.info("Wrote module registry %s (%d modules)", path, len(registry.modules))
