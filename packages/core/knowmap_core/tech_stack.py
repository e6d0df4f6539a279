"""Tech-stack and dependency detection from well-known manifest files."""

from __future__ import annotations

import json
import logging
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from knowmap_core.config import TechStack

logger = logging.getLogger(__name__)

# First dependency found wins.
NODE_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("next", "next.js"),
    ("nuxt", "nuxt"),
    ("@angular/core", "angular"),
    ("vue", "vue"),
    ("react", "react"),
    ("express", "express"),
    ("fastify", "fastify"),
    ("koa", "koa"),
    ("hono", "hono"),
    ("svelte", "svelte"),
)

_REQUIREMENT_RE = re.compile(r"^([A-Za-z0-9_.\-\[\]]+)\s*(?:[=<>!~]+\s*(.+))?")


@dataclass(frozen=True)
class Dependency:
    name: str
    version: str | None = None


def _read_json(path: Path) -> dict[str, Any] | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def _read_toml(path: Path) -> dict[str, Any] | None:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None


def _node_package_manager(root: Path) -> str:
    if (root / "pnpm-lock.yaml").exists():
        return "pnpm"
    if (root / "yarn.lock").exists():
        return "yarn"
    if (root / "bun.lockb").exists() or (root / "bun.lock").exists():
        return "bun"
    return "npm"


def detect_tech_stack(cwd: str | Path = ".") -> TechStack:
    """Detect language, framework and package manager.

    - package.json -> javascript, or typescript when tsconfig.json exists
    - requirements.txt / pyproject.toml -> python
    - anything else -> empty result
    """
    root = Path(cwd)
    package_json = root / "package.json"
    if package_json.exists():
        language = "typescript" if (root / "tsconfig.json").exists() else "javascript"
        framework = None
        pkg = _read_json(package_json)
        if pkg is not None:
            deps = {**(pkg.get("dependencies") or {}), **(pkg.get("devDependencies") or {})}
            framework = next((name for dep, name in NODE_FRAMEWORKS if dep in deps), None)
        return TechStack(
            language=language,
            framework=framework,
            package_manager=_node_package_manager(root),
        )

    has_pyproject = (root / "pyproject.toml").exists()
    if has_pyproject or (root / "requirements.txt").exists():
        return TechStack(language="python", package_manager="poetry" if has_pyproject else "pip")

    return TechStack()


def collect_dependencies(cwd: str | Path = ".") -> list[Dependency]:
    """Collect declared dependencies from package.json, pyproject.toml or requirements.txt."""
    root = Path(cwd)

    package_json = root / "package.json"
    if package_json.exists():
        pkg = _read_json(package_json) or {}
        deps: list[Dependency] = []
        for key in ("dependencies", "devDependencies"):
            for name, version in (pkg.get(key) or {}).items():
                deps.append(Dependency(name=name, version=str(version)))
        return deps

    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        data = _read_toml(pyproject) or {}
        declared = (data.get("project") or {}).get("dependencies") or []
        if declared:
            parsed = (_parse_requirement(str(line)) for line in declared)
            return [dep for dep in parsed if dep is not None]

    requirements = root / "requirements.txt"
    if requirements.exists():
        deps = []
        for line in requirements.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith(("#", "-")):
                continue
            dep = _parse_requirement(stripped)
            if dep:
                deps.append(dep)
        return deps

    return []


def _parse_requirement(line: str) -> Dependency | None:
    match = _REQUIREMENT_RE.match(line.strip())
    if not match:
        return None
    version = match.group(2).strip() if match.group(2) else None
    return Dependency(name=match.group(1), version=version)
