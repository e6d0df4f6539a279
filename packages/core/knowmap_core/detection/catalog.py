"""Fixed catalogues used by module detection."""

from __future__ import annotations

import re

# Declaration order is the tie-break: at equal score the earlier pattern wins.
ARCHITECTURE_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("mvc", ("models", "views", "controllers")),
    ("layered", ("routes", "services", "models")),
    ("clean", ("domain", "application", "infrastructure")),
    ("feature", ("features", "modules")),
    ("pragmatic", ("cli", "services", "lib", "types")),
)

MIN_ARCHITECTURE_SCORE = 2
UNKNOWN_ARCHITECTURE = "unknown"

# Top-level directories that only wrap the real module directories.
CONTAINER_DIRS = frozenset({"src", "app", "lib", "packages"})
ARCHITECTURE_CONTAINER_DIRS = frozenset({"src", "app", "lib"})

# Directory names kept as modules even when they hold a single file.
MODULE_INDICATORS = frozenset(
    {
        "src",
        "lib",
        "app",
        "packages",
        "modules",
        "features",
        "components",
        "pages",
        "routes",
        "services",
        "models",
        "controllers",
        "views",
        "domain",
        "application",
        "infrastructure",
        "api",
        "core",
        "shared",
        "utils",
        "helpers",
        "types",
        "config",
        "middleware",
        "plugins",
        "cli",
        "commands",
    }
)

MODULE_DESCRIPTIONS: dict[str, str] = {
    "cli": "Command-line interface layer",
    "commands": "CLI command definitions",
    "services": "Business logic services",
    "lib": "Shared utility functions",
    "types": "Type definitions and schemas",
    "models": "Data models",
    "views": "View templates or components",
    "controllers": "Request handlers",
    "routes": "Route definitions",
    "middleware": "Middleware functions",
    "config": "Configuration management",
    "utils": "Utility functions",
    "helpers": "Helper functions",
    "components": "UI components",
    "pages": "Page components",
    "api": "API endpoints",
    "core": "Core application logic",
    "shared": "Shared modules",
    "domain": "Domain layer (business entities)",
    "application": "Application layer (use cases)",
    "infrastructure": "Infrastructure layer (external services)",
    "templates": "Template files",
    "tests": "Test files",
    "plugins": "Plugin modules",
    "features": "Feature modules",
    "modules": "Application modules",
    "formatters": "Output formatting",
}

ENTRY_POINT_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        r"^src/index\.[tj]sx?$",
        r"^src/main\.[tj]sx?$",
        r"^src/app\.[tj]sx?$",
        r"^src/cli/index\.[tj]sx?$",
        r"^src/server\.[tj]sx?$",
        r"^index\.[tj]sx?$",
        r"^main\.[tj]sx?$",
        r"^app\.[tj]sx?$",
        r"^server\.[tj]sx?$",
        r"^manage\.py$",
        r"^main\.py$",
        r"^(?:src/)?[^/]+/__main__\.py$",
        r"^main\.go$",
        r"^cmd/.+/main\.go$",
    )
)


def infer_description(name: str) -> str:
    return MODULE_DESCRIPTIONS.get(name, f"{name} module")
