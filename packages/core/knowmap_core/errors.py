"""Exception hierarchy shared by every knowmap component.

Each error carries a human-readable message, a machine-readable ``code``
(UPPER_SNAKE_CASE) and a ``suggestion`` the CLI prints next to the message.
"""

from __future__ import annotations


class KnowmapError(Exception):
    """Base class for knowmap errors."""

    code = "KNOWMAP_ERROR"
    suggestion = "Re-run with --verbose for details."

    def __init__(self, message: str, *, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if suggestion is not None:
            self.suggestion = suggestion


def _with_cause(text: str, cause: str | None) -> str:
    return f"{text} ({cause})" if cause else text


class ConfigNotFoundError(KnowmapError):
    """Raised when ``.knowmap.yaml`` is required but missing."""

    code = "CONFIG_NOT_FOUND"
    suggestion = "Run `knowmap init` to create a project configuration."

    def __init__(self, path: str | None = None) -> None:
        super().__init__(
            f"Configuration file not found: {path}" if path else "Configuration file .knowmap.yaml not found"
        )
        self.path = path


class ConfigInvalidError(KnowmapError):
    """Raised when the project configuration fails parsing or validation."""

    code = "CONFIG_INVALID"
    suggestion = "Check the structure of .knowmap.yaml (project.name is required)."

    def __init__(self, details: str) -> None:
        super().__init__(f"Invalid configuration: {details}")
        self.details = details


class AlreadyExistsError(KnowmapError):
    code = "ALREADY_EXISTS"
    suggestion = "Remove the existing file first if you want to re-initialize."

    def __init__(self, target: str) -> None:
        super().__init__(f"{target} already exists")
        self.target = target


class PrerequisiteError(KnowmapError):
    """Raised when a workflow depends on an artifact that has not been produced yet."""

    code = "PREREQUISITE_ERROR"
    suggestion = "Complete the prerequisite step first."

    def __init__(self, missing: str, suggestion: str | None = None) -> None:
        super().__init__(f"Prerequisite not met: {missing}", suggestion=suggestion)
        self.missing = missing


class ScanError(KnowmapError):
    code = "SCAN_ERROR"
    suggestion = "Check that the directory exists and is readable."

    def __init__(self, path: str, cause: str | None = None) -> None:
        super().__init__(_with_cause(f"Scan failed: {path}", cause))
        self.path = path
        self.cause = cause


class WriteError(KnowmapError):
    code = "WRITE_ERROR"
    suggestion = "Check that the target path is writable."

    def __init__(self, path: str, cause: str | None = None) -> None:
        super().__init__(_with_cause(f"Write failed: {path}", cause))
        self.path = path
        self.cause = cause


class RegistryParseError(KnowmapError):
    """Raised when the module registry is malformed.

    Call sites that only use the registry as optional context catch this and
    carry on as if the registry were absent.
    """

    code = "REGISTRY_PARSE_ERROR"
    suggestion = "Fix module-map.yaml or delete it and run `knowmap steering` again."

    def __init__(self, path: str, cause: str | None = None) -> None:
        super().__init__(_with_cause(f"Could not parse module registry: {path}", cause))
        self.path = path
        self.cause = cause


class TemplateError(KnowmapError):
    code = "TEMPLATE_ERROR"
    suggestion = "Check that the template exists and renders with the given context."

    def __init__(self, template_name: str, cause: str | None = None) -> None:
        super().__init__(_with_cause(f"Template failed: {template_name}", cause))
        self.template_name = template_name
        self.cause = cause


class ModuleDetectionError(KnowmapError):
    code = "MODULE_DETECTION_ERROR"
    suggestion = "Check the project layout, or write module-map.yaml by hand."

    def __init__(self, cause: str | None = None) -> None:
        super().__init__(f"Module detection failed: {cause}" if cause else "Module detection failed")
        self.cause = cause
