"""Error taxonomy for start-vibe-project.

Errors are ordinary exceptions so they carry tracebacks and can be raised at
the CLI boundary, but inside the pipeline they travel as values inside
``Err``.  Each kind has a stable ``code`` and a ``context`` mapping with the
details an operator needs to act on the failure.

Operational errors describe expected failure modes (bad input, a missing
file, a failing external command).  ``InternalError`` is the one
non-operational kind: it signals a packaging or programming defect.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn


class AppError(Exception):
    """Base class for every error produced by start-vibe-project."""

    code: str = "APP_ERROR"

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        is_operational: bool = True,
    ) -> None:
        self.message = message
        self.context: dict[str, Any] = dict(context or {})
        self.is_operational = is_operational
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation for logs and progress files."""
        return {
            "name": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }

    def wrap(self, operation: str) -> "AppError":
        """Copy of this error, same kind, whose message names the failed *operation*."""
        wrapped = type(self).__new__(type(self))
        wrapped.__dict__.update(self.__dict__)
        wrapped.message = f"{operation} failed: {self.message}"
        wrapped.context = {**self.context, "operation": operation}
        wrapped.args = (wrapped.message,)
        wrapped.__cause__ = self
        return wrapped

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class ValidationError(AppError):
    """Invalid user input or configuration."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, context)


class FileSystemError(AppError):
    """A filesystem operation failed."""

    code = "FILESYSTEM_ERROR"

    def __init__(self, message: str, path: str, context: dict[str, Any] | None = None) -> None:
        self.path = str(path)
        super().__init__(message, {**(context or {}), "path": self.path})


class PathSecurityError(AppError):
    """A path escapes the directory it is supposed to stay inside."""

    code = "PATH_SECURITY_ERROR"

    def __init__(self, message: str, path: str, context: dict[str, Any] | None = None) -> None:
        self.path = str(path)
        super().__init__(message, {**(context or {}), "path": self.path})


class CommandExecutionError(AppError):
    """An external command could not be run or exited unsuccessfully."""

    code = "COMMAND_EXECUTION_ERROR"

    def __init__(
        self,
        message: str,
        command: str,
        exit_code: int | None = None,
        stderr: str = "",
        context: dict[str, Any] | None = None,
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(
            message,
            {**(context or {}), "command": command, "exit_code": exit_code, "stderr": stderr},
        )


class TemplateLoadError(AppError):
    """A packaged template or asset could not be loaded or rendered."""

    code = "TEMPLATE_LOAD_ERROR"

    def __init__(
        self, message: str, template_path: str, context: dict[str, Any] | None = None
    ) -> None:
        self.template_path = template_path
        super().__init__(message, {**(context or {}), "template_path": template_path})


class SkillInstallError(AppError):
    """Skill installation selected nothing or failed for one or more sources."""

    code = "SKILL_INSTALL_ERROR"

    def __init__(
        self, message: str, skill_name: str, context: dict[str, Any] | None = None
    ) -> None:
        self.skill_name = skill_name
        super().__init__(message, {**(context or {}), "skill_name": skill_name})


class OperationCancelledError(AppError):
    """The operator or a cancellation signal stopped the operation."""

    code = "OPERATION_CANCELLED"

    def __init__(self, message: str = "Operation cancelled by user") -> None:
        super().__init__(message)


class InternalError(AppError):
    """Environment or packaging defect; never the user's fault."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, context, is_operational=False)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def assert_never(value: Any, message: str | None = None) -> NoReturn:
    """Fail an exhaustiveness check."""
    try:
        rendered = json.dumps(value)
    except (TypeError, ValueError):
        rendered = repr(value)
    raise InternalError(message or f"Unexpected value: {rendered}")


def is_app_error(error: object) -> bool:
    return isinstance(error, AppError)


def normalize_error(error: BaseException | object) -> BaseException:
    """Coerce any caught value into an exception instance."""
    if isinstance(error, BaseException):
        return error
    return Exception(str(error))


def error_message(error: object) -> str:
    """Best-effort human-readable message for any error value."""
    if isinstance(error, AppError):
        return error.message
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return str(error)


__all__ = [
    "AppError",
    "CommandExecutionError",
    "FileSystemError",
    "InternalError",
    "OperationCancelledError",
    "PathSecurityError",
    "SkillInstallError",
    "TemplateLoadError",
    "ValidationError",
    "assert_never",
    "error_message",
    "is_app_error",
    "normalize_error",
]
