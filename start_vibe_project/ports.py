"""Capability contracts between the pipeline and the outside world.

The pipeline, the skill installer and the checksum verifier depend on these
protocols only; ``infra`` provides the production implementations and the
tests provide doubles.  Every fallible operation returns a ``Result``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Literal,
    Optional,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from .errors import AppError, CommandExecutionError, FileSystemError, TemplateLoadError
    from .infra.shell import CommandOutput
    from .models import ProjectConfig
    from .result import Result

ProgressStatusName = Literal["start", "success", "error"]
ProgressCallback = Callable[[str, ProgressStatusName], None]


@runtime_checkable
class LoggerPort(Protocol):
    """Leveled sink taking a message and an optional context mapping."""

    def debug(self, message: str, context: dict[str, Any] | None = None) -> None: ...

    def info(self, message: str, context: dict[str, Any] | None = None) -> None: ...

    def warn(self, message: str, context: dict[str, Any] | None = None) -> None: ...

    def error(self, message: str, context: dict[str, Any] | None = None) -> None: ...


@runtime_checkable
class FileReaderPort(Protocol):
    """The read-only slice of the filesystem the template loader needs."""

    async def read_file(self, path: str | Path) -> Result[str, FileSystemError]: ...


@runtime_checkable
class FileSystemPort(FileReaderPort, Protocol):
    async def read_bytes(self, path: str | Path) -> Result[bytes, FileSystemError]: ...

    async def write_file(self, path: str | Path, content: str) -> Result[None, AppError]: ...

    async def mkdir(
        self, path: str | Path, recursive: bool = True
    ) -> Result[None, FileSystemError]: ...

    def exists(self, path: str | Path) -> bool: ...

    async def is_directory(self, path: str | Path) -> Result[bool, FileSystemError]: ...

    async def read_dir(self, path: str | Path) -> Result[list[str], FileSystemError]: ...

    async def copy_file(self, src: str | Path, dest: str | Path) -> Result[None, AppError]: ...


@runtime_checkable
class TemplateLoaderPort(Protocol):
    async def load_template(self, logical_path: str) -> Result[str, TemplateLoadError]: ...

    async def load_file_asset(self, logical_path: str) -> Result[str, TemplateLoadError]: ...

    async def load_data(self, logical_path: str) -> Result[str, TemplateLoadError]: ...


@runtime_checkable
class ShellPort(Protocol):
    async def run(
        self,
        command: str,
        args: list[str],
        cwd: str | Path,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Result[CommandOutput, CommandExecutionError]: ...


@runtime_checkable
class SpinnerHandlePort(Protocol):
    def update(self, message: str) -> None: ...

    def stop(self, final_message: str | None = None) -> None: ...


@runtime_checkable
class SpinnerPort(Protocol):
    def start(self, message: str) -> SpinnerHandlePort: ...


@runtime_checkable
class ProgressTrackerPort(Protocol):
    """Observer of pipeline steps; each call resolves once its state is persisted."""

    def record_step(self, step: str) -> Awaitable[None]: ...

    def mark_error(self, error: object) -> Awaitable[None]: ...

    def mark_cancelled(self) -> Awaitable[None]: ...

    def mark_completed(self) -> Awaitable[None]: ...

    async def flush(self) -> None: ...


@runtime_checkable
class SkillInstallerPort(Protocol):
    async def install(
        self,
        config: ProjectConfig,
        target_dir: str | Path,
        skills_dir: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Result[None, AppError]: ...


__all__ = [
    "FileReaderPort",
    "FileSystemPort",
    "LoggerPort",
    "ProgressCallback",
    "ProgressStatusName",
    "ProgressTrackerPort",
    "ShellPort",
    "SkillInstallerPort",
    "SpinnerHandlePort",
    "SpinnerPort",
    "TemplateLoaderPort",
]
