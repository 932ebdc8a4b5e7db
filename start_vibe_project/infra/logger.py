"""Console logging sink.

Structured log calls (message plus optional context mapping) rendered
through Rich.  The threshold comes from ``Settings.log_level``; errors are
always shown.
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape

from ..utils import console as default_console
from ..utils import err_console as default_err_console
from ..utils import safe_json

LEVELS: dict[str, int] = {"debug": 10, "info": 20, "warn": 30, "error": 40}

_STYLES: dict[str, str] = {
    "debug": "dim",
    "info": "cyan",
    "warn": "yellow",
    "error": "bold red",
}


class ConsoleLogger:
    """Leveled logger writing ``[LEVEL] message {context}`` lines."""

    def __init__(
        self,
        level: str = "error",
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level!r}")
        self.level = level
        self.console = console or default_console
        self.err_console = err_console or default_err_console

    def is_enabled(self, level: str) -> bool:
        return level == "error" or LEVELS[level] >= LEVELS[self.level]

    def debug(self, message: str, context: dict[str, Any] | None = None) -> None:
        self._emit("debug", message, context)

    def info(self, message: str, context: dict[str, Any] | None = None) -> None:
        self._emit("info", message, context)

    def warn(self, message: str, context: dict[str, Any] | None = None) -> None:
        self._emit("warn", message, context)

    def error(self, message: str, context: dict[str, Any] | None = None) -> None:
        self._emit("error", message, context)

    def _emit(self, level: str, message: str, context: dict[str, Any] | None) -> None:
        if not self.is_enabled(level):
            return
        style = _STYLES[level]
        line = f"[{style}]\\[{level.upper()}][/{style}] {escape(message)}"
        if context:
            line += f" [dim]{escape(safe_json(context))}[/dim]"
        target = self.err_console if level in ("warn", "error") else self.console
        target.print(line, highlight=False)
