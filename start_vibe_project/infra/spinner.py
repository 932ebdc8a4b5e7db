"""Visual progress indicator for long-running steps."""

from __future__ import annotations

from rich.console import Console
from rich.status import Status

from ..utils import console as default_console


class SpinnerHandle:
    """A running spinner; ``stop`` prints the final line."""

    def __init__(self, console: Console, message: str) -> None:
        self.console = console
        self.message = message
        self._status: Status | None = None
        if console.is_terminal:
            self._status = console.status(message, spinner="dots")
            self._status.start()
        else:
            console.print(message, highlight=False)

    def update(self, message: str) -> None:
        self.message = message
        if self._status is not None:
            self._status.update(message)

    def stop(self, final_message: str | None = None) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
        if final_message:
            self.console.print(final_message, highlight=False)


class Spinner:
    """Starts spinners on a shared console (plain lines when not a TTY)."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or default_console

    def start(self, message: str) -> SpinnerHandle:
        return SpinnerHandle(self.console, message)
