"""Shared console helpers for start-vibe-project.

Every operator-facing line goes through the single Rich ``console`` defined
here (or ``err_console`` for warnings and errors), so tests can capture or
silence output in one place.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


def safe_json(context: dict[str, Any]) -> str:
    """Serialise a log context compactly, falling back to ``repr``."""
    try:
        return json.dumps(context, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(context)


def format_command(command: str, args: list[str]) -> str:
    """Render a command line for logs and manual-retry hints."""
    return " ".join([command, *args])


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_panel(message: str, title: str, style: str = "bright_cyan") -> None:
    console.print(Panel(message, title=f"[bold]{title}[/bold]", border_style=style))


def print_error(message: str) -> None:
    """Print a red error message."""
    err_console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    err_console.print(f"[bold yellow]{message}[/bold yellow]")
