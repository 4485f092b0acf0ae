"""Terminal messages for preview-cli.

Every message goes through the module-level ``console`` so that
``--no-color`` (see :func:`set_no_color`) and tests can swap it.
"""

from __future__ import annotations

import os
from typing import Any

from rich.console import Console

# Message kind -> Rich markup prefix
MARKERS = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]⚠[/yellow] ",
    "info": "",
}


def create_console(no_color: bool = False) -> Console:
    """Build a console; colors are off if ``no_color`` or NO_COLOR is set."""
    plain = no_color or "NO_COLOR" in os.environ
    return Console(no_color=plain, force_terminal=False if plain else None)


console = create_console()


def set_no_color(no_color: bool) -> None:
    """Replace the module console, e.g. from the ``--no-color`` flag."""
    global console
    console = create_console(no_color=no_color)


def _emit(kind: str, message: str, **kwargs: Any) -> None:
    console.print(f"{MARKERS[kind]}{message}", **kwargs)


def success(message: str, **kwargs: Any) -> None:
    """Report a finished step.

    Example:
        >>> success("Compiled web01 in production and prod_v2 to .preview")
        ✓ Compiled web01 in production and prod_v2 to .preview
    """
    _emit("success", message, **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Report a failure the user has to act on."""
    _emit("error", message, **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    _emit("warning", message, **kwargs)


def info(message: str, **kwargs: Any) -> None:
    _emit("info", message, **kwargs)
