"""
Console output utilities for catalogkeeper using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or debug output, use :mod:`catalogkeeper.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table / confirm: structured or interactive CLI output
- Logging should never go through this module
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional, Sequence

from rich.text import Text
from rich.table import Table
from rich.theme import Theme
from rich.console import Console

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

CATALOGKEEPER_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "update.major": "red",
        "update.minor": "yellow",
        "update.patch": "green",
        "update.snapshot": "magenta",
        "update.other": "cyan",
    }
)

#: Theme style used for each update type returned by ``get_update_type``.
UPDATE_TYPE_STYLES: Dict[str, str] = {
    "major": "update.major",
    "minor": "update.minor",
    "patch": "update.patch",
    "snapshot": "update.snapshot",
    "update": "update.other",
    "downgrade": "update.major",
}

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_color_override: Optional[bool] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    if _color_override is not None:
        return _color_override
    if os.environ.get("NO_COLOR"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=CATALOGKEEPER_THEME,
                    no_color=not use_color,
                    highlight=False,
                    soft_wrap=True,
                )
    return _console


def reconfigure_console(color: Optional[bool] = None) -> None:
    """Drop the console so the next output picks up new settings.

    Args:
        color: Force colors on or off; ``None`` goes back to detecting
            them from ``NO_COLOR`` and the terminal.
    """
    global _console, _color_override
    with _console_lock:
        _console = None
        _color_override = color


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def _status(message: str, style: str, prefix: Optional[str]) -> None:
    text = f"{prefix} {message}" if prefix else message
    _get_console().print(text, style=style, markup=False)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _status(message, "success", prefix)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _status(message, "error", prefix)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _status(message, "warning", prefix)


def print_plain(message: str = "") -> None:
    """Print text as is, without markup or styling."""
    _get_console().print(message, markup=False, highlight=False)


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    rows: Sequence[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, str]] = None,
) -> None:
    """Render rows of data as a Rich table.

    Cells are printed verbatim: strings such as version ranges or
    remote version text are never parsed as Rich markup. Pass a
    :class:`~rich.text.Text` (as returned by :func:`colorize_update_type`)
    to style a single cell.

    Args:
        rows: Row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Style per column header.
    """
    if not rows:
        return

    if headers is None:
        headers = list(rows[0].keys())

    table = Table(title=title, caption=caption, header_style="bold")
    styles = column_styles or {}
    for header in headers:
        table.add_column(header, style=styles.get(header), overflow="fold")

    for row in rows:
        table.add_row(*(_cell(row.get(header, "")) for header in headers))

    _get_console().print(table)


def _cell(value: Any) -> Text:
    return value if isinstance(value, Text) else Text(str(value))


def colorize_update_type(update_type: str) -> Text:
    """Return *update_type* as text styled with its theme style."""
    return Text(update_type, style=UPDATE_TYPE_STYLES.get(update_type.lower(), ""))


# ---------------------------------------------------------------------------
# User interaction
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Ask a yes/no question on the console.

    ``y``/``yes`` and ``n``/``no`` answer the question; an empty or
    unrecognized answer gives *default*; Ctrl+C or EOF gives ``False``.
    """
    console = _get_console()
    suffix = " [Y/n]: " if default else " [y/N]: "
    console.print(f"{message}{suffix}", end="", style="info", markup=False)

    try:
        response = input().strip().lower()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    if response in ("y", "yes"):
        return True
    if response in ("n", "no"):
        return False
    return default
