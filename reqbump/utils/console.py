"""
Console output for the reqbump CLI, built on Rich.

Only commands print. The engine reports through :mod:`reqbump.utils.logger`
and returns outcome values; commands turn those into status lines, tables
and JSON here.

Requirement text routinely contains square brackets (``[1.0,2.0)``,
``[23.3-jre]``), which Rich would read as markup. Status lines and JSON are
therefore printed with markup disabled, and table cells built from
requirement text must be passed through :func:`rich.markup.escape` by the
caller. Cell labels from :func:`colorize_outcome` and
:func:`colorize_update_type` are markup on purpose.
"""

from __future__ import annotations

import os
import sys
import json
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

REQBUMP_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "requirement": "bold magenta",
        # Outcome labels
        "updated": "green",
        "unchanged": "dim",
        "unfixable": "red",
        # Update types
        "major": "red",
        "minor": "yellow",
        "patch": "green",
        "new": "cyan",
        "downgrade": "red",
        "update": "yellow",
    }
)

_OUTCOME_STYLES = frozenset({"updated", "unchanged", "unfixable"})
_UPDATE_TYPE_STYLES = frozenset({"major", "minor", "patch", "new", "downgrade", "update"})

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if stdout is a terminal and nothing asks for plain output."""
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                _console = Console(
                    theme=REQBUMP_THEME,
                    no_color=not _should_use_color(),
                    highlight=False,
                )
    return _console


def reconfigure_console() -> None:
    """Forget the cached console; the next print builds a new one.

    Needed after ``--no-color`` changes ``NO_COLOR`` and whenever stdout is
    swapped (Click's test runner does this).
    """
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the Rich console used by the print helpers."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status lines
# ---------------------------------------------------------------------------


def _status(style: str, prefix: str, message: str) -> None:
    _get_console().print(f"{prefix} {message}", style=style, markup=False)


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success line, e.g. ``[OK] Rewrote 2 requirement(s)``."""
    _status("success", prefix, message)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error line."""
    _status("error", prefix, message)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning line, e.g. for unfixable requirements."""
    _status("warning", prefix, message)


# ---------------------------------------------------------------------------
# Tables and JSON
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render rows as a Rich table.

    Args:
        data: One dict per row; nothing is printed when empty.
        headers: Column order. Defaults to the keys of the first row.
        title: Table title (markup; escape requirement text).
        column_styles: Per-column ``style``, ``justify``, ``no_wrap`` and
            ``overflow`` settings.
        row_styler: Returns a style for a row, or ``None``.
    """
    if not data:
        return

    headers = headers or list(data[0])
    column_styles = column_styles or {}

    table = Table(title=title, show_header=True, header_style="bold")
    for header in headers:
        settings = column_styles.get(header, {})
        table.add_column(
            header,
            style=settings.get("style"),
            justify=settings.get("justify", "default"),
            no_wrap=settings.get("no_wrap", False),
            overflow=settings.get("overflow", "fold"),
        )

    for row in data:
        table.add_row(
            *(str(row.get(header, "")) for header in headers),
            style=row_styler(row) if row_styler else None,
        )

    _get_console().print(table)


def print_json(data: Any) -> None:
    """Print ``data`` as indented JSON with no styling or wrapping."""
    _get_console().print(
        json.dumps(data, indent=2),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


# ---------------------------------------------------------------------------
# Cell labels
# ---------------------------------------------------------------------------


def _styled(label: str, known: frozenset) -> str:
    style = label.lower()
    return f"[{style}]{label}[/{style}]" if style in known else label


def colorize_update_type(update_type: str) -> str:
    """Return ``update_type`` (``major``, ``patch``...) as themed markup.

    Labels without a theme style (``same``, ``unknown``) are returned as is.
    """
    return _styled(update_type, _UPDATE_TYPE_STYLES)


def colorize_outcome(outcome: str) -> str:
    """Return an outcome label (``updated``, ``unchanged``, ``unfixable``) as themed markup."""
    return _styled(outcome, _OUTCOME_STYLES)
