"""User-facing console output.

All terminal output goes through these helpers so styling stays in one
place. Text is markup-escaped before rendering; model ids and file paths
routinely contain square brackets that Rich would otherwise parse as tags.

Usage:
    from omo_config.messaging import emit_success, emit_table

    emit_success("Configuration saved")
    emit_table("Agents", ["Agent", "Model"], [["oracle", "openai/gpt-5.2"]])
"""

from enum import Enum
from typing import Any, Dict, Iterable, Optional, Sequence

from rich.console import Console
from rich.markup import escape as escape_rich_markup
from rich.table import Table


class MessageLevel(str, Enum):
    """Severity level for text messages."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


DEFAULT_STYLES: Dict[MessageLevel, str] = {
    MessageLevel.ERROR: "bold red",
    MessageLevel.WARNING: "yellow",
    MessageLevel.SUCCESS: "green",
    MessageLevel.INFO: "white",
    MessageLevel.DEBUG: "dim",
}

LEVEL_PREFIXES: Dict[MessageLevel, str] = {
    MessageLevel.ERROR: "✗ ",
    MessageLevel.WARNING: "⚠ ",
    MessageLevel.SUCCESS: "✓ ",
    MessageLevel.INFO: "ℹ ",
    MessageLevel.DEBUG: "• ",
}

_console = Console(soft_wrap=True)
_error_console = Console(stderr=True, soft_wrap=True)


def emit(level: MessageLevel, text: Any, console: Optional[Console] = None) -> None:
    """Print one styled line with the level's prefix."""
    if console is None:
        console = _error_console if level == MessageLevel.ERROR else _console
    style = DEFAULT_STYLES.get(level, "white")
    prefix = LEVEL_PREFIXES.get(level, "")
    console.print(f"{prefix}{escape_rich_markup(str(text))}", style=style)


def emit_info(text: Any) -> None:
    emit(MessageLevel.INFO, text)


def emit_success(text: Any) -> None:
    emit(MessageLevel.SUCCESS, text)


def emit_warning(text: Any) -> None:
    emit(MessageLevel.WARNING, text)


def emit_error(text: Any) -> None:
    emit(MessageLevel.ERROR, text)


def emit_debug(text: Any) -> None:
    emit(MessageLevel.DEBUG, text)


def emit_plain(text: Any) -> None:
    """Print text without prefix or markup (used for --json output)."""
    _console.print(str(text), markup=False, highlight=False, emoji=False)


def emit_table(
    title: Optional[str],
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
) -> None:
    """Render rows as a table; None cells print as a dash."""
    table = Table(title=escape_rich_markup(title) if title else None)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("-" if cell is None else escape_rich_markup(str(cell)) for cell in row))
    _console.print(table)
