"""Terminal output helpers for the tracker CLI."""

from __future__ import annotations

from contextlib import AbstractContextManager, nullcontext
from typing import Any, Protocol

from colorama import init as colorama_init
from rich.console import Console

from tracker.color import bright_white, dim_white, should_use_color
from tracker.data import ResolvedWindow
from tracker.dates import format_clock_time


MISSING_VALUE = "-"


class OutputArgs(Protocol):
    """Protocol for arguments that control colored output."""

    color_flag: bool | None


def setup_output(args: OutputArgs) -> bool:
    """Resolve color support and initialise colorama when colors are on."""
    color_enabled = should_use_color(args.color_flag)
    if color_enabled:
        colorama_init(autoreset=True, strip=False)
    return color_enabled


def build_console(color_enabled: bool) -> Console:
    """Build the console used for all command output."""
    return Console(
        no_color=not color_enabled,
        force_terminal=color_enabled or None,
        highlight=False,
        soft_wrap=True,
    )


def processing_status(console: Console, color_enabled: bool) -> AbstractContextManager[Any]:
    """Show a spinner while notes are scanned, only on color terminals."""
    if not color_enabled:
        return nullcontext()
    return console.status("Processing notes...")


def print_output(console: Console, text: str, color_enabled: bool, end: str = "\n") -> None:
    """Print text, interpreting Rich markup only when colors are on."""
    console.print(text, markup=color_enabled, highlight=False, end=end)


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` and with at most four decimals."""
    if value.is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def format_value(value: float | None, is_time: bool) -> str:
    """Render one dataset cell."""
    if value is None:
        return MISSING_VALUE
    if is_time:
        return format_clock_time(value)
    return format_number(value)


def format_window_header(window: ResolvedWindow, color_enabled: bool) -> str:
    """Return the heading printed above the series table."""
    span = f"{window.start.isoformat()} to {window.end.isoformat()}"
    days = f"({len(window)} days)"
    return f"{bright_white(span, color_enabled)} {dim_white(days, color_enabled)}"
