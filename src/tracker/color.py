"""Color support for CLI output using Rich markup."""

import sys

from rich.markup import escape


TIME_VALUE_STYLE = "bold blue"
NUMBER_VALUE_STYLE = "bold green"
MISSING_VALUE_STYLE = "dim white"
HEADER_STYLE = "bold"


def should_use_color(color_flag: bool | None) -> bool:
    """Determine if color should be used based on flag and TTY detection.

    Args:
        color_flag: Explicit color preference (True/False) or None for auto-detect

    Returns:
        True if colors should be used, False otherwise
    """
    if color_flag is None:
        return sys.stdout.isatty()
    return color_flag


def colorize(text: str, style: str, enabled: bool) -> str:
    """Wrap text in Rich markup when colors are on, escaping any brackets in it."""
    if not enabled:
        return text
    return f"[{style}]{escape(text)}[/]"


def bright_white(text: str, enabled: bool) -> str:
    """Apply bright white color to text."""
    return colorize(text, "bold white", enabled)


def dim_white(text: str, enabled: bool) -> str:
    """Apply dim white color to text."""
    return colorize(text, MISSING_VALUE_STYLE, enabled)


def header_style(enabled: bool) -> str:
    """Return the style of table headers."""
    return HEADER_STYLE if enabled else ""


def cell_style(value: float | None, is_time: bool, enabled: bool) -> str:
    """Return the style for a dataset value cell.

    Clock time series are shown in blue, plain numbers in green and days
    without data dimmed.
    """
    if not enabled:
        return ""
    if value is None:
        return MISSING_VALUE_STYLE
    return TIME_VALUE_STYLE if is_time else NUMBER_VALUE_STYLE
