"""Validation and parsing helpers for CLI arguments."""

from __future__ import annotations

from datetime import date

import typer

from tracker.data import SearchType
from tracker.dates import has_date_tokens, parse_date
from tracker.errors import QueryDefinitionError
from tracker.output_format import OutputFormat
from tracker.query_builder import parse_search_type


def parse_bound_date(date_str: str | None, date_format: str, arg_name: str) -> date | None:
    """Parse a start or end date given on the command line.

    The date may be written in the run's date format or as an ISO date.

    Args:
        date_str: Date string, or None when the bound is not set
        date_format: Moment-style date format of the notes
        arg_name: Argument name for error messages

    Returns:
        Parsed date, or None when no bound was given

    Raises:
        typer.BadParameter: If the string is not a valid date
    """
    if date_str is None or not date_str.strip():
        return None

    text = date_str.strip()
    parsed = parse_date(text, date_format)
    if parsed is not None:
        return parsed

    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    raise typer.BadParameter(
        f"{arg_name} must be in the format {date_format} or YYYY-MM-DD\nGot: '{date_str}'"
    )


def validate_date_format(date_format: str) -> str:
    """Check that a date format names at least one date component.

    Raises:
        typer.BadParameter: If the format is empty or has no date tokens
    """
    if not date_format or not date_format.strip():
        raise typer.BadParameter("--date-format cannot be empty")
    if not has_date_tokens(date_format):
        raise typer.BadParameter(
            f"--date-format must contain a year, month or day token, got '{date_format}'"
        )
    return date_format


def validate_output_format(out: str) -> OutputFormat:
    """Map the --out value to an OutputFormat.

    Raises:
        typer.BadParameter: If the format is not supported
    """
    normalized = out.strip().lower()
    try:
        return OutputFormat(normalized)
    except ValueError as err:
        choices = ", ".join(output_format.value for output_format in OutputFormat)
        raise typer.BadParameter(f"--out must be one of: {choices}") from err


def parse_search_types(values: list[str]) -> list[SearchType]:
    """Parse --search-type values.

    Raises:
        typer.BadParameter: If a search type is unknown
    """
    try:
        return [parse_search_type(value) for value in values]
    except QueryDefinitionError as err:
        raise typer.BadParameter(str(err)) from err


def validate_separators(separators: list[str]) -> list[str]:
    """Reject empty --separator values."""
    if any(not separator for separator in separators):
        raise typer.BadParameter("--separator cannot be empty")
    return separators


def validate_x_datasets(x_datasets: list[int], target_count: int) -> list[int]:
    """Check --x-dataset indices against the number of search targets."""
    for position in x_datasets:
        if not 0 <= position < target_count:
            raise typer.BadParameter(
                f"--x-dataset must be between 0 and {target_count - 1}, got {position}"
            )
    return x_datasets
