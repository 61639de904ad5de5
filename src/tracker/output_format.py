"""Output format abstraction and format-specific renderers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from tracker.color import cell_style, header_style
from tracker.data import AggregationResult, Dataset
from tracker.tui import format_value, format_window_header, print_output


DEFAULT_OUTPUT_THEME = "github-dark"


class OutputFormat(StrEnum):
    """Supported output formats."""

    TEXT = "text"
    JSON = "json"


class SeriesOutputFormatter(Protocol):
    """Formatter interface for the series command."""

    def prepare(self, result: AggregationResult, color_enabled: bool) -> PreparedOutput:
        """Prepare aggregated datasets for rendering."""
        ...


@dataclass(frozen=True)
class OutputOperation:
    """One prepared output operation."""

    kind: str
    text: str | None = None
    renderable: object | None = None
    markup: bool = False
    color_enabled: bool = False
    end: str = "\n"


@dataclass(frozen=True)
class PreparedOutput:
    """Prepared output operations ready for console rendering."""

    operations: tuple[OutputOperation, ...]


class OutputFormatError(RuntimeError):
    """Raised when output formatting fails."""


_NO_RESULTS = PreparedOutput(
    operations=(OutputOperation(kind="console_print", text="No results", markup=False),)
)


def visible_datasets(result: AggregationResult) -> list[Dataset]:
    """Return the datasets worth showing; table date columns only provide the x axis."""
    return [dataset for dataset in result.datasets if not dataset.query.used_as_x_dataset]


def _write_plain_output(console: Console, text: str) -> None:
    """Write plain output directly to console stream."""
    console.file.write(f"{text}\n")
    console.file.flush()


def print_prepared_output(console: Console, prepared_output: PreparedOutput) -> None:
    """Print already prepared output operations."""
    for operation in prepared_output.operations:
        if operation.kind == "plain_write":
            if operation.text is not None:
                _write_plain_output(console, operation.text)
            continue
        if operation.kind == "print_output":
            if operation.text is not None:
                print_output(
                    console,
                    operation.text,
                    operation.color_enabled,
                    end=operation.end,
                )
            continue
        if operation.renderable is not None:
            console.print(operation.renderable)
            continue
        console.print(operation.text if operation.text is not None else "", markup=operation.markup)


def _prepare_output(text: str, color_enabled: bool, language: str) -> PreparedOutput:
    """Prepare output with syntax highlighting when colors are on."""
    if color_enabled:
        return PreparedOutput(
            operations=(
                OutputOperation(
                    kind="console_print",
                    renderable=Syntax(
                        text,
                        language,
                        theme=DEFAULT_OUTPUT_THEME,
                        line_numbers=False,
                        word_wrap=True,
                    ),
                ),
            )
        )
    return PreparedOutput(operations=(OutputOperation(kind="plain_write", text=text),))


def build_series_table(datasets: list[Dataset], color_enabled: bool) -> Table:
    """Build a table with one row per day and one column per dataset."""
    table = Table(show_edge=False, header_style=header_style(color_enabled))
    table.add_column("date", no_wrap=True)
    for dataset in datasets:
        table.add_column(Text(dataset.query.target), justify="right", no_wrap=True)

    for row_index, day in enumerate(datasets[0].dates()):
        cells: list[Text] = [Text(day.isoformat())]
        for dataset in datasets:
            _, value = dataset.values[row_index]
            style = cell_style(value, dataset.using_time_value, color_enabled)
            cells.append(Text(format_value(value, dataset.using_time_value), style=style))
        table.add_row(*cells)
    return table


class TextSeriesOutputFormatter:
    """Table output formatter for the series command."""

    def prepare(self, result: AggregationResult, color_enabled: bool) -> PreparedOutput:
        datasets = visible_datasets(result)
        if not datasets:
            return _NO_RESULTS

        return PreparedOutput(
            operations=(
                OutputOperation(
                    kind="print_output",
                    text=format_window_header(result.window, color_enabled),
                    color_enabled=color_enabled,
                ),
                OutputOperation(
                    kind="console_print",
                    renderable=build_series_table(datasets, color_enabled),
                ),
            )
        )


def series_payload(result: AggregationResult) -> dict[str, object]:
    """Convert an aggregation result to its JSON shape."""
    return {
        "start": result.window.start.isoformat(),
        "end": result.window.end.isoformat(),
        "datasets": [
            {
                "id": dataset.query.id,
                "target": dataset.query.target,
                "search_type": str(dataset.query.search_type),
                "using_time_value": dataset.using_time_value,
                "values": [
                    {"date": day.isoformat(), "value": value} for day, value in dataset.values
                ],
            }
            for dataset in visible_datasets(result)
        ],
    }


class JsonSeriesOutputFormatter:
    """JSON output formatter for the series command."""

    def prepare(self, result: AggregationResult, color_enabled: bool) -> PreparedOutput:
        try:
            text = json.dumps(series_payload(result), ensure_ascii=True, allow_nan=False)
        except ValueError as exc:
            raise OutputFormatError(str(exc)) from exc
        return _prepare_output(text, color_enabled, OutputFormat.JSON)


_TEXT_SERIES_FORMATTER = TextSeriesOutputFormatter()
_JSON_SERIES_FORMATTER = JsonSeriesOutputFormatter()


def get_series_formatter(output_format: str) -> SeriesOutputFormatter:
    """Return series formatter for selected output format.

    Raises:
        OutputFormatError: If the format is not supported
    """
    normalized_output = output_format.strip().lower()
    if normalized_output == OutputFormat.TEXT:
        return _TEXT_SERIES_FORMATTER
    if normalized_output == OutputFormat.JSON:
        return _JSON_SERIES_FORMATTER
    raise OutputFormatError(f"Unsupported output format: {output_format}")
