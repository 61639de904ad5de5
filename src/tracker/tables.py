"""Markdown table lookup and extraction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from tracker.data import DateRange, TableReference, ValueStore
from tracker.dates import format_date, parse_date
from tracker.values import parse_float, select_value


logger = logging.getLogger("tracker")


@dataclass(frozen=True)
class MarkdownTable:
    """Header cells and data rows of one markdown table."""

    header: list[str]
    rows: list[list[str]]

    @property
    def width(self) -> int:
        """Number of columns defined by the header."""
        return len(self.header)


def split_row(line: str) -> list[str]:
    """Split a table line into trimmed cells, ignoring outer pipes."""
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def find_table_blocks(text: str) -> list[list[str]]:
    """Group consecutive lines containing a pipe into table blocks."""
    blocks: list[list[str]] = []
    current: list[str] = []
    for line in text.splitlines():
        if "|" in line:
            current.append(line)
            continue
        if current:
            blocks.append(current)
            current = []
    if current:
        blocks.append(current)
    return blocks


def select_table(text: str, table_index: int) -> MarkdownTable | None:
    """Return the table at a zero-based index, or None when there is no such table.

    The first line of a block is the header and the second its separator;
    everything after is data.
    """
    blocks = find_table_blocks(text)
    if not 0 <= table_index < len(blocks):
        return None
    block = blocks[table_index]
    if len(block) < 2:
        return None
    return MarkdownTable(header=split_row(block[0]), rows=[split_row(line) for line in block[2:]])


def _row_dates(table: MarkdownTable, column: int, date_format: str) -> list[date | None]:
    dates: list[date | None] = []
    for row in table.rows:
        day = parse_date(row[column], date_format) if column < len(row) else None
        if day is None:
            logger.info("Skipping table row without a valid date: %s", " | ".join(row))
        dates.append(day)
    return dates


def extract_table(
    text: str,
    reference: TableReference,
    date_format: str,
    store: ValueStore,
    date_range: DateRange,
) -> int:
    """Store y values of a table keyed by the dates in its x column.

    Args:
        text: Full text of the document holding the table
        reference: Table location with its x query and y queries
        date_format: Format of the dates in the x column
        store: Store receiving the observations
        date_range: Tracker updated with every valid x date

    Returns:
        Number of observations stored
    """
    if reference.x_query is None:
        return 0

    table = select_table(text, reference.table_index)
    if table is None or not table.rows:
        logger.info("No data rows in table %d of %s", reference.table_index, reference.file_path)
        return 0

    x_column = reference.x_query.accessor(1)
    if x_column >= table.width:
        logger.warning(
            "Date column %d is outside table %d of %s",
            x_column,
            reference.table_index,
            reference.file_path,
        )
        return 0

    row_dates = _row_dates(table, x_column, date_format)
    for day in row_dates:
        if day is not None:
            date_range.update(day)

    stored = 0
    for y_query in reference.y_queries:
        column = y_query.accessor(1)
        if column >= table.width:
            logger.warning(
                "Value column %d is outside table %d of %s",
                column,
                reference.table_index,
                reference.file_path,
            )
            continue

        for row, day in zip(table.rows, row_dates, strict=True):
            if day is None or column >= len(row):
                continue
            selected = select_value(row[column], y_query.separator, y_query.accessor(2))
            number = parse_float(selected) if selected is not None else None
            if number is None:
                continue
            store.add(format_date(day, date_format), y_query, number)
            stored += 1

    return stored
