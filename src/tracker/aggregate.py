"""Aggregation driver: scan notes and tables, then build date-aligned datasets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from tracker.assemble import assemble_datasets
from tracker.data import (
    DOCUMENT_EXTENSION,
    AggregationConfig,
    AggregationResult,
    DateRange,
    Query,
    SearchType,
    TableReference,
    ValueStore,
)
from tracker.dates import format_date, parse_date
from tracker.errors import AggregationError, DocumentReadError
from tracker.extractors import extract_document
from tracker.source import DocumentHandle, DocumentSource
from tracker.tables import extract_table
from tracker.window import resolve_window


logger = logging.getLogger("tracker")

METADATA_SEARCH_TYPES = frozenset({SearchType.FRONTMATTER, SearchType.TAG, SearchType.WIKI})
TEXT_SEARCH_TYPES = frozenset({SearchType.TAG, SearchType.TEXT, SearchType.DV_FIELD})


@dataclass
class ScanState:
    """Everything gathered while scanning, before the window is resolved."""

    store: ValueStore = field(default_factory=ValueStore)
    date_range: DateRange = field(default_factory=DateRange)
    accepted_documents: int = 0
    out_of_range_documents: int = 0
    time_queries: set[int] = field(default_factory=set)


def needs_metadata(queries: Iterable[Query]) -> bool:
    """Return whether any per-date query reads front-matter or links."""
    return any(query.search_type in METADATA_SEARCH_TYPES for query in queries)


def needs_text(queries: Iterable[Query]) -> bool:
    """Return whether any per-date query reads the raw note text."""
    return any(query.search_type in TEXT_SEARCH_TYPES for query in queries)


def strip_affixes(basename: str, prefix: str, suffix: str) -> str:
    """Remove a leading prefix and a trailing suffix when present."""
    if prefix and basename.startswith(prefix):
        basename = basename[len(prefix) :]
    if suffix and basename.endswith(suffix):
        basename = basename[: len(basename) - len(suffix)]
    return basename


def resolve_document_date(basename: str, config: AggregationConfig) -> date | None:
    """Parse the date a note stands for from its base name."""
    stripped = strip_affixes(basename, config.date_format_prefix, config.date_format_suffix)
    return parse_date(stripped, config.date_format)


def _within_bounds(day: date, config: AggregationConfig) -> bool:
    if config.start_date is not None and day < config.start_date:
        return False
    if config.end_date is not None and day > config.end_date:
        return False
    return True


def group_table_references(queries: Iterable[Query]) -> list[TableReference]:
    """Group table queries by (document path, table index), in declaration order."""
    references: dict[tuple[str, int], TableReference] = {}
    for query in queries:
        if query.search_type != SearchType.TABLE:
            continue
        key = (query.parent_target or "", query.accessor(0))
        reference = references.get(key)
        if reference is None:
            reference = TableReference(file_path=key[0], table_index=key[1])
            references[key] = reference

        if query.used_as_x_dataset:
            if reference.x_query is not None:
                logger.warning(
                    "Table %d of %s has several date columns, using '%s'",
                    key[1],
                    key[0],
                    query.target,
                )
            reference.x_query = query
        else:
            reference.y_queries.append(query)
    return list(references.values())


def scan_documents(
    source: DocumentSource,
    documents: Iterable[DocumentHandle],
    queries: Sequence[Query],
    config: AggregationConfig,
    state: ScanState,
) -> None:
    """First pass: run the per-date extractors over every dated note."""
    per_date_queries = [query for query in queries if query.search_type != SearchType.TABLE]
    if not per_date_queries:
        return

    read_metadata = needs_metadata(per_date_queries)
    read_text = needs_text(per_date_queries)

    for document in documents:
        day = resolve_document_date(document.basename, config)
        if day is None:
            logger.info("Skipping %s: name does not match the date format", document.path)
            continue
        if not _within_bounds(day, config):
            logger.info("Skipping %s: outside the date range", document.path)
            state.out_of_range_documents += 1
            continue

        try:
            metadata = source.read_document_metadata(document) if read_metadata else None
            text = source.read_document_text(document) if read_text else None
        except DocumentReadError as exc:
            logger.warning("Skipping note: %s", exc)
            continue

        logger.info("Processing %s", document.path)
        state.accepted_documents += 1
        state.date_range.update(day)
        date_key = format_date(day, config.date_format)

        for query in per_date_queries:
            for extraction in extract_document(query, metadata, text):
                state.store.add(date_key, query, extraction.value)
                if extraction.uses_time:
                    state.time_queries.add(query.id)


def scan_tables(
    source: DocumentSource,
    references: Iterable[TableReference],
    config: AggregationConfig,
    state: ScanState,
) -> None:
    """Second pass: read each referenced table document once."""
    for reference in references:
        if reference.x_query is None:
            logger.warning(
                "Skipping table %d of %s: no date column query",
                reference.table_index,
                reference.file_path,
            )
            continue

        handle = source.resolve_document_by_path(reference.file_path + DOCUMENT_EXTENSION)
        if handle is None:
            logger.warning("Skipping table in %s: document not found", reference.file_path)
            continue

        try:
            text = source.read_document_text(handle)
        except DocumentReadError as exc:
            logger.warning("Skipping table %d: %s", reference.table_index, exc)
            continue

        logger.info("Processing table %d of %s", reference.table_index, handle.path)
        state.accepted_documents += 1
        extract_table(text, reference, config.date_format, state.store, state.date_range)


def collect(
    source: DocumentSource,
    documents: Iterable[DocumentHandle],
    queries: Sequence[Query],
    config: AggregationConfig,
) -> AggregationResult:
    """Scan documents and tables and assemble one dataset per query.

    Args:
        source: Where note contents and metadata are read from
        documents: Candidate per-date notes
        queries: Queries in declaration order
        config: Date format, affixes and optional bounds

    Returns:
        Datasets covering every day of the resolved window

    Raises:
        AggregationError: If no document matched or the date window is invalid
    """
    state = ScanState()
    scan_documents(source, documents, queries, config, state)
    scan_tables(source, group_table_references(queries), config, state)

    window = resolve_window(
        state.date_range,
        state.accepted_documents,
        start_date=config.start_date,
        end_date=config.end_date,
        out_of_range_documents=state.out_of_range_documents,
    )
    datasets = assemble_datasets(
        state.store, queries, window, config.date_format, frozenset(state.time_queries)
    )
    return AggregationResult(datasets=datasets, window=window)


def aggregate(
    source: DocumentSource,
    documents: Iterable[DocumentHandle],
    queries: Sequence[Query],
    config: AggregationConfig,
) -> AggregationResult | AggregationError:
    """Like `collect`, but return the failure instead of raising it."""
    try:
        return collect(source, documents, queries, config)
    except AggregationError as exc:
        logger.info("Aggregation failed: %s", exc)
        return exc
