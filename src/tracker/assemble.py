"""Turn stored observations into dense per-day series."""

from __future__ import annotations

from collections.abc import Iterable, Set
from datetime import date

from tracker.data import Dataset, Query, ResolvedWindow, ValueStore
from tracker.dates import format_date


def merge_day(store: ValueStore, date_key: str, query: Query) -> float | None:
    """Sum the non-null observations of one query on one day.

    Returns None when the query has no observation that day, or only null ones.
    """
    total = 0.0
    has_value = False
    for observation in store.observations(date_key, query):
        if observation.value is not None:
            total += observation.value
            has_value = True
    return total if has_value else None


def assemble_datasets(
    store: ValueStore,
    queries: Iterable[Query],
    window: ResolvedWindow,
    date_format: str,
    time_queries: Set[int] = frozenset(),
) -> tuple[Dataset, ...]:
    """Build one dataset per query, in declaration order, covering every day of the window."""
    days = list(window.days())
    keys = [format_date(day, date_format) for day in days]

    datasets: list[Dataset] = []
    for query in queries:
        values: list[tuple[date, float | None]] = []
        for day, key in zip(days, keys, strict=True):
            values.append((day, merge_day(store, key, query) if key in store else None))
        datasets.append(
            Dataset(
                query=query,
                values=tuple(values),
                using_time_value=query.id in time_queries,
            )
        )
    return tuple(datasets)
