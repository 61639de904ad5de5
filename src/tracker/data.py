"""Core data structures for series extraction and aggregation."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import StrEnum


DEFAULT_SEPARATOR = "/"
DEFAULT_DATE_FORMAT = "YYYY-MM-DD"
DOCUMENT_EXTENSION = ".md"


class SearchType(StrEnum):
    """Where a query looks for its values."""

    FRONTMATTER = "frontmatter"
    TAG = "tag"
    WIKI = "wiki"
    TEXT = "text"
    DV_FIELD = "dvField"
    TABLE = "table"


@dataclass(frozen=True, eq=False)
class Query:
    """One configured search and the rules for turning matches into numbers.

    Two queries are the same query when they share an id, regardless of the
    rest of their content.
    """

    id: int
    search_type: SearchType
    target: str
    parent_target: str | None = None
    accessors: tuple[int, ...] = ()
    separator: str = DEFAULT_SEPARATOR
    const_value: float = 1.0
    ignore_attached_value: bool = False
    ignore_zero_value: bool = False
    used_as_x_dataset: bool = False

    def accessor(self, position: int = 0) -> int:
        """Return the accessor at position, or 0 when it was not given."""
        if 0 <= position < len(self.accessors):
            return self.accessors[position]
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class Observation:
    """A value found for one query on one date; None means no usable number."""

    query: Query
    value: float | None


class ValueStore:
    """Append-only multimap from formatted date keys to observations."""

    def __init__(self) -> None:
        self._entries: dict[str, list[Observation]] = {}

    def add(self, date_key: str, query: Query, value: float | None) -> None:
        """Record one observation under a date key."""
        self._entries.setdefault(date_key, []).append(Observation(query=query, value=value))

    def observations(self, date_key: str, query: Query | None = None) -> list[Observation]:
        """Return observations for a date key, optionally only for one query."""
        entries = self._entries.get(date_key, [])
        if query is None:
            return list(entries)
        return [entry for entry in entries if entry.query == query]

    def __contains__(self, date_key: object) -> bool:
        return date_key in self._entries

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._entries.values())


@dataclass
class DateRange:
    """Earliest and latest accepted dates seen while scanning."""

    earliest: date | None = None
    latest: date | None = None

    @property
    def is_set(self) -> bool:
        """Return whether at least one date was observed."""
        return self.earliest is not None and self.latest is not None

    def update(self, day: date) -> None:
        """Fold a date into the range."""
        if self.earliest is None or day < self.earliest:
            self.earliest = day
        if self.latest is None or day > self.latest:
            self.latest = day


@dataclass
class TableReference:
    """Table queries that share one markdown table in one document."""

    file_path: str
    table_index: int
    x_query: Query | None = None
    y_queries: list[Query] = field(default_factory=list)


@dataclass(frozen=True)
class ResolvedWindow:
    """Inclusive calendar window covered by the output series."""

    start: date
    end: date

    def days(self) -> Iterator[date]:
        """Yield every day from start to end inclusive."""
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return max((self.end - self.start).days + 1, 0)


@dataclass(frozen=True)
class Dataset:
    """Dense per-day series for one query; None marks a day without data."""

    query: Query
    values: tuple[tuple[date, float | None], ...]
    using_time_value: bool = False

    def dates(self) -> list[date]:
        """Return the days covered by the series."""
        return [day for day, _ in self.values]

    def value_on(self, day: date) -> float | None:
        """Return the value for one day, or None when missing or out of range."""
        for current, value in self.values:
            if current == day:
                return value
        return None

    def present_values(self) -> list[float]:
        """Return only the days that carry a value."""
        return [value for _, value in self.values if value is not None]


@dataclass(frozen=True)
class AggregationConfig:
    """Run-wide settings for one aggregation."""

    date_format: str = DEFAULT_DATE_FORMAT
    date_format_prefix: str = ""
    date_format_suffix: str = ""
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class AggregationResult:
    """Datasets for every query over the resolved window."""

    datasets: tuple[Dataset, ...]
    window: ResolvedWindow
