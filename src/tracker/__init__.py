"""tracker - Extract date-aligned numeric series from markdown notes."""

from tracker.aggregate import aggregate, collect
from tracker.data import (
    AggregationConfig,
    AggregationResult,
    Dataset,
    Observation,
    Query,
    ResolvedWindow,
    SearchType,
    ValueStore,
)
from tracker.errors import (
    AggregationError,
    InvalidDateRangeError,
    NoMatchingDocumentsError,
    QueryDefinitionError,
    TrackerError,
)
from tracker.query_builder import QueryOptions, build_queries
from tracker.source import DocumentHandle, DocumentMetadata, DocumentSource
from tracker.vault import Vault


__version__ = "0.1.0"

__all__ = [
    "AggregationConfig",
    "AggregationError",
    "AggregationResult",
    "Dataset",
    "DocumentHandle",
    "DocumentMetadata",
    "DocumentSource",
    "InvalidDateRangeError",
    "NoMatchingDocumentsError",
    "Observation",
    "Query",
    "QueryDefinitionError",
    "QueryOptions",
    "ResolvedWindow",
    "SearchType",
    "TrackerError",
    "ValueStore",
    "Vault",
    "__version__",
    "aggregate",
    "build_queries",
    "collect",
]
