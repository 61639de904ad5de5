"""Errors for query definition and series aggregation."""


class TrackerError(Exception):
    """Base exception for tracker failures."""


class QueryDefinitionError(TrackerError):
    """Raised when a search target or query option cannot be interpreted."""


class AggregationError(TrackerError):
    """Base class for failures that abort a whole aggregation run."""

    default_message = "Aggregation failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class NoMatchingDocumentsError(AggregationError):
    """Raised when no note or table document was accepted."""

    default_message = "No notes found in the date range."


class InvalidDateRangeError(AggregationError):
    """Raised when the configured and observed date windows cannot be reconciled."""

    default_message = "Invalid date range"


class DocumentReadError(TrackerError):
    """Raised by a document source when one note cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read '{path}': {reason}")
        self.path = path
        self.reason = reason
