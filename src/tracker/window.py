"""Reconcile requested date bounds with the dates actually found."""

from __future__ import annotations

import logging
from datetime import date

from tracker.data import DateRange, ResolvedWindow
from tracker.errors import InvalidDateRangeError, NoMatchingDocumentsError


logger = logging.getLogger("tracker")


def resolve_window(
    observed: DateRange,
    accepted_documents: int,
    start_date: date | None = None,
    end_date: date | None = None,
    out_of_range_documents: int = 0,
) -> ResolvedWindow:
    """Fix the inclusive window the output series will cover.

    Missing bounds are taken from the observed dates. A lone start bound must
    lie before the latest observed date, a lone end bound after the earliest.
    With both bounds, the window is rejected only when it lies entirely before
    or entirely after the observed dates.

    Args:
        observed: Earliest and latest accepted dates
        accepted_documents: Number of notes and table documents that were accepted
        start_date: Requested first day, if any
        end_date: Requested last day, if any
        out_of_range_documents: Dated notes dropped because of the bounds

    Returns:
        Resolved window with start <= end

    Raises:
        NoMatchingDocumentsError: If no document was accepted
        InvalidDateRangeError: If no date was observed, the bounds cannot be
            reconciled, or every dated note fell outside the bounds
    """
    if accepted_documents == 0:
        if out_of_range_documents:
            raise InvalidDateRangeError()
        raise NoMatchingDocumentsError()

    earliest, latest = observed.earliest, observed.latest
    if earliest is None or latest is None:
        raise InvalidDateRangeError()

    match (start_date, end_date):
        case (None, None):
            start, end = earliest, latest
        case (date() as lower, None):
            if not lower < latest:
                raise InvalidDateRangeError()
            start, end = lower, latest
        case (None, date() as upper):
            if not upper > earliest:
                raise InvalidDateRangeError()
            start, end = earliest, upper
        case (date() as lower, date() as upper):
            entirely_before = lower < earliest and upper < earliest
            entirely_after = lower > latest and upper > latest
            if entirely_before or entirely_after:
                raise InvalidDateRangeError()
            start, end = lower, upper

    if start > end:
        raise InvalidDateRangeError()

    logger.info("Resolved date window %s to %s", start.isoformat(), end.isoformat())
    return ResolvedWindow(start=start, end=end)
