"""Numeric policy shared by every extractor."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from tracker.dates import parse_clock_time


_LEADING_FLOAT = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True)
class ParsedValue:
    """A number found in a note, flagged when it came from a clock time."""

    value: float
    is_time: bool = False


def parse_float(raw: object) -> float | None:
    """Parse the leading number of a value.

    Trailing text is ignored (``"12kg"`` is 12), text without a leading number
    and non-finite results are treated as absent. Lists are joined with commas
    before parsing, booleans are never numbers.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        number = float(raw)
        return number if math.isfinite(number) else None
    if isinstance(raw, list | tuple):
        raw = ",".join(str(item) for item in raw)

    match = _LEADING_FLOAT.match(str(raw).lstrip())
    if match is None:
        return None
    number = float(match.group())
    return number if math.isfinite(number) else None


def parse_number_or_time(raw: str) -> ParsedValue | None:
    """Parse text as a clock time when it contains a colon, else as a number."""
    text = raw.strip()
    if ":" in text:
        seconds = parse_clock_time(text)
        if seconds is not None:
            return ParsedValue(float(seconds), is_time=True)
    number = parse_float(text)
    if number is None:
        return None
    return ParsedValue(number)


def split_values(raw: str, separator: str) -> list[str]:
    """Split a multi-value string on commas, or on the separator when there are none."""
    if "," in raw:
        return raw.split(",")
    if not separator:
        return [raw]
    return raw.split(separator)


def select_value(raw: str, separator: str, accessor: int) -> str | None:
    """Pick one element of a multi-value string.

    A single element is returned as is, regardless of the accessor.
    """
    parts = split_values(raw.strip(), separator)
    if len(parts) == 1:
        return parts[0]
    if 0 <= accessor < len(parts):
        return parts[accessor].strip()
    return None


def parse_attached_value(raw: str, separator: str, accessor: int) -> ParsedValue | None:
    """Parse the value attached to a tag, field or text match."""
    selected = select_value(raw, separator, accessor)
    if selected is None:
        return None
    return parse_number_or_time(selected)
