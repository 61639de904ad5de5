"""Strict moment-style date and clock-time parsing.

Date formats use the token vocabulary of note-taking apps (``YYYY-MM-DD``,
``DD.MM.YY``, ``[Journal] YYYY-MM-DD``...). A format is tokenized once with
parsy, compiled into an anchored regex, and every parse must consume the whole
input (no fuzzy fallback).
"""

from __future__ import annotations

from typing import TypeAlias

import re
from dataclasses import dataclass
from datetime import date
from functools import lru_cache

from parsy import alt, any_char, regex, string


MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TIME_FORMATS = (
    "HH:mm",
    "HH:m",
    "H:mm",
    "H:m",
    "hh:mm A",
    "hh:mm a",
    "hh:m A",
    "hh:m a",
    "h:mm A",
    "h:mm a",
    "h:m A",
    "h:m a",
)

SECONDS_PER_DAY = 24 * 60 * 60

_MERIDIEM = r"[apAP]\.?[mM]?\.?"

_TOKEN_PATTERNS: dict[str, str] = {
    "YYYY": r"\d{4}",
    "YY": r"\d{2}",
    "MMMM": "(?i:" + "|".join(MONTH_NAMES) + ")",
    "MMM": "(?i:" + "|".join(name[:3] for name in MONTH_NAMES) + ")",
    "MM": r"\d{2}",
    "M": r"\d{1,2}",
    "DD": r"\d{2}",
    "Do": r"\d{1,2}(?:st|nd|rd|th)",
    "D": r"\d{1,2}",
    "dddd": "(?i:" + "|".join(WEEKDAY_NAMES) + ")",
    "ddd": "(?i:" + "|".join(name[:3] for name in WEEKDAY_NAMES) + ")",
    "HH": r"\d{2}",
    "H": r"\d{1,2}",
    "hh": r"\d{2}",
    "h": r"\d{1,2}",
    "mm": r"\d{2}",
    "m": r"\d{1,2}",
    "ss": r"\d{2}",
    "s": r"\d{1,2}",
    "A": _MERIDIEM,
    "a": _MERIDIEM,
}

DATE_TOKENS = frozenset({"YYYY", "YY", "MMMM", "MMM", "MM", "M", "DD", "Do", "D"})


@dataclass(frozen=True)
class FormatToken:
    """A format placeholder such as ``YYYY`` or ``mm``."""

    name: str


@dataclass(frozen=True)
class Literal:
    """Literal text inside a format."""

    text: str


FormatPart: TypeAlias = FormatToken | Literal


_token = alt(*(string(name) for name in _TOKEN_PATTERNS)).map(FormatToken)
_escaped = (string("[") >> regex(r"[^\]]*") << string("]")).map(Literal)
_literal = any_char.map(Literal)
_format_parser = alt(_escaped, _token, _literal).many()


@dataclass
class _Fields:
    year: int | None = None
    month: int | None = None
    day: int | None = None
    weekday: int | None = None
    hour: int | None = None
    minute: int | None = None
    second: int | None = None
    meridiem: str | None = None
    twelve_hour: bool = False


@dataclass(frozen=True)
class _CompiledFormat:
    pattern: re.Pattern[str]
    groups: tuple[tuple[str, str], ...]


@lru_cache(maxsize=128)
def parse_format(pattern: str) -> tuple[FormatPart, ...]:
    """Split a format string into tokens and literal runs."""
    parts: list[FormatPart] = []
    for part in _format_parser.parse(pattern):
        if isinstance(part, Literal) and parts and isinstance(parts[-1], Literal):
            parts[-1] = Literal(parts[-1].text + part.text)
        else:
            parts.append(part)
    return tuple(parts)


def has_date_tokens(pattern: str) -> bool:
    """Return whether a format contains at least one year, month or day token."""
    return any(
        isinstance(part, FormatToken) and part.name in DATE_TOKENS for part in parse_format(pattern)
    )


@lru_cache(maxsize=128)
def _compile_format(pattern: str) -> _CompiledFormat:
    regex_parts: list[str] = []
    groups: list[tuple[str, str]] = []
    for index, part in enumerate(parse_format(pattern)):
        if isinstance(part, Literal):
            regex_parts.append(re.escape(part.text))
            continue
        group_name = f"t{index}"
        regex_parts.append(f"(?P<{group_name}>{_TOKEN_PATTERNS[part.name]})")
        groups.append((group_name, part.name))
    return _CompiledFormat(pattern=re.compile("".join(regex_parts)), groups=tuple(groups))


def _two_digit_year(value: int) -> int:
    return value + (1900 if value > 68 else 2000)


def _name_index(names: tuple[str, ...], raw: str) -> int:
    lowered = raw.lower()
    for index, name in enumerate(names):
        if name.lower().startswith(lowered):
            return index
    raise ValueError(f"Unknown name: {raw}")


def _assign_field(fields: _Fields, token: str, raw: str) -> None:
    if token == "YYYY":
        fields.year = int(raw)
    elif token == "YY":
        fields.year = _two_digit_year(int(raw))
    elif token in ("MMMM", "MMM"):
        fields.month = _name_index(MONTH_NAMES, raw) + 1
    elif token in ("MM", "M"):
        fields.month = int(raw)
    elif token == "Do":
        fields.day = int(raw[:-2])
    elif token in ("DD", "D"):
        fields.day = int(raw)
    elif token in ("dddd", "ddd"):
        fields.weekday = _name_index(WEEKDAY_NAMES, raw)
    elif token in ("HH", "H"):
        fields.hour = int(raw)
    elif token in ("hh", "h"):
        fields.hour = int(raw)
        fields.twelve_hour = True
    elif token in ("mm", "m"):
        fields.minute = int(raw)
    elif token in ("ss", "s"):
        fields.second = int(raw)
    elif token in ("A", "a"):
        fields.meridiem = raw


def _match_fields(text: str, pattern: str) -> _Fields | None:
    compiled = _compile_format(pattern)
    match = compiled.pattern.fullmatch(text)
    if match is None:
        return None

    fields = _Fields()
    for group_name, token in compiled.groups:
        _assign_field(fields, token, match.group(group_name))
    return fields


def _clock_seconds(fields: _Fields) -> int | None:
    hour = fields.hour if fields.hour is not None else 0
    minute = fields.minute if fields.minute is not None else 0
    second = fields.second if fields.second is not None else 0

    if minute > 59 or second > 59:
        return None

    if fields.twelve_hour:
        if not 1 <= hour <= 12:
            return None
    elif hour == 24:
        if minute or second:
            return None
    elif hour > 23:
        return None

    if fields.meridiem is not None:
        is_pm = fields.meridiem.lower().startswith("p")
        if is_pm and hour < 12:
            hour += 12
        elif not is_pm and hour == 12:
            hour = 0

    return hour * 3600 + minute * 60 + second


def parse_date(text: str, pattern: str) -> date | None:
    """Parse text strictly against a moment-style date format.

    Args:
        text: Text to parse, e.g. a note's base name
        pattern: Date format such as ``YYYY-MM-DD``

    Returns:
        Parsed date, or None when the text does not match the format exactly
        or describes an impossible calendar date
    """
    fields = _match_fields(text, pattern)
    if fields is None:
        return None

    if (fields.hour, fields.minute, fields.second) != (None, None, None):
        if _clock_seconds(fields) is None:
            return None

    year = fields.year if fields.year is not None else date.today().year
    month = fields.month if fields.month is not None else 1
    day_of_month = fields.day if fields.day is not None else 1
    try:
        parsed = date(year, month, day_of_month)
    except ValueError:
        return None

    if fields.weekday is not None and parsed.weekday() != fields.weekday:
        return None
    return parsed


def parse_clock_time(text: str) -> int | None:
    """Parse a time of day against the canonical time formats.

    Returns:
        Seconds elapsed since midnight, or None when no format matches
    """
    for time_format in TIME_FORMATS:
        fields = _match_fields(text, time_format)
        if fields is None:
            continue
        seconds = _clock_seconds(fields)
        if seconds is not None:
            return seconds
    return None


def _ordinal(value: int) -> str:
    if 10 <= value % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(value % 10, "th")
    return f"{value}{suffix}"


def _render_token(token: str, day: date) -> str:
    renderers = {
        "YYYY": lambda: f"{day.year:04d}",
        "YY": lambda: f"{day.year % 100:02d}",
        "MMMM": lambda: MONTH_NAMES[day.month - 1],
        "MMM": lambda: MONTH_NAMES[day.month - 1][:3],
        "MM": lambda: f"{day.month:02d}",
        "M": lambda: str(day.month),
        "DD": lambda: f"{day.day:02d}",
        "Do": lambda: _ordinal(day.day),
        "D": lambda: str(day.day),
        "dddd": lambda: WEEKDAY_NAMES[day.weekday()],
        "ddd": lambda: WEEKDAY_NAMES[day.weekday()][:3],
        "HH": lambda: "00",
        "H": lambda: "0",
        "hh": lambda: "12",
        "h": lambda: "12",
        "mm": lambda: "00",
        "m": lambda: "0",
        "ss": lambda: "00",
        "s": lambda: "0",
        "A": lambda: "AM",
        "a": lambda: "am",
    }
    return renderers[token]()


def format_date(day: date, pattern: str) -> str:
    """Render a date with a moment-style format."""
    rendered: list[str] = []
    for part in parse_format(pattern):
        if isinstance(part, Literal):
            rendered.append(part.text)
        else:
            rendered.append(_render_token(part.name, day))
    return "".join(rendered)


def format_clock_time(seconds: float) -> str:
    """Render seconds as ``HH:MM``; hours may exceed 23 for summed values."""
    total_minutes = int(round(seconds / 60))
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours:02d}:{minutes:02d}"
