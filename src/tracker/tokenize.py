"""Tokenizers for inline hashtags and ``key:: value`` fields."""

from __future__ import annotations

from typing import TypeAlias

import re
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from parsy import Parser, eof, index, peek, regex, seq, string


@dataclass(frozen=True)
class TokenMatch:
    """One tokenizer hit: its span in the text and the attached value text, if any."""

    start: int
    end: int
    values: str | None


_CANDIDATE = re.compile(r"(?<!\S)\S")

_nested_segments = regex(r"(?:/[\w-]+)*")
_attached_values = string(":") >> regex(r"[\d./:-]*") << regex(r"[a-zA-Z]*")
_trailing_punctuation = regex(r"[.!,?;~-]*")
_boundary = peek(regex(r"\s")) | eof
_emphasis = regex(r"\*{0,2}")
_field_values = regex(r"[\w./,@;:\- \t]*(?=\s|\Z)")


@lru_cache(maxsize=128)
def hashtag_parser(name: str) -> Parser:
    """Build a parser for ``#name`` with optional nesting and attached values.

    Matches ``#name``, ``#name/sub``, ``#name:72.5``, ``#name:72.5kg.`` and the
    like; the token must end at whitespace or at the end of the text.
    """
    return seq(
        start=index << string("#" + name) << _nested_segments,
        values=_attached_values.optional(),
        end=_trailing_punctuation >> index << _boundary,
    ).combine_dict(TokenMatch)


@lru_cache(maxsize=128)
def field_parser(key: str) -> Parser:
    """Build a parser for ``key:: values`` optionally wrapped in ``*`` or ``**``."""
    return seq(
        start=index << _emphasis << string(key) << _emphasis << string("::") << regex(r"[ \t]*"),
        values=_field_values,
        end=index,
    ).combine_dict(TokenMatch)


def _scan(parser: Parser, text: str) -> list[TokenMatch]:
    """Try the parser at every token start, never going backwards."""
    matches: list[TokenMatch] = []
    position = 0
    while True:
        candidate = _CANDIDATE.search(text, position)
        if candidate is None:
            return matches
        result = parser(text, candidate.start())
        if result.status:
            token = result.value
            matches.append(token)
            position = max(token.end, candidate.start() + 1)
        else:
            position = candidate.start() + 1


def scan_hashtags(text: str, name: str) -> list[TokenMatch]:
    """Return every ``#name`` token preceded by whitespace or the start of the text."""
    return _scan(hashtag_parser(name), text)


def scan_fields(text: str, key: str) -> list[TokenMatch]:
    """Return every ``key:: values`` annotation preceded by whitespace or the start of the text."""
    return _scan(field_parser(key), text)


Scanner: TypeAlias = Callable[[str, str], list[TokenMatch]]
