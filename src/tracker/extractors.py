"""Value extractors for per-date notes.

Each extractor looks at one document for one query and returns an
`Extraction`. When `exists` is False nothing is recorded for the document; a
`value` of None records that the target was present without a usable number.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from tracker.data import Query, SearchType
from tracker.errors import QueryDefinitionError
from tracker.source import DocumentMetadata
from tracker.tokenize import Scanner, scan_fields, scan_hashtags
from tracker.values import (
    ParsedValue,
    parse_attached_value,
    parse_float,
    parse_number_or_time,
    split_values,
)


FRONTMATTER_TAGS_KEY = "tags"
TEXT_VALUE_GROUP = "value"

_JS_NAMED_GROUP = re.compile(r"\(\?<(?=[A-Za-z_])")
_JS_NAMED_BACKREF = re.compile(r"\\k<([A-Za-z_]\w*)>")


@dataclass(frozen=True)
class Extraction:
    """Outcome of one extractor run."""

    value: float | None = None
    exists: bool = False
    uses_time: bool = False


NOT_FOUND = Extraction()


@dataclass
class _Accumulator:
    total: float = 0.0
    has_value: bool = False
    matched: bool = False
    uses_time: bool = False

    def add_constant(self, value: float) -> None:
        self.matched = True
        self.total += value
        self.has_value = True

    def add_parsed(self, parsed: ParsedValue | None, ignore_zero: bool) -> None:
        if parsed is not None and not parsed.is_time and ignore_zero and parsed.value == 0:
            return
        self.matched = True
        if parsed is None:
            return
        if parsed.is_time:
            self.uses_time = True
        self.total += parsed.value
        self.has_value = True

    def result(self) -> Extraction:
        if not self.matched:
            return NOT_FOUND
        value = self.total if self.has_value else None
        return Extraction(value=value, exists=True, uses_time=self.uses_time)


@lru_cache(maxsize=128)
def compile_text_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a user supplied search regex.

    ``(?<name>...)`` groups and ``\\k<name>`` references are accepted and
    rewritten to Python syntax.

    Raises:
        QueryDefinitionError: If the pattern is not a valid regex
    """
    translated = _JS_NAMED_GROUP.sub("(?P<", pattern)
    translated = _JS_NAMED_BACKREF.sub(r"(?P=\1)", translated)
    try:
        return re.compile(translated, re.MULTILINE)
    except re.error as exc:
        raise QueryDefinitionError(f"Invalid search regex '{pattern}': {exc}") from exc


def _as_list(raw: Any) -> list[Any]:
    if isinstance(raw, list | tuple):
        return list(raw)
    return [raw]


def _is_blank(raw: Any) -> bool:
    return raw is None or raw == "" or raw == [] or raw == {}


def extract_frontmatter_tags(frontmatter: Mapping[str, Any] | None, query: Query) -> Extraction:
    """Count ``tags`` entries equal to the target or nested below it."""
    if not frontmatter:
        return NOT_FOUND
    tags = frontmatter.get(FRONTMATTER_TAGS_KEY)
    if _is_blank(tags):
        return NOT_FOUND

    accumulator = _Accumulator()
    nested_prefix = query.target + "/"
    for tag in _as_list(tags):
        tag_name = str(tag)
        if tag_name == query.target or tag_name.startswith(nested_prefix):
            accumulator.add_constant(query.const_value)
    return accumulator.result()


def _parse_frontmatter_scalar(raw: Any) -> ParsedValue | None:
    if isinstance(raw, str):
        return parse_number_or_time(raw)
    number = parse_float(raw)
    if number is None:
        return None
    return ParsedValue(number)


def _parse_frontmatter_multi(raw: Any, query: Query) -> ParsedValue | None:
    if isinstance(raw, list | tuple):
        parts = [str(item) for item in raw]
    elif isinstance(raw, str):
        parts = split_values(raw, query.separator)
    else:
        return None

    accessor = query.accessor(0)
    if not 0 <= accessor < len(parts):
        return None
    return parse_number_or_time(parts[accessor])


def extract_frontmatter_value(frontmatter: Mapping[str, Any] | None, query: Query) -> Extraction:
    """Read a number or clock time stored under a front-matter key.

    The key is looked up directly first; when it is missing and the query has
    a parent target, the parent's multi-value entry is split and indexed.
    """
    if not frontmatter or query.target == FRONTMATTER_TAGS_KEY:
        return NOT_FOUND

    direct = frontmatter.get(query.target)
    if not _is_blank(direct):
        parsed = _parse_frontmatter_scalar(direct)
    elif query.parent_target and not _is_blank(frontmatter.get(query.parent_target)):
        parsed = _parse_frontmatter_multi(frontmatter[query.parent_target], query)
    else:
        return NOT_FOUND

    if parsed is None:
        return NOT_FOUND
    return Extraction(value=parsed.value, exists=True, uses_time=parsed.is_time)


def extract_wiki_links(links: Iterable[str], query: Query) -> Extraction:
    """Count outgoing links pointing at the target."""
    accumulator = _Accumulator()
    for link in links:
        if link == query.target:
            accumulator.add_constant(query.const_value)
    return accumulator.result()


def _extract_attached(text: str, query: Query, scanner: Scanner) -> Extraction:
    name = query.parent_target or query.target
    accumulator = _Accumulator()
    for token in scanner(text, name):
        if token.values is not None and not query.ignore_attached_value:
            parsed = parse_attached_value(token.values, query.separator, query.accessor(0))
            accumulator.add_parsed(parsed, query.ignore_zero_value)
        else:
            accumulator.add_constant(query.const_value)
    return accumulator.result()


def extract_inline_tags(text: str, query: Query) -> Extraction:
    """Sum ``#tag`` occurrences in the text, using attached values when present."""
    return _extract_attached(text, query, scan_hashtags)


def extract_dataview_field(text: str, query: Query) -> Extraction:
    """Sum ``key:: value`` annotations in the text."""
    return _extract_attached(text, query, scan_fields)


def extract_text(text: str, query: Query) -> Extraction:
    """Sum matches of the target regex.

    With named groups, only the ``value`` group contributes. Without named
    groups every match adds the query's constant.
    """
    pattern = compile_text_pattern(query.target)
    uses_groups = bool(pattern.groupindex) and not query.ignore_attached_value
    accumulator = _Accumulator()

    for match in pattern.finditer(text):
        if match.start() == match.end():
            continue
        if not uses_groups:
            accumulator.add_constant(query.const_value)
            continue
        if TEXT_VALUE_GROUP not in pattern.groupindex:
            continue
        captured = match.group(TEXT_VALUE_GROUP)
        if captured is None:
            continue
        parsed = parse_attached_value(captured, query.separator, query.accessor(0))
        accumulator.add_parsed(parsed, query.ignore_zero_value)

    return accumulator.result()


def extract_document(
    query: Query, metadata: DocumentMetadata | None, text: str | None
) -> list[Extraction]:
    """Run every extractor that applies to the query's search type.

    Tag queries look at both the front-matter ``tags`` and the inline hashtags,
    so they may yield two extractions for one document.
    """
    frontmatter = metadata.frontmatter if metadata is not None else None
    links = metadata.links if metadata is not None else []
    results: list[Extraction] = []

    match query.search_type:
        case SearchType.FRONTMATTER:
            results.append(extract_frontmatter_value(frontmatter, query))
        case SearchType.TAG:
            results.append(extract_frontmatter_tags(frontmatter, query))
            if text is not None:
                results.append(extract_inline_tags(text, query))
        case SearchType.WIKI:
            results.append(extract_wiki_links(links, query))
        case SearchType.TEXT:
            if text is not None:
                results.append(extract_text(text, query))
        case SearchType.DV_FIELD:
            if text is not None:
                results.append(extract_dataview_field(text, query))
        case SearchType.TABLE:
            pass

    return [result for result in results if result.exists]
