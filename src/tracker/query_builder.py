"""Build queries from user facing search targets."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from parsy import ParseError, eof, regex, seq, string

from tracker.data import DEFAULT_SEPARATOR, Query, SearchType
from tracker.errors import QueryDefinitionError
from tracker.extractors import compile_text_pattern


T = TypeVar("T")

_index = string("[") >> regex(r"\s*\d+\s*").map(int) << string("]")
_target = seq(regex(r"[^\[\]]+"), _index.many()) << eof


@dataclass(frozen=True)
class QueryOptions:
    """Per-target settings; shorter lists are padded with their last element."""

    separator: Sequence[str] = (DEFAULT_SEPARATOR,)
    const_value: Sequence[float] = (1.0,)
    ignore_attached_value: Sequence[bool] = (False,)
    ignore_zero_value: Sequence[bool] = (False,)
    x_dataset: Sequence[int] = ()


@dataclass(frozen=True)
class ParsedTarget:
    """A target split into its base name and bracketed indices."""

    name: str
    indices: tuple[int, ...]


def parse_search_type(value: str) -> SearchType:
    """Map a search type name, case-insensitively, to a SearchType."""
    lookup = {search_type.value.lower(): search_type for search_type in SearchType}
    search_type = lookup.get(value.strip().lower())
    if search_type is None:
        choices = ", ".join(search_type.value for search_type in SearchType)
        raise QueryDefinitionError(f"Unknown search type '{value}'. Choose from: {choices}")
    return search_type


def parse_target(target: str) -> ParsedTarget:
    """Parse ``name``, ``name[1]`` or ``path[0][1][2]``.

    Raises:
        QueryDefinitionError: If the target is empty or its brackets are malformed
    """
    try:
        name, indices = _target.parse(target.strip())
    except ParseError as exc:
        raise QueryDefinitionError(f"Invalid search target '{target}'") from exc
    return ParsedTarget(name=name.strip(), indices=tuple(indices))


def _option_at(values: Sequence[T], position: int, default: T) -> T:
    if not values:
        return default
    return values[min(position, len(values) - 1)]


def _resolve_types(
    search_types: SearchType | Sequence[SearchType], count: int
) -> list[SearchType]:
    if isinstance(search_types, SearchType):
        return [search_types] * count
    if not search_types:
        raise QueryDefinitionError("At least one search type is required")
    return [_option_at(search_types, position, search_types[0]) for position in range(count)]


def _locate(search_type: SearchType, target: str) -> tuple[str | None, tuple[int, ...]]:
    if search_type == SearchType.TEXT:
        compile_text_pattern(target)
        return None, ()

    parsed = parse_target(target)
    if search_type == SearchType.TABLE:
        if len(parsed.indices) not in (2, 3):
            raise QueryDefinitionError(
                f"Table target '{target}' must look like path[table][column] "
                "or path[table][column][value]"
            )
        return parsed.name, parsed.indices

    if len(parsed.indices) > 1:
        raise QueryDefinitionError(f"Target '{target}' accepts at most one index")
    if parsed.indices:
        return parsed.name, parsed.indices
    return None, ()


def _default_x_datasets(
    types: list[SearchType], locations: list[tuple[str | None, tuple[int, ...]]]
) -> set[int]:
    chosen: dict[tuple[str | None, int], int] = {}
    pairs = zip(types, locations, strict=True)
    for position, (search_type, (parent, accessors)) in enumerate(pairs):
        if search_type == SearchType.TABLE:
            chosen.setdefault((parent, accessors[0]), position)
    return set(chosen.values())


def build_queries(
    search_types: SearchType | Sequence[SearchType],
    targets: Sequence[str],
    options: QueryOptions | None = None,
) -> list[Query]:
    """Create one query per target, ids in declaration order.

    Args:
        search_types: One search type for all targets, or one per target
        targets: Search targets as typed by the user
        options: Separator, constant and flag settings

    Returns:
        Queries ready for aggregation

    Raises:
        QueryDefinitionError: If a target, search type or option is invalid
    """
    if not targets:
        raise QueryDefinitionError("At least one search target is required")
    options = options or QueryOptions()

    types = _resolve_types(search_types, len(targets))
    locations = [
        _locate(search_type, target)
        for search_type, target in zip(types, targets, strict=True)
    ]

    for position in options.x_dataset:
        if not 0 <= position < len(targets):
            raise QueryDefinitionError(f"x dataset index {position} is out of range")
        if types[position] != SearchType.TABLE:
            raise QueryDefinitionError(
                f"Only table targets can be used as x dataset, got '{targets[position]}'"
            )
    x_datasets = set(options.x_dataset) or _default_x_datasets(types, locations)

    queries: list[Query] = []
    for position, target in enumerate(targets):
        separator = _option_at(options.separator, position, DEFAULT_SEPARATOR)
        if not separator:
            raise QueryDefinitionError("Separator must not be empty")
        parent_target, accessors = locations[position]
        queries.append(
            Query(
                id=position,
                search_type=types[position],
                target=target if types[position] == SearchType.TEXT else target.strip(),
                parent_target=parent_target,
                accessors=accessors,
                separator=separator,
                const_value=float(_option_at(options.const_value, position, 1.0)),
                ignore_attached_value=_option_at(options.ignore_attached_value, position, False),
                ignore_zero_value=_option_at(options.ignore_zero_value, position, False),
                used_as_x_dataset=position in x_datasets,
            )
        )
    return queries
