"""Tests for building queries from search targets."""

from __future__ import annotations

import pytest

from tracker.data import SearchType
from tracker.errors import QueryDefinitionError
from tracker.query_builder import (
    ParsedTarget,
    QueryOptions,
    build_queries,
    parse_search_type,
    parse_target,
)


def test_parse_search_type_is_case_insensitive() -> None:
    """Search type names should match regardless of case."""
    assert parse_search_type("dvfield") == SearchType.DV_FIELD
    assert parse_search_type(" Table ") == SearchType.TABLE


def test_parse_search_type_unknown() -> None:
    """Unknown names should list the valid choices."""
    with pytest.raises(QueryDefinitionError, match="Choose from: frontmatter, tag"):
        parse_search_type("fileMeta")


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        ("weight", ParsedTarget("weight", ())),
        ("bp[1]", ParsedTarget("bp", (1,))),
        ("logs/health[0][ 2 ][1]", ParsedTarget("logs/health", (0, 2, 1))),
    ],
)
def test_parse_target(target: str, expected: ParsedTarget) -> None:
    """Targets should split into a name and bracketed indices."""
    assert parse_target(target) == expected


@pytest.mark.parametrize("target", ["", "bp[x]", "bp[1", "bp]1[", "[0]"])
def test_parse_target_invalid(target: str) -> None:
    """Malformed brackets should be rejected."""
    with pytest.raises(QueryDefinitionError):
        parse_target(target)


def test_build_queries_ids_and_defaults() -> None:
    """Queries should be numbered in order with default options."""
    queries = build_queries(SearchType.TAG, ["weight", " bp[1] "])

    assert [query.id for query in queries] == [0, 1]
    assert queries[0].parent_target is None
    assert queries[0].accessor(0) == 0
    assert queries[1].target == "bp[1]"
    assert queries[1].parent_target == "bp"
    assert queries[1].accessors == (1,)
    assert queries[1].separator == "/"
    assert queries[1].const_value == 1.0


def test_build_queries_per_target_options_padded() -> None:
    """Shorter option lists should repeat their last value."""
    options = QueryOptions(
        separator=(",", ";"),
        const_value=(2.0,),
        ignore_zero_value=(False, True),
    )
    queries = build_queries(
        [SearchType.TAG, SearchType.DV_FIELD], ["a", "b", "c"], options
    )

    assert [query.search_type for query in queries] == [
        SearchType.TAG,
        SearchType.DV_FIELD,
        SearchType.DV_FIELD,
    ]
    assert [query.separator for query in queries] == [",", ";", ";"]
    assert [query.const_value for query in queries] == [2.0, 2.0, 2.0]
    assert [query.ignore_zero_value for query in queries] == [False, True, True]


def test_build_queries_text_targets_kept_verbatim() -> None:
    """Text targets are regexes and should not be parsed or trimmed."""
    queries = build_queries(SearchType.TEXT, [r" ran (?<value>\d+)km[0]"])

    assert queries[0].target == r" ran (?<value>\d+)km[0]"
    assert queries[0].parent_target is None
    assert queries[0].accessors == ()


def test_build_queries_invalid_regex() -> None:
    """Unparsable text targets should fail at build time."""
    with pytest.raises(QueryDefinitionError, match="Invalid search regex"):
        build_queries(SearchType.TEXT, ["(unclosed"])


def test_build_queries_table_targets() -> None:
    """The first table target of each table should be its x dataset."""
    queries = build_queries(
        SearchType.TABLE, ["log[0][0]", "log[0][1][2]", "log[1][3]", "log[1][0]"]
    )

    assert [query.used_as_x_dataset for query in queries] == [True, False, True, False]
    assert queries[1].parent_target == "log"
    assert queries[1].accessors == (0, 1, 2)


def test_build_queries_explicit_x_dataset() -> None:
    """An explicit x dataset should replace the default choice."""
    options = QueryOptions(x_dataset=(1,))
    queries = build_queries(SearchType.TABLE, ["log[0][1]", "log[0][0]"], options)

    assert [query.used_as_x_dataset for query in queries] == [False, True]


@pytest.mark.parametrize(
    ("search_types", "targets", "options", "message"),
    [
        (SearchType.TABLE, ["log[0]"], None, "must look like"),
        (SearchType.TAG, ["bp[0][1]"], None, "at most one index"),
        ([SearchType.TAG], [], None, "At least one search target"),
        ([], ["a"], None, "At least one search type"),
        (SearchType.TABLE, ["log[0][0]"], QueryOptions(x_dataset=(3,)), "out of range"),
        (SearchType.TAG, ["a"], QueryOptions(x_dataset=(0,)), "Only table targets"),
        (SearchType.TAG, ["a"], QueryOptions(separator=("",)), "Separator must not be empty"),
    ],
)
def test_build_queries_rejects_invalid_definitions(
    search_types: SearchType | list[SearchType],
    targets: list[str],
    options: QueryOptions | None,
    message: str,
) -> None:
    """Invalid targets and options should raise query definition errors."""
    with pytest.raises(QueryDefinitionError, match=message):
        build_queries(search_types, targets, options)
