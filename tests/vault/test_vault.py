"""Tests for the filesystem vault document source."""

from __future__ import annotations

from typing import TypeAlias

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from tracker.aggregate import aggregate
from tracker.data import AggregationConfig, AggregationResult, SearchType
from tracker.errors import DocumentReadError
from tracker.query_builder import build_queries
from tracker.source import DocumentHandle
from tracker.vault import Vault, extract_links, parse_note


VaultFactory: TypeAlias = Callable[[dict[str, str]], Path]


NOTE_WITH_FRONTMATTER = """---
sleep: 07:30
weight: 72.5
day: 2023-01-05
tags:
  - health
  - work/meeting
---
Went to the [[Gym]] and read [[Books/Dune|Dune]], ![[photo.png]].
See also [[Gym#Legs]].
"""


def test_parse_note_keeps_scalars_as_text() -> None:
    """Front-matter scalars should stay strings so clock times survive."""
    metadata = parse_note(NOTE_WITH_FRONTMATTER)

    assert metadata.frontmatter == {
        "sleep": "07:30",
        "weight": "72.5",
        "day": "2023-01-05",
        "tags": ["health", "work/meeting"],
    }


def test_parse_note_links() -> None:
    """Links should drop aliases, headings and embeds."""
    metadata = parse_note(NOTE_WITH_FRONTMATTER)

    assert metadata.links == ["Gym", "Books/Dune", "Gym"]


def test_extract_links_skips_empty_targets() -> None:
    """Empty link targets should be ignored."""
    assert extract_links("[[ |alias]] [[Home]]") == ["Home"]


def test_parse_note_without_frontmatter() -> None:
    """Notes without front-matter should report none."""
    metadata = parse_note("just text with [[Link]]")

    assert metadata.frontmatter is None
    assert metadata.links == ["Link"]


def test_parse_note_malformed_frontmatter(caplog: pytest.LogCaptureFixture) -> None:
    """Broken front-matter should be logged and treated as missing."""
    with caplog.at_level(logging.WARNING, logger="tracker"):
        metadata = parse_note("---\nweight: [72\n---\nbody [[Gym]]\n")

    assert metadata.frontmatter is None
    assert metadata.links == ["Gym"]
    assert "Malformed front-matter" in caplog.text


def test_list_candidate_documents(make_vault: VaultFactory) -> None:
    """Markdown notes should be listed sorted, recursively by default."""
    root = make_vault(
        {
            "daily/2023-01-06.md": "",
            "daily/2023-01-05.md": "",
            "daily/archive/2022-12-31.md": "",
            "daily/image.png": "",
            "other.md": "",
        }
    )
    vault = Vault(root)

    recursive = vault.list_candidate_documents("daily")
    flat = vault.list_candidate_documents("/daily/", include_subfolders=False)

    assert [handle.path for handle in recursive] == [
        "daily/2023-01-05.md",
        "daily/2023-01-06.md",
        "daily/archive/2022-12-31.md",
    ]
    assert [handle.basename for handle in flat] == ["2023-01-05", "2023-01-06"]


def test_list_candidate_documents_root_folder(make_vault: VaultFactory) -> None:
    """The root folder should be selected by '/' or an empty folder."""
    root = make_vault({"2023-01-05.md": "", "sub/2023-01-06.md": ""})
    vault = Vault(root)

    assert len(vault.list_candidate_documents("/")) == 2
    assert len(vault.list_candidate_documents("", include_subfolders=False)) == 1


def test_list_candidate_documents_missing_folder(
    make_vault: VaultFactory, caplog: pytest.LogCaptureFixture
) -> None:
    """A missing folder should give no documents and a warning."""
    vault = Vault(make_vault({"2023-01-05.md": ""}))

    with caplog.at_level(logging.WARNING, logger="tracker"):
        handles = vault.list_candidate_documents("missing")

    assert handles == []
    assert "Folder 'missing' not found" in caplog.text


def test_read_document_text_and_metadata(make_vault: VaultFactory) -> None:
    """Notes should be readable as text and as parsed metadata."""
    vault = Vault(make_vault({"2023-01-05.md": NOTE_WITH_FRONTMATTER}))
    handle = vault.list_candidate_documents("/")[0]

    assert vault.read_document_text(handle) == NOTE_WITH_FRONTMATTER
    metadata = vault.read_document_metadata(handle)
    assert metadata is not None
    assert metadata.frontmatter is not None
    assert metadata.frontmatter["sleep"] == "07:30"


def test_read_document_text_missing_file(make_vault: VaultFactory) -> None:
    """Reading a vanished note should raise a read error."""
    vault = Vault(make_vault({}))

    with pytest.raises(DocumentReadError, match="Cannot read 'gone.md': file not found"):
        vault.read_document_text(DocumentHandle(path="gone.md", basename="gone"))


def test_resolve_document_by_path(make_vault: VaultFactory) -> None:
    """Paths relative to the root should resolve to handles."""
    vault = Vault(make_vault({"health/log.md": "| a |"}))

    assert vault.resolve_document_by_path("health/log.md") == DocumentHandle(
        path="health/log.md", basename="log"
    )
    assert vault.resolve_document_by_path("/health/log.md") is not None
    assert vault.resolve_document_by_path("health/missing.md") is None


def test_read_document_text_not_utf8(make_vault: VaultFactory) -> None:
    """Notes in another encoding should raise a read error."""
    root = make_vault({})
    (root / "2023-01-06.md").write_bytes(b"caf\xe9 #weight:71")
    vault = Vault(root)

    with pytest.raises(DocumentReadError, match="not valid UTF-8"):
        vault.read_document_text(DocumentHandle(path="2023-01-06.md", basename="2023-01-06"))


def test_aggregate_skips_note_in_other_encoding(
    make_vault: VaultFactory, caplog: pytest.LogCaptureFixture
) -> None:
    """A Latin-1 note should be skipped while the valid note still counts."""
    root = make_vault({"2023-01-05.md": "#weight:70"})
    (root / "2023-01-06.md").write_bytes(b"caf\xe9 #weight:71")
    vault = Vault(root)
    queries = build_queries(SearchType.TAG, ["weight"])

    with caplog.at_level(logging.WARNING, logger="tracker"):
        result = aggregate(
            vault, vault.list_candidate_documents("/"), queries, AggregationConfig()
        )

    assert isinstance(result, AggregationResult)
    assert [value for _, value in result.datasets[0].values] == [70.0]
    assert "Cannot read '2023-01-06.md': not valid UTF-8" in caplog.text


class CountingVault(Vault):
    """Vault that records every file it opens."""

    def __init__(self, root: Path) -> None:
        super().__init__(root)
        self.opened: list[str] = []

    def _read(self, path: Path) -> str:
        self.opened.append(path.name)
        return super()._read(path)


def test_metadata_and_text_share_one_read(make_vault: VaultFactory) -> None:
    """Metadata followed by text of the same note should open the file once."""
    vault = CountingVault(make_vault({"a.md": NOTE_WITH_FRONTMATTER, "b.md": "#n:1"}))
    first, second = vault.list_candidate_documents("/")

    vault.read_document_metadata(first)
    assert vault.read_document_text(first) == NOTE_WITH_FRONTMATTER
    vault.read_document_text(second)
    vault.read_document_text(first)

    assert vault.opened == ["a.md", "b.md", "a.md"]


def test_tag_query_reads_each_note_once(make_vault: VaultFactory) -> None:
    """Tag queries need metadata and text but should open each note once."""
    vault = CountingVault(
        make_vault({"2023-01-05.md": "---\ntags: [n]\n---\n#n:2", "2023-01-06.md": "#n:3"})
    )
    queries = build_queries(SearchType.TAG, ["n"])

    result = aggregate(vault, vault.list_candidate_documents("/"), queries, AggregationConfig())

    assert isinstance(result, AggregationResult)
    assert vault.opened == ["2023-01-05.md", "2023-01-06.md"]
