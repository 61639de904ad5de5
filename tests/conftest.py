"""Shared fixtures for tracker tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from tracker import config
from tracker.errors import DocumentReadError
from tracker.source import DocumentHandle, DocumentMetadata


class MemorySource:
    """Document source backed by dictionaries, for engine tests."""

    def __init__(
        self,
        texts: dict[str, str] | None = None,
        frontmatter: dict[str, dict[str, Any]] | None = None,
        links: dict[str, list[str]] | None = None,
        unreadable: set[str] | None = None,
    ) -> None:
        self.texts = texts or {}
        self.frontmatter = frontmatter or {}
        self.links = links or {}
        self.unreadable = unreadable or set()
        self.text_reads: list[str] = []
        self.metadata_reads: list[str] = []

    def handles(self) -> list[DocumentHandle]:
        paths = sorted(set(self.texts) | set(self.frontmatter) | set(self.links))
        return [DocumentHandle(path=path, basename=Path(path).stem) for path in paths]

    def list_candidate_documents(
        self, folder: str, include_subfolders: bool = True
    ) -> list[DocumentHandle]:
        return self.handles()

    def read_document_text(self, handle: DocumentHandle) -> str:
        if handle.path in self.unreadable:
            raise DocumentReadError(handle.path, "permission denied")
        self.text_reads.append(handle.path)
        return self.texts.get(handle.path, "")

    def read_document_metadata(self, handle: DocumentHandle) -> DocumentMetadata | None:
        if handle.path in self.unreadable:
            raise DocumentReadError(handle.path, "permission denied")
        self.metadata_reads.append(handle.path)
        return DocumentMetadata(
            frontmatter=self.frontmatter.get(handle.path),
            links=self.links.get(handle.path, []),
        )

    def resolve_document_by_path(self, path: str) -> DocumentHandle | None:
        if path not in self.texts:
            return None
        return DocumentHandle(path=path, basename=Path(path).stem)


@pytest.fixture
def memory_source() -> Callable[..., MemorySource]:
    """Factory for in-memory document sources."""
    return MemorySource


@pytest.fixture
def make_vault(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write notes below a temporary vault directory and return its root."""

    def _make(notes: dict[str, str]) -> Path:
        root = tmp_path / "vault"
        root.mkdir(exist_ok=True)
        for relative, content in notes.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture(autouse=True)
def reset_tracker_logger() -> Iterator[None]:
    """Undo CLI logging setup so caplog sees tracker records."""
    yield
    logger = logging.getLogger("tracker")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    config.CONFIG_DEFAULTS.clear()
