"""Interface between the aggregation engine and wherever notes are stored."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class DocumentHandle:
    """Opaque reference to one note."""

    path: str
    basename: str


@dataclass(frozen=True)
class DocumentMetadata:
    """Parsed front-matter and resolved outgoing links of a note."""

    frontmatter: dict[str, Any] | None = None
    links: list[str] = field(default_factory=list)


class DocumentSource(Protocol):
    """Read access to a collection of notes.

    Reads raise `tracker.errors.DocumentReadError` for a note that cannot be read.
    """

    def list_candidate_documents(
        self, folder: str, include_subfolders: bool = True
    ) -> list[DocumentHandle]: ...

    def read_document_text(self, handle: DocumentHandle) -> str: ...

    def read_document_metadata(self, handle: DocumentHandle) -> DocumentMetadata | None: ...

    def resolve_document_by_path(self, path: str) -> DocumentHandle | None: ...
