"""Directory of markdown notes exposed as a document source."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import frontmatter
import yaml
from frontmatter.default_handlers import YAMLHandler

from tracker.data import DOCUMENT_EXTENSION
from tracker.errors import DocumentReadError
from tracker.source import DocumentHandle, DocumentMetadata


logger = logging.getLogger("tracker")

WIKI_LINK_RE = re.compile(r"(?<!!)\[\[([^\]]+)\]\]")


class StringYAMLHandler(YAMLHandler):
    """Front-matter handler that keeps every scalar as text.

    Values such as ``07:30`` would otherwise be read as YAML 1.1 sexagesimal
    integers and ``2023-01-05`` as dates.
    """

    def load(self, fm: str, **kwargs: object) -> Any:
        return yaml.load(fm, Loader=yaml.BaseLoader)


_HANDLER = StringYAMLHandler()


def extract_links(body: str) -> list[str]:
    """Return the notes linked with ``[[...]]``, embeds excluded.

    Aliases and heading anchors are dropped, so ``[[Gym#Legs|legs]]`` links to ``Gym``.
    """
    links: list[str] = []
    for match in WIKI_LINK_RE.finditer(body):
        target = match.group(1).split("|", 1)[0].split("#", 1)[0].strip()
        if target:
            links.append(target)
    return links


def parse_note(content: str) -> DocumentMetadata:
    """Split a note into front-matter and links.

    Malformed front-matter is logged and reported as missing.
    """
    try:
        post = frontmatter.loads(content, handler=_HANDLER)
    except yaml.YAMLError as exc:
        logger.warning("Malformed front-matter: %s", exc)
        return DocumentMetadata(frontmatter=None, links=extract_links(content))

    metadata = dict(post.metadata) or None
    return DocumentMetadata(frontmatter=metadata, links=extract_links(post.content))


class Vault:
    """Notes stored as ``.md`` files below a root directory.

    The most recently read note is kept, so asking for the metadata and then
    the text of the same note reads the file once.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._last_read: tuple[str, str] | None = None

    def _folder_path(self, folder: str) -> Path:
        relative = folder.strip().strip("/")
        return self.root / relative if relative else self.root

    def _handle(self, path: Path) -> DocumentHandle:
        return DocumentHandle(path=path.relative_to(self.root).as_posix(), basename=path.stem)

    def _read(self, path: Path) -> str:
        with open(path, encoding="utf-8") as f:
            return f.read()

    def list_candidate_documents(
        self, folder: str, include_subfolders: bool = True
    ) -> list[DocumentHandle]:
        """List notes in a folder, sorted by path."""
        base = self._folder_path(folder)
        if not base.is_dir():
            logger.warning("Folder '%s' not found in %s", folder, self.root)
            return []

        pattern = f"*{DOCUMENT_EXTENSION}"
        candidates = base.rglob(pattern) if include_subfolders else base.glob(pattern)
        return [self._handle(path) for path in sorted(candidates) if path.is_file()]

    def read_document_text(self, handle: DocumentHandle) -> str:
        """Read the full text of a note.

        Raises:
            DocumentReadError: If the note is missing, unreadable or not UTF-8
        """
        if self._last_read is not None and self._last_read[0] == handle.path:
            return self._last_read[1]

        try:
            text = self._read(self.root / handle.path)
        except FileNotFoundError as err:
            raise DocumentReadError(handle.path, "file not found") from err
        except PermissionError as err:
            raise DocumentReadError(handle.path, "permission denied") from err
        except UnicodeDecodeError as err:
            raise DocumentReadError(handle.path, "not valid UTF-8") from err
        except OSError as err:
            raise DocumentReadError(handle.path, err.strerror or str(err)) from err

        self._last_read = (handle.path, text)
        return text

    def read_document_metadata(self, handle: DocumentHandle) -> DocumentMetadata | None:
        """Parse front-matter and links of a note."""
        return parse_note(self.read_document_text(handle))

    def resolve_document_by_path(self, path: str) -> DocumentHandle | None:
        """Find a note by its path relative to the vault root."""
        candidate = self.root / path.strip().lstrip("/")
        if not candidate.is_file():
            return None
        return self._handle(candidate)
