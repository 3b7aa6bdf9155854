"""Base document interface for metadata lookup and clip rendering."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence

from clippings.library.models import Position

log = logging.getLogger(__name__)


class DocumentError(Exception):
    """A document could not be opened or loaded."""


@dataclass(frozen=True)
class DocumentProps:
    title: str = ""
    author: Optional[str] = None
    authors: Optional[str] = None


class BaseDocument(ABC):
    """Abstract base for format-specific document handles."""

    SUPPORTED_EXTENSIONS: tuple[str, ...] = ()

    @classmethod
    @abstractmethod
    def load(cls, file_path: Path) -> BaseDocument:
        """Open a file, raising DocumentError if it cannot be loaded."""

    @abstractmethod
    def get_props(self) -> Optional[DocumentProps]:
        """Return title/author metadata, if any."""

    def render_clip(
        self,
        pos0: Position,
        pos1: Position,
        pboxes: Sequence[dict[str, float]] = (),
        drawer: Optional[str] = None,
    ) -> Optional[bytes]:
        """Render the region between two positions as PNG bytes."""
        return None

    @abstractmethod
    def close(self) -> None:
        """Release the underlying handle."""

    @classmethod
    def can_handle(cls, file_path: Path) -> bool:
        return file_path.suffix.lower() in cls.SUPPORTED_EXTENSIONS


def document_classes() -> list[type[BaseDocument]]:
    from clippings.documents.epub_document import EpubDocument
    from clippings.documents.pdf_document import PdfDocument

    return [EpubDocument, PdfDocument]


def open_document(file_path: Path) -> Optional[BaseDocument]:
    """Open a document with the first class that handles its format."""
    file_path = Path(file_path)
    for doc_cls in document_classes():
        if doc_cls.can_handle(file_path):
            try:
                return doc_cls.load(file_path)
            except DocumentError as e:
                log.warning("Cannot open %s: %s", file_path, e)
                return None
    log.debug("Unsupported format: %s", file_path.suffix)
    return None


Opener = Callable[[Path], Optional[BaseDocument]]


@contextmanager
def document_session(
    file_path: Path, opener: Opener = open_document
) -> Iterator[Optional[BaseDocument]]:
    """Yield an open document (or None) and close it on the way out."""
    doc = opener(file_path)
    try:
        yield doc
    finally:
        if doc is not None:
            doc.close()


def get_document_props(
    file_path: Path, opener: Opener = open_document
) -> Optional[DocumentProps]:
    with document_session(file_path, opener) as doc:
        if doc is None:
            return None
        return doc.get_props()
