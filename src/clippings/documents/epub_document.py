"""EPUB metadata via ebooklib."""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Optional

from ebooklib import epub

from .base import BaseDocument, DocumentError, DocumentProps


class EpubDocument(BaseDocument):
    """Metadata-only handle; reflowable highlights always carry text."""

    SUPPORTED_EXTENSIONS = (".epub",)

    def __init__(self, book: Optional[epub.EpubBook]) -> None:
        self._book = book

    @classmethod
    def load(cls, file_path: Path) -> EpubDocument:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore")
                book = epub.read_epub(str(file_path), options={"ignore_ncx": True})
        except Exception as e:
            raise DocumentError(f"{type(e).__name__}: {e}") from e
        return cls(book)

    def get_props(self) -> Optional[DocumentProps]:
        if self._book is None:
            return None
        titles = self._get_meta_values(self._book, "title")
        creators = self._get_meta_values(self._book, "creator")
        return DocumentProps(
            title=titles[0] if titles else "",
            authors=", ".join(creators) or None,
        )

    def close(self) -> None:
        self._book = None

    @staticmethod
    def _get_meta_values(book: epub.EpubBook, field: str) -> list[str]:
        values = []
        for val in book.get_metadata("DC", field):
            if isinstance(val, tuple):
                val = val[0]
            if val:
                values.append(str(val).strip())
        return values
