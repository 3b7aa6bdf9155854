"""Collect clippings of every book in the reading history."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Iterable, Optional

from clippings.config import AppConfig
from clippings.parsing.titles import extract_title_author

from .merger import HighlightBookmarkMerger
from .models import Book, HistoryRecord
from .sidecar import LuaSidecarStore, SidecarError, SidecarStore, iter_history_sources

log = logging.getLogger(__name__)

_SIDECAR_NAME_RE = re.compile(r".+\.lua$")

TitleExtractor = Callable[[str, Path], tuple[str, Optional[str]]]


class ClippingAggregator:
    def __init__(
        self,
        config: AppConfig,
        store: Optional[SidecarStore] = None,
        merger: Optional[HighlightBookmarkMerger] = None,
        title_extractor: TitleExtractor = extract_title_author,
    ) -> None:
        self._config = config
        self._store = store or LuaSidecarStore()
        self._merger = merger or HighlightBookmarkMerger(config.bookmark_templates)
        self._extract_title = title_extractor

    def aggregate(self, sources: Optional[Iterable[HistoryRecord]] = None) -> dict[str, Book]:
        """Return books keyed by title.

        A later book with the same title replaces an earlier one.
        """
        if sources is None:
            sources = iter_history_sources(self._config)
        clippings: dict[str, Book] = {}
        for record in sources:
            self.parse_history_record(clippings, record)
        log.info("Collected clippings from %d books", len(clippings))
        return clippings

    def parse_history_record(self, clippings: dict[str, Book], record: HistoryRecord) -> None:
        sidecar_path, doc_file = Path(record.sidecar_path), Path(record.file)
        if not sidecar_path.is_file() or not _SIDECAR_NAME_RE.match(sidecar_path.name):
            return
        if not doc_file.is_file():
            log.debug("Document missing for %s", sidecar_path)
            return

        try:
            stored = self._store.load(sidecar_path)
        except SidecarError as e:
            log.warning("Cannot load sidecar %s: %s", sidecar_path, e)
            return
        if stored is None:
            log.warning(
                "An empty history file %s has been found. The book associated is %s",
                sidecar_path,
                doc_file,
            )
            return
        if stored.highlight is None:
            return

        title, author = self._extract_title(doc_file.stem, doc_file)
        book = Book(file=doc_file, title=title, author=author)
        clippings[title] = book
        self._merger.merge(stored.highlight, stored.bookmarks, book)
