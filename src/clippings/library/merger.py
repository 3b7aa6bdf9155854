"""Build per-book entries from raw highlights and bookmarks."""

from __future__ import annotations

import dataclasses
import logging
import re
from pathlib import Path
from typing import Callable, Iterable, Mapping, Optional, Sequence

from clippings.config import DEFAULT_BOOKMARK_TEMPLATES
from clippings.documents.clips import request_clip
from clippings.parsing.classifier import clean_text
from clippings.parsing.timestamps import TimeParser

from .models import (
    HIGHLIGHT,
    Book,
    Entry,
    Image,
    Position,
    PositionalHighlight,
    RawBookmark,
    RawHighlight,
)

log = logging.getLogger(__name__)

Clipper = Callable[
    [Path, Position, Position, Sequence[dict[str, float]], Optional[str]],
    Optional[Image],
]

_TEMPLATE_FIELDS = {
    "%1": r"\[?\d*\]?\d+",
    "%2": r"(.*)",
    "%3": r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}",
}
_PLACEHOLDER_RE = re.compile(r"(%[123])")


def compile_auto_text(template: str) -> re.Pattern[str]:
    """Turn a ``Page %1 %2 @ %3`` style template into a matching regex
    that captures the quoted text."""
    parts = _PLACEHOLDER_RE.split(template)
    pattern = "".join(_TEMPLATE_FIELDS.get(p, re.escape(p)) for p in parts)
    return re.compile(f"^{pattern}$", re.DOTALL)


class HighlightBookmarkMerger:
    def __init__(
        self,
        bookmark_templates: Iterable[str] = DEFAULT_BOOKMARK_TEMPLATES,
        time_parser: Optional[TimeParser] = None,
        clipper: Clipper = request_clip,
    ) -> None:
        self._auto_text = tuple(compile_auto_text(t) for t in bookmark_templates)
        self._time_parser = time_parser or TimeParser()
        self._clipper = clipper

    def merge(
        self,
        highlights: Mapping[int, Sequence[RawHighlight]],
        bookmarks: Sequence[RawBookmark],
        book: Book,
    ) -> None:
        """Append entries for every highlight with text or an image to
        ``book.entries``, then sort them by page."""
        for page, items in highlights.items():
            for item in items:
                entry = self._make_entry(page, item, bookmarks, book)
                if entry.has_content:
                    book.entries.append(entry)
        book.entries.sort(key=lambda e: e.page)
        log.debug("%s: %d entries", book.title, len(book.entries))

    def auto_text_quote(self, text: str) -> Optional[str]:
        for pattern in self._auto_text:
            m = pattern.match(text)
            if m:
                return m.group(1)
        return None

    def _make_entry(
        self,
        page: int,
        item: RawHighlight,
        bookmarks: Sequence[RawBookmark],
        book: Book,
    ) -> Entry:
        text = clean_text(item.text)
        image = None
        if isinstance(item, PositionalHighlight):
            image = self._clip(page, item, book.file)
        return Entry(
            page=page,
            category=HIGHLIGHT,
            time=self._time_parser.parse(item.datetime),
            text=text,
            chapter=item.chapter,
            note=self._find_note(item, text, bookmarks),
            image=image,
        )

    def _find_note(
        self, item: RawHighlight, text: str, bookmarks: Sequence[RawBookmark]
    ) -> Optional[str]:
        note = None
        for bookmark in bookmarks:
            if bookmark.datetime != item.datetime or not bookmark.text:
                continue
            quote = self.auto_text_quote(bookmark.text)
            if quote != text and bookmark.text != text:
                note = quote if quote is not None else bookmark.text
        return note

    def _clip(self, page: int, item: PositionalHighlight, file: Path) -> Optional[Image]:
        # reflowing mode leaves page out of positions
        pos0, pos1 = item.pos0, item.pos1
        if pos0.page is None:
            pos0 = dataclasses.replace(pos0, page=page)
        if pos1.page is None:
            pos1 = dataclasses.replace(pos1, page=page)
        return self._clipper(file, pos0, pos1, item.pboxes, item.drawer)
