"""Classification of raw annotation header lines."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping, Optional

from clippings.library.models import BOOKMARK, HIGHLIGHT, NOTE, ClassifiedInfo

from .timestamps import TimeParser

KEYWORDS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        HIGHLIGHT: ("Highlight", "标注"),
        NOTE: ("Note", "笔记"),
        BOOKMARK: ("Bookmark", "书签"),
    }
)

_SPLIT_RE = re.compile(r"^(.+?)\s*\|\s*(.+)$", re.DOTALL)
_LOCATION_RE = re.compile(r"\d+(?:-\d+)?")


def clean_text(line: Optional[str]) -> str:
    return (line or "").strip()


class EntryClassifier:
    """Split lines like ``Highlight[12-15] | 2020-05-01 12:30:45`` into
    category, location and time."""

    def __init__(
        self,
        keywords: Mapping[str, tuple[str, ...]] = KEYWORDS,
        time_parser: Optional[TimeParser] = None,
    ) -> None:
        self._keywords = MappingProxyType(
            {category: tuple(words) for category, words in keywords.items()}
        )
        self._time_parser = time_parser or TimeParser()

    def classify(self, line: Optional[str]) -> ClassifiedInfo:
        m = _SPLIT_RE.match(line or "")
        part1, part2 = (m.group(1).strip(), m.group(2).strip()) if m else (None, None)

        category = self._match_category(part1)
        location = None
        if category and part1:
            loc = _LOCATION_RE.search(part1)
            location = loc.group(0) if loc else None

        return ClassifiedInfo(
            category=category,
            location=location,
            time=self._time_parser.parse(part2 or ""),
        )

    def _match_category(self, part: Optional[str]) -> Optional[str]:
        if not part:
            return None
        for category, words in self._keywords.items():
            if any(word in part for word in words):
                return category
        return None
