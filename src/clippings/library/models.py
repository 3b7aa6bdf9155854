"""Data models for extracted clippings."""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

HIGHLIGHT = "highlight"
NOTE = "note"
BOOKMARK = "bookmark"


@dataclass(frozen=True)
class Image:
    """Rendered clip of a highlighted region."""

    payload: bytes  # PNG data
    hash: str  # MD5 of payload

    @classmethod
    def from_payload(cls, payload: bytes) -> Image:
        return cls(payload=payload, hash=hashlib.md5(payload).hexdigest())


@dataclass(frozen=True)
class Entry:
    """A single normalized annotation."""

    page: int
    category: str = HIGHLIGHT
    time: Optional[float] = None  # epoch seconds, local time
    text: str = ""
    chapter: Optional[str] = None
    note: Optional[str] = None
    image: Optional[Image] = None

    @property
    def has_content(self) -> bool:
        return bool(self.text) or self.image is not None


@dataclass
class Book:
    file: Path
    title: str
    author: Optional[str] = None
    entries: list[Entry] = field(default_factory=list)


@dataclass(frozen=True)
class ClassifiedInfo:
    category: Optional[str] = None
    location: Optional[str] = None
    time: Optional[float] = None


# ── Raw sidecar records ────────────────────────────────


@dataclass(frozen=True)
class Position:
    """Edge of a highlight in page coordinates."""

    x: float
    y: float
    page: Optional[int] = None  # missing in reflowing mode
    zoom: Optional[float] = None
    rotation: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional[Position]:
        """None unless both coordinates are numbers."""
        if not isinstance(data, dict):
            return None
        x, y = _number(data.get("x")), _number(data.get("y"))
        if x is None or y is None:
            return None
        page = _number(data.get("page"))
        rotation = _number(data.get("rotation"))
        return cls(
            x=x,
            y=y,
            page=int(page) if page is not None else None,
            zoom=_number(data.get("zoom")),
            rotation=int(rotation) if rotation is not None else None,
        )


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class TextHighlight:
    datetime: Optional[str]
    text: str
    chapter: Optional[str] = None


@dataclass(frozen=True)
class PositionalHighlight:
    """Highlight with no text, only a region to render."""

    datetime: Optional[str]
    pos0: Position
    pos1: Position
    text: str = ""
    chapter: Optional[str] = None
    pboxes: tuple[dict[str, float], ...] = ()
    drawer: Optional[str] = None


RawHighlight = Union[TextHighlight, PositionalHighlight]


@dataclass(frozen=True)
class RawBookmark:
    datetime: Optional[str]
    text: Optional[str] = None
    page: Any = None  # page number or xpointer
    notes: Optional[str] = None


def as_list(value: Any) -> list[Any]:
    """Values of a Lua sequence table, in index order."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if not isinstance(value, dict):
        return []
    indexed = [(k, v) for k, v in value.items() if isinstance(k, int)]
    return [v for _, v in sorted(indexed, key=lambda kv: kv[0])]


def raw_highlight_from_dict(data: dict[str, Any]) -> RawHighlight:
    """Resolve a persisted highlight table into its variant."""
    text = data.get("text")
    text = text if isinstance(text, str) else ""
    datetime = _str_or_none(data.get("datetime"))
    chapter = _str_or_none(data.get("chapter"))
    if not text:
        pos0 = Position.from_dict(data.get("pos0"))
        pos1 = Position.from_dict(data.get("pos1"))
        if pos0 is not None and pos1 is not None:
            boxes = as_list(data.get("pboxes"))
            return PositionalHighlight(
                datetime=datetime,
                pos0=pos0,
                pos1=pos1,
                chapter=chapter,
                pboxes=tuple(b for b in boxes if isinstance(b, dict)),
                drawer=_str_or_none(data.get("drawer")),
            )
    return TextHighlight(datetime=datetime, text=text, chapter=chapter)


def raw_bookmark_from_dict(data: dict[str, Any]) -> RawBookmark:
    return RawBookmark(
        datetime=_str_or_none(data.get("datetime")),
        text=_str_or_none(data.get("text")),
        page=data.get("page"),
        notes=_str_or_none(data.get("notes")),
    )


@dataclass
class SidecarData:
    highlight: Optional[dict[int, list[RawHighlight]]] = None
    bookmarks: list[RawBookmark] = field(default_factory=list)


@dataclass(frozen=True)
class HistoryRecord:
    file: Path
    sidecar_path: Path
