"""Paged documents via PyMuPDF."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

import pymupdf

from clippings.library.models import Position

from .base import BaseDocument, DocumentError, DocumentProps

log = logging.getLogger(__name__)

# drawer mode -> annotation drawn over the clip before rendering
_DRAWER_ANNOTS = {
    "lighten": "add_highlight_annot",
    "underscore": "add_underline_annot",
    "strikeout": "add_strikeout_annot",
}


class PdfDocument(BaseDocument):
    SUPPORTED_EXTENSIONS = (".pdf", ".xps", ".oxps", ".cbz", ".fb2", ".mobi")

    CLIP_ZOOM = 2.0

    def __init__(self, doc: pymupdf.Document) -> None:
        self._doc = doc

    @classmethod
    def load(cls, file_path: Path) -> PdfDocument:
        try:
            doc = pymupdf.open(str(file_path))
        except (RuntimeError, ValueError, OSError) as e:
            raise DocumentError(str(e)) from e
        if doc.needs_pass:
            doc.close()
            raise DocumentError("password protected")
        return cls(doc)

    def get_props(self) -> Optional[DocumentProps]:
        metadata = self._doc.metadata or {}
        return DocumentProps(
            title=(metadata.get("title") or "").strip(),
            author=(metadata.get("author") or "").strip() or None,
        )

    def render_clip(
        self,
        pos0: Position,
        pos1: Position,
        pboxes: Sequence[dict[str, float]] = (),
        drawer: Optional[str] = None,
    ) -> Optional[bytes]:
        page_no = pos0.page or pos1.page
        if not page_no or not 1 <= page_no <= len(self._doc):
            return None
        try:
            return self._render(self._doc[page_no - 1], pos0, pos1, pboxes, drawer)
        except (RuntimeError, ValueError) as e:
            log.warning("Cannot render page %d: %s", page_no, e)
            return None

    def _render(
        self,
        page: pymupdf.Page,
        pos0: Position,
        pos1: Position,
        pboxes: Sequence[dict[str, float]],
        drawer: Optional[str],
    ) -> Optional[bytes]:
        boxes = self._boxes(pboxes)
        if boxes:
            clip = pymupdf.Rect(boxes[0])
            for box in boxes[1:]:
                clip |= box
        else:
            clip = pymupdf.Rect(
                min(pos0.x, pos1.x),
                min(pos0.y, pos1.y),
                max(pos0.x, pos1.x),
                max(pos0.y, pos1.y),
            )
        clip &= page.rect
        if clip.is_empty:
            return None

        annot_method = _DRAWER_ANNOTS.get(drawer or "")
        if annot_method and self._doc.is_pdf:
            getattr(page, annot_method)(boxes or [clip])

        pix = page.get_pixmap(
            matrix=pymupdf.Matrix(self.CLIP_ZOOM, self.CLIP_ZOOM), clip=clip
        )
        return pix.tobytes("png")

    @staticmethod
    def _boxes(pboxes: Sequence[dict[str, float]]) -> list[pymupdf.Rect]:
        rects: list[pymupdf.Rect] = []
        for box in pboxes:
            try:
                x, y, w, h = (float(box[k]) for k in ("x", "y", "w", "h"))
            except (KeyError, TypeError, ValueError):
                continue
            rects.append(pymupdf.Rect(x, y, x + w, y + h))
        return rects

    def close(self) -> None:
        self._doc.close()
