"""Rendered image clips for highlights that carry no text."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from clippings.library.models import Image, Position

from .base import Opener, document_session, open_document

log = logging.getLogger(__name__)


def request_clip(
    file: Path,
    pos0: Position,
    pos1: Position,
    pboxes: Sequence[dict[str, float]] = (),
    drawer: Optional[str] = None,
    opener: Opener = open_document,
) -> Optional[Image]:
    """Render the highlighted region of ``file`` and hash the PNG."""
    with document_session(file, opener) as doc:
        if doc is None:
            return None
        payload = doc.render_clip(pos0, pos1, pboxes, drawer)
    if not payload:
        log.debug("No clip rendered for %s page %s", file, pos0.page)
        return None
    return Image.from_payload(payload)
