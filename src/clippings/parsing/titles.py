"""Book title and author heuristics."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, Optional, Union

from clippings.documents.base import DocumentProps, get_document_props

# Suffixes left behind in names written by older reader versions
DOCUMENT_EXTENSIONS = frozenset(
    [".pdf", ".djvu", ".epub", ".fb2", ".mobi", ".txt", ".html", ".doc"]
)

_PAREN_AUTHOR_RE = re.compile(r"(.*?)\s*\((.*)\)", re.DOTALL)
_DASH_AUTHOR_RE = re.compile(r"(.*?)\s*-\s*(.*)", re.DOTALL)

PropsLoader = Callable[[Path], Optional[DocumentProps]]


def extract_title_author(
    line: str,
    doc_path: Union[str, Path, None] = None,
    props_loader: PropsLoader = get_document_props,
) -> tuple[str, Optional[str]]:
    """Return ``(title, author)`` for a book.

    Document metadata wins when it carries a title. Otherwise the title is
    taken from ``line`` (usually the file name stem) in one of the forms
    ``Title (Author)`` or ``Title - Author``.
    """
    if doc_path is not None:
        props = props_loader(Path(doc_path))
        if props and props.title:
            return props.title, props.authors or props.author

    line = (line or "").strip()
    if line[-4:].lower() in DOCUMENT_EXTENSIONS:
        line = line[:-4]
    elif line[-5:].lower() in DOCUMENT_EXTENSIONS:
        line = line[:-5]

    m = _PAREN_AUTHOR_RE.match(line) or _DASH_AUTHOR_RE.match(line)
    if not m:
        return line.strip(), None
    title, author = m.group(1).strip(), m.group(2).strip()
    return title, author or None
