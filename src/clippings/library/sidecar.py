"""Reader sidecar files and reading history.

Sidecar files are Lua chunks of the form ``return { ... }``. They are
evaluated in a fresh Lua runtime with an empty global environment and
converted to plain Python values: tables become dicts, strings are
decoded as UTF-8.

History comes from two places, legacy first:

* ``<reader_dir>/history/[<dir>] <name>.lua``: old per-book session files,
  which are themselves the sidecar of ``<dir>/<name>``; ``/`` in ``<dir>``
  is stored as ``#``.
* ``<reader_dir>/history.lua``: the read-history registry, a list of
  ``{file = ..., time = ...}`` tables whose sidecars live in
  ``<dir>/<stem>.sdr/metadata.<ext>.lua``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterator, Optional, Protocol

import lupa
from lupa import LuaRuntime

from clippings.config import AppConfig

from .models import (
    HistoryRecord,
    RawHighlight,
    SidecarData,
    as_list,
    raw_bookmark_from_dict,
    raw_highlight_from_dict,
)

log = logging.getLogger(__name__)

_LEGACY_NAME_RE = re.compile(r"^\[([^\]]*)\] (.+)\.lua$", re.DOTALL)

_LOADER = 'function(source, name) return load(source, name, "t", {}) end'


class SidecarError(Exception):
    """A sidecar file could not be read or evaluated."""


class SidecarStore(Protocol):
    def load(self, path: Path) -> Optional[SidecarData]: ...


def _key(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return _to_python(value)


def _to_python(value: Any) -> Any:
    if lupa.lua_type(value) == "table":
        return {_key(k): _to_python(v) for k, v in value.items()}
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _page_number(key: Any) -> Optional[int]:
    if isinstance(key, int):
        return key
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return None


def load_lua_table(path: Path) -> Optional[dict[Any, Any]]:
    """Evaluate a Lua data file and return the table it returns."""
    try:
        source = Path(path).read_bytes()
    except OSError as e:
        raise SidecarError(f"{path}: {e}") from e

    lua = LuaRuntime(encoding=None, unpack_returned_tuples=True)
    # text chunks only; no os, io or require
    loader = lua.eval(_LOADER)
    loaded = loader(source, ("=" + Path(path).name).encode("utf-8", "replace"))
    if isinstance(loaded, tuple):
        message = loaded[-1]
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        raise SidecarError(f"{path}: {message}")
    try:
        result = loaded()
    except lupa.LuaError as e:
        raise SidecarError(f"{path}: {e}") from e

    if result is None:
        return None
    if lupa.lua_type(result) != "table":
        kind = lupa.lua_type(result) or type(result).__name__
        raise SidecarError(f"{path}: expected a table, got {kind}")
    return _to_python(result)


class LuaSidecarStore:
    def load(self, path: Path) -> Optional[SidecarData]:
        """Load a sidecar file; None if it returns nothing.

        Raises SidecarError on malformed content.
        """
        stored = load_lua_table(path)
        if stored is None:
            return None
        try:
            return self._decode(stored, path)
        except (TypeError, ValueError) as e:
            raise SidecarError(f"{path}: {e}") from e

    def _decode(self, stored: dict[Any, Any], path: Path) -> SidecarData:
        highlight: Optional[dict[int, list[RawHighlight]]] = None
        raw_highlight = stored.get("highlight")
        if isinstance(raw_highlight, dict):
            highlight = {}
            for key, items in raw_highlight.items():
                page = _page_number(key)
                if page is None:
                    log.debug("Skipping highlight key %r in %s", key, path)
                    continue
                highlight[page] = [
                    raw_highlight_from_dict(item)
                    for item in as_list(items)
                    if isinstance(item, dict)
                ]

        bookmarks = [
            raw_bookmark_from_dict(b)
            for b in as_list(stored.get("bookmarks"))
            if isinstance(b, dict)
        ]
        return SidecarData(highlight=highlight, bookmarks=bookmarks)


def sidecar_path_for(doc_file: Path) -> Path:
    doc_file = Path(doc_file)
    return doc_file.parent / f"{doc_file.stem}.sdr" / f"metadata{doc_file.suffix}.lua"


def document_path_from_history(name: str) -> Optional[Path]:
    """``[#books#dir#] file.pdf.lua`` -> ``/books/dir/file.pdf``."""
    m = _LEGACY_NAME_RE.match(name)
    if not m:
        return None
    return Path(m.group(1).replace("#", "/")) / m.group(2)


def iter_history_sources(config: AppConfig) -> Iterator[HistoryRecord]:
    if config.history_dir.is_dir():
        for history_file in sorted(config.history_dir.iterdir()):
            doc_file = document_path_from_history(history_file.name)
            if doc_file is not None:
                yield HistoryRecord(file=doc_file, sidecar_path=history_file)

    if not config.history_file.is_file():
        return
    try:
        hist = load_lua_table(config.history_file)
    except SidecarError as e:
        log.warning("Cannot read history %s: %s", config.history_file, e)
        return
    for item in as_list(hist):
        if isinstance(item, dict) and isinstance(item.get("file"), str):
            doc_file = Path(item["file"])
            yield HistoryRecord(file=doc_file, sidecar_path=sidecar_path_for(doc_file))
