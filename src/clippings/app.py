"""Clippings - collect reader highlights per book."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from clippings.config import AppConfig, load_config
from clippings.library.aggregator import ClippingAggregator
from clippings.library.models import Book


def _setup_logging(config: AppConfig) -> None:
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("clippings")
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)


def format_summary(book: Book) -> str:
    author = f" - {book.author}" if book.author else ""
    images = sum(1 for e in book.entries if e.image is not None)
    line = f"{book.title}{author}: {len(book.entries)} entries"
    if images:
        line += f" ({images} images)"
    return line


def main(argv: Optional[list[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    reader_dir = Path(args[0]).expanduser() if args else None

    config = load_config(reader_dir=reader_dir)
    _setup_logging(config)

    clippings = ClippingAggregator(config).aggregate()
    for title in sorted(clippings):
        print(format_summary(clippings[title]))


if __name__ == "__main__":
    main()
