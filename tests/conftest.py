"""Shared fixtures for tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest

from clippings.config import AppConfig


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    # set first so monkeypatch removes them even if load_dotenv adds them
    for name in ("CLIPPINGS_READER_DIR", "CLIPPINGS_BOOKMARK_TEMPLATE"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        reader_dir=tmp_path / "koreader",
        data_dir=tmp_path / "data",
        config_dir=tmp_path / "config",
    )


@pytest.fixture
def make_pdf() -> Callable[..., Path]:
    """Write a small PDF, optionally with title/author metadata."""
    import pymupdf

    def _make(
        path: Path,
        pages: int = 1,
        title: Optional[str] = None,
        author: Optional[str] = None,
    ) -> Path:
        doc = pymupdf.open()
        for i in range(pages):
            page = doc.new_page()
            page.insert_text((72, 72), f"Page {i + 1} text", fontsize=12)
        if title or author:
            doc.set_metadata({"title": title or "", "author": author or ""})
        path.parent.mkdir(parents=True, exist_ok=True)
        doc.save(str(path))
        doc.close()
        return path

    return _make


@pytest.fixture
def write_lua() -> Callable[[Path, str], Path]:
    def _write(path: Path, source: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return _write


SAMPLE_SIDECAR = """-- we can read Lua syntax here!
return {
    ["bookmarks"] = {
        [1] = {
            ["datetime"] = "2020-05-01 12:30:45",
            ["notes"] = "Page 12 Quoted @ 2020-05-01 12:30:45",
            ["page"] = 12,
            ["text"] = "Page 12 Remember this @ 2020-05-01 12:30:45",
        },
    },
    ["highlight"] = {
        [12] = {
            [1] = {
                ["chapter"] = "Chapter Two",
                ["datetime"] = "2020-05-01 12:30:45",
                ["text"] = "  Second highlight  ",
            },
        },
        [3] = {
            [1] = {
                ["chapter"] = "Chapter One",
                ["datetime"] = "2020-04-30 08:00:00",
                ["text"] = "First highlight",
            },
            [2] = {
                ["datetime"] = "2020-04-30 08:05:00",
                ["text"] = "",
            },
        },
    },
}
"""


@pytest.fixture
def sample_sidecar() -> str:
    return SAMPLE_SIDECAR
