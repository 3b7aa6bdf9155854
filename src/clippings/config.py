"""Configuration management via .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_BOOKMARK_TEMPLATES: tuple[str, ...] = ("Page %1 %2 @ %3",)


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class AppConfig:
    # Reader data
    reader_dir: Path = field(default_factory=lambda: _xdg_config_home() / "koreader")
    history_dir: Path = field(init=False)
    history_file: Path = field(init=False)

    # Own paths
    data_dir: Path = field(default_factory=lambda: _xdg_data_home() / "clippings")
    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "clippings")
    log_path: Path = field(init=False)

    # Bookmark auto-text, %1 = page, %2 = quoted text, %3 = timestamp
    bookmark_templates: tuple[str, ...] = DEFAULT_BOOKMARK_TEMPLATES

    def __post_init__(self) -> None:
        self.reader_dir = Path(self.reader_dir)
        self.history_dir = self.reader_dir / "history"
        self.history_file = self.reader_dir / "history.lua"
        self.log_path = self.data_dir / "clippings.log"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)


def load_config(
    env_path: Optional[Path] = None, reader_dir: Optional[Path] = None
) -> AppConfig:
    """Load config from .env file. Searches CWD then config dir."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "clippings" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    defaults = AppConfig()
    templates = defaults.bookmark_templates
    extra_template = os.getenv("CLIPPINGS_BOOKMARK_TEMPLATE", "")
    if extra_template:
        templates = (extra_template,) + templates

    if reader_dir is None:
        env_dir = os.getenv("CLIPPINGS_READER_DIR", "")
        reader_dir = Path(env_dir).expanduser() if env_dir else defaults.reader_dir

    return AppConfig(reader_dir=reader_dir, bookmark_templates=templates)
