# Rev 0.2.0

"""Paths and XDG helpers (Rev 0.2.0)
- Follows the XDG Base Directory layout for data and config (logs: see logging_setup)
- DB lives under $XDG_DATA_HOME/planboard unless PLANBOARD_DB points elsewhere
"""
from __future__ import annotations
import os
from pathlib import Path


APP_NAME = "planboard"


XDG_DATA_HOME = Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))
XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


DATA_DIR = XDG_DATA_HOME / APP_NAME
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME


DEFAULT_DB_PATH = DATA_DIR / "planboard.db"


def env_db_path() -> Path | None:
    raw = os.environ.get("PLANBOARD_DB", "").strip()
    return Path(raw).expanduser() if raw else None


def config_dir() -> Path:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return CONFIG_DIR
