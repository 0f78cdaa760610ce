# planboard/utils/config.py
from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict

from .paths import DEFAULT_DB_PATH, config_dir, env_db_path

SETTINGS_FILENAME = "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "database": {
        "path": str(DEFAULT_DB_PATH),
    },
    "logging": {
        "level": "INFO",
    },
}

_log = logging.getLogger("planboard.config")


def settings_file() -> Path:
    return config_dir() / SETTINGS_FILENAME


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Path | None = None) -> Dict[str, Any]:
    path = path or settings_file()
    if not path.exists():
        return copy.deepcopy(_DEFAULTS)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        _log.warning("Ignoring unreadable settings %s: %s", path, exc)
        return copy.deepcopy(_DEFAULTS)
    if not isinstance(data, dict):
        _log.warning("Ignoring settings %s: top level is not an object", path)
        return copy.deepcopy(_DEFAULTS)
    return _merge(_DEFAULTS, data)


def save_settings(data: Dict[str, Any], path: Path | None = None) -> None:
    path = path or settings_file()
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def resolve_db_path(explicit: str | Path | None = None, settings: Dict[str, Any] | None = None) -> Path:
    """explicit argument > PLANBOARD_DB > settings.json > XDG default"""
    if explicit:
        return Path(explicit).expanduser()
    from_env = env_db_path()
    if from_env is not None:
        return from_env
    settings = settings if settings is not None else load_settings()
    configured = (settings.get("database") or {}).get("path")
    return Path(configured).expanduser() if configured else DEFAULT_DB_PATH
