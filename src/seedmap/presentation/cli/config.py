"""CLI configuration helpers for generation defaults."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict

_DEFAULTS: Dict[str, int] = {
    "layer_count": 15,
    "min_path_width": 2,
    "max_path_width": 3,
}
_MIN_VALUES: Dict[str, int] = {
    "layer_count": 2,
    "min_path_width": 1,
    "max_path_width": 1,
}


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Seedmap"
        return Path.home() / "Seedmap"
    return Path.home() / ".config" / "seedmap"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def default_config() -> Dict[str, int]:
    return dict(_DEFAULTS)


def _normalize(raw: object) -> Dict[str, int]:
    config = default_config()
    if not isinstance(raw, dict):
        return config
    for key, minimum in _MIN_VALUES.items():
        value = raw.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value >= minimum:
            config[key] = value
    if config["max_path_width"] < config["min_path_width"]:
        config["max_path_width"] = config["min_path_width"]
    return config


def load_config(path: Path | None = None) -> Dict[str, int]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default_config()
    except (OSError, ValueError):
        return default_config()
    return _normalize(raw)


def save_config(config: Dict[str, int], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = _normalize(config)
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
