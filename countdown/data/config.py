"""Loading of the duration-adjustment config; bad input falls back to defaults."""

from __future__ import annotations

import json
from pathlib import Path

from countdown.core.adjust import AdjustConfig
from countdown.core.errors import ConfigError
from countdown.logger import get_logger

_LOGGER = get_logger()


def read_config(path: Path) -> AdjustConfig:
    """Strict read: raises ``ConfigError`` for unreadable or malformed files."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"malformed config file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"malformed config file {path}: expected an object")
    config = AdjustConfig.from_mapping(raw)
    if config.to_mapping() != {key: raw.get(key) for key in config.to_mapping()}:
        _LOGGER.warning("Config {} has missing or invalid fields, defaults used for them", path)
    return config


def save_config(path: Path, config: AdjustConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_mapping(), indent=2), encoding="utf-8")


def load_config(path: Path) -> AdjustConfig:
    """Never fails: a missing file is created with defaults, a broken one is ignored."""
    if not path.exists():
        config = AdjustConfig()
        try:
            save_config(path, config)
        except OSError as exc:
            _LOGGER.warning("Could not create default config {}: {}", path, exc)
        return config
    try:
        return read_config(path)
    except ConfigError as exc:
        _LOGGER.warning("{}; using defaults", exc)
        return AdjustConfig()
