from __future__ import annotations

import os
from pathlib import Path


def data_dir() -> Path:
    """Directory holding timers, config and the log; ``COUNTDOWN_HOME`` overrides it."""
    override = os.environ.get("COUNTDOWN_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "countdown"


def default_timers_path() -> Path:
    return data_dir() / "timers.json"


def default_config_path() -> Path:
    return data_dir() / "config.json"
