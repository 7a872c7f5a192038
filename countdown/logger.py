"""
Logging setup for countdown.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from countdown.paths import data_dir

_LOG_INITIALISED = False


def default_log_path() -> Path:
    return data_dir() / "countdown.log"


def configure(log_path: Optional[Path] = None, *, console: bool = False) -> None:
    """
    Configure loguru once per process.

    The TUI owns the terminal, so console output is only enabled for CLI runs;
    everything at DEBUG and above goes to a rotating file sink.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    target = log_path or default_log_path()
    _logger.remove()
    if console and sys.stderr is not None:
        _logger.add(sys.stderr, level="WARNING", format="{level}: {message}")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            target,
            level="DEBUG",
            rotation="1 MB",
            retention=3,
            encoding="utf-8",
            backtrace=True,
            diagnose=False,
        )
    except OSError as exc:
        _logger.warning("Log file {} unavailable: {}", target, exc)
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    return _logger
