"""JSON persistence for the timer list."""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from countdown.core.errors import PersistenceError
from countdown.core.timer import ZERO, Timer
from countdown.logger import get_logger

_LOGGER = get_logger()

# Other writers trim trailing zeros or emit nanoseconds; datetime wants exactly six digits.
_FRACTION_RE = re.compile(r"\.(\d+)")
_NANOS_PER_MICRO = 1000


def to_nanos(value: timedelta) -> int:
    return (value // timedelta(microseconds=1)) * _NANOS_PER_MICRO


def from_nanos(value: int) -> timedelta:
    return timedelta(microseconds=value // _NANOS_PER_MICRO)


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def parse_timestamp(text: str) -> datetime:
    cleaned = _FRACTION_RE.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), text.strip())
    if cleaned.endswith(("Z", "z")):
        cleaned = cleaned[:-1] + "+00:00"
    parsed = datetime.fromisoformat(cleaned)
    return parsed.astimezone()


def timer_to_dict(timer: Timer) -> dict[str, Any]:
    return {
        "name": timer.name,
        "end": format_timestamp(timer.end),
        "paused": timer.paused,
        "remaining": to_nanos(timer.remaining),
        "duration": to_nanos(timer.duration),
    }


def timer_from_dict(raw: Any) -> Timer:
    if not isinstance(raw, dict):
        raise PersistenceError(f"timer entry must be an object, got {type(raw).__name__}")
    try:
        name = raw["name"]
        end = parse_timestamp(raw["end"])
        paused = raw.get("paused", False)
        remaining = from_nanos(int(raw.get("remaining", 0)))
        duration = from_nanos(int(raw.get("duration", 0)))
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceError(f"invalid timer entry: {exc}") from exc
    if not isinstance(name, str) or not isinstance(paused, bool):
        raise PersistenceError("invalid timer entry: bad name or paused flag")
    return Timer(
        name=name,
        end=end,
        duration=duration,
        paused=paused,
        remaining=max(ZERO, remaining),
    )


class TimerFile:
    """Reads and writes ``{"timers": [...]}`` at a fixed path."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def mtime(self) -> float | None:
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"cannot stat {self.path}: {exc}") from exc

    def load(self) -> list[Timer]:
        """Timers in file order; a missing file is an empty list."""
        try:
            raw_text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise PersistenceError(f"error loading timers: {exc}") from exc

        try:
            payload = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"error loading timers: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceError("error loading timers: top level must be an object")

        entries = payload.get("timers") or []
        if not isinstance(entries, list):
            raise PersistenceError("error loading timers: 'timers' must be a list")
        timers = [timer_from_dict(entry) for entry in entries]
        _LOGGER.debug("Loaded {} timer(s) from {}", len(timers), self.path)
        return timers

    def save(self, timers: list[Timer]) -> None:
        payload = {"timers": [timer_to_dict(timer) for timer in timers]}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"error saving timers: {exc}") from exc
        _LOGGER.debug("Saved {} timer(s) to {}", len(timers), self.path)
