from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable

from countdown.core.errors import TimerIndexError, ValidationError
from countdown.core.store import TimerStore
from countdown.core.timer import Timer, TimerStatus


class FilterMode(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    PAUSED = "paused"
    DONE = "done"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def next(self) -> "FilterMode":
        modes = list(FilterMode)
        return modes[(modes.index(self) + 1) % len(modes)]


_STATUS_FOR_FILTER = {
    FilterMode.ACTIVE: TimerStatus.ACTIVE,
    FilterMode.PAUSED: TimerStatus.PAUSED,
    FilterMode.DONE: TimerStatus.DONE,
}


def parse_filter(text: str | None) -> FilterMode:
    """Map ``active``/``--active`` and friends to a filter; empty means ALL."""
    if not text:
        return FilterMode.ALL
    try:
        return FilterMode(text.lstrip("-").lower())
    except ValueError:
        raise ValidationError(f"unknown filter: {text}") from None


def matches(timer: Timer, filter_mode: FilterMode, now: datetime) -> bool:
    if filter_mode is FilterMode.ALL:
        return True
    return timer.status(now) is _STATUS_FOR_FILTER[filter_mode]


def visible(timers: Iterable[Timer], filter_mode: FilterMode, now: datetime) -> list[Timer]:
    return [timer for timer in timers if matches(timer, filter_mode, now)]


def clamp_cursor(cursor: int, visible_count: int) -> int:
    if visible_count <= 0:
        return 0
    return max(0, min(cursor, visible_count - 1))


def visible_position(store: TimerStore, filter_mode: FilterMode, timer_id: int, now: datetime) -> int:
    for position, timer in enumerate(visible(store, filter_mode, now)):
        if timer.id == timer_id:
            return position
    return -1


def actual_index(store: TimerStore, filter_mode: FilterMode, cursor: int, now: datetime) -> int:
    """Store index of the timer under ``cursor`` in the filtered view, or -1."""
    shown = visible(store, filter_mode, now)
    if cursor < 0 or cursor >= len(shown):
        return -1
    return store.index_of(shown[cursor].id)


def resolve_cli_index(store: TimerStore, filter_mode: FilterMode, position: int, now: datetime) -> int:
    """Resolve a 1-based index typed on the command line."""
    if position < 1:
        raise TimerIndexError("index must be >= 1")
    shown = visible(store, filter_mode, now)
    if position > len(shown):
        raise TimerIndexError(f"index {position} out of range (filter shows {len(shown)} timer(s))")
    index = store.index_of(shown[position - 1].id)
    if index < 0:
        raise TimerIndexError("timer not found")
    return index
