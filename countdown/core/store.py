from __future__ import annotations

from datetime import datetime, timedelta
from itertools import count
from typing import Iterable, Iterator

from countdown.core.errors import EligibilityError, TimerIndexError, ValidationError
from countdown.core.timer import ZERO, Timer


class TimerStore:
    """Ordered collection of timers and the only place they are mutated.

    Every successful mutation sets ``dirty``; the caller clears it after a save.
    """

    def __init__(self, timers: Iterable[Timer] = ()) -> None:
        self._ids = count(1)
        self._timers: list[Timer] = []
        self.dirty = False
        for timer in timers:
            self._adopt(timer)

    def __len__(self) -> int:
        return len(self._timers)

    def __iter__(self) -> Iterator[Timer]:
        return iter(self._timers)

    def __getitem__(self, index: int) -> Timer:
        return self._timers[self._check_index(index)]

    @property
    def timers(self) -> list[Timer]:
        return list(self._timers)

    def _adopt(self, timer: Timer) -> Timer:
        timer.id = next(self._ids)
        self._timers.append(timer)
        return timer

    def _check_index(self, index: int) -> int:
        if index < 0 or index >= len(self._timers):
            raise TimerIndexError(f"timer index {index} out of range ({len(self._timers)} timer(s))")
        return index

    def index_of(self, timer_id: int) -> int:
        for index, timer in enumerate(self._timers):
            if timer.id == timer_id:
                return index
        return -1

    def add(self, name: str, duration: timedelta, now: datetime) -> Timer:
        _require_valid(name, duration)
        timer = self._adopt(Timer(name=name, end=now + duration, duration=duration))
        self.dirty = True
        return timer

    def remove(self, index: int) -> Timer:
        timer = self._timers.pop(self._check_index(index))
        self.dirty = True
        return timer

    def remove_where(self, predicate) -> int:
        survivors = [timer for timer in self._timers if not predicate(timer)]
        removed = len(self._timers) - len(survivors)
        if removed:
            self._timers = survivors
            self.dirty = True
        return removed

    def swap(self, index: int) -> bool:
        """Exchange positions ``index`` and ``index + 1``; False at the boundaries."""
        if index < 0 or index + 1 >= len(self._timers):
            return False
        self._timers[index], self._timers[index + 1] = self._timers[index + 1], self._timers[index]
        self.dirty = True
        return True

    def pause(self, index: int, now: datetime) -> Timer:
        timer = self[index]
        if timer.paused:
            raise EligibilityError(f'timer "{timer.name}" is already paused')
        if timer.end <= now:
            raise EligibilityError("cannot pause: timer already done")
        timer.remaining = timer.end - now
        timer.paused = True
        self.dirty = True
        return timer

    def resume(self, index: int, now: datetime) -> Timer:
        timer = self[index]
        if not timer.paused:
            raise EligibilityError(f'timer "{timer.name}" is already active')
        if timer.remaining <= ZERO:
            raise EligibilityError("cannot resume: no remaining time")
        timer.end = now + timer.remaining
        timer.paused = False
        timer.remaining = ZERO
        self.dirty = True
        return timer

    def restart(self, index: int, now: datetime) -> Timer:
        timer = self[index]
        if timer.duration <= ZERO:
            raise EligibilityError("cannot restart: timer has no duration")
        timer.arm(now)
        self.dirty = True
        return timer

    def edit(self, index: int, name: str, duration: timedelta, now: datetime) -> Timer:
        """Replace name and duration; editing always re-arms the timer."""
        timer = self[index]
        _require_valid(name, duration)
        timer.name = name
        timer.duration = duration
        timer.arm(now)
        self.dirty = True
        return timer

    def rename(self, index: int, name: str) -> Timer:
        timer = self[index]
        if not name.strip():
            raise ValidationError("name cannot be empty")
        timer.name = name
        self.dirty = True
        return timer

    def clear(self) -> int:
        removed = len(self._timers)
        self._timers = []
        if removed:
            self.dirty = True
        return removed

    def replace_all(self, timers: Iterable[Timer]) -> None:
        """Swap in a freshly loaded list; ids are reassigned and dirty is reset."""
        self._timers = []
        for timer in timers:
            self._adopt(timer)
        self.dirty = False


def _require_valid(name: str, duration: timedelta) -> None:
    if not name.strip():
        raise ValidationError("name cannot be empty")
    if duration <= ZERO:
        raise ValidationError("duration must be positive")
