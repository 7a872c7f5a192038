from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from countdown.core.duration import format_duration


ZERO = timedelta(0)


class TimerStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    DONE = "done"


def local_now() -> datetime:
    """Timezone-aware wall-clock time in the local zone."""
    return datetime.now().astimezone()


@dataclass
class Timer:
    """One named countdown.

    ``end`` is authoritative while running, ``remaining`` while paused.
    ``id`` is an in-memory identity assigned by the store; it is not persisted.
    """

    name: str
    end: datetime
    duration: timedelta
    paused: bool = False
    remaining: timedelta = ZERO
    id: int = 0

    def status(self, now: datetime) -> TimerStatus:
        if self.paused:
            return TimerStatus.PAUSED
        if now < self.end:
            return TimerStatus.ACTIVE
        return TimerStatus.DONE

    def is_active(self, now: datetime) -> bool:
        return self.status(now) is TimerStatus.ACTIVE

    def is_done(self, now: datetime) -> bool:
        return self.status(now) is TimerStatus.DONE

    def time_left(self, now: datetime) -> timedelta:
        if self.paused:
            return max(ZERO, self.remaining)
        return max(ZERO, self.end - now)

    def arm(self, now: datetime) -> None:
        self.end = now + self.duration
        self.paused = False
        self.remaining = ZERO

    def status_text(self, now: datetime) -> str:
        if self.status(now) is TimerStatus.DONE:
            return "Done"
        return format_duration(self.time_left(now))

    def end_time_text(self, now: datetime) -> str:
        status = self.status(now)
        if status is TimerStatus.PAUSED:
            return "(paused)"
        if status is TimerStatus.DONE:
            return f"+{format_duration(self.duration + (now - self.end))}"
        return format_end_time(self.end, now)


def format_end_time(end: datetime, now: datetime) -> str:
    """End time for the table, leaving out the date parts shared with ``now``."""
    end = end.astimezone(now.tzinfo)
    if end.date() == now.date():
        return end.strftime("%H:%M:%S")
    if (end.year, end.month) == (now.year, now.month):
        return f"{end.day} {end:%H:%M}"
    if end.year == now.year:
        return f"{end.day}/{end:%m %H:%M}"
    return f"{end.day}/{end:%m/%y %H:%M}"


def format_end_time_cli(end: datetime, now: datetime) -> str:
    end = end.astimezone(now.tzinfo)
    if end.date() == now.date():
        return end.strftime("%H:%M:%S")
    if (end.year, end.month) == (now.year, now.month):
        return f"{end:%b} {end.day} {end:%H:%M}"
    if end.year == now.year:
        return f"{end:%b} {end.day}"
    return end.strftime("%Y-%m-%d")
