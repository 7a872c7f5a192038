"""Polling for changes other processes make to the timer file."""

from __future__ import annotations

from datetime import datetime

from countdown.core.errors import PersistenceError
from countdown.core.session import Session
from countdown.data.storage import TimerFile
from countdown.logger import get_logger

_LOGGER = get_logger()

# A file that did not exist yet counts as older than any file that appears later.
NEVER = 0.0


class TimerFileWatcher:
    def __init__(self, timer_file: TimerFile, session: Session) -> None:
        self.timer_file = timer_file
        self.session = session
        self.last_mtime = self._mtime() or NEVER
        self._deferred_mtime: float | None = None

    def _mtime(self) -> float | None:
        try:
            return self.timer_file.mtime()
        except PersistenceError as exc:
            _LOGGER.warning("Cannot check timer file: {}", exc)
            return None

    def poll(self, now: datetime) -> bool:
        """Reload the session when the file changed on disk; True when it did."""
        mtime = self._mtime()
        if mtime is None or mtime <= self.last_mtime:
            return False
        if self.session.is_modal or self.session.store.dirty:
            if self._deferred_mtime != mtime:
                _LOGGER.info("Timer file changed on disk; reload deferred until local edits are settled")
                self._deferred_mtime = mtime
            return False
        try:
            timers = self.timer_file.load()
        except PersistenceError as exc:
            _LOGGER.warning("Ignoring unreadable external change: {}", exc)
            self.last_mtime = mtime
            return False
        if not self.session.reload(timers, now):
            return False
        self.last_mtime = mtime
        self._deferred_mtime = None
        return True
