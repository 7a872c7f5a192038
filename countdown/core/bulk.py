from __future__ import annotations

from datetime import datetime
from enum import Enum

from countdown.core.store import TimerStore
from countdown.core.timer import ZERO, Timer, TimerStatus


class BulkAction(str, Enum):
    PAUSE_ALL = "pause_all"
    RESUME_ALL = "resume_all"
    DELETE_DONE = "delete_done"
    RESTART_ALL = "restart_all"
    RESTART_ACTIVE = "restart_active"
    RESTART_PAUSED = "restart_paused"
    DELETE_ALL = "delete_all"


def pause_all(store: TimerStore, now: datetime) -> int:
    count = 0
    for index, timer in enumerate(store):
        if timer.status(now) is TimerStatus.ACTIVE:
            store.pause(index, now)
            count += 1
    return count


def resume_all(store: TimerStore, now: datetime) -> int:
    count = 0
    for index, timer in enumerate(store):
        if timer.paused and timer.remaining > ZERO:
            store.resume(index, now)
            count += 1
    return count


def delete_done(store: TimerStore, now: datetime) -> int:
    return store.remove_where(lambda timer: timer.is_done(now))


def delete_all(store: TimerStore, now: datetime) -> int:
    return store.clear()


def _restart_matching(store: TimerStore, now: datetime, predicate) -> int:
    targets = [
        index
        for index, timer in enumerate(store)
        if timer.duration > ZERO and predicate(timer)
    ]
    for index in targets:
        store.restart(index, now)
    return len(targets)


def restart_all(store: TimerStore, now: datetime) -> int:
    return _restart_matching(store, now, lambda timer: True)


def restart_active(store: TimerStore, now: datetime) -> int:
    return _restart_matching(store, now, lambda timer: timer.is_active(now))


def restart_paused(store: TimerStore, now: datetime) -> int:
    return _restart_matching(store, now, lambda timer: timer.paused)


_HANDLERS = {
    BulkAction.PAUSE_ALL: pause_all,
    BulkAction.RESUME_ALL: resume_all,
    BulkAction.DELETE_DONE: delete_done,
    BulkAction.RESTART_ALL: restart_all,
    BulkAction.RESTART_ACTIVE: restart_active,
    BulkAction.RESTART_PAUSED: restart_paused,
    BulkAction.DELETE_ALL: delete_all,
}


def run_bulk(store: TimerStore, action: BulkAction, now: datetime) -> int:
    """Apply ``action`` to every eligible timer and return how many were affected."""
    return _HANDLERS[action](store, now)


def eligible(timer: Timer, action: BulkAction, now: datetime) -> bool:
    """Whether ``timer`` would be touched by ``action``; used for confirm prompts."""
    if action is BulkAction.PAUSE_ALL:
        return timer.is_active(now)
    if action is BulkAction.RESUME_ALL:
        return timer.paused and timer.remaining > ZERO
    if action is BulkAction.DELETE_DONE:
        return timer.is_done(now)
    if action is BulkAction.RESTART_ACTIVE:
        return timer.duration > ZERO and timer.is_active(now)
    if action is BulkAction.RESTART_PAUSED:
        return timer.duration > ZERO and timer.paused
    if action is BulkAction.DELETE_ALL:
        return True
    return timer.duration > ZERO
