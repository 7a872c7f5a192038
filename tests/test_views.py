from datetime import datetime, timedelta, timezone

import pytest

from countdown.core.errors import TimerIndexError, ValidationError
from countdown.core.store import TimerStore
from countdown.core.timer import Timer
from countdown.core.views import (
    FilterMode,
    actual_index,
    clamp_cursor,
    parse_filter,
    resolve_cli_index,
    visible,
    visible_position,
)


NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
MINUTES_10 = timedelta(minutes=10)


def mixed_store() -> TimerStore:
    return TimerStore(
        [
            Timer("running", NOW + MINUTES_10, MINUTES_10),
            Timer("finished", NOW - MINUTES_10, MINUTES_10),
            Timer("held", NOW + MINUTES_10, MINUTES_10, paused=True, remaining=MINUTES_10),
            Timer("running too", NOW + MINUTES_10, MINUTES_10),
        ]
    )


def test_filtered_views_partition_all() -> None:
    store = mixed_store()
    names = {mode: [timer.name for timer in visible(store, mode, NOW)] for mode in FilterMode}
    assert names[FilterMode.ALL] == ["running", "finished", "held", "running too"]
    assert names[FilterMode.ACTIVE] == ["running", "running too"]
    assert names[FilterMode.PAUSED] == ["held"]
    assert names[FilterMode.DONE] == ["finished"]
    partitioned = names[FilterMode.ACTIVE] + names[FilterMode.PAUSED] + names[FilterMode.DONE]
    assert sorted(partitioned) == sorted(names[FilterMode.ALL])


def test_actual_index_maps_filtered_cursor() -> None:
    store = mixed_store()
    assert actual_index(store, FilterMode.ACTIVE, 1, NOW) == 3
    assert actual_index(store, FilterMode.DONE, 0, NOW) == 1
    assert actual_index(store, FilterMode.PAUSED, 1, NOW) == -1
    assert actual_index(store, FilterMode.ALL, -1, NOW) == -1


def test_actual_index_tells_identical_timers_apart() -> None:
    end = NOW + MINUTES_10
    store = TimerStore([Timer("twin", end, MINUTES_10), Timer("twin", end, MINUTES_10)])
    assert actual_index(store, FilterMode.ALL, 0, NOW) == 0
    assert actual_index(store, FilterMode.ALL, 1, NOW) == 1
    assert visible_position(store, FilterMode.ALL, store[1].id, NOW) == 1


def test_clamp_cursor() -> None:
    assert clamp_cursor(5, 3) == 2
    assert clamp_cursor(-2, 3) == 0
    assert clamp_cursor(4, 0) == 0
    assert clamp_cursor(1, 3) == 1


def test_resolve_cli_index() -> None:
    store = mixed_store()
    assert resolve_cli_index(store, FilterMode.ALL, 3, NOW) == 2
    assert resolve_cli_index(store, FilterMode.ACTIVE, 2, NOW) == 3

    with pytest.raises(TimerIndexError, match="index must be >= 1"):
        resolve_cli_index(store, FilterMode.ALL, 0, NOW)
    with pytest.raises(TimerIndexError, match=r"index 5 out of range \(filter shows 2 timer\(s\)\)"):
        resolve_cli_index(store, FilterMode.ACTIVE, 5, NOW)


def test_parse_filter() -> None:
    assert parse_filter(None) is FilterMode.ALL
    assert parse_filter("--paused") is FilterMode.PAUSED
    assert parse_filter("Done") is FilterMode.DONE
    with pytest.raises(ValidationError):
        parse_filter("stale")


def test_filter_cycle_wraps() -> None:
    assert FilterMode.ALL.next() is FilterMode.ACTIVE
    assert FilterMode.DONE.next() is FilterMode.ALL
    assert FilterMode.PAUSED.label == "Paused"
