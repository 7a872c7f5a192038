from datetime import datetime, timedelta, timezone

from countdown.core.bulk import BulkAction
from countdown.core.errors import PersistenceError
from countdown.core.session import (
    Action,
    Browsing,
    ConfirmingBulk,
    ConfirmingDelete,
    ConfirmingRestart,
    Editing,
    Field,
    Outcome,
    Session,
)
from countdown.core.store import TimerStore
from countdown.core.timer import Timer
from countdown.core.views import FilterMode
from countdown.data.storage import timer_to_dict


NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
MINUTES_10 = timedelta(minutes=10)


class RecordingStorage:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.saved: list[list[Timer]] = []

    def save(self, timers: list[Timer]) -> None:
        if self.fail:
            raise PersistenceError("error saving timers: disk full")
        self.saved.append(timers)


def make_session(*timers: Timer, storage: RecordingStorage | None = None) -> Session:
    return Session(TimerStore(timers), storage=storage)


def three_timers() -> Session:
    return make_session(
        Timer("first", NOW + MINUTES_10, MINUTES_10),
        Timer("second", NOW - MINUTES_10, MINUTES_10),
        Timer("third", NOW + MINUTES_10, MINUTES_10),
    )


def snapshot(session: Session) -> list[dict]:
    return [timer_to_dict(timer) for timer in session.store]


def test_add_flow_creates_timer_and_selects_it() -> None:
    session = three_timers()
    session.cursor = 0
    assert session.dispatch(Action.ADD, NOW) is Outcome.HANDLED
    session.type_text("Meeting")
    session.dispatch(Action.SUBMIT, NOW)
    assert session.mode.focused is Field.DURATION
    session.type_text("30m")
    session.dispatch(Action.SUBMIT, NOW)

    assert isinstance(session.mode, Browsing)
    assert session.store[3].name == "Meeting"
    assert session.store[3].end == NOW + timedelta(minutes=30)
    assert session.store.dirty
    assert session.cursor == 3


def test_submit_with_blank_name_stays_on_name() -> None:
    session = make_session()
    session.dispatch(Action.ADD, NOW)
    assert session.dispatch(Action.SUBMIT, NOW) is Outcome.IGNORED
    assert session.mode.focused is Field.NAME
    assert session.mode.error


def test_invalid_duration_keeps_form_open() -> None:
    session = make_session()
    session.dispatch(Action.ADD, NOW)
    session.type_text("Tea")
    session.dispatch(Action.NEXT_FIELD, NOW)
    session.type_text("0s")
    session.dispatch(Action.SUBMIT, NOW)
    assert isinstance(session.mode, Editing)
    assert session.mode.error.startswith("Invalid:")
    assert len(session.store) == 0
    assert not session.store.dirty


def test_cancel_leaves_store_untouched() -> None:
    session = three_timers()
    before = snapshot(session)
    session.cursor = 2
    session.dispatch(Action.EDIT, NOW)
    session.type_text(" renamed")
    session.dispatch(Action.CANCEL, NOW)
    assert isinstance(session.mode, Browsing)
    assert snapshot(session) == before
    assert not session.store.dirty


def test_edit_prefills_and_rearms() -> None:
    session = make_session(Timer("tea", NOW + MINUTES_10, MINUTES_10, paused=True, remaining=MINUTES_10))
    session.dispatch(Action.EDIT, NOW)
    form = session.mode
    assert form == Editing(is_new=False, target_id=session.store[0].id, name="tea", duration_text="10m")

    later = NOW + timedelta(minutes=1)
    session.dispatch(Action.NEXT_FIELD, later)
    session.dispatch(Action.BACKSPACE, later)
    session.dispatch(Action.BACKSPACE, later)
    session.dispatch(Action.BACKSPACE, later)
    session.type_text("5m")
    session.dispatch(Action.SUBMIT, later)
    timer = session.store[0]
    assert timer.duration == timedelta(minutes=5)
    assert timer.end == later + timedelta(minutes=5)
    assert not timer.paused


def test_adjust_only_on_duration_field() -> None:
    session = make_session()
    session.dispatch(Action.ADD, NOW)
    session.dispatch(Action.INCREASE, NOW)
    session.dispatch(Action.DECREASE, NOW)
    assert session.mode.name == "+-"
    session.backspace()
    assert session.mode.name == "+"

    session.dispatch(Action.NEXT_FIELD, NOW)
    session.dispatch(Action.INCREASE, NOW)
    session.dispatch(Action.INCREASE, NOW)
    assert session.mode.duration_text == "2m"
    session.dispatch(Action.DECREASE, NOW)
    assert session.mode.duration_text == "1m"


def test_duration_field_accepts_only_duration_characters() -> None:
    session = make_session()
    session.dispatch(Action.ADD, NOW)
    session.dispatch(Action.PREV_FIELD, NOW)
    assert session.mode.focused is Field.DURATION
    session.type_text("1x H")
    assert session.mode.duration_text == "1 h"
    assert session.type_text("!") is Outcome.IGNORED


def test_confirmation_locks_out_other_input() -> None:
    session = three_timers()
    session.dispatch(Action.DELETE, NOW)
    pending = session.mode
    assert isinstance(pending, ConfirmingDelete)
    for action in (Action.ADD, Action.DOWN, Action.TOGGLE_PAUSE, Action.QUIT, Action.FILTER_DONE):
        assert session.dispatch(action, NOW) is Outcome.IGNORED
        assert session.mode == pending
    assert session.type_text("y") is Outcome.IGNORED
    assert len(session.store) == 3


def test_confirm_delete_removes_selected_timer() -> None:
    session = three_timers()
    session.cursor = 2
    session.dispatch(Action.DELETE, NOW)
    session.dispatch(Action.CONFIRM, NOW)
    assert [timer.name for timer in session.store] == ["first", "second"]
    assert session.cursor == 1
    assert isinstance(session.mode, Browsing)


def test_deny_cancels_confirmation() -> None:
    session = three_timers()
    session.dispatch(Action.DELETE, NOW)
    session.dispatch(Action.DENY, NOW)
    assert isinstance(session.mode, Browsing)
    assert len(session.store) == 3
    assert not session.store.dirty


def test_confirm_restart() -> None:
    session = three_timers()
    session.cursor = 1
    later = NOW + timedelta(minutes=2)
    session.dispatch(Action.RESTART, later)
    assert isinstance(session.mode, ConfirmingRestart)
    session.dispatch(Action.CONFIRM, later)
    assert session.store[1].end == later + MINUTES_10


def test_confirm_on_vanished_target_is_a_no_op() -> None:
    session = three_timers()
    session.dispatch(Action.DELETE, NOW)
    session.store.remove(0)
    session.store.dirty = False
    session.dispatch(Action.CONFIRM, NOW)
    assert len(session.store) == 2
    assert not session.store.dirty


def test_bulk_actions_wait_for_confirmation() -> None:
    session = three_timers()
    session.dispatch(Action.PAUSE_ALL, NOW)
    assert session.mode == ConfirmingBulk(BulkAction.PAUSE_ALL)
    assert not any(timer.paused for timer in session.store)
    session.dispatch(Action.CONFIRM, NOW)
    assert [timer.paused for timer in session.store] == [True, False, True]


def test_toggle_pause_is_immediate() -> None:
    session = three_timers()
    session.dispatch(Action.TOGGLE_PAUSE, NOW)
    assert session.store[0].paused
    session.dispatch(Action.TOGGLE_PAUSE, NOW)
    assert not session.store[0].paused


def test_toggle_pause_on_done_timer_changes_nothing() -> None:
    session = three_timers()
    session.cursor = 1
    session.dispatch(Action.TOGGLE_PAUSE, NOW)
    assert not session.store[1].paused
    assert not session.store.dirty


def test_filters_keep_cursor_in_range() -> None:
    session = three_timers()
    session.cursor = 2
    session.dispatch(Action.CYCLE_FILTER, NOW)
    assert session.filter_mode is FilterMode.ACTIVE
    assert session.cursor == 1
    session.dispatch(Action.CYCLE_FILTER, NOW)
    assert session.filter_mode is FilterMode.PAUSED
    assert session.cursor == 0
    assert session.selected(NOW) is None
    assert session.dispatch(Action.DELETE, NOW) is Outcome.IGNORED

    session.dispatch(Action.FILTER_DONE, NOW)
    assert session.filter_mode is FilterMode.DONE
    assert session.selected(NOW).name == "second"


def test_actions_apply_to_the_timer_under_the_filtered_cursor() -> None:
    session = three_timers()
    session.dispatch(Action.FILTER_ACTIVE, NOW)
    session.dispatch(Action.DOWN, NOW)
    session.dispatch(Action.TOGGLE_PAUSE, NOW)
    assert session.store[2].paused
    assert not session.store[0].paused


def test_move_down_keeps_selection_on_moved_timer() -> None:
    session = three_timers()
    session.dispatch(Action.MOVE_DOWN, NOW)
    assert [timer.name for timer in session.store] == ["second", "first", "third"]
    assert session.cursor == 1
    session.dispatch(Action.MOVE_UP, NOW)
    assert [timer.name for timer in session.store] == ["first", "second", "third"]
    assert session.cursor == 0
    assert session.dispatch(Action.MOVE_UP, NOW) is Outcome.HANDLED
    assert session.store[0].name == "first"


def test_cursor_stays_in_bounds() -> None:
    session = three_timers()
    session.dispatch(Action.UP, NOW)
    assert session.cursor == 0
    for _ in range(5):
        session.dispatch(Action.DOWN, NOW)
    assert session.cursor == 2


def test_quit_saves_dirty_store() -> None:
    storage = RecordingStorage()
    session = make_session(Timer("tea", NOW + MINUTES_10, MINUTES_10), storage=storage)
    session.dispatch(Action.TOGGLE_PAUSE, NOW)
    assert session.dispatch(Action.QUIT, NOW) is Outcome.QUIT
    assert len(storage.saved) == 1
    assert not session.store.dirty


def test_quit_without_changes_skips_save() -> None:
    storage = RecordingStorage()
    session = make_session(Timer("tea", NOW + MINUTES_10, MINUTES_10), storage=storage)
    assert session.dispatch(Action.QUIT, NOW) is Outcome.QUIT
    assert storage.saved == []


def test_quit_save_failure_still_quits() -> None:
    session = make_session(Timer("tea", NOW + MINUTES_10, MINUTES_10), storage=RecordingStorage(fail=True))
    session.dispatch(Action.TOGGLE_PAUSE, NOW)
    assert session.dispatch(Action.QUIT, NOW) is Outcome.QUIT
    assert session.store.dirty


def test_reload_is_deferred_while_modal_or_dirty() -> None:
    session = three_timers()
    fresh = [Timer("from disk", NOW + MINUTES_10, MINUTES_10)]

    session.dispatch(Action.ADD, NOW)
    assert not session.reload(fresh, NOW)
    session.dispatch(Action.CANCEL, NOW)

    session.store.dirty = True
    assert not session.reload(fresh, NOW)
    assert len(session.store) == 3

    session.store.dirty = False
    session.cursor = 2
    assert session.reload(fresh, NOW)
    assert [timer.name for timer in session.store] == ["from disk"]
    assert session.cursor == 0
