from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, Protocol, Union

from countdown.core.adjust import AdjustConfig, adjust_duration
from countdown.core.bulk import BulkAction, run_bulk
from countdown.core.duration import format_duration, parse_duration
from countdown.core.errors import EligibilityError, PersistenceError, TimerIndexError, ValidationError
from countdown.core.store import TimerStore
from countdown.core.timer import ZERO, Timer
from countdown.core.views import FilterMode, actual_index, clamp_cursor, visible, visible_position
from countdown.logger import get_logger

_LOGGER = get_logger()

DURATION_CHARS = frozenset("0123456789smhdyo ")


class Action(str, Enum):
    UP = "up"
    DOWN = "down"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    RESTART = "restart"
    TOGGLE_PAUSE = "toggle_pause"
    PAUSE_ALL = "pause_all"
    RESUME_ALL = "resume_all"
    DELETE_DONE = "delete_done"
    RESTART_ALL = "restart_all"
    CYCLE_FILTER = "cycle_filter"
    FILTER_ALL = "filter_all"
    FILTER_ACTIVE = "filter_active"
    FILTER_PAUSED = "filter_paused"
    FILTER_DONE = "filter_done"
    QUIT = "quit"
    NEXT_FIELD = "next_field"
    PREV_FIELD = "prev_field"
    SUBMIT = "submit"
    CANCEL = "cancel"
    INCREASE = "increase"
    DECREASE = "decrease"
    BACKSPACE = "backspace"
    CONFIRM = "confirm"
    DENY = "deny"


class Outcome(str, Enum):
    IGNORED = "ignored"
    HANDLED = "handled"
    QUIT = "quit"


class Field(str, Enum):
    NAME = "name"
    DURATION = "duration"


@dataclass(frozen=True)
class Browsing:
    pass


@dataclass(frozen=True)
class Editing:
    is_new: bool
    target_id: int | None = None
    name: str = ""
    duration_text: str = ""
    focused: Field = Field.NAME
    error: str = ""

    def value(self, field: Field) -> str:
        return self.name if field is Field.NAME else self.duration_text

    def with_value(self, field: Field, text: str) -> "Editing":
        if field is Field.NAME:
            return replace(self, name=text, error="")
        return replace(self, duration_text=text, error="")


@dataclass(frozen=True)
class ConfirmingDelete:
    target_id: int


@dataclass(frozen=True)
class ConfirmingRestart:
    target_id: int


@dataclass(frozen=True)
class ConfirmingBulk:
    action: BulkAction


Mode = Union[Browsing, Editing, ConfirmingDelete, ConfirmingRestart, ConfirmingBulk]
CONFIRM_MODES = (ConfirmingDelete, ConfirmingRestart, ConfirmingBulk)
BROWSING = Browsing()

BULK_TRIGGERS = {
    Action.PAUSE_ALL: BulkAction.PAUSE_ALL,
    Action.RESUME_ALL: BulkAction.RESUME_ALL,
    Action.DELETE_DONE: BulkAction.DELETE_DONE,
    Action.RESTART_ALL: BulkAction.RESTART_ALL,
}

FILTER_SELECTORS = {
    Action.FILTER_ALL: FilterMode.ALL,
    Action.FILTER_ACTIVE: FilterMode.ACTIVE,
    Action.FILTER_PAUSED: FilterMode.PAUSED,
    Action.FILTER_DONE: FilterMode.DONE,
}


class TimerSaver(Protocol):
    def save(self, timers: list[Timer]) -> None: ...


class Session:
    """Modal controller for the interactive timer list.

    Exactly one mode is active at a time. Confirmation modes lock out every
    input except confirm, deny and cancel.
    """

    def __init__(
        self,
        store: TimerStore,
        config: AdjustConfig | None = None,
        storage: TimerSaver | None = None,
    ) -> None:
        self.store = store
        self.config = config or AdjustConfig()
        self.storage = storage
        self.mode: Mode = BROWSING
        self.filter_mode = FilterMode.ALL
        self.cursor = 0

    @property
    def is_modal(self) -> bool:
        return not isinstance(self.mode, Browsing)

    def visible(self, now: datetime) -> list[Timer]:
        return visible(self.store, self.filter_mode, now)

    def selected_index(self, now: datetime) -> int:
        return actual_index(self.store, self.filter_mode, self.cursor, now)

    def selected(self, now: datetime) -> Timer | None:
        index = self.selected_index(now)
        return self.store[index] if index >= 0 else None

    def target(self) -> Timer | None:
        """Timer referenced by the current edit or confirmation, if it still exists."""
        target_id = getattr(self.mode, "target_id", None)
        if target_id is None:
            return None
        index = self.store.index_of(target_id)
        return self.store[index] if index >= 0 else None

    def refresh(self, now: datetime) -> None:
        self.cursor = clamp_cursor(self.cursor, len(self.visible(now)))

    def _follow(self, timer_id: int, now: datetime) -> None:
        position = visible_position(self.store, self.filter_mode, timer_id, now)
        if position >= 0:
            self.cursor = position
        else:
            self.refresh(now)

    def dispatch(self, action: Action, now: datetime) -> Outcome:
        if isinstance(self.mode, Editing):
            return self._dispatch_editing(self.mode, action, now)
        if isinstance(self.mode, CONFIRM_MODES):
            return self._dispatch_confirm(action, now)
        return self._dispatch_browsing(action, now)

    # Browsing

    def _dispatch_browsing(self, action: Action, now: datetime) -> Outcome:
        if action is Action.UP:
            self.cursor = clamp_cursor(self.cursor - 1, len(self.visible(now)))
        elif action is Action.DOWN:
            self.cursor = clamp_cursor(self.cursor + 1, len(self.visible(now)))
        elif action is Action.MOVE_UP:
            self._reorder(-1, now)
        elif action is Action.MOVE_DOWN:
            self._reorder(1, now)
        elif action is Action.ADD:
            self.mode = Editing(is_new=True)
        elif action is Action.EDIT:
            timer = self.selected(now)
            if timer is None:
                return Outcome.IGNORED
            self.mode = Editing(
                is_new=False,
                target_id=timer.id,
                name=timer.name,
                duration_text=format_duration(timer.duration),
            )
        elif action is Action.DELETE:
            timer = self.selected(now)
            if timer is None:
                return Outcome.IGNORED
            self.mode = ConfirmingDelete(timer.id)
        elif action is Action.RESTART:
            timer = self.selected(now)
            if timer is None or timer.duration <= ZERO:
                return Outcome.IGNORED
            self.mode = ConfirmingRestart(timer.id)
        elif action is Action.TOGGLE_PAUSE:
            self._toggle_pause(now)
        elif action in BULK_TRIGGERS:
            self.mode = ConfirmingBulk(BULK_TRIGGERS[action])
        elif action is Action.CYCLE_FILTER:
            self.filter_mode = self.filter_mode.next()
            self.refresh(now)
        elif action in FILTER_SELECTORS:
            self.filter_mode = FILTER_SELECTORS[action]
            self.cursor = 0
        elif action is Action.QUIT:
            return self.quit()
        else:
            return Outcome.IGNORED
        return Outcome.HANDLED

    def _reorder(self, step: int, now: datetime) -> None:
        index = self.selected_index(now)
        if index < 0:
            return
        timer = self.store[index]
        if self.store.swap(index if step > 0 else index - 1):
            self._follow(timer.id, now)

    def _toggle_pause(self, now: datetime) -> None:
        index = self.selected_index(now)
        if index < 0:
            return
        try:
            if self.store[index].paused:
                self.store.resume(index, now)
            else:
                self.store.pause(index, now)
        except EligibilityError as exc:
            _LOGGER.debug("Pause toggle ignored: {}", exc)
        self.refresh(now)

    def quit(self) -> Outcome:
        if self.store.dirty and self.storage is not None:
            try:
                self.storage.save(self.store.timers)
            except PersistenceError as exc:
                _LOGGER.warning("Could not save timers on quit: {}", exc)
            else:
                self.store.dirty = False
        return Outcome.QUIT

    # Editing

    def _dispatch_editing(self, form: Editing, action: Action, now: datetime) -> Outcome:
        if action in (Action.NEXT_FIELD, Action.PREV_FIELD):
            fields = list(Field)
            step = 1 if action is Action.NEXT_FIELD else -1
            focused = fields[(fields.index(form.focused) + step) % len(fields)]
            self.mode = replace(form, focused=focused)
        elif action is Action.SUBMIT:
            if form.focused is Field.NAME:
                if not form.name.strip():
                    self.mode = replace(form, error="Name is required")
                    return Outcome.IGNORED
                self.mode = replace(form, focused=Field.DURATION, error="")
            else:
                self._commit_form(form, now)
        elif action is Action.CANCEL:
            self.mode = BROWSING
        elif action in (Action.INCREASE, Action.DECREASE):
            if form.focused is not Field.DURATION:
                return self.type_text("+" if action is Action.INCREASE else "-")
            direction = 1 if action is Action.INCREASE else -1
            self.mode = form.with_value(Field.DURATION, adjust_duration(form.duration_text, direction, self.config))
        elif action is Action.BACKSPACE:
            return self.backspace()
        else:
            return Outcome.IGNORED
        return Outcome.HANDLED

    def _commit_form(self, form: Editing, now: datetime) -> None:
        try:
            if not form.name.strip():
                raise ValidationError("Name is required")
            duration = parse_duration(form.duration_text)
            if form.is_new:
                timer = self.store.add(form.name, duration, now)
            else:
                index = self.store.index_of(form.target_id) if form.target_id is not None else -1
                if index < 0:
                    self.mode = BROWSING
                    self.refresh(now)
                    return
                timer = self.store.edit(index, form.name, duration, now)
        except ValidationError as exc:
            self.mode = replace(form, error=f"Invalid: {exc}")
            return
        self.mode = BROWSING
        self._follow(timer.id, now)

    def type_text(self, text: str) -> Outcome:
        """Append typed characters to the focused field of the open form."""
        if not isinstance(self.mode, Editing):
            return Outcome.IGNORED
        form = self.mode
        if form.focused is Field.DURATION:
            text = "".join(ch for ch in text.lower() if ch in DURATION_CHARS)
        if not text:
            return Outcome.IGNORED
        self.mode = form.with_value(form.focused, form.value(form.focused) + text)
        return Outcome.HANDLED

    def backspace(self) -> Outcome:
        if not isinstance(self.mode, Editing):
            return Outcome.IGNORED
        form = self.mode
        self.mode = form.with_value(form.focused, form.value(form.focused)[:-1])
        return Outcome.HANDLED

    # Confirmation

    def _dispatch_confirm(self, action: Action, now: datetime) -> Outcome:
        if action in (Action.DENY, Action.CANCEL):
            self.mode = BROWSING
            return Outcome.HANDLED
        if action is not Action.CONFIRM:
            return Outcome.IGNORED

        pending = self.mode
        self.mode = BROWSING
        if isinstance(pending, ConfirmingBulk):
            affected = run_bulk(self.store, pending.action, now)
            _LOGGER.info("Bulk {} affected {} timer(s)", pending.action.value, affected)
        else:
            index = self.store.index_of(pending.target_id)
            try:
                if index < 0:
                    raise TimerIndexError("timer no longer exists")
                if isinstance(pending, ConfirmingDelete):
                    self.store.remove(index)
                else:
                    self.store.restart(index, now)
            except (EligibilityError, TimerIndexError) as exc:
                _LOGGER.debug("Confirmed action skipped: {}", exc)
        self.refresh(now)
        return Outcome.HANDLED

    # External changes

    def reload(self, timers: Iterable[Timer], now: datetime) -> bool:
        """Replace the store with timers read from disk after an external change.

        Deferred while a dialog is open or local changes are unsaved; the
        caller retries on its next poll.
        """
        if self.is_modal or self.store.dirty:
            _LOGGER.info("External change deferred: unsaved or in-progress local edits")
            return False
        self.store.replace_all(timers)
        self.refresh(now)
        _LOGGER.info("Reloaded {} timer(s) after external change", len(self.store))
        return True
