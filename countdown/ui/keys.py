"""Key tables per interaction mode, keyed by Textual key names or typed characters."""

from __future__ import annotations

from countdown.core.session import CONFIRM_MODES, Action, Editing, Field, Mode


BROWSE_KEYS: dict[str, Action] = {
    "up": Action.UP,
    "k": Action.UP,
    "down": Action.DOWN,
    "j": Action.DOWN,
    "ctrl+up": Action.MOVE_UP,
    "ctrl+k": Action.MOVE_UP,
    "ctrl+down": Action.MOVE_DOWN,
    "ctrl+j": Action.MOVE_DOWN,
    "a": Action.ADD,
    "e": Action.EDIT,
    "d": Action.DELETE,
    "r": Action.RESTART,
    "p": Action.TOGGLE_PAUSE,
    "P": Action.PAUSE_ALL,
    "U": Action.RESUME_ALL,
    "D": Action.DELETE_DONE,
    "R": Action.RESTART_ALL,
    "tab": Action.CYCLE_FILTER,
    "1": Action.FILTER_ALL,
    "2": Action.FILTER_ACTIVE,
    "3": Action.FILTER_PAUSED,
    "4": Action.FILTER_DONE,
    "q": Action.QUIT,
    "ctrl+c": Action.QUIT,
}

FORM_KEYS: dict[str, Action] = {
    "tab": Action.NEXT_FIELD,
    "down": Action.NEXT_FIELD,
    "shift+tab": Action.PREV_FIELD,
    "up": Action.PREV_FIELD,
    "enter": Action.SUBMIT,
    "escape": Action.CANCEL,
    "backspace": Action.BACKSPACE,
}

# Only active on the duration field; on the name field these are plain text.
DURATION_KEYS: dict[str, Action] = {
    "+": Action.INCREASE,
    "=": Action.INCREASE,
    "-": Action.DECREASE,
    "_": Action.DECREASE,
}

CONFIRM_KEYS: dict[str, Action] = {
    "y": Action.CONFIRM,
    "Y": Action.CONFIRM,
    "enter": Action.CONFIRM,
    "n": Action.DENY,
    "N": Action.DENY,
    "escape": Action.CANCEL,
}

HELP_KEY = "?"

BROWSE_HELP_SHORT = (("?", "help"), ("q", "quit"))
BROWSE_HELP_FULL = (
    (("↑/k", "move up"), ("↓/j", "move down"), ("ctrl+↑", "reorder up"), ("ctrl+↓", "reorder down")),
    (("a", "add"), ("d", "delete"), ("e", "edit"), ("r", "restart"), ("p", "pause/resume")),
    (("D", "delete done"), ("R", "restart all"), ("P", "pause all"), ("U", "resume all")),
    (("tab", "next filter"), ("1", "all"), ("2", "active"), ("3", "paused"), ("4", "done")),
    (("?", "less help"), ("q", "quit")),
)
FORM_HELP = (("tab", "next field"), ("+/-", "adjust"), ("enter", "confirm"), ("esc", "cancel"))
CONFIRM_HELP = (("y/enter", "yes"), ("n", "no"), ("esc", "cancel"))


def resolve(mode: Mode, key: str) -> Action | None:
    """Action bound to ``key`` in ``mode``; None means unbound (text input or ignored)."""
    if isinstance(mode, Editing):
        if mode.focused is Field.DURATION and key in DURATION_KEYS:
            return DURATION_KEYS[key]
        return FORM_KEYS.get(key)
    if isinstance(mode, CONFIRM_MODES):
        return CONFIRM_KEYS.get(key)
    return BROWSE_KEYS.get(key)


def help_line(bindings) -> str:
    return " • ".join(f"{key} {description}" for key, description in bindings)
