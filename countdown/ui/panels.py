"""Plain-text rendering of the timer list and of the modal dialogs."""

from __future__ import annotations

from datetime import datetime

from countdown.core.bulk import BulkAction, eligible
from countdown.core.session import (
    ConfirmingBulk,
    ConfirmingDelete,
    ConfirmingRestart,
    Editing,
    Field,
    Session,
)
from countdown.core.timer import Timer, TimerStatus
from countdown.core.views import FilterMode
from countdown.ui.compositor import composite
from countdown.ui.keys import BROWSE_HELP_FULL, BROWSE_HELP_SHORT, CONFIRM_HELP, FORM_HELP, help_line


FILTER_PANEL_WIDTH = 20
POPUP_WIDTH = 58
NAME_LIMIT = 20
COLUMNS = (("", 2), ("Stat", 6), ("Name", 22), ("Remaining", 17), ("End Time", 17))

STATUS_MARKS = {
    TimerStatus.ACTIVE: "●",
    TimerStatus.PAUSED: "‖",
    TimerStatus.DONE: "✓",
}

BULK_PROMPTS = {
    BulkAction.PAUSE_ALL: ("Pause All Active", "Pause all active timers?"),
    BulkAction.RESUME_ALL: ("Resume All Paused", "Resume all paused timers?"),
    BulkAction.DELETE_DONE: ("Delete Completed", "Delete all completed timers?"),
    BulkAction.RESTART_ALL: ("Restart All", "Restart all timers?"),
}

PLACEHOLDERS = {
    Field.NAME: "Timer name",
    Field.DURATION: "30s, 5m, 1h, 2d, 1y",
}


def filter_panel(current: FilterMode) -> list[str]:
    lines = [" Filters"]
    for number, mode in enumerate(FilterMode, start=1):
        prefix = "▶" if mode is current else " "
        lines.append(f"{prefix} {number} {mode.label}")
    return lines


def _cells(values: tuple[str, ...]) -> str:
    return "".join(value.ljust(width)[:width] for value, (_title, width) in zip(values, COLUMNS)).rstrip()


def short_name(name: str) -> str:
    if len(name) > NAME_LIMIT:
        return name[: NAME_LIMIT - 1] + "…"
    return name


def timer_table(timers: list[Timer], cursor: int, now: datetime) -> list[str]:
    lines = [_cells(tuple(title for title, _width in COLUMNS))]
    if not timers:
        lines.append(_cells(("", "", "No timers", "", "")))
    for position, timer in enumerate(timers):
        pointer = "›" if position == cursor else ""
        lines.append(
            _cells(
                (
                    pointer,
                    STATUS_MARKS[timer.status(now)],
                    short_name(timer.name),
                    timer.status_text(now),
                    timer.end_time_text(now),
                )
            )
        )
    return lines


def background(session: Session, now: datetime, height: int, show_help: bool) -> list[str]:
    left = filter_panel(session.filter_mode)
    right = timer_table(session.visible(now), session.cursor, now)
    body = [
        (left[row] if row < len(left) else "").ljust(FILTER_PANEL_WIDTH) + (right[row] if row < len(right) else "")
        for row in range(max(len(left), len(right)))
    ]
    help_rows = [help_line(group) for group in BROWSE_HELP_FULL] if show_help else [help_line(BROWSE_HELP_SHORT)]
    room = max(0, height - len(help_rows) - 1)
    return body[:room] + [""] * max(0, room - len(body)) + [""] + help_rows


def box(title: str, body: list[str], width: int = POPUP_WIDTH) -> list[str]:
    inner = width - 4
    lines = ["╭" + "─" * (width - 2) + "╮"]
    for text in ["", title, "─" * inner, *body, ""]:
        lines.append("│ " + text[:inner].ljust(inner) + " │")
    lines.append("╰" + "─" * (width - 2) + "╯")
    return lines


def _field_line(form: Editing, field: Field, label: str) -> str:
    focused = form.focused is field
    value = form.value(field)
    if focused:
        shown = value + "_"
    else:
        shown = value or PLACEHOLDERS[field]
    marker = "▶" if focused else " "
    return f"{marker} {label:<9} {shown}"


def form_panel(form: Editing) -> list[str]:
    title = "Add Timer" if form.is_new else "Edit Timer"
    body = [
        "",
        _field_line(form, Field.NAME, "Name:"),
        "",
        _field_line(form, Field.DURATION, "Duration:"),
        "",
        "Examples: 30s, 5m, 1h, 2d, 1y",
        form.error,
        help_line(FORM_HELP),
    ]
    return box(title, body)


def confirm_panel(session: Session, now: datetime) -> list[str]:
    mode = session.mode
    if isinstance(mode, ConfirmingBulk):
        title, question = BULK_PROMPTS.get(mode.action, (mode.action.value, "Apply to all timers?"))
        affected = sum(1 for timer in session.store if eligible(timer, mode.action, now))
        body = ["", question, f"{affected} timer(s) affected", "", help_line(CONFIRM_HELP)]
        return box(title, body)

    timer = session.target()
    name = timer.name if timer is not None else "?"
    if isinstance(mode, ConfirmingDelete):
        title, question = "Delete Timer", f'Delete "{name}"?'
    else:
        title, question = "Restart Timer", f'Restart "{name}"?'
    return box(title, ["", question, "", help_line(CONFIRM_HELP)])


def popup(session: Session, now: datetime) -> list[str] | None:
    if isinstance(session.mode, Editing):
        return form_panel(session.mode)
    if isinstance(session.mode, (ConfirmingDelete, ConfirmingRestart, ConfirmingBulk)):
        return confirm_panel(session, now)
    return None


def render_frame(session: Session, now: datetime, width: int, height: int, show_help: bool = False) -> list[str]:
    """Full screen as text lines: the list, with the active dialog merged on top."""
    lines = background(session, now, height, show_help and not session.is_modal)
    overlay = popup(session, now)
    if overlay is None:
        return lines
    return composite(lines, overlay, width, height, POPUP_WIDTH)
