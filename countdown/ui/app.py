from __future__ import annotations

from datetime import datetime
from typing import Callable

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Static

from countdown.core.session import Editing, Outcome, Session
from countdown.core.timer import local_now
from countdown.data.storage import TimerFile
from countdown.data.watcher import TimerFileWatcher
from countdown.ui.keys import HELP_KEY, resolve
from countdown.ui.panels import render_frame

REFRESH_SECONDS = 1.0
FILE_POLL_SECONDS = 1.0


class CountdownApp(App):
    """Full-screen timer list; all state lives in the ``Session``."""

    CSS = """
    Screen {
        overflow: hidden;
    }

    #frame {
        width: 100%;
        height: 100%;
    }
    """

    # Textual reserves these for focus and copy; route them to the session instead.
    BINDINGS = [
        Binding("tab", "press('tab')", show=False, priority=True),
        Binding("shift+tab", "press('shift+tab')", show=False, priority=True),
        Binding("ctrl+c", "press('ctrl+c')", show=False, priority=True),
    ]

    def __init__(self, session: Session, timer_file: TimerFile, clock: Callable[[], datetime] = local_now) -> None:
        super().__init__()
        self.session = session
        self.timer_file = timer_file
        self._clock = clock
        self.now = clock()
        self.show_help = False
        self.watcher = TimerFileWatcher(timer_file, session)

    def compose(self) -> ComposeResult:
        yield Static(id="frame")

    def on_mount(self) -> None:
        self.set_interval(REFRESH_SECONDS, self._tick)
        self.set_interval(FILE_POLL_SECONDS, self._check_file_changes)
        self.refresh_frame()

    def on_resize(self, _event: events.Resize) -> None:
        self.refresh_frame()

    def refresh_frame(self) -> None:
        lines = render_frame(self.session, self.now, self.size.width, self.size.height, self.show_help)
        self.query_one("#frame", Static).update(Text("\n".join(lines), no_wrap=True, overflow="crop"))

    def _tick(self) -> None:
        self.now = self._clock()
        self.session.refresh(self.now)
        self.refresh_frame()

    def _check_file_changes(self) -> None:
        if self.watcher.poll(self.now):
            self.refresh_frame()

    def on_key(self, event: events.Key) -> None:
        key = event.character if event.is_printable and event.character else event.key
        event.stop()
        event.prevent_default()
        self.route(key)

    def action_press(self, key: str) -> None:
        self.route(key)

    def route(self, key: str) -> None:
        self.now = self._clock()
        session = self.session
        if key == HELP_KEY and not session.is_modal:
            self.show_help = not self.show_help
        else:
            action = resolve(session.mode, key)
            if action is not None:
                if session.dispatch(action, self.now) is Outcome.QUIT:
                    self.exit()
                    return
            elif isinstance(session.mode, Editing) and len(key) == 1 and key.isprintable():
                session.type_text(key)
        self.refresh_frame()
