"""Entry point: no arguments opens the interactive view, anything else runs a CLI command."""

from __future__ import annotations

import sys
from typing import Sequence

from countdown import cli
from countdown.core.errors import PersistenceError
from countdown.core.session import Session
from countdown.core.store import TimerStore
from countdown.data.config import load_config
from countdown.data.storage import TimerFile
from countdown.logger import configure, get_logger
from countdown.paths import default_config_path, default_timers_path


def run_tui(timer_file: TimerFile) -> int:
    """Load state, then hand the terminal to the Textual app until quit."""
    from countdown.ui.app import CountdownApp

    configure()
    try:
        timers = timer_file.load()
    except PersistenceError as exc:
        get_logger().error("Cannot start: {}", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    session = Session(TimerStore(timers), load_config(default_config_path()), timer_file)
    CountdownApp(session, timer_file).run()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    timer_file = TimerFile(default_timers_path())
    if not args:
        return run_tui(timer_file)
    configure(console=True)
    return cli.run(args, timer_file)


if __name__ == "__main__":
    raise SystemExit(main())
