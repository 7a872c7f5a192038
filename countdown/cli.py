"""Command-line surface: one command per run, loading and saving the timer file."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Sequence, TextIO

from countdown.core import bulk
from countdown.core.duration import format_duration, parse_duration
from countdown.core.errors import CountdownError, ValidationError
from countdown.core.store import TimerStore
from countdown.core.timer import Timer, TimerStatus, format_end_time_cli, local_now
from countdown.core.views import FilterMode, resolve_cli_index, visible
from countdown.data.storage import TimerFile
from countdown.logger import get_logger

_LOGGER = get_logger()

PROG = "countdown"
EPILOG = """\
duration format:
  30s, 5m, 1h, 2d, 1y, compound: 1h30m, 30d30m

examples:
  countdown a "Meeting" 30m
  countdown l --active
  countdown p --all
  countdown r --paused 2
  countdown d --done
  countdown rs --all
"""

FLAG_FILTERS = {
    "all": FilterMode.ALL,
    "active": FilterMode.ACTIVE,
    "paused": FilterMode.PAUSED,
    "done": FilterMode.DONE,
}


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise ValidationError(f"{message}\nrun '{PROG} help' for usage")


@dataclass
class CommandContext:
    store: TimerStore
    now: datetime
    out: TextIO
    confirm: Callable[[str], str]

    def say(self, message: str) -> None:
        print(message, file=self.out)


def _flag(args: argparse.Namespace) -> str | None:
    for name in FLAG_FILTERS:
        if getattr(args, name, False):
            return name
    return None


def _position(text: str | None) -> int:
    if text is None:
        raise ValidationError("missing timer index")
    try:
        return int(text)
    except ValueError:
        raise ValidationError(f"invalid index: {text}") from None


def _target(ctx: CommandContext, args: argparse.Namespace) -> int:
    flag = _flag(args)
    filter_mode = FLAG_FILTERS[flag] if flag else FilterMode.ALL
    return resolve_cli_index(ctx.store, filter_mode, _position(args.index), ctx.now)


def cmd_add(ctx: CommandContext, args: argparse.Namespace) -> None:
    try:
        duration = parse_duration(args.duration)
    except ValidationError as exc:
        raise ValidationError(f"invalid duration: {exc}") from exc
    ctx.store.add(args.name, duration, ctx.now)
    ctx.say(f'Added timer "{args.name}" ({format_duration(duration)})')


def describe(timer: Timer, now: datetime) -> tuple[str, str, str]:
    status = timer.status(now)
    if status is TimerStatus.PAUSED:
        return "[paused]", format_duration(timer.remaining), ""
    if status is TimerStatus.DONE:
        elapsed = timer.duration + (now - timer.end)
        return "[done]", "Done", f"(+{format_duration(elapsed)} elapsed)"
    return "[active]", format_duration(timer.end - now), f"(ends {format_end_time_cli(timer.end, now)})"


def cmd_list(ctx: CommandContext, args: argparse.Namespace) -> None:
    flag = _flag(args)
    shown = visible(ctx.store, FLAG_FILTERS[flag] if flag else FilterMode.ALL, ctx.now)

    ctx.say("Countdown Timers")
    ctx.say("================")
    ctx.say("")
    if not shown:
        ctx.say("No timers found.")
        return
    for position, timer in enumerate(shown, start=1):
        label, remaining, end_text = describe(timer, ctx.now)
        line = f"[{position}] {label} {timer.name:<30} {remaining:<13}"
        if end_text:
            line += f" {end_text}"
        ctx.say(line)
    ctx.say("")
    ctx.say(f"Showing {len(shown)} timer(s)")


def cmd_pause(ctx: CommandContext, args: argparse.Namespace) -> None:
    if args.all and args.index is None:
        ctx.say(f"Paused {bulk.pause_all(ctx.store, ctx.now)} timer(s)")
        return
    index = _target(ctx, args)
    timer = ctx.store[index]
    if timer.paused:
        ctx.say(f'Timer "{timer.name}" is already paused')
        return
    ctx.store.pause(index, ctx.now)
    ctx.say(f'Paused timer "{timer.name}"')


def cmd_resume(ctx: CommandContext, args: argparse.Namespace) -> None:
    if args.all and args.index is None:
        ctx.say(f"Resumed {bulk.resume_all(ctx.store, ctx.now)} timer(s)")
        return
    index = _target(ctx, args)
    timer = ctx.store[index]
    if not timer.paused:
        ctx.say(f'Timer "{timer.name}" is already active')
        return
    ctx.store.resume(index, ctx.now)
    ctx.say(f'Resumed timer "{timer.name}"')


def cmd_delete(ctx: CommandContext, args: argparse.Namespace) -> None:
    if args.done and args.index is None:
        ctx.say(f"Deleted {bulk.delete_done(ctx.store, ctx.now)} completed timer(s)")
        return
    if args.all and args.index is None:
        try:
            answer = ctx.confirm("Delete all timers? [y/N]: ")
        except EOFError:
            answer = ""
        if answer.strip().lower() != "y":
            ctx.say("Cancelled")
            return
        ctx.say(f"Deleted {bulk.delete_all(ctx.store, ctx.now)} timer(s)")
        return
    removed = ctx.store.remove(_target(ctx, args))
    ctx.say(f'Deleted timer "{removed.name}"')


def cmd_restart(ctx: CommandContext, args: argparse.Namespace) -> None:
    if args.index is None:
        if args.all:
            ctx.say(f"Restarted {bulk.restart_all(ctx.store, ctx.now)} timer(s)")
            return
        if args.active:
            ctx.say(f"Restarted {bulk.restart_active(ctx.store, ctx.now)} active timer(s)")
            return
        if args.paused:
            ctx.say(f"Restarted {bulk.restart_paused(ctx.store, ctx.now)} paused timer(s)")
            return
    timer = ctx.store.restart(_target(ctx, args), ctx.now)
    ctx.say(f'Restarted timer "{timer.name}"')


def cmd_edit(ctx: CommandContext, args: argparse.Namespace) -> None:
    index = _target(ctx, args)
    timer = ctx.store[index]
    old_name = timer.name
    name = args.name or timer.name
    if args.duration:
        try:
            duration = parse_duration(args.duration)
        except ValidationError as exc:
            raise ValidationError(f"invalid duration: {exc}") from exc
        ctx.store.edit(index, name, duration, ctx.now)
    elif name != old_name:
        ctx.store.rename(index, name)
    ctx.say(f'Edited timer: "{old_name}" -> "{name}"')


def _add_filter_flags(parser: argparse.ArgumentParser, names: Sequence[str], help_for: dict[str, str]) -> None:
    group = parser.add_mutually_exclusive_group()
    for name in names:
        group.add_argument(f"--{name}", action="store_true", help=help_for.get(name, f"index within {name} timers"))


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=PROG,
        description="Terminal countdown timers. Run without arguments for the interactive view.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>", parser_class=_ArgumentParser)

    add = commands.add_parser("add", aliases=["a"], help="add a new timer")
    add.add_argument("name")
    add.add_argument("duration")
    add.set_defaults(handler=cmd_add)

    listing = commands.add_parser("list", aliases=["l"], help="list timers")
    _add_filter_flags(listing, ("active", "paused", "done"), {})
    listing.set_defaults(handler=cmd_list)

    pause = commands.add_parser("pause", aliases=["p"], help="pause a timer, or --all active timers")
    _add_filter_flags(pause, ("all", "active", "paused", "done"), {"all": "pause every active timer"})
    pause.add_argument("index", nargs="?", help="1-based index within the filter")
    pause.set_defaults(handler=cmd_pause)

    resume = commands.add_parser("resume", aliases=["r"], help="resume a timer, or --all paused timers")
    _add_filter_flags(resume, ("all", "active", "paused", "done"), {"all": "resume every paused timer"})
    resume.add_argument("index", nargs="?", help="1-based index within the filter")
    resume.set_defaults(handler=cmd_resume)

    delete = commands.add_parser("delete", aliases=["d"], help="delete a timer, --done timers or --all")
    _add_filter_flags(
        delete,
        ("all", "active", "paused", "done"),
        {"all": "delete every timer (asks first)", "done": "delete completed timers"},
    )
    delete.add_argument("index", nargs="?", help="1-based index within the filter")
    delete.set_defaults(handler=cmd_delete)

    restart = commands.add_parser("restart", aliases=["rs"], help="restart a timer or a group of timers")
    _add_filter_flags(
        restart,
        ("all", "active", "paused", "done"),
        {"all": "restart every timer", "active": "restart active timers", "paused": "restart paused timers"},
    )
    restart.add_argument("index", nargs="?", help="1-based index within the filter")
    restart.set_defaults(handler=cmd_restart)

    edit = commands.add_parser("edit", aliases=["e"], help="rename a timer and optionally set a new duration")
    _add_filter_flags(edit, ("all", "active", "paused", "done"), {})
    edit.add_argument("index")
    edit.add_argument("name", help='new name, "" keeps the current one')
    edit.add_argument("duration", nargs="?", help="new duration; restarts the timer")
    edit.set_defaults(handler=cmd_edit)

    commands.add_parser("help", aliases=["h"], help="show this help")
    return parser


def run(
    argv: Sequence[str],
    timer_file: TimerFile,
    *,
    now: datetime | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
    confirm: Callable[[str], str] = input,
) -> int:
    """Execute one command and return the process exit code."""
    out = out or sys.stdout
    err = err or sys.stderr
    parser = build_parser()
    try:
        args = parser.parse_args(list(argv))
        handler = getattr(args, "handler", None)
        if handler is None:
            parser.print_help(out)
            return 0
        ctx = CommandContext(TimerStore(timer_file.load()), now or local_now(), out, confirm)
        handler(ctx, args)
        if ctx.store.dirty:
            timer_file.save(ctx.store.timers)
    except CountdownError as exc:
        _LOGGER.debug("Command {} failed: {}", list(argv), exc)
        print(f"Error: {exc}", file=err)
        return 1
    return 0
