from __future__ import annotations

from datetime import timedelta

from countdown.core.errors import ParseError


SECOND = timedelta(seconds=1)
MINUTE = timedelta(minutes=1)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
MONTH = timedelta(days=30)
YEAR = timedelta(days=365)

UNIT_SPANS = {
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
    "d": DAY,
    "mo": MONTH,
    "y": YEAR,
}

DIGITS = "0123456789"

# Days after which format_duration drops to the coarse two-unit display.
COARSE_DISPLAY_DAYS = 60


def parse_duration(text: str) -> timedelta:
    """Parse compound duration text such as ``30s``, ``1h30m`` or ``30d 30m``.

    A trailing number without a unit counts as seconds. ``mo`` is a 30-day
    month so that everything :func:`format_duration` emits parses back.
    """
    source = text.strip().lower()
    if not source:
        raise ParseError("empty input")

    total = timedelta(0)
    pos = 0
    while pos < len(source):
        if source[pos] == " ":
            pos += 1
            continue

        start = pos
        while pos < len(source) and source[pos] in DIGITS:
            pos += 1
        if pos == start:
            raise ParseError(f"expected number at position {start}")
        value = int(source[start:pos])
        if value <= 0:
            raise ParseError("duration must be positive")

        if pos >= len(source):
            unit = "s"
        elif source.startswith("mo", pos):
            unit = "mo"
            pos += 2
        else:
            unit = source[pos]
            pos += 1
        if unit not in UNIT_SPANS:
            raise ParseError(f"invalid suffix: {unit} (use s, m, h, d, y)")
        total += value * UNIT_SPANS[unit]

    if total <= timedelta(0):
        raise ParseError("duration must be positive")
    return total


def whole_seconds(value: timedelta) -> int:
    """Round to the nearest second, halves away from zero."""
    micros = value // timedelta(microseconds=1)
    seconds, rest = divmod(abs(micros), 1_000_000)
    if rest >= 500_000:
        seconds += 1
    return seconds if micros >= 0 else -seconds


def _calendar_parts(total_seconds: int) -> tuple[int, int, int, int, int, int]:
    days, rest = divmod(total_seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    years, day_rest = divmod(days, 365)
    months, days_left = divmod(day_rest, 30)
    return years, months, days_left, hours, minutes, seconds


def format_duration(value: timedelta) -> str:
    """Render a span for display, e.g. ``1h 30m`` or ``1y 2mo`` for long spans."""
    total_seconds = max(0, whole_seconds(value))
    years, months, days_left, hours, minutes, seconds = _calendar_parts(total_seconds)

    if total_seconds // 86400 > COARSE_DISPLAY_DAYS:
        coarse = [
            f"{amount}{suffix}"
            for amount, suffix in ((years, "y"), (months, "mo"), (days_left, "d"))
            if amount > 0
        ]
        return " ".join(coarse[:2])

    parts = [
        f"{amount}{suffix}"
        for amount, suffix in (
            (years, "y"),
            (months, "mo"),
            (days_left, "d"),
            (hours, "h"),
            (minutes, "m"),
        )
        if amount > 0
    ]
    if seconds > 0 or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts)


def format_for_input(value: timedelta) -> str:
    """Compact form used inside the edit form: at most two components."""
    total_seconds = whole_seconds(value)
    if total_seconds <= 0:
        return ""
    years, months, days_left, hours, minutes, seconds = _calendar_parts(total_seconds)

    parts: list[str] = []
    if total_seconds >= 86400:
        if years > 0:
            parts.append(f"{years}y")
        if months > 0:
            parts.append(f"{months}mo")
        if days_left > 0 and len(parts) < 2:
            parts.append(f"{days_left}d")
    elif hours > 0:
        parts.append(f"{hours}h")
        if minutes > 0:
            parts.append(f"{minutes}m")
    elif minutes > 0:
        parts.append(f"{minutes}m")
        if seconds > 0:
            parts.append(f"{seconds}s")
    else:
        parts.append(f"{seconds}s")
    return " ".join(parts)
