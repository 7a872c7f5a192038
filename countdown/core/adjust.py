from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Mapping

from countdown.core.duration import DAY, HOUR, MINUTE, MONTH, SECOND, YEAR, format_for_input, parse_duration
from countdown.core.errors import ParseError


class DurationUnit(str, Enum):
    SMART = "smart"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"


FIXED_UNIT_SPANS = {
    DurationUnit.SECONDS: SECOND,
    DurationUnit.MINUTES: MINUTE,
    DurationUnit.HOURS: HOUR,
}

# Largest first; "mo" must be checked before "m".
SMART_UNIT_PRIORITY: tuple[tuple[str, timedelta], ...] = (
    ("y", YEAR),
    ("mo", MONTH),
    ("d", DAY),
    ("h", HOUR),
    ("m", MINUTE),
    ("s", SECOND),
)

DEFAULT_INCREMENT_STEP = 1
DEFAULT_SHIFT_INCREMENT_STEP = 5


@dataclass(frozen=True)
class AdjustConfig:
    unit: DurationUnit = DurationUnit.SMART
    increment_step: int = DEFAULT_INCREMENT_STEP
    # Reserved: validated and persisted, no control reads it yet.
    shift_increment_step: int = DEFAULT_SHIFT_INCREMENT_STEP

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "AdjustConfig":
        """Build a config from the JSON shape, replacing each bad field on its own."""
        try:
            unit = DurationUnit(raw.get("unit"))
        except ValueError:
            unit = DurationUnit.SMART
        return cls(
            unit=unit,
            increment_step=_positive_int(raw.get("incrementStep"), DEFAULT_INCREMENT_STEP),
            shift_increment_step=_positive_int(raw.get("shiftIncrementStep"), DEFAULT_SHIFT_INCREMENT_STEP),
        )

    def to_mapping(self) -> dict[str, Any]:
        return {
            "unit": self.unit.value,
            "incrementStep": self.increment_step,
            "shiftIncrementStep": self.shift_increment_step,
        }


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def has_unit(text: str, suffix: str) -> bool:
    """True when ``suffix`` appears right after a digit somewhere in ``text``."""
    lowered = text.lower()
    start = lowered.find(suffix, 1)
    while start != -1:
        if lowered[start - 1].isdigit():
            if suffix != "m" or not lowered.startswith("mo", start):
                return True
        start = lowered.find(suffix, start + 1)
    return False


def detect_largest_unit(text: str) -> str:
    for suffix, _span in SMART_UNIT_PRIORITY:
        if has_unit(text, suffix):
            return suffix
    return ""


def unit_multiplier(unit: DurationUnit, current_text: str) -> timedelta:
    if unit in FIXED_UNIT_SPANS:
        return FIXED_UNIT_SPANS[unit]
    largest = detect_largest_unit(current_text)
    return dict(SMART_UNIT_PRIORITY).get(largest, MINUTE)


def adjust_duration(current_text: str, direction: int, config: AdjustConfig) -> str:
    """Step the duration in ``current_text`` up (+1) or down (-1).

    Unparseable text counts as zero and the result never drops below one second.
    """
    try:
        current = parse_duration(current_text)
    except ParseError:
        current = timedelta(0)

    delta = direction * config.increment_step * unit_multiplier(config.unit, current_text)
    updated = max(SECOND, current + delta)
    return format_for_input(updated)
