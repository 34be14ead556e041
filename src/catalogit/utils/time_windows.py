"""Availability window matching on a 24-hour HH:MM clock.

Windows are any objects with ``start`` and ``end`` attributes holding
zero-padded ``HH:MM`` strings, so the same helpers serve plain availability
windows and priced Dynamic windows.
"""

from datetime import date, datetime, time
from enum import Enum
import re
from typing import Optional, Sequence, TypeVar

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")
_WEEKDAY_NAMES = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}

W = TypeVar("W")


class MatchMode(Enum):
    """How a target is compared against windows."""

    POINT = "point"
    RANGE = "range"


def is_hhmm(value) -> bool:
    """Return True if value is a valid zero-padded 24-hour HH:MM string."""
    return isinstance(value, str) and HHMM_PATTERN.match(value) is not None


def parse_hhmm(value: str) -> time:
    """Parse an HH:MM string into a time.

    Raises:
        ValueError: If the string is not HH:MM on a 24-hour clock
    """
    if not is_hhmm(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM (24-hour)")
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def format_hhmm(moment: datetime | time) -> str:
    """Format the wall-clock part of a datetime or time as HH:MM."""
    return f"{moment.hour:02d}:{moment.minute:02d}"


def to_minutes(value: str | time | datetime) -> int:
    """Convert HH:MM (or a time/datetime) to minutes since midnight."""
    if isinstance(value, str):
        value = parse_hhmm(value)
    return value.hour * 60 + value.minute


def _as_hhmm(value: str | time | datetime) -> str:
    if isinstance(value, str):
        parse_hhmm(value)
        return value
    return format_hhmm(value)


def find_containing_window(
    windows: Sequence[W],
    target,
    mode: MatchMode = MatchMode.POINT,
) -> Optional[W]:
    """Find the first window containing a point in time or a time range.

    Args:
        windows: Windows with ``start``/``end`` HH:MM attributes
        target: For POINT, a datetime, time or HH:MM string. For RANGE, a
            ``(start, end)`` pair of any of those.
        mode: MatchMode.POINT or MatchMode.RANGE

    Returns:
        The matching window, or None if no window matches

    POINT uses a half-open interval, ``start <= t < end``, so two windows
    sharing a boundary never both match. RANGE requires
    ``range.start >= window.start`` and ``range.end <= window.end``.
    """
    if mode is MatchMode.POINT:
        moment = _as_hhmm(target)
        for window in windows:
            if window.start <= moment < window.end:
                return window
        return None

    if mode is MatchMode.RANGE:
        range_start, range_end = target
        start_minutes = to_minutes(range_start)
        end_minutes = to_minutes(range_end)
        for window in windows:
            if start_minutes >= to_minutes(window.start) and end_minutes <= to_minutes(window.end):
                return window
        return None

    raise ValueError(f"Unknown match mode: {mode!r}")


def normalize_weekday(value: str) -> str:
    """Normalize a weekday name to its three-letter lowercase code.

    Accepts "mon", "Mon", "monday", "MONDAY", etc.

    Raises:
        ValueError: If the value is not a weekday
    """
    cleaned = value.strip().lower()
    if cleaned in WEEKDAYS:
        return cleaned
    if cleaned in _WEEKDAY_NAMES:
        return _WEEKDAY_NAMES[cleaned]
    raise ValueError(f"Invalid weekday '{value}'. Use one of: {', '.join(WEEKDAYS)}")


def weekday_code(day: date) -> str:
    """Return the three-letter weekday code for a date or datetime."""
    return WEEKDAYS[day.weekday()]


def subtract_ranges(
    free: tuple[datetime, datetime],
    taken: Sequence[tuple[datetime, datetime]],
) -> list[tuple[datetime, datetime]]:
    """Remove taken ranges from a free range.

    Args:
        free: (start, end) of the free range
        taken: (start, end) ranges to remove, in any order

    Returns:
        Remaining free pieces sorted by start. Touching ranges do not
        overlap, so a booking ending at 10:00 leaves 10:00 onward free.
    """
    pieces = [free]
    for taken_start, taken_end in taken:
        remaining = []
        for start, end in pieces:
            if taken_start < end and taken_end > start:
                if start < taken_start:
                    remaining.append((start, taken_start))
                if end > taken_end:
                    remaining.append((taken_end, end))
            else:
                remaining.append((start, end))
        pieces = remaining
    return sorted(pieces)
