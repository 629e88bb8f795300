from __future__ import annotations

from datetime import time

from ..core.constants import MINUTES_PER_DAY


def time_to_minutes(t: time) -> int:
    """
    Convert time to minutes since midnight.

    Seconds and microseconds are ignored; scheduling works at minute precision.
    """
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> time:
    """
    Convert minutes since midnight back to a time.

    Raises:
        ValueError: If the value falls outside a single day.
    """
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    return time(minutes // 60, minutes % 60)


def minutes_to_time_str(minutes: int) -> str:
    """
    Convert minutes since midnight to HH:MM.

    1440 is rendered as "24:00".
    """
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"minutes out of range: {minutes}")
    if minutes == MINUTES_PER_DAY:
        return "24:00"
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
