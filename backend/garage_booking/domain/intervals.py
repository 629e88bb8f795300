"""
Half-open time intervals used by every scheduling component.

An interval ``[start, end)`` contains ``start`` but not ``end``; two intervals
that merely touch (one ends when the other starts) do not overlap.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Any, Dict, Optional, Protocol

from ..utils.time_utils import minutes_to_time, minutes_to_time_str, time_to_minutes


class HasBounds(Protocol):
    start: Any
    end: Any


def overlaps(a: HasBounds, b: HasBounds) -> bool:
    """Return True when two half-open intervals share at least one instant."""
    return a.start < b.end and b.start < a.end


def ranges_overlap(a_start: Any, a_end: Any, b_start: Any, b_end: Any) -> bool:
    """Tuple form of :func:`overlaps` for callers holding raw bounds."""
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True, order=True)
class MinuteInterval:
    """Interval measured in minutes since midnight."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"interval start {self.start} must precede end {self.end}")

    @classmethod
    def from_times(cls, start: time, end: time) -> "MinuteInterval":
        return cls(time_to_minutes(start), time_to_minutes(end))

    @property
    def duration(self) -> int:
        return self.end - self.start

    def covers(self, other: "MinuteInterval") -> bool:
        """True when ``other`` lies entirely inside this interval."""
        return self.start <= other.start and other.end <= self.end

    def label(self) -> str:
        return f"{minutes_to_time_str(self.start)}-{minutes_to_time_str(self.end)}"


@dataclass(frozen=True)
class TimeWindow:
    """Candidate window produced by availability search."""

    start: time
    end: time
    staff_id: Optional[str] = None

    @classmethod
    def from_minutes(cls, start: int, end: int, staff_id: Optional[str] = None) -> "TimeWindow":
        return cls(minutes_to_time(start), minutes_to_time(end), staff_id)

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "staff_id": self.staff_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeWindow":
        return cls(
            start=time.fromisoformat(data["start"]),
            end=time.fromisoformat(data["end"]),
            staff_id=data.get("staff_id"),
        )
