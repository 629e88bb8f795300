# backend/garage_booking/schemas/availability.py
"""Availability query responses."""

from datetime import date, time
from datetime import date as date_type
from typing import List, Optional

from pydantic import Field

from ..domain.intervals import TimeWindow
from ._strict_base import StrictModel


class TimeWindowResponse(StrictModel):
    """One advisory window; staff_id names the working window it came from."""

    start: time
    end: time
    staff_id: Optional[str] = None

    @classmethod
    def from_window(cls, window: TimeWindow) -> "TimeWindowResponse":
        return cls(start=window.start, end=window.end, staff_id=window.staff_id)


class AvailabilityResponse(StrictModel):
    date: date_type
    operation_ids: List[str] = Field(..., description="Canonical (sorted, de-duplicated) operation set")
    windows: List[TimeWindowResponse]

    @classmethod
    def build(
        cls, target_date: date, operation_ids: List[str], windows: List[TimeWindow]
    ) -> "AvailabilityResponse":
        return cls(
            date=target_date,
            operation_ids=sorted(set(operation_ids)),
            windows=[TimeWindowResponse.from_window(w) for w in windows],
        )
