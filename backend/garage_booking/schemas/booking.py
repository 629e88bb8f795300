# backend/garage_booking/schemas/booking.py
"""
Appointment booking schemas.

A booking request names the exact window and the operations to run inside
it, in order. The response echoes the confirmed appointment with one segment
per operation.
"""

from datetime import date, datetime, time
from datetime import date as date_type
import re
from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from ..core.constants import MAX_NAME_LENGTH
from ._strict_base import StrictModel, StrictRequestModel

DATE_ONLY_REGEX = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class AppointmentCreate(StrictRequestModel):
    """Request to book an appointment."""

    date: date_type = Field(..., description="Day of the appointment (YYYY-MM-DD)")
    start_time: time = Field(..., description="Start of the appointment window")
    end_time: time = Field(..., description="End of the appointment window (exclusive)")
    customer_id: str = Field(..., min_length=1)
    operation_ids: List[str] = Field(..., description="Operations to perform, in order")

    @field_validator("date", mode="before")
    @classmethod
    def _date_only(cls, value: object) -> object:
        if isinstance(value, str):
            candidate = value.strip()
            if not DATE_ONLY_REGEX.fullmatch(candidate):
                raise ValueError("date must be a YYYY-MM-DD date-only string")
            return candidate
        return value

    @field_validator("operation_ids")
    @classmethod
    def _non_blank_ids(cls, value: List[str]) -> List[str]:
        cleaned = [item.strip() for item in value]
        if any(not item for item in cleaned):
            raise ValueError("operation_ids must not contain blank ids")
        return cleaned


class CustomerSummary(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    name: str = Field(..., max_length=MAX_NAME_LENGTH)
    email: Optional[str] = None
    phone: Optional[str] = None


class SegmentResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    position: int
    operation_id: str
    staff_id: str
    start_time: time
    end_time: time


class AppointmentResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    appointment_date: date
    start_time: time
    end_time: time
    customer_id: str
    bay_id: str
    created_at: Optional[datetime] = None


class ConfirmationResponse(StrictModel):
    """Booking confirmation."""

    customer: CustomerSummary
    appointment: AppointmentResponse
    segments: List[SegmentResponse]
