# backend/garage_booking/schemas/__init__.py
"""Pydantic request/response models for the HTTP API."""

from .availability import AvailabilityResponse, TimeWindowResponse
from .booking import (
    AppointmentCreate,
    AppointmentResponse,
    ConfirmationResponse,
    CustomerSummary,
    SegmentResponse,
)

__all__ = [
    "AppointmentCreate",
    "AppointmentResponse",
    "AvailabilityResponse",
    "ConfirmationResponse",
    "CustomerSummary",
    "SegmentResponse",
    "TimeWindowResponse",
]
