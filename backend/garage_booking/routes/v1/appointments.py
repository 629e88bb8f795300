# backend/garage_booking/routes/v1/appointments.py
"""
Appointment routes - API v1

Endpoints:
    POST / - Book an appointment (bay + staffed segments, all or nothing)
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Body, Depends, status

from ...api.dependencies import get_booking_service
from ...core.exceptions import DomainException
from ...schemas.booking import (
    AppointmentCreate,
    AppointmentResponse,
    ConfirmationResponse,
    CustomerSummary,
    SegmentResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["appointments-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.post(
    "",
    response_model=ConfirmationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_appointment(
    payload: AppointmentCreate = Body(...),
    booking_service: BookingService = Depends(get_booking_service),
) -> ConfirmationResponse:
    """
    Book an appointment.

    The operations run in the order given and must exactly fill
    [start_time, end_time). Either the appointment and all of its segments
    are stored, or nothing is.
    """
    try:
        confirmation = await asyncio.to_thread(
            booking_service.book,
            payload.date,
            payload.start_time,
            payload.end_time,
            payload.customer_id,
            payload.operation_ids,
        )
    except DomainException as e:
        handle_domain_exception(e)

    logger.info(
        "Appointment %s booked in bay %s",
        confirmation.appointment.id,
        confirmation.appointment.bay_id,
    )
    return ConfirmationResponse(
        customer=CustomerSummary.model_validate(confirmation.customer),
        appointment=AppointmentResponse.model_validate(confirmation.appointment),
        segments=[SegmentResponse.model_validate(s) for s in confirmation.segments],
    )
