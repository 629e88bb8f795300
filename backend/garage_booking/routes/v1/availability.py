# backend/garage_booking/routes/v1/availability.py
"""
Availability routes - API v1

Endpoints:
    GET / - Advisory time windows for a date and operation set
"""

import asyncio
from datetime import date
import logging
from typing import List, NoReturn

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_availability_service
from ...core.exceptions import DomainException
from ...schemas.availability import AvailabilityResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("", response_model=AvailabilityResponse)
async def get_availability(
    target_date: date = Query(..., alias="date", description="Day to search (YYYY-MM-DD)"),
    operation_ids: List[str] = Query(default=[], description="Operations to fit, repeatable"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    """
    Candidate windows for running every requested operation back to back.

    Results are advisory: they ignore existing appointments, so booking one of
    them can still fail.
    """
    try:
        windows = await asyncio.to_thread(
            availability_service.query_availability, target_date, operation_ids
        )
    except DomainException as e:
        handle_domain_exception(e)
    return AvailabilityResponse.build(target_date, operation_ids, windows)
