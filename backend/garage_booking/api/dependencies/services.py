# backend/garage_booking/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

The availability cache and the resource lock registry are created once in the
application lifespan and live on ``app.state``; every request-scoped service
receives those shared instances together with its own database session.
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ...core.resource_lock import ResourceLockRegistry
from ...services.availability_cache import AvailabilityCache
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from .database import get_db

logger = logging.getLogger(__name__)


def get_availability_cache(request: Request) -> AvailabilityCache:
    """Application-owned availability cache."""
    return request.app.state.availability_cache


def get_resource_locks(request: Request) -> ResourceLockRegistry:
    """Application-owned resource lock registry."""
    return request.app.state.resource_locks


def get_availability_service(
    db: Session = Depends(get_db),
    cache: AvailabilityCache = Depends(get_availability_cache),
) -> AvailabilityService:
    """
    Get availability service instance.

    Args:
        db: Database session
        cache: Shared availability cache

    Returns:
        AvailabilityService instance
    """
    return AvailabilityService(db, cache)


def get_booking_service(
    db: Session = Depends(get_db),
    cache: AvailabilityCache = Depends(get_availability_cache),
    locks: ResourceLockRegistry = Depends(get_resource_locks),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        cache: Shared availability cache (evicted after each booking)
        locks: Shared resource lock registry

    Returns:
        BookingService instance
    """
    return BookingService(db, cache=cache, locks=locks)
