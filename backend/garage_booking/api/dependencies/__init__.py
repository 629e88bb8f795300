# backend/garage_booking/api/dependencies/__init__.py
"""
Dependency injection for API routes.

Usage:
    from garage_booking.api.dependencies import get_booking_service
"""

from .database import get_db
from .services import (
    get_availability_cache,
    get_availability_service,
    get_booking_service,
    get_resource_locks,
)

__all__ = [
    "get_availability_cache",
    "get_availability_service",
    "get_booking_service",
    "get_db",
    "get_resource_locks",
]
