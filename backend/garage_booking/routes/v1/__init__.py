# backend/garage_booking/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import appointments, availability

__all__ = [
    "appointments",
    "availability",
]
