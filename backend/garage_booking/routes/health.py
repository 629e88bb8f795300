# backend/garage_booking/routes/health.py
"""
Health check endpoint.

Reports database connectivity and which availability cache backend is active.
"""

from datetime import datetime, timezone
import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..core.constants import API_VERSION
from ..database import with_db_retry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    """Standard health check response."""

    status: str = Field(description="Service health status", pattern="^(ok|degraded)$")
    version: str = Field(description="API version")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    checks: Dict[str, bool] = Field(description="Individual component health checks")
    cache_backend: str = Field(description="Availability cache backend (redis or memory)")


@router.get("/health", response_model=HealthCheckResponse)
def health_check(request: Request, db: Session = Depends(get_db)) -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns:
        ``ok`` when the database answers, ``degraded`` otherwise.
    """
    try:
        with_db_retry("health_check", lambda: db.execute(text("SELECT 1")))
        db_status = True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = False

    cache = getattr(request.app.state, "availability_cache", None)
    return HealthCheckResponse(
        status="ok" if db_status else "degraded",
        version=API_VERSION,
        checks={"database": db_status},
        cache_backend=cache.backend if cache is not None else "none",
    )
