# backend/garage_booking/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from . import models  # noqa: F401
from .core.config import is_running_tests, settings
from .core.constants import API_DESCRIPTION, API_VERSION
from .core.resource_lock import ResourceLockRegistry
from .database import Base, get_engine
from .errors import register_error_handlers
from .routes import health, prometheus
from .routes.v1 import appointments as appointments_v1, availability as availability_v1
from .services.availability_cache import AvailabilityCache

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the process-owned cache and lock registry; dispose of the engine on shutdown."""
    logger.info(f"{settings.api_title} starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    engine = get_engine()
    if settings.is_sqlite:
        # Server databases are migrated with Alembic; local SQLite files are created in place.
        Base.metadata.create_all(bind=engine)

    app.state.availability_cache = AvailabilityCache.from_url(settings.redis_url)
    app.state.resource_locks = ResourceLockRegistry.from_url(
        settings.redis_url,
        timeout_seconds=settings.resource_lock_timeout_seconds,
        ttl_seconds=settings.resource_lock_ttl_seconds,
    )
    logger.info(
        f"Availability cache backend: {app.state.availability_cache.backend}, "
        f"resource locks: {app.state.resource_locks.backend}, "
        f"booking horizon: {settings.max_advance_days} days"
    )

    yield

    logger.info(f"{settings.api_title} shutting down...")
    engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.api_title,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )
    # Register unified error envelope handlers
    register_error_handlers(app)

    # Create API v1 router
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(availability_v1.router, prefix="/availability")
    api_v1.include_router(appointments_v1.router, prefix="/appointments")

    app.include_router(api_v1)
    app.include_router(health.router)
    app.include_router(prometheus.router)
    return app


app = create_app()
