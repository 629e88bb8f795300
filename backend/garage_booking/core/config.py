# backend/garage_booking/core/config.py
import logging
import os
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import API_TITLE, DEFAULT_MAX_ADVANCE_DAYS

logger = logging.getLogger(__name__)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


class Settings(BaseSettings):
    environment: Literal["local", "development", "staging", "production", "test"] = Field(
        default="local",
        description="Deployment environment name",
    )
    api_title: str = Field(default=API_TITLE, description="Title shown in the OpenAPI docs")

    # Persistence
    database_url: str = Field(
        default="sqlite:///./garage_booking.db",
        description="SQLAlchemy URL for the primary database",
    )
    database_echo: bool = Field(default=False, description="Log every SQL statement")
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL backing the availability cache (in-memory when unset)",
    )

    # Booking horizon and scheduling rules
    max_advance_days: int = Field(
        default=DEFAULT_MAX_ADVANCE_DAYS,
        description="Furthest day (relative to today) that can be queried or booked",
    )
    garage_timezone: str = Field(
        default="UTC",
        description="IANA timezone used to decide what 'today' means for the garage",
    )
    booking_max_attempts: int = Field(
        default=3,
        description="How many times a booking is re-planned after losing a race",
    )
    resource_lock_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound on waiting for a bay/staff lock during booking",
    )
    resource_lock_ttl_seconds: int = Field(
        default=90,
        description="Expiry of a Redis resource lock left behind by a crashed worker",
    )

    is_testing: bool = Field(default=False, description="Set by the test suite")

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("max_advance_days")
    @classmethod
    def _validate_max_advance_days(cls, value: int) -> int:
        if value < 0:
            raise ValueError("MAX_ADVANCE_DAYS must be zero or positive")
        return value

    @field_validator("booking_max_attempts")
    @classmethod
    def _validate_booking_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("BOOKING_MAX_ATTEMPTS must be at least 1")
        return value

    @field_validator("resource_lock_timeout_seconds")
    @classmethod
    def _validate_lock_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("RESOURCE_LOCK_TIMEOUT_SECONDS must be positive")
        return value

    @field_validator("resource_lock_ttl_seconds")
    @classmethod
    def _validate_lock_ttl(cls, value: int) -> int:
        if value < 1:
            raise ValueError("RESOURCE_LOCK_TTL_SECONDS must be at least 1")
        return value

    @field_validator("garage_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown GARAGE_TIMEZONE: {value}") from exc
        return value

    @field_validator("redis_url", mode="before")
    @classmethod
    def _blank_redis_url(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
