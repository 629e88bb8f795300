# backend/tests/unit/core/test_config.py
import pytest
from pydantic import ValidationError

from garage_booking.core.config import Settings


def test_defaults_follow_environment_overrides():
    settings = Settings()

    assert settings.max_advance_days == 14
    assert settings.resource_lock_ttl_seconds == 90
    assert settings.redis_url is None
    assert settings.is_sqlite


def test_blank_redis_url_means_in_memory(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "   ")

    assert Settings().redis_url is None


@pytest.mark.parametrize(
    "env, value",
    [
        ("BOOKING_MAX_ATTEMPTS", "0"),
        ("RESOURCE_LOCK_TIMEOUT_SECONDS", "0"),
        ("RESOURCE_LOCK_TTL_SECONDS", "0"),
        ("MAX_ADVANCE_DAYS", "-1"),
        ("GARAGE_TIMEZONE", "Mars/Olympus_Mons"),
    ],
)
def test_invalid_values_are_rejected(monkeypatch, env, value):
    monkeypatch.setenv(env, value)

    with pytest.raises(ValidationError):
        Settings()
