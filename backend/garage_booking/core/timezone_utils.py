"""
Timezone utilities for the garage booking engine.

The booking horizon is evaluated against the garage's local calendar, not the
server clock.
"""

from datetime import date, datetime
from typing import Optional

import pytz

from .config import settings


def get_garage_timezone(tz_name: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Get the configured garage timezone.

    Args:
        tz_name: Optional override (defaults to GARAGE_TIMEZONE)

    Returns:
        pytz timezone object
    """
    return pytz.timezone(tz_name or settings.garage_timezone)


def get_garage_now(tz_name: Optional[str] = None) -> datetime:
    """Get current datetime in the garage's timezone."""
    return datetime.now(get_garage_timezone(tz_name))


def get_garage_today(tz_name: Optional[str] = None) -> date:
    """
    Get 'today' in the garage's timezone.

    Args:
        tz_name: Optional override (defaults to GARAGE_TIMEZONE)

    Returns:
        Today's date in the garage's timezone
    """
    return get_garage_now(tz_name).date()
