"""Application-wide constants for the garage booking engine."""

from __future__ import annotations

API_TITLE = "Garage Booking API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Availability search and atomic appointment booking for service bays."

# Booking horizon (days after today that can still be booked)
DEFAULT_MAX_ADVANCE_DAYS = 14

# Day geometry
MINUTES_PER_DAY = 24 * 60

# Text constraints
MAX_NAME_LENGTH = 120
MAX_REASON_LENGTH = 255

# Cache
AVAILABILITY_CACHE_PREFIX = "avail"
