# backend/tests/unit/core/test_time_utils.py
from datetime import time

import pytest

from garage_booking.utils.time_utils import minutes_to_time, minutes_to_time_str, time_to_minutes


def test_time_to_minutes_ignores_seconds():
    assert time_to_minutes(time(9, 30, 59)) == 570


def test_minutes_to_time():
    assert minutes_to_time(0) == time(0, 0)
    assert minutes_to_time(1439) == time(23, 59)


def test_minutes_to_time_rejects_end_of_day():
    with pytest.raises(ValueError):
        minutes_to_time(1440)


def test_minutes_to_time_str_renders_midnight_end():
    assert minutes_to_time_str(1440) == "24:00"
    assert minutes_to_time_str(545) == "09:05"
