# backend/tests/unit/services/test_bay_allocator.py
from datetime import time

import pytest

from garage_booking.core.exceptions import NoBayAvailableException
from garage_booking.models import Appointment
from garage_booking.services.bay_allocator import BayAllocator


def _occupy(db, booking_date, bay_id, start, end):
    db.add(
        Appointment(
            customer_id="cust-1",
            bay_id=bay_id,
            appointment_date=booking_date,
            start_time=start,
            end_time=end,
        )
    )
    db.commit()


def test_first_free_bay_by_id(db, garage, booking_date):
    garage.bays(["bay-3", "bay-2"])

    bay = BayAllocator(db).allocate(booking_date, time(9, 0), time(10, 0))

    assert bay.id == "bay-1"


def test_skips_occupied_bays(db, garage, booking_date):
    garage.bays(["bay-2", "bay-3"])
    _occupy(db, booking_date, "bay-1", time(9, 30), time(10, 30))

    bay = BayAllocator(db).allocate(booking_date, time(9, 0), time(10, 0))

    assert bay.id == "bay-2"


def test_touching_appointment_does_not_block(db, garage, booking_date):
    _occupy(db, booking_date, "bay-1", time(8, 0), time(9, 0))

    assert BayAllocator(db).allocate(booking_date, time(9, 0), time(10, 0)).id == "bay-1"


def test_no_bay_available(db, garage, booking_date):
    _occupy(db, booking_date, "bay-1", time(9, 0), time(10, 0))

    with pytest.raises(NoBayAvailableException) as exc_info:
        BayAllocator(db).allocate(booking_date, time(9, 30), time(10, 30))

    assert exc_info.value.code == "NO_BAY_AVAILABLE"
