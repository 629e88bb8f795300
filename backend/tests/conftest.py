# backend/tests/conftest.py
"""
Pytest configuration for the garage booking engine.

Every test gets a fresh in-memory SQLite database. Environment overrides are
applied BEFORE any garage_booking import so Settings never picks up a local
.env database or Redis URL.
"""

import os

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ["IS_TESTING"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["REDIS_URL"] = ""
os.environ["GARAGE_TIMEZONE"] = "UTC"
os.environ["MAX_ADVANCE_DAYS"] = "14"
os.environ["BOOKING_MAX_ATTEMPTS"] = "3"

from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from garage_booking import models  # noqa: F401
from garage_booking.core.timezone_utils import get_garage_today
from garage_booking.database import Base
from garage_booking.models import StaffRole
from tests.helpers.garage_seed import MONDAY, GarageSeeder, next_weekday


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    """Plain session; services commit for real against the per-test database."""
    session_factory = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def today() -> date:
    return get_garage_today()


@pytest.fixture
def booking_date(today: date) -> date:
    """Next Monday: always inside the 14-day booking horizon."""
    return next_weekday(today, MONDAY)


@pytest.fixture
def seed(db: Session) -> GarageSeeder:
    return GarageSeeder(db)


@pytest.fixture
def garage(seed: GarageSeeder, booking_date: date) -> GarageSeeder:
    """
    Small garage open on Mondays.

    - open 07:00-18:00
    - staff-a (mechanic) and staff-b (electrician) work 08:00-12:00
    - one bay, one customer
    - oil-change (60 min), tire-rotation (30 min), diagnostics (45 min, electrician)
    """
    weekday = booking_date.weekday()
    seed.opening_hours(weekday, time(7, 0), time(18, 0))
    seed.staff("staff-a", [(weekday, time(8, 0), time(12, 0))], role=StaffRole.MECHANIC)
    seed.staff("staff-b", [(weekday, time(8, 0), time(12, 0))], role=StaffRole.ELECTRICIAN)
    seed.bay("bay-1")
    seed.customer("cust-1")
    seed.operation("oil-change", 60, name="Oil change")
    seed.operation("tire-rotation", 30, name="Tire rotation")
    seed.operation("diagnostics", 45, name="Diagnostics", role=StaffRole.ELECTRICIAN)
    return seed
