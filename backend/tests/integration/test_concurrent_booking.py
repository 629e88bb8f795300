# backend/tests/integration/test_concurrent_booking.py
"""
Concurrent bookings racing for the last bay.

Uses a file-backed SQLite database so each worker has its own connection, the
way separate request handlers would. Both workers plan against the same empty
bay; exactly one may commit. Workers either share one lock registry (one
process), have separate registries on one Redis (several processes), or have
separate in-process registries (several processes without Redis).
"""

from datetime import time
import threading

import pytest
from sqlalchemy.orm import sessionmaker

from garage_booking.core.exceptions import NoBayAvailableException
from garage_booking.core.resource_lock import ResourceLockRegistry
from garage_booking.database import Base, build_engine
from garage_booking.models import Appointment
from garage_booking.services.availability_cache import AvailabilityCache
from garage_booking.services.booking_service import BookingService

from tests.helpers.fake_redis import FakeRedis
from tests.helpers.garage_seed import GarageSeeder

WORKERS = 2
SEPARATE_WORKER_TRIALS = 20


def _make_session_factory(path):
    engine = build_engine(f"sqlite:///{path}")
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    return engine, factory


def _seed_one_bay(session_factory, booking_date):
    setup = session_factory()
    seeder = GarageSeeder(setup)
    weekday = booking_date.weekday()
    seeder.opening_hours(weekday, time(7, 0), time(18, 0))
    seeder.staff("staff-a", [(weekday, time(8, 0), time(12, 0))])
    seeder.staff("staff-b", [(weekday, time(8, 0), time(12, 0))])
    seeder.bay("bay-1")
    seeder.customer("cust-1")
    seeder.customer("cust-2")
    seeder.operation("oil-change", 60)
    setup.close()


def _race(session_factory, booking_date, registries):
    """Book 09:00-10:00 from one thread per registry; map customer id to outcome."""
    cache = AvailabilityCache()
    barrier = threading.Barrier(len(registries))
    results = {}

    def worker(customer_id, locks):
        session = session_factory()
        try:
            service = BookingService(session, cache=cache, locks=locks)
            barrier.wait(timeout=5)
            confirmation = service.book(
                booking_date, time(9, 0), time(10, 0), customer_id, ["oil-change"]
            )
            results[customer_id] = confirmation.appointment.id
        except Exception as exc:
            results[customer_id] = exc
        finally:
            session.close()

    threads = [
        threading.Thread(target=worker, args=(f"cust-{i + 1}", locks))
        for i, locks in enumerate(registries)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


def _assert_single_winner(session_factory, results):
    outcomes = list(results.values())
    winners = [o for o in outcomes if isinstance(o, str)]
    losers = [o for o in outcomes if isinstance(o, Exception)]
    assert len(winners) == 1, outcomes
    assert len(losers) == 1
    assert isinstance(losers[0], NoBayAvailableException), losers[0]

    check = session_factory()
    try:
        appointments = check.query(Appointment).all()
        assert [a.id for a in appointments] == winners
        assert len(appointments[0].segments) == 1
    finally:
        check.close()


@pytest.fixture
def session_factory(tmp_path):
    engine, factory = _make_session_factory(tmp_path / "race.db")
    yield factory
    engine.dispose()


def test_exactly_one_of_two_concurrent_bookings_wins(session_factory, booking_date):
    _seed_one_bay(session_factory, booking_date)
    locks = ResourceLockRegistry(timeout_seconds=5)

    results = _race(session_factory, booking_date, [locks] * WORKERS)

    _assert_single_winner(session_factory, results)
    assert len(locks) == 0


def test_workers_with_separate_registries_on_one_redis(session_factory, booking_date):
    _seed_one_bay(session_factory, booking_date)
    client = FakeRedis()
    registries = [
        ResourceLockRegistry(timeout_seconds=5, redis_client=client, poll_interval=0.01)
        for _ in range(WORKERS)
    ]

    results = _race(session_factory, booking_date, registries)

    _assert_single_winner(session_factory, results)
    assert client.store == {}


def test_workers_without_shared_locks_never_double_book(tmp_path, booking_date):
    for trial in range(SEPARATE_WORKER_TRIALS):
        engine, factory = _make_session_factory(tmp_path / f"race-{trial}.db")
        try:
            _seed_one_bay(factory, booking_date)
            registries = [ResourceLockRegistry(timeout_seconds=5) for _ in range(WORKERS)]

            results = _race(factory, booking_date, registries)

            _assert_single_winner(factory, results)
        finally:
            engine.dispose()


def test_different_windows_both_succeed(session_factory, booking_date):
    setup = session_factory()
    seeder = GarageSeeder(setup)
    seeder.opening_hours(booking_date.weekday(), time(7, 0), time(18, 0))
    seeder.staff("staff-a", [(booking_date.weekday(), time(8, 0), time(12, 0))])
    seeder.bay("bay-1")
    seeder.customer("cust-1")
    seeder.operation("oil-change", 60)
    setup.close()

    locks = ResourceLockRegistry(timeout_seconds=5)
    barrier = threading.Barrier(WORKERS)
    errors = []

    def worker(start, end):
        session = session_factory()
        try:
            barrier.wait(timeout=5)
            BookingService(session, locks=locks).book(
                booking_date, start, end, "cust-1", ["oil-change"]
            )
        except Exception as exc:
            errors.append(exc)
        finally:
            session.close()

    threads = [
        threading.Thread(target=worker, args=(time(9, 0), time(10, 0))),
        threading.Thread(target=worker, args=(time(10, 0), time(11, 0))),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert errors == []
    check = session_factory()
    try:
        assert check.query(Appointment).count() == 2
    finally:
        check.close()
