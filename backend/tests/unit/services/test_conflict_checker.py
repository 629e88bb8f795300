# backend/tests/unit/services/test_conflict_checker.py
"""ConflictChecker against committed state in a real (in-memory) database."""

from datetime import time, timedelta

from garage_booking.domain.intervals import MinuteInterval
from garage_booking.models import Appointment, AppointmentSegment
from garage_booking.services.conflict_checker import ConflictChecker


def _book(db, booking_date, bay_id, staff_id, start, end, op_id="oil-change"):
    appointment = Appointment(
        customer_id="cust-1",
        bay_id=bay_id,
        appointment_date=booking_date,
        start_time=start,
        end_time=end,
    )
    appointment.segments.append(
        AppointmentSegment(
            operation_id=op_id,
            staff_id=staff_id,
            segment_date=booking_date,
            position=0,
            start_time=start,
            end_time=end,
        )
    )
    db.add(appointment)
    db.commit()
    return appointment


class TestPureOverlap:
    def test_touching_intervals_do_not_overlap(self, db):
        checker = ConflictChecker(db)

        assert not checker.overlaps(MinuteInterval(540, 600), MinuteInterval(600, 660))
        assert checker.overlaps(MinuteInterval(540, 601), MinuteInterval(600, 660))


class TestStaffWindowAvailable:
    def test_partial_overlap_is_enough(self, db, garage, booking_date):
        checker = ConflictChecker(db)

        assert checker.staff_window_available(booking_date, time(11, 30), time(13, 0))

    def test_outside_hours(self, db, garage, booking_date):
        checker = ConflictChecker(db)

        assert not checker.staff_window_available(booking_date, time(12, 0), time(13, 0))
        assert not checker.staff_window_available(
            booking_date + timedelta(days=1), time(9, 0), time(10, 0)
        )


class TestCommittedConflicts:
    def test_staff_conflict(self, db, garage, booking_date):
        _book(db, booking_date, "bay-1", "staff-a", time(9, 0), time(10, 0))
        checker = ConflictChecker(db)

        assert checker.has_committed_conflict("staff-a", booking_date, time(9, 30), time(10, 30))
        assert not checker.has_committed_conflict("staff-a", booking_date, time(10, 0), time(11, 0))
        assert not checker.has_committed_conflict("staff-b", booking_date, time(9, 0), time(10, 0))
        assert not checker.has_committed_conflict(
            "staff-a", booking_date + timedelta(days=7), time(9, 0), time(10, 0)
        )

    def test_bay_is_free(self, db, garage, booking_date):
        _book(db, booking_date, "bay-1", "staff-a", time(9, 0), time(10, 0))
        checker = ConflictChecker(db)

        assert not checker.bay_is_free("bay-1", booking_date, time(8, 30), time(9, 30))
        assert checker.bay_is_free("bay-1", booking_date, time(8, 0), time(9, 0))
        assert checker.bay_is_free("bay-1", booking_date, time(10, 0), time(11, 0))


class TestReferenceDataChecks:
    def test_staff_on_time_off(self, db, garage, booking_date):
        garage.time_off("staff-a", booking_date, time(9, 0), booking_date, time(10, 0))
        checker = ConflictChecker(db)

        assert checker.staff_on_time_off("staff-a", booking_date, time(9, 30), time(10, 30))
        assert not checker.staff_on_time_off("staff-a", booking_date, time(10, 0), time(11, 0))
        assert not checker.staff_on_time_off("staff-b", booking_date, time(9, 0), time(10, 0))

    def test_multi_day_time_off_blocks_whole_day(self, db, garage, booking_date):
        garage.time_off(
            "staff-a",
            booking_date - timedelta(days=1),
            time(0, 0),
            booking_date + timedelta(days=1),
            time(0, 0),
        )
        checker = ConflictChecker(db)

        assert checker.staff_on_time_off("staff-a", booking_date, time(8, 0), time(12, 0))

    def test_is_garage_closed(self, db, garage, booking_date):
        garage.closure(booking_date)
        checker = ConflictChecker(db)

        assert checker.is_garage_closed(booking_date)
        assert not checker.is_garage_closed(booking_date + timedelta(days=1))

    def test_opening_hours_by_weekday(self, db, garage, booking_date):
        checker = ConflictChecker(db)

        hours = checker.opening_hours_on(booking_date)
        assert (hours.opening_time, hours.closing_time) == (time(7, 0), time(18, 0))
        assert checker.opening_hours_on(booking_date + timedelta(days=1)) is None

    def test_opening_hours_cover_is_inclusive_of_bounds(self, db, garage, booking_date):
        hours = ConflictChecker(db).opening_hours_on(booking_date)

        assert hours.covers(time(7, 0), time(18, 0))
        assert not hours.covers(time(6, 30), time(7, 30))
        assert not hours.covers(time(17, 30), time(18, 30))
