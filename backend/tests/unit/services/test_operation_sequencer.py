# backend/tests/unit/services/test_operation_sequencer.py
"""
OperationSequencer.

The fold itself (plan_segments) is tested with hand-built candidates and a
fake busy predicate; the service wrapper is tested against the database.
"""

from datetime import date, time

import pytest

from garage_booking.core.exceptions import (
    ImpossibleDurationException,
    NoStaffAvailableException,
    ValidationException,
)
from garage_booking.domain.intervals import MinuteInterval, overlaps
from garage_booking.models import Operation, StaffTimeOff
from garage_booking.services.operation_sequencer import (
    OperationSequencer,
    StaffCandidate,
    plan_segments,
)
from garage_booking.utils.time_utils import time_to_minutes

DAY = date(2030, 1, 7)
MORNING = [MinuteInterval(8 * 60, 12 * 60)]


def _op(op_id, minutes, role=None):
    return Operation(id=op_id, name=op_id.title(), duration_minutes=minutes, required_role=role)


def _never_busy(staff_id, start, end):
    return False


class TestPlanSegments:
    def test_segments_are_contiguous_and_ordered(self):
        candidates = [StaffCandidate("staff-a", "mechanic", MORNING)]

        plans = plan_segments(
            DAY, time(9, 0), [_op("oil", 60), _op("tires", 30)], candidates, [], _never_busy
        )

        assert [(p.position, p.operation_id, p.start_time, p.end_time) for p in plans] == [
            (0, "oil", time(9, 0), time(10, 0)),
            (1, "tires", time(10, 0), time(10, 30)),
        ]
        # Back-to-back segments touch, so one person may do both.
        assert {p.staff_id for p in plans} == {"staff-a"}

    def test_single_candidate_takes_back_to_back_segments(self):
        candidates = [StaffCandidate("staff-a", "mechanic", MORNING)]
        operations = [_op("oil", 60), _op("tires", 30), _op("brakes", 45)]

        plans = plan_segments(DAY, time(9, 0), operations, candidates, [], _never_busy)

        assert [p.staff_id for p in plans] == ["staff-a"] * 3
        intervals = [
            MinuteInterval(time_to_minutes(p.start_time), time_to_minutes(p.end_time))
            for p in plans
        ]
        for earlier, later in zip(intervals, intervals[1:]):
            assert earlier.end == later.start
        for i, first in enumerate(intervals):
            for second in intervals[i + 1:]:
                assert not overlaps(first, second)

    def test_lowest_staff_id_wins(self):
        candidates = [
            StaffCandidate("staff-a", "mechanic", MORNING),
            StaffCandidate("staff-b", "mechanic", MORNING),
        ]

        plans = plan_segments(DAY, time(9, 0), [_op("oil", 60)], candidates, [], _never_busy)

        assert plans[0].staff_id == "staff-a"

    def test_role_qualification(self):
        candidates = [
            StaffCandidate("staff-a", "mechanic", MORNING),
            StaffCandidate("staff-b", "electrician", MORNING),
        ]

        plans = plan_segments(
            DAY,
            time(9, 0),
            [_op("oil", 60), _op("diag", 45, role="electrician")],
            candidates,
            [],
            _never_busy,
        )

        assert [p.staff_id for p in plans] == ["staff-a", "staff-b"]

    def test_window_must_cover_whole_segment(self):
        candidates = [
            StaffCandidate("staff-a", "mechanic", [MinuteInterval(8 * 60, 9 * 60 + 30)]),
            StaffCandidate("staff-b", "mechanic", MORNING),
        ]

        plans = plan_segments(DAY, time(9, 0), [_op("oil", 60)], candidates, [], _never_busy)

        assert plans[0].staff_id == "staff-b"

    def test_time_off_skips_staff(self):
        candidates = [
            StaffCandidate("staff-a", "mechanic", MORNING),
            StaffCandidate("staff-b", "mechanic", MORNING),
        ]
        time_off = [
            StaffTimeOff(
                staff_id="staff-a",
                start_date=DAY,
                start_time=time(9, 30),
                end_date=DAY,
                end_time=time(11, 0),
            )
        ]

        plans = plan_segments(DAY, time(9, 0), [_op("oil", 60)], candidates, time_off, _never_busy)

        assert plans[0].staff_id == "staff-b"

    def test_committed_conflicts_skip_staff(self):
        candidates = [
            StaffCandidate("staff-a", "mechanic", MORNING),
            StaffCandidate("staff-b", "mechanic", MORNING),
        ]
        calls = []

        def busy(staff_id, start, end):
            calls.append((staff_id, start, end))
            return staff_id == "staff-a"

        plans = plan_segments(DAY, time(9, 0), [_op("oil", 60)], candidates, [], busy)

        assert plans[0].staff_id == "staff-b"
        assert calls[0] == ("staff-a", time(9, 0), time(10, 0))

    def test_no_candidate_names_the_operation(self):
        candidates = [StaffCandidate("staff-a", "mechanic", MORNING)]

        with pytest.raises(NoStaffAvailableException) as exc_info:
            plan_segments(
                DAY,
                time(9, 0),
                [_op("oil", 60), _op("diag", 45, role="electrician")],
                candidates,
                [],
                _never_busy,
            )

        assert exc_info.value.details == {
            "operation_id": "diag",
            "operation_name": "Diag",
            "start_time": "10:00",
            "end_time": "10:45",
        }


class TestCheckDuration:
    def test_exact_fit(self):
        assert OperationSequencer.check_duration(time(9, 0), [_op("a", 60), _op("b", 30)], time(10, 30)) == 630

    def test_mismatch_is_impossible_duration(self):
        with pytest.raises(ImpossibleDurationException) as exc_info:
            OperationSequencer.check_duration(time(9, 0), [_op("a", 60)], time(10, 30))

        assert exc_info.value.details["sequenced_end"] == "10:00"
        assert exc_info.value.details["total_minutes"] == 60

    def test_past_midnight_without_expected_end(self):
        with pytest.raises(ValidationException):
            OperationSequencer.check_duration(time(23, 30), [_op("a", 60)], None)


class TestSequencerService:
    def test_sequence_against_database(self, db, garage, booking_date):
        operations = [
            db.get(Operation, "oil-change"),
            db.get(Operation, "diagnostics"),
        ]

        plans = OperationSequencer(db).sequence(booking_date, time(9, 0), operations, time(10, 45))

        assert [(p.operation_id, p.staff_id) for p in plans] == [
            ("oil-change", "staff-a"),
            ("diagnostics", "staff-b"),
        ]

    def test_duration_checked_before_staffing(self, db, garage, booking_date):
        operations = [db.get(Operation, "diagnostics")]

        with pytest.raises(ImpossibleDurationException):
            # Nobody works at 18:00 either; the duration error is reported first.
            OperationSequencer(db).sequence(booking_date, time(18, 0), operations, time(19, 0))
