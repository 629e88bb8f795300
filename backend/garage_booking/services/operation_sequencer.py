# backend/garage_booking/services/operation_sequencer.py
"""
Operation Sequencer for the garage booking engine

Chains the requested operations, in the order given, into contiguous segments
starting at the requested start time and assigns one staff member to each.

The assignment is a fold over the operations carrying the cursor. A staff
member is a candidate for a segment when one of their working windows covers
it, their role qualifies for the operation, they are not on time off and they
have no committed segment overlapping it. The lowest staff id among candidates
wins. Segments of one plan are back to back, so the same person may take
several of them without ever overlapping themselves.
"""

from dataclasses import dataclass
from datetime import date, time
import logging
from typing import Callable, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import (
    ImpossibleDurationException,
    NoStaffAvailableException,
    ValidationException,
)
from ..domain.intervals import MinuteInterval
from ..models.operation import Operation
from ..models.staff import StaffTimeOff, WorkingWindow
from ..utils.time_utils import minutes_to_time, minutes_to_time_str, time_to_minutes
from .base import BaseService
from .conflict_checker import ConflictChecker

logger = logging.getLogger(__name__)

BusyPredicate = Callable[[str, time, time], bool]


@dataclass(frozen=True)
class SegmentPlan:
    """Planned (not yet persisted) segment."""

    position: int
    operation_id: str
    operation_name: str
    staff_id: str
    start_time: time
    end_time: time


@dataclass(frozen=True)
class StaffCandidate:
    staff_id: str
    role: str
    windows: List[MinuteInterval]

    def covers(self, interval: MinuteInterval) -> bool:
        return any(window.covers(interval) for window in self.windows)


def build_candidates(working_windows: Sequence[WorkingWindow]) -> List[StaffCandidate]:
    """Group a weekday's working windows per staff member, ordered by staff id."""
    grouped: Dict[str, List[MinuteInterval]] = {}
    roles: Dict[str, str] = {}
    for window in working_windows:
        grouped.setdefault(window.staff_id, []).append(
            MinuteInterval.from_times(window.start_time, window.end_time)
        )
        roles[window.staff_id] = window.staff.role
    return [StaffCandidate(staff_id, roles[staff_id], grouped[staff_id]) for staff_id in sorted(grouped)]


def plan_segments(
    target_date: date,
    start_time: time,
    operations: Sequence[Operation],
    candidates: Sequence[StaffCandidate],
    time_off: Sequence[StaffTimeOff],
    is_busy: BusyPredicate,
) -> List[SegmentPlan]:
    """
    Assign contiguous segments to staff, starting at ``start_time``.

    ``is_busy(staff_id, start, end)`` answers whether committed state already
    holds the staff member during [start, end).

    Segments of one plan follow each other without gaps and never overlap, so
    a staff member may take any number of consecutive segments.

    Raises:
        NoStaffAvailableException: Some operation has no candidate
    """
    cursor = time_to_minutes(start_time)
    plans: List[SegmentPlan] = []

    for position, operation in enumerate(operations):
        segment = MinuteInterval(cursor, cursor + operation.duration_minutes)
        seg_start = minutes_to_time(segment.start)
        seg_end = minutes_to_time(segment.end)

        assigned: Optional[str] = None
        for candidate in candidates:
            if not candidate.covers(segment):
                continue
            if not operation.is_performable_by(candidate.role):
                continue
            if any(
                entry.staff_id == candidate.staff_id and entry.blocks(target_date, seg_start, seg_end)
                for entry in time_off
            ):
                continue
            if is_busy(candidate.staff_id, seg_start, seg_end):
                continue
            assigned = candidate.staff_id
            break

        if assigned is None:
            raise NoStaffAvailableException(
                operation.id,
                operation.name,
                minutes_to_time_str(segment.start),
                minutes_to_time_str(segment.end),
            )

        plans.append(
            SegmentPlan(
                position=position,
                operation_id=operation.id,
                operation_name=operation.name,
                staff_id=assigned,
                start_time=seg_start,
                end_time=seg_end,
            )
        )
        cursor = segment.end

    return plans


class OperationSequencer(BaseService):
    """Loads the day's staffing data and runs the segment fold against it."""

    def __init__(self, db: Session, conflict_checker: Optional[ConflictChecker] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.conflict_checker = conflict_checker or ConflictChecker(db)

    @staticmethod
    def check_duration(
        start_time: time, operations: Sequence[Operation], expected_end: Optional[time]
    ) -> int:
        """
        Return the minute at which the operations finish.

        Raises:
            ImpossibleDurationException: They do not finish exactly at ``expected_end``
            ValidationException: They run past midnight
        """
        total = sum(op.duration_minutes for op in operations)
        end_minutes = time_to_minutes(start_time) + total
        if expected_end is not None and end_minutes != time_to_minutes(expected_end):
            sequenced_end = (
                minutes_to_time_str(end_minutes) if end_minutes <= MINUTES_PER_DAY else "past midnight"
            )
            raise ImpossibleDurationException(expected_end, sequenced_end, total)
        if end_minutes >= MINUTES_PER_DAY:
            raise ValidationException(
                "Requested operations run past midnight",
                code="IMPOSSIBLE_DURATION",
                details={"total_minutes": total},
            )
        return end_minutes

    @BaseService.measure_operation("sequence_operations")
    def sequence(
        self,
        target_date: date,
        start_time: time,
        operations: Sequence[Operation],
        expected_end: Optional[time] = None,
    ) -> List[SegmentPlan]:
        """
        Plan one segment per operation, in the order given.

        The whole chain is checked against ``expected_end`` before any staff is
        looked up.

        Raises:
            ImpossibleDurationException: Durations do not fill [start_time, expected_end)
            NoStaffAvailableException: An operation cannot be staffed
        """
        self.check_duration(start_time, operations, expected_end)

        candidates = build_candidates(self.conflict_checker.working_windows_on(target_date))
        time_off = self.conflict_checker.time_off_on(target_date)

        def is_busy(staff_id: str, seg_start: time, seg_end: time) -> bool:
            return self.conflict_checker.has_committed_conflict(
                staff_id, target_date, seg_start, seg_end
            )

        plans = plan_segments(target_date, start_time, operations, candidates, time_off, is_busy)
        self.logger.debug(
            "Sequenced %d operations on %s: %s",
            len(plans),
            target_date,
            [(p.operation_id, p.staff_id) for p in plans],
        )
        return plans
