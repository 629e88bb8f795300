# backend/garage_booking/services/availability_calculator.py
"""
Availability Calculator for the garage booking engine

Derives candidate time windows for a date and a set of operations from staff
working hours, clipped to the garage opening hours of that weekday. Results are
advisory: committed bookings and bays are not consulted, so a window returned
here can still be rejected at booking time. A weekday without opening hours
has no availability.

For each clipped working window [ws, we) the calculator slides a start time
from ws in steps of the shortest requested duration. A start is kept when the
whole operation set, run back to back, finishes by we.
"""

from datetime import date
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..domain.intervals import TimeWindow
from ..models.staff import StaffTimeOff
from ..repositories import RepositoryFactory
from ..utils.time_utils import time_to_minutes
from .base import BaseService
from .conflict_checker import ConflictChecker
from .scheduling_rules import ensure_bookable_date, normalize_operation_ids, resolve_operations

logger = logging.getLogger(__name__)


class AvailabilityCalculator(BaseService):
    """Computes advisory windows from working hours, closures and time off."""

    def __init__(self, db: Session, conflict_checker: Optional[ConflictChecker] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.conflict_checker = conflict_checker or ConflictChecker(db)
        self.operation_repository = RepositoryFactory.create_operation_repository(db)

    @BaseService.measure_operation("calculate_availability")
    def calculate(self, target_date: date, operation_ids: Iterable[str]) -> List[TimeWindow]:
        """
        Compute candidate windows for ``operation_ids`` on ``target_date``.

        Args:
            target_date: Requested day
            operation_ids: Operation ids (duplicates collapse)

        Returns:
            Windows ordered by staff id, then start time

        Raises:
            InvalidDateRangeException: Date outside [today, today + horizon]
            ValidationException: Empty operation set
            UnknownOperationException: An id does not resolve
        """
        ensure_bookable_date(target_date)
        ids = normalize_operation_ids(operation_ids)
        operations = resolve_operations(self.operation_repository, ids)

        if self.conflict_checker.is_garage_closed(target_date):
            self.logger.info(f"Garage closed on {target_date}, no availability")
            return []

        hours = self.conflict_checker.opening_hours_on(target_date)
        if hours is None:
            self.logger.info(f"No opening hours for {target_date:%A}, no availability")
            return []
        opens = time_to_minutes(hours.opening_time)
        closes = time_to_minutes(hours.closing_time)

        durations = [op.duration_minutes for op in operations]
        step = min(durations)
        total = sum(durations)

        time_off = self.conflict_checker.time_off_on(target_date)
        absences: Dict[str, List[StaffTimeOff]] = {}
        for entry in time_off:
            absences.setdefault(entry.staff_id, []).append(entry)

        windows: List[TimeWindow] = []
        for working_window in self.conflict_checker.working_windows_on(target_date):
            # Staff only work while the garage is open.
            ws = max(time_to_minutes(working_window.start_time), opens)
            we = min(time_to_minutes(working_window.end_time), closes)
            staff_absences = absences.get(working_window.staff_id, [])

            start = ws
            while start + step <= we:
                end = start + total
                if end <= we:
                    candidate = TimeWindow.from_minutes(start, end, working_window.staff_id)
                    if not any(
                        a.blocks(target_date, candidate.start, candidate.end)
                        for a in staff_absences
                    ):
                        windows.append(candidate)
                start += step

        windows.sort(key=lambda w: (w.staff_id or "", w.start))
        self.log_operation(
            "calculate_availability",
            date=target_date.isoformat(),
            operations=len(ids),
            windows=len(windows),
        )
        return windows

