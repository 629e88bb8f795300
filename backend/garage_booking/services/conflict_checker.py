# backend/garage_booking/services/conflict_checker.py
"""
Conflict Checker Service for the garage booking engine

Handles all overlap detection used by availability search and booking:
- Pure interval overlap on half-open [start, end) intervals
- Coarse "is anyone working then" checks against working windows
- Committed staff and bay conflicts (always re-read from the database)
- Staff time off, garage closures and weekly opening hours

Nothing here is cached: every committed-state answer is read fresh so the
booking path sees the latest writes of other workers.
"""

from datetime import date, time
import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..domain.intervals import overlaps, ranges_overlap
from ..models.opening_hours import GarageWorkingHours
from ..models.staff import StaffTimeOff, WorkingWindow
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository, ResourceKind
from .base import BaseService

logger = logging.getLogger(__name__)


class ConflictChecker(BaseService):
    """
    Service for checking schedule conflicts.

    Centralizes conflict detection so availability search, bay allocation and
    sequencing all use the same overlap definition.
    """

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional ConflictCheckerRepository instance
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)
        self.staff_repository = RepositoryFactory.create_staff_repository(db)
        self.closure_repository = RepositoryFactory.create_closure_repository(db)

    @staticmethod
    def overlaps(a: Any, b: Any) -> bool:
        """Half-open overlap: touching endpoints never overlap."""
        return overlaps(a, b)

    def working_windows_on(self, check_date: date) -> List[WorkingWindow]:
        """Working windows of every staff member for the weekday of ``check_date``."""
        return self.staff_repository.find_working_windows_by_weekday(check_date.weekday())

    @BaseService.measure_operation("staff_window_available")
    def staff_window_available(self, check_date: date, start_time: time, end_time: time) -> bool:
        """
        Check whether anyone works at some point during [start_time, end_time).

        Coarse check only: partial overlap is enough and bookings are ignored.
        """
        for window in self.working_windows_on(check_date):
            if ranges_overlap(window.start_time, window.end_time, start_time, end_time):
                return True
        return False

    @BaseService.measure_operation("has_committed_conflict")
    def has_committed_conflict(
        self, staff_id: str, check_date: date, start_time: time, end_time: time
    ) -> bool:
        """True when a committed segment of the staff member overlaps the interval."""
        return self.repository.overlap_exists(
            ResourceKind.STAFF, staff_id, check_date, start_time, end_time
        )

    @BaseService.measure_operation("bay_is_free")
    def bay_is_free(self, bay_id: str, check_date: date, start_time: time, end_time: time) -> bool:
        """True when no committed appointment on the bay overlaps the interval."""
        return not self.repository.overlap_exists(
            ResourceKind.BAY, bay_id, check_date, start_time, end_time
        )

    def time_off_on(self, check_date: date) -> List[StaffTimeOff]:
        return self.staff_repository.find_time_off_for_date(check_date)

    def staff_on_time_off(
        self,
        staff_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
        time_off: Optional[List[StaffTimeOff]] = None,
    ) -> bool:
        """
        True when the staff member is absent for any part of the interval.

        ``time_off`` lets callers that already loaded the day's absences skip
        the query.
        """
        entries = time_off if time_off is not None else self.time_off_on(check_date)
        return any(
            entry.staff_id == staff_id and entry.blocks(check_date, start_time, end_time)
            for entry in entries
        )

    def is_garage_closed(self, check_date: date) -> bool:
        return self.closure_repository.is_closed_on(check_date)

    def opening_hours_on(self, check_date: date) -> Optional[GarageWorkingHours]:
        """Opening hours for the weekday of ``check_date``, None when the garage stays shut."""
        return self.closure_repository.find_opening_hours_by_weekday(check_date.weekday())
