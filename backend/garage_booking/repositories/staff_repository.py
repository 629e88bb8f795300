# backend/garage_booking/repositories/staff_repository.py
"""
Staff Repository for the garage booking engine

Working windows and time off are reference data; the scheduling services only
read them.
"""

from datetime import date
import logging
from typing import List, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.staff import StaffMember, StaffTimeOff, WorkingWindow
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class StaffRepository(BaseRepository[StaffMember]):
    """Repository for staff members, their working windows and time off."""

    def __init__(self, db: Session):
        super().__init__(db, StaffMember)

    def find_working_windows_by_weekday(self, weekday: int) -> List[WorkingWindow]:
        """
        Get every working window on a weekday.

        Ordered by staff id, then start time, which is the stable order all
        staff selection relies on.
        """
        try:
            return cast(
                List[WorkingWindow],
                self.db.query(WorkingWindow)
                .options(joinedload(WorkingWindow.staff))
                .filter(WorkingWindow.weekday == weekday)
                .order_by(WorkingWindow.staff_id, WorkingWindow.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading working windows for weekday {weekday}: {str(e)}")
            raise RepositoryException(f"Failed to load working windows: {str(e)}")

    def find_time_off_for_date(self, target_date: date) -> List[StaffTimeOff]:
        """Get absences that touch ``target_date`` (any staff member)."""
        try:
            return cast(
                List[StaffTimeOff],
                self.db.query(StaffTimeOff)
                .filter(
                    StaffTimeOff.start_date <= target_date,
                    StaffTimeOff.end_date >= target_date,
                )
                .order_by(StaffTimeOff.staff_id, StaffTimeOff.start_date)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading time off for {target_date}: {str(e)}")
            raise RepositoryException(f"Failed to load time off: {str(e)}")
