# backend/garage_booking/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository for the garage booking engine

Every committed-state overlap question (is this staff member busy, is this bay
taken) goes through one query shape: rows for one resource on one date whose
[start_time, end_time) overlaps the queried interval. ``overlap_exists`` is that
capability; the staff/bay helpers are thin views over it.
"""

from datetime import date, time
from enum import Enum
import logging
from typing import List, cast

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.appointment import Appointment, AppointmentSegment
from ..models.bay import Bay
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    """Resources that can be double-booked."""

    STAFF = "staff"
    BAY = "bay"


class ConflictCheckerRepository(BaseRepository[Appointment]):
    """
    Repository for conflict checking data access.

    Reads committed appointments and segments only; anything not yet flushed
    in another session is invisible here.
    """

    def __init__(self, db: Session):
        """Initialize with Appointment model as primary."""
        super().__init__(db, Appointment)
        self.logger = logging.getLogger(__name__)

    def _overlap_query(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
    ):
        if resource_kind == ResourceKind.STAFF:
            model = AppointmentSegment
            return self.db.query(model).filter(
                model.staff_id == resource_id,
                model.segment_date == check_date,
                model.start_time < end_time,
                model.end_time > start_time,
            )
        if resource_kind == ResourceKind.BAY:
            return self.db.query(Appointment).filter(
                Appointment.bay_id == resource_id,
                Appointment.appointment_date == check_date,
                Appointment.start_time < end_time,
                Appointment.end_time > start_time,
            )
        raise ValueError(f"Unsupported resource kind: {resource_kind}")

    def overlap_exists(
        self,
        resource_kind: ResourceKind,
        resource_id: str,
        check_date: date,
        start_time: time,
        end_time: time,
    ) -> bool:
        """
        Check whether a committed booking for the resource overlaps [start_time, end_time).

        Args:
            resource_kind: STAFF (segments) or BAY (appointments)
            resource_id: Staff or bay id
            check_date: The date to check
            start_time: Start of the queried interval
            end_time: End of the queried interval (exclusive)

        Returns:
            True if at least one committed row overlaps
        """
        try:
            query = self._overlap_query(resource_kind, resource_id, check_date, start_time, end_time)
            return query.first() is not None
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking {resource_kind.value} overlap: {str(e)}")
            raise RepositoryException(f"Failed to check overlap: {str(e)}")

    def find_committed_conflicts(
        self, staff_id: str, check_date: date, start_time: time, end_time: time
    ) -> List[AppointmentSegment]:
        """Get committed segments of a staff member overlapping the interval."""
        try:
            query = self._overlap_query(
                ResourceKind.STAFF, staff_id, check_date, start_time, end_time
            ).order_by(AppointmentSegment.start_time)
            return cast(List[AppointmentSegment], query.all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting committed conflicts: {str(e)}")
            raise RepositoryException(f"Failed to get committed conflicts: {str(e)}")

    def find_free_bays(self, check_date: date, start_time: time, end_time: time) -> List[Bay]:
        """
        Get bays without an overlapping appointment, ordered by id.

        Single anti-join instead of one query per bay.
        """
        try:
            busy = select(Appointment.bay_id).where(
                and_(
                    Appointment.appointment_date == check_date,
                    Appointment.start_time < end_time,
                    Appointment.end_time > start_time,
                )
            )
            query = self.db.query(Bay).filter(Bay.id.not_in(busy)).order_by(Bay.id)
            return cast(List[Bay], query.all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding free bays: {str(e)}")
            raise RepositoryException(f"Failed to find free bays: {str(e)}")

