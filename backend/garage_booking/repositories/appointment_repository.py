# backend/garage_booking/repositories/appointment_repository.py
"""
Appointment Repository for the garage booking engine

Writes the appointment and all of its segments as one unit. The caller owns the
transaction: nothing here commits, so a failure anywhere before the service's
commit leaves no trace.
"""

import logging
from typing import Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.appointment import Appointment, AppointmentSegment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AppointmentRepository(BaseRepository[Appointment]):
    """Repository for appointments and their segments."""

    def __init__(self, db: Session):
        super().__init__(db, Appointment)

    def save_appointment_atomically(
        self, appointment: Appointment, segments: Sequence[AppointmentSegment]
    ) -> Appointment:
        """
        Stage an appointment with its segments and flush them together.

        IntegrityError is re-raised untouched so the service can tell which
        exclusion constraint fired.

        Raises:
            IntegrityError: A storage constraint rejected the rows
            RepositoryException: Any other database failure
        """
        try:
            for position, segment in enumerate(segments):
                segment.position = position
                segment.segment_date = appointment.appointment_date
                appointment.segments.append(segment)
            self.db.add(appointment)
            self.db.flush()
            return appointment
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Error saving appointment: {str(e)}")
            raise RepositoryException(f"Failed to save appointment: {str(e)}")

