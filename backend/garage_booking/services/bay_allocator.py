# backend/garage_booking/services/bay_allocator.py
"""Bay allocation: first free bay by ascending id."""

from datetime import date, time
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NoBayAvailableException
from ..models.bay import Bay
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class BayAllocator(BaseService):
    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)

    @BaseService.measure_operation("allocate_bay")
    def allocate(
        self,
        target_date: date,
        start_time: time,
        end_time: time,
    ) -> Bay:
        """
        Pick the lowest-id bay with no committed appointment overlapping the window.

        Raises:
            NoBayAvailableException: Every bay is occupied
        """
        free_bays = self.repository.find_free_bays(target_date, start_time, end_time)
        if not free_bays:
            raise NoBayAvailableException(target_date, start_time, end_time)
        return free_bays[0]
