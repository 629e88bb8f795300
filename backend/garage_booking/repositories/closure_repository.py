# backend/garage_booking/repositories/closure_repository.py
from datetime import date
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models.closure import GarageClosure
from ..models.opening_hours import GarageWorkingHours
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ClosureRepository(BaseRepository[GarageClosure]):
    """Garage calendar: non-working days and weekly opening hours."""

    def __init__(self, db: Session):
        super().__init__(db, GarageClosure)

    def find_closure_on(self, target_date: date) -> Optional[GarageClosure]:
        return self._execute_first(
            self._build_query().filter(GarageClosure.closure_date == target_date),
            f"closure for {target_date}",
        )

    def is_closed_on(self, target_date: date) -> bool:
        return self.find_closure_on(target_date) is not None

    def find_opening_hours_by_weekday(self, weekday: int) -> Optional[GarageWorkingHours]:
        """Opening hours for ``weekday`` (Monday = 0), None when the garage does not open."""
        return self._execute_first(
            self.db.query(GarageWorkingHours).filter(GarageWorkingHours.weekday == weekday),
            f"opening hours for weekday {weekday}",
        )
