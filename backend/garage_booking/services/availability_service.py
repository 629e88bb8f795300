# backend/garage_booking/services/availability_service.py
"""
Availability Service for the garage booking engine

Read path of the engine: validates the request, answers from the availability
cache when it can, and otherwise asks the calculator and stores the result.
"""

from datetime import date
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..database import with_db_retry
from ..domain.intervals import TimeWindow
from .availability_cache import AvailabilityCache
from .availability_calculator import AvailabilityCalculator
from .base import BaseService
from .scheduling_rules import ensure_bookable_date, normalize_operation_ids

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    """Cached availability queries."""

    def __init__(
        self,
        db: Session,
        cache: AvailabilityCache,
        calculator: Optional[AvailabilityCalculator] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.cache = cache
        self.calculator = calculator or AvailabilityCalculator(db)

    @BaseService.measure_operation("query_availability")
    def query_availability(
        self, target_date: date, operation_ids: Iterable[str]
    ) -> List[TimeWindow]:
        """
        Candidate windows for an operation set on a date.

        Repeated calls with the same date and operation set (in any order, with
        or without duplicates) return the same result until a booking for that
        date and set evicts it.

        Raises:
            InvalidDateRangeException: Date outside the booking horizon
            ValidationException: Empty operation set
            UnknownOperationException: An id does not resolve
        """
        ensure_bookable_date(target_date)
        ids = normalize_operation_ids(operation_ids)

        cached = self.cache.get(target_date, ids)
        if cached is not None:
            self.logger.debug(f"Availability cache hit for {target_date} {sorted(ids)}")
            return cached

        windows = with_db_retry(
            "query_availability", lambda: self.calculator.calculate(target_date, ids)
        )
        self.cache.set(target_date, ids, windows)
        return windows
