# backend/garage_booking/services/scheduling_rules.py
"""Request checks shared by availability search and booking."""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from ..core.config import settings
from ..core.exceptions import (
    InvalidDateRangeException,
    UnknownOperationException,
    ValidationException,
)
from ..core.timezone_utils import get_garage_today
from ..models.operation import Operation
from ..repositories.operation_repository import OperationRepository


def ensure_bookable_date(
    target_date: date,
    *,
    today: Optional[date] = None,
    max_advance_days: Optional[int] = None,
) -> None:
    """
    Reject dates before today or beyond the booking horizon.

    Both bounds are inclusive: today and today + max_advance_days are valid.
    """
    earliest = today or get_garage_today()
    horizon = settings.max_advance_days if max_advance_days is None else max_advance_days
    latest = earliest + timedelta(days=horizon)
    if target_date < earliest or target_date > latest:
        raise InvalidDateRangeException(target_date, earliest, latest)


def normalize_operation_ids(operation_ids: Iterable[str]) -> List[str]:
    """Drop duplicates while keeping first-seen order; empty input is invalid."""
    ids = list(dict.fromkeys(operation_ids))
    if not ids:
        raise ValidationException(
            "At least one operation is required", code="EMPTY_OPERATION_LIST"
        )
    return ids


def resolve_operations(repository: OperationRepository, operation_ids: List[str]) -> List[Operation]:
    """
    Load operations in the order requested.

    Raises:
        UnknownOperationException: If any id has no catalog entry
    """
    found = {op.id: op for op in repository.find_operations_by_ids(operation_ids)}
    missing = [op_id for op_id in operation_ids if op_id not in found]
    if missing:
        raise UnknownOperationException(missing)
    return [found[op_id] for op_id in operation_ids]
