# backend/garage_booking/repositories/operation_repository.py
import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from ..models.operation import Operation
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class OperationRepository(BaseRepository[Operation]):
    """Read access to the operation catalog."""

    def __init__(self, db: Session):
        super().__init__(db, Operation)

    def find_operations_by_ids(self, operation_ids: Iterable[str]) -> List[Operation]:
        """
        Get the operations whose id is in ``operation_ids``.

        Unknown ids are silently absent from the result; callers compare the
        returned ids with what they asked for.
        """
        ids = list(dict.fromkeys(operation_ids))
        if not ids:
            return []
        return self._execute_query(
            self._build_query().filter(Operation.id.in_(ids)), f"operations {ids}"
        )
