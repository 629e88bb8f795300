# backend/garage_booking/repositories/base_repository.py
"""
Base Repository Pattern for the garage booking engine

Every repository gets the session it runs in and the model it serves, plus
a couple of read helpers that turn SQLAlchemy failures into
RepositoryException.

Repositories never commit on their own; the booking transaction decides when
the unit of work is durable.
"""

from abc import ABC, abstractmethod
import logging
from typing import Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class IRepository(ABC, Generic[T]):
    """Read contract shared by all repositories."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Entity with primary key ``id``, or None."""


class BaseRepository(IRepository[T]):
    """
    Concrete base repository.

    Attributes:
        db: SQLAlchemy session (owned by the service layer)
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str) -> Optional[T]:
        return self._execute_first(
            self._build_query().filter(self.model.id == id),
            f"{self.model.__name__} {id}",
        )

    # Protected helpers for subclasses

    def _build_query(self) -> Query:
        return self.db.query(self.model)

    def _execute_query(self, query: Query, what: str) -> List[T]:
        """Run ``query`` and wrap driver errors; ``what`` names the read in logs."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading {what}: {str(e)}")
            raise RepositoryException(f"Failed to load {what}: {str(e)}")

    def _execute_first(self, query: Query, what: str) -> Optional[T]:
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading {what}: {str(e)}")
            raise RepositoryException(f"Failed to load {what}: {str(e)}")
