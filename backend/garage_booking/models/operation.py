# backend/garage_booking/models/operation.py
"""
Service operation catalog.

Operations are reference data: the booking engine only reads them. Each one
has a fixed duration and optionally names the staff role allowed to perform it.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Operation(Base):
    """A bookable service operation (oil change, brake inspection, ...)."""

    __tablename__ = "operations"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    required_role = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (CheckConstraint("duration_minutes > 0", name="check_operation_duration_positive"),)

    def is_performable_by(self, role: str) -> bool:
        """Staff qualification: any role when unrestricted, otherwise an exact match."""
        return self.required_role is None or self.required_role == role

    def __repr__(self) -> str:
        return f"<Operation {self.id}: {self.name} ({self.duration_minutes}m)>"
