# backend/garage_booking/models/closure.py
"""Calendar dates on which the whole garage takes no appointments."""

from enum import Enum

from sqlalchemy import CheckConstraint, Column, Date, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..database import Base


class ClosureType(str, Enum):
    """Why the garage is closed."""

    HOLIDAY = "holiday"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class GarageClosure(Base):
    """Non-working day for the garage."""

    __tablename__ = "garage_closures"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    closure_date = Column(Date, nullable=False, unique=True, index=True)
    closure_type = Column(String(20), nullable=False, default=ClosureType.HOLIDAY.value)
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "closure_type IN ('holiday', 'maintenance', 'other')",
            name="ck_garage_closures_type",
        ),
    )

    def __repr__(self) -> str:
        return f"<GarageClosure {self.closure_date} ({self.closure_type})>"
