# backend/garage_booking/models/opening_hours.py
"""Weekly opening hours of the garage. A weekday without a row is a closed day."""

from datetime import time

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Time
from sqlalchemy.sql import func
import ulid

from ..database import Base


class GarageWorkingHours(Base):
    """Opening interval [opening_time, closing_time) for one weekday (Monday = 0)."""

    __tablename__ = "garage_working_hours"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    weekday = Column(Integer, nullable=False, unique=True, index=True)
    opening_time = Column(Time, nullable=False)
    closing_time = Column(Time, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_garage_working_hours_weekday"),
        CheckConstraint("opening_time < closing_time", name="ck_garage_working_hours_order"),
    )

    def covers(self, start_time: time, end_time: time) -> bool:
        """True when [start_time, end_time) lies entirely within opening hours."""
        return self.opening_time <= start_time and end_time <= self.closing_time

    def __repr__(self) -> str:
        return f"<GarageWorkingHours weekday={self.weekday} {self.opening_time}-{self.closing_time}>"
