# backend/garage_booking/models/staff.py
"""
Staff members and their recurring weekly working windows.

A staff member may have several disjoint windows on the same weekday (for
example a split shift around lunch). Time off is a one-off interval that can
span several days and temporarily removes the staff member from scheduling.
"""

from datetime import date, datetime, time

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class StaffRole:
    """Well-known staff roles (free-form strings are accepted as well)."""

    MECHANIC = "mechanic"
    ELECTRICIAN = "electrician"
    TIRE_SPECIALIST = "tire_specialist"


class StaffMember(Base):
    """Garage employee who can be assigned to operation segments."""

    __tablename__ = "staff_members"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False)
    role = Column(String(50), nullable=False, default=StaffRole.MECHANIC)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    working_windows = relationship(
        "WorkingWindow", back_populates="staff", cascade="all, delete-orphan"
    )
    time_off = relationship("StaffTimeOff", back_populates="staff", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<StaffMember {self.id}: {self.name} ({self.role})>"


class WorkingWindow(Base):
    """Recurring weekly interval during which a staff member may be assigned work."""

    __tablename__ = "working_windows"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    staff_id = Column(
        String(26), ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False
    )
    # 0 = Monday ... 6 = Sunday (date.weekday())
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    staff = relationship("StaffMember", back_populates="working_windows")

    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="check_working_window_weekday"),
        CheckConstraint("start_time < end_time", name="check_working_window_order"),
        Index("idx_working_windows_weekday_staff", "weekday", "staff_id"),
    )

    @property
    def start(self) -> time:
        return self.start_time

    @property
    def end(self) -> time:
        return self.end_time

    def __repr__(self) -> str:
        return (
            f"<WorkingWindow staff={self.staff_id} weekday={self.weekday} "
            f"{self.start_time}-{self.end_time}>"
        )


class StaffTimeOff(Base):
    """Staff absence covering [start_date start_time, end_date end_time)."""

    __tablename__ = "staff_time_off"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    staff_id = Column(
        String(26), ForeignKey("staff_members.id", ondelete="CASCADE"), nullable=False
    )
    start_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False, default=time(0, 0))
    end_date = Column(Date, nullable=False)
    end_time = Column(Time, nullable=False, default=time(0, 0))
    reason = Column(String(255), nullable=True)

    staff = relationship("StaffMember", back_populates="time_off")

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="check_time_off_date_order"),
        Index("idx_staff_time_off_dates", "start_date", "end_date"),
    )

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.start_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.end_date, self.end_time)

    def blocks(self, on_date: date, start: time, end: time) -> bool:
        """True when the absence overlaps [start, end) on ``on_date``."""
        window_start = datetime.combine(on_date, start)
        window_end = datetime.combine(on_date, end)
        return self.starts_at < window_end and window_start < self.ends_at

    def __repr__(self) -> str:
        return f"<StaffTimeOff staff={self.staff_id} {self.starts_at}->{self.ends_at}>"
