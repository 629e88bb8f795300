# backend/garage_booking/models/appointment.py
"""
Appointment and segment models.

Appointments are created only by the booking transaction and are immutable
afterwards. Each appointment occupies one bay for [start_time, end_time) and is
split into ordered, contiguous segments, one per requested operation, each
handled by a single staff member.

On PostgreSQL the Alembic migration adds generated ``tsrange`` columns and
exclusion constraints so that overlapping rows for the same bay (appointments)
or the same staff member (segments) can never both commit.
"""

import logging
from typing import Any

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

logger = logging.getLogger(__name__)

BAY_OVERLAP_CONSTRAINT = "appointments_no_overlap_per_bay"
STAFF_OVERLAP_CONSTRAINT = "appointment_segments_no_overlap_per_staff"


class Appointment(Base):
    """Confirmed garage appointment holding one bay for a contiguous window."""

    __tablename__ = "appointments"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    customer_id = Column(String(26), ForeignKey("customers.id"), nullable=False)
    bay_id = Column(String(26), ForeignKey("bays.id"), nullable=False)

    appointment_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer")
    bay = relationship("Bay")
    segments = relationship(
        "AppointmentSegment",
        back_populates="appointment",
        cascade="all, delete-orphan",
        order_by="AppointmentSegment.position",
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_appointment_time_order"),
        Index("idx_appointments_bay_date", "bay_id", "appointment_date"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        logger.debug(
            "Creating appointment for customer %s in bay %s", self.customer_id, self.bay_id
        )

    def __repr__(self) -> str:
        return (
            f"<Appointment {self.id}: customer={self.customer_id}, bay={self.bay_id}, "
            f"date={self.appointment_date}, time={self.start_time}-{self.end_time}>"
        )


class AppointmentSegment(Base):
    """One operation's time allocation to one staff member within an appointment."""

    __tablename__ = "appointment_segments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    appointment_id = Column(
        String(26), ForeignKey("appointments.id", ondelete="CASCADE"), nullable=False
    )
    operation_id = Column(String(26), ForeignKey("operations.id"), nullable=False)
    staff_id = Column(String(26), ForeignKey("staff_members.id"), nullable=False)

    # Denormalised from the appointment so staff conflicts need no join.
    segment_date = Column(Date, nullable=False)
    position = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    appointment = relationship("Appointment", back_populates="segments")
    operation = relationship("Operation")
    staff = relationship("StaffMember")

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="check_segment_time_order"),
        CheckConstraint("position >= 0", name="check_segment_position"),
        Index("idx_segments_staff_date", "staff_id", "segment_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<AppointmentSegment {self.id}: op={self.operation_id}, staff={self.staff_id}, "
            f"{self.start_time}-{self.end_time}>"
        )
