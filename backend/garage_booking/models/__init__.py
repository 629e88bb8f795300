"""
Database models for the garage booking engine.

- Reference data: Operation, StaffMember, WorkingWindow, StaffTimeOff, Bay,
  Customer, GarageClosure, GarageWorkingHours
- Booking state: Appointment, AppointmentSegment
"""

from .appointment import (
    BAY_OVERLAP_CONSTRAINT,
    STAFF_OVERLAP_CONSTRAINT,
    Appointment,
    AppointmentSegment,
)
from .bay import Bay
from .closure import ClosureType, GarageClosure
from .customer import Customer
from .opening_hours import GarageWorkingHours
from .operation import Operation
from .staff import StaffMember, StaffRole, StaffTimeOff, WorkingWindow

__all__ = [
    "Appointment",
    "AppointmentSegment",
    "BAY_OVERLAP_CONSTRAINT",
    "Bay",
    "ClosureType",
    "Customer",
    "GarageClosure",
    "GarageWorkingHours",
    "Operation",
    "STAFF_OVERLAP_CONSTRAINT",
    "StaffMember",
    "StaffRole",
    "StaffTimeOff",
    "WorkingWindow",
]
