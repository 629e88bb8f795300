# backend/tests/helpers/garage_seed.py
"""Reference-data builders shared by unit, integration and route tests."""

from datetime import date, time, timedelta
from typing import Iterable, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from garage_booking.models import (
    Bay,
    ClosureType,
    Customer,
    GarageClosure,
    GarageWorkingHours,
    Operation,
    StaffMember,
    StaffRole,
    StaffTimeOff,
    WorkingWindow,
)

MONDAY = 0


def next_weekday(start: date, weekday: int) -> date:
    """First date strictly after ``start`` falling on ``weekday`` (within 7 days)."""
    days_ahead = (weekday - start.weekday()) % 7 or 7
    return start + timedelta(days=days_ahead)


class GarageSeeder:
    """Writes reference data the way a seed script would."""

    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def operation(
        self, op_id: str, duration: int, name: Optional[str] = None, role: Optional[str] = None
    ) -> Operation:
        return self._save(
            Operation(id=op_id, name=name or op_id, duration_minutes=duration, required_role=role)
        )

    def staff(
        self,
        staff_id: str,
        windows: Iterable[Tuple[int, time, time]],
        role: str = StaffRole.MECHANIC,
    ) -> StaffMember:
        member = StaffMember(id=staff_id, name=f"Staff {staff_id}", role=role)
        for weekday, start, end in windows:
            member.working_windows.append(
                WorkingWindow(weekday=weekday, start_time=start, end_time=end)
            )
        return self._save(member)

    def bay(self, bay_id: str) -> Bay:
        return self._save(Bay(id=bay_id, name=f"Bay {bay_id}"))

    def bays(self, bay_ids: Sequence[str]) -> None:
        for bay_id in bay_ids:
            self.bay(bay_id)

    def customer(self, customer_id: str = "cust-1") -> Customer:
        return self._save(Customer(id=customer_id, name="Jane Driver", email="jane@example.com"))

    def closure(self, closure_date: date, description: str = "Public holiday") -> GarageClosure:
        return self._save(
            GarageClosure(
                closure_date=closure_date,
                closure_type=ClosureType.HOLIDAY.value,
                description=description,
            )
        )

    def opening_hours(self, weekday: int, opening: time, closing: time) -> GarageWorkingHours:
        return self._save(
            GarageWorkingHours(weekday=weekday, opening_time=opening, closing_time=closing)
        )

    def time_off(
        self,
        staff_id: str,
        start_date: date,
        start_time: time,
        end_date: date,
        end_time: time,
        reason: str = "Dentist",
    ) -> StaffTimeOff:
        return self._save(
            StaffTimeOff(
                staff_id=staff_id,
                start_date=start_date,
                start_time=start_time,
                end_date=end_date,
                end_time=end_time,
                reason=reason,
            )
        )
