# backend/garage_booking/models/customer.py
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Customer(Base):
    """Customer the appointment is booked for."""

    __tablename__ = "customers"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(40), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Customer {self.id}: {self.name}>"
