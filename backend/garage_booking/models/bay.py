# backend/garage_booking/models/bay.py
from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Bay(Base):
    """Physical service location; hosts at most one appointment at any instant."""

    __tablename__ = "bays"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Bay {self.id}: {self.name or 'unnamed'}>"
