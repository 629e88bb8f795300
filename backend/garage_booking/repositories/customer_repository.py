# backend/garage_booking/repositories/customer_repository.py
from typing import Optional

from sqlalchemy.orm import Session

from ..models.customer import Customer
from .base_repository import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    """Read access to customer records."""

    def __init__(self, db: Session):
        super().__init__(db, Customer)

    def find_customer_by_id(self, customer_id: str) -> Optional[Customer]:
        return self.get_by_id(customer_id)
