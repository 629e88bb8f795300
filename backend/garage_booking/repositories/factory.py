# backend/garage_booking/repositories/factory.py
"""
Repository Factory for the garage booking engine

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .appointment_repository import AppointmentRepository
    from .closure_repository import ClosureRepository
    from .conflict_checker_repository import ConflictCheckerRepository
    from .customer_repository import CustomerRepository
    from .operation_repository import OperationRepository
    from .staff_repository import StaffRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_conflict_checker_repository(db: Session) -> "ConflictCheckerRepository":
        """Create repository for committed-state overlap checks."""
        from .conflict_checker_repository import ConflictCheckerRepository

        return ConflictCheckerRepository(db)

    @staticmethod
    def create_operation_repository(db: Session) -> "OperationRepository":
        """Create repository for the operation catalog."""
        from .operation_repository import OperationRepository

        return OperationRepository(db)

    @staticmethod
    def create_staff_repository(db: Session) -> "StaffRepository":
        """Create repository for staff, working windows and time off."""
        from .staff_repository import StaffRepository

        return StaffRepository(db)

    @staticmethod
    def create_customer_repository(db: Session) -> "CustomerRepository":
        """Create repository for customers."""
        from .customer_repository import CustomerRepository

        return CustomerRepository(db)

    @staticmethod
    def create_closure_repository(db: Session) -> "ClosureRepository":
        """Create repository for garage closures."""
        from .closure_repository import ClosureRepository

        return ClosureRepository(db)

    @staticmethod
    def create_appointment_repository(db: Session) -> "AppointmentRepository":
        """Create repository for appointments and segments."""
        from .appointment_repository import AppointmentRepository

        return AppointmentRepository(db)
