# backend/garage_booking/repositories/__init__.py
"""
Repository Pattern Implementation for the garage booking engine

This package provides the repository layer for data access,
separating scheduling logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories
- RepositoryFactory: Factory for creating repository instances
- ConflictCheckerRepository: Committed-state overlap checks for staff and bays
- AppointmentRepository: Atomic appointment + segment writes
- OperationRepository, StaffRepository, CustomerRepository, ClosureRepository: Reference data reads

Usage:
    from garage_booking.repositories import RepositoryFactory

    repository = RepositoryFactory.create_conflict_checker_repository(db)
    busy = repository.overlap_exists(ResourceKind.BAY, bay_id, day, start, end)
"""

from .appointment_repository import AppointmentRepository
from .base_repository import BaseRepository, IRepository
from .closure_repository import ClosureRepository
from .conflict_checker_repository import ConflictCheckerRepository, ResourceKind
from .customer_repository import CustomerRepository
from .factory import RepositoryFactory
from .operation_repository import OperationRepository
from .staff_repository import StaffRepository

__all__ = [
    "AppointmentRepository",
    "BaseRepository",
    "ClosureRepository",
    "ConflictCheckerRepository",
    "CustomerRepository",
    "IRepository",
    "OperationRepository",
    "RepositoryFactory",
    "ResourceKind",
    "StaffRepository",
]
