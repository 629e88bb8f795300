# backend/garage_booking/services/booking_service.py
"""
Booking Service for the garage booking engine

Books an appointment as one atomic unit:

1. Validate the date, the time range and the garage calendar
2. Make sure someone works during the requested window
3. Allocate a free bay
4. Resolve the operations and the customer
5. Sequence the operations into staffed segments
6. Persist the appointment and its segments together
7. Evict the availability cache entry for the date and operation set

Steps 3 to 6 are planned optimistically, then the bay and staff locks of the
plan are taken and committed state is read again before anything is written.
If another booking got there first the plan is rebuilt, up to
``booking_max_attempts`` times. With Redis the locks are shared by every
worker process. On PostgreSQL, exclusion constraints reject any overlap that
slips past them; on SQLite the re-check runs inside BEGIN IMMEDIATE. Constraint
rejections, serialization failures, deadlocks and a busy SQLite database are
re-planned the same way.
"""

from dataclasses import dataclass
from datetime import date, time
import logging
from typing import List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    DomainException,
    GarageClosedException,
    NoBayAvailableException,
    NoMechanicAvailableException,
    NoStaffAvailableException,
    OutsideOpeningHoursException,
    ResourceBusyException,
    ServiceException,
    UnknownCustomerException,
    ValidationException,
)
from ..core.resource_lock import ResourceKey, ResourceLockRegistry, ResourceLockTimeout
from ..models.appointment import (
    BAY_OVERLAP_CONSTRAINT,
    STAFF_OVERLAP_CONSTRAINT,
    Appointment,
    AppointmentSegment,
)
from ..models.bay import Bay
from ..models.customer import Customer
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ResourceKind
from .availability_cache import AvailabilityCache
from .base import BaseService
from .bay_allocator import BayAllocator
from .conflict_checker import ConflictChecker
from .operation_sequencer import OperationSequencer, SegmentPlan
from .scheduling_rules import ensure_bookable_date, resolve_operations

logger = logging.getLogger(__name__)

SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"


@dataclass(frozen=True)
class Confirmation:
    """Result of a successful booking."""

    customer: Customer
    appointment: Appointment
    segments: List[AppointmentSegment]


class _PlanInvalidated(Exception):
    """A concurrent booking took a resource the current plan relies on."""

    def __init__(self, scope: Optional[str], reason: str):
        self.scope = scope
        self.reason = reason
        super().__init__(f"plan invalidated ({reason}, scope={scope})")


@dataclass(frozen=True)
class _Plan:
    bay: Bay
    customer: Customer
    segments: List[SegmentPlan]

    def lock_keys(self, target_date: date) -> List[ResourceKey]:
        keys = [ResourceKey(ResourceKind.BAY.value, self.bay.id, target_date)]
        keys.extend(
            ResourceKey(ResourceKind.STAFF.value, segment.staff_id, target_date)
            for segment in self.segments
        )
        return keys


class BookingService(BaseService):
    """
    Service layer for atomic appointment booking.

    The lock registry and the availability cache are owned by the application
    and shared between requests; pass the same instances to every
    BookingService of a process.
    """

    def __init__(
        self,
        db: Session,
        cache: Optional[AvailabilityCache] = None,
        locks: Optional[ResourceLockRegistry] = None,
        max_attempts: Optional[int] = None,
    ):
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.cache = cache
        if locks is None:
            locks = ResourceLockRegistry.from_url(
                settings.redis_url,
                timeout_seconds=settings.resource_lock_timeout_seconds,
                ttl_seconds=settings.resource_lock_ttl_seconds,
            )
        self.locks = locks
        self.max_attempts = max_attempts or settings.booking_max_attempts

        self.conflict_checker = ConflictChecker(db)
        self.bay_allocator = BayAllocator(db)
        self.sequencer = OperationSequencer(db, self.conflict_checker)
        self.operation_repository = RepositoryFactory.create_operation_repository(db)
        self.customer_repository = RepositoryFactory.create_customer_repository(db)
        self.appointment_repository = RepositoryFactory.create_appointment_repository(db)

    @BaseService.measure_operation("book")
    def book(
        self,
        target_date: date,
        start_time: time,
        end_time: time,
        customer_id: str,
        operation_ids: Sequence[str],
    ) -> Confirmation:
        """
        Book an appointment for ``customer_id`` covering [start_time, end_time).

        Operations run in the order given. Nothing is persisted unless every
        step succeeds.

        Raises:
            InvalidDateRangeException: Date outside the booking horizon
            ValidationException: start_time >= end_time or no operations
            GarageClosedException: The garage is closed on the date
            OutsideOpeningHoursException: The window is not within opening hours
            NoMechanicAvailableException: Nobody works during the window
            NoBayAvailableException: Every bay is occupied
            UnknownOperationException: An operation id does not resolve
            UnknownCustomerException: The customer id does not resolve
            ImpossibleDurationException: Durations do not fill the window
            NoStaffAvailableException: An operation cannot be staffed
        """
        try:
            confirmation = self._book(target_date, start_time, end_time, customer_id, list(operation_ids))
        except DomainException as exc:
            prometheus_metrics.record_booking_outcome(exc.code)
            raise
        prometheus_metrics.record_booking_outcome("confirmed")
        return confirmation

    def _book(
        self,
        target_date: date,
        start_time: time,
        end_time: time,
        customer_id: str,
        operation_ids: List[str],
    ) -> Confirmation:
        self._validate_request(target_date, start_time, end_time, operation_ids)

        if not self.conflict_checker.staff_window_available(target_date, start_time, end_time):
            raise NoMechanicAvailableException(target_date, start_time, end_time)

        attempt = 1
        while True:
            last_attempt = attempt >= self.max_attempts
            try:
                plan = self._plan(target_date, start_time, end_time, customer_id, operation_ids)
                appointment = self._commit_plan(plan, target_date, start_time, end_time)
                break
            except _PlanInvalidated as exc:
                prometheus_metrics.record_booking_replan(exc.reason)
                self.logger.info(
                    f"Booking plan for {target_date} {start_time}-{end_time} invalidated "
                    f"(attempt {attempt}/{self.max_attempts}, {exc.reason}, scope={exc.scope})"
                )
                if last_attempt:
                    raise self._conflict_error(exc, plan, target_date, start_time, end_time) from exc
            attempt += 1

        if self.cache is not None:
            self.cache.invalidate(target_date, operation_ids)

        self.log_operation(
            "book",
            appointment_id=appointment.id,
            customer_id=customer_id,
            bay_id=appointment.bay_id,
            appointment_date=target_date.isoformat(),
            attempts=attempt,
        )
        return Confirmation(
            customer=plan.customer,
            appointment=appointment,
            segments=list(appointment.segments),
        )

    def _validate_request(
        self, target_date: date, start_time: time, end_time: time, operation_ids: List[str]
    ) -> None:
        ensure_bookable_date(target_date)
        if start_time >= end_time:
            raise ValidationException(
                "Start time must be before end time",
                code="INVALID_TIME_RANGE",
                details={"start_time": start_time.isoformat(), "end_time": end_time.isoformat()},
            )
        if not operation_ids:
            raise ValidationException(
                "At least one operation is required", code="EMPTY_OPERATION_LIST"
            )
        closure = self.conflict_checker.closure_repository.find_closure_on(target_date)
        if closure is not None:
            raise GarageClosedException(target_date, closure.closure_type, closure.description)
        hours = self.conflict_checker.opening_hours_on(target_date)
        if hours is None or not hours.covers(start_time, end_time):
            raise OutsideOpeningHoursException(
                target_date,
                start_time,
                end_time,
                hours.opening_time if hours else None,
                hours.closing_time if hours else None,
            )

    def _plan(
        self,
        target_date: date,
        start_time: time,
        end_time: time,
        customer_id: str,
        operation_ids: List[str],
    ) -> _Plan:
        """Optimistic plan against committed state, no locks held."""
        bay = self.bay_allocator.allocate(target_date, start_time, end_time)
        operations = resolve_operations(self.operation_repository, operation_ids)
        customer = self.customer_repository.find_customer_by_id(customer_id)
        if customer is None:
            raise UnknownCustomerException(customer_id)
        segments = self.sequencer.sequence(target_date, start_time, operations, end_time)
        return _Plan(bay=bay, customer=customer, segments=segments)

    def _commit_plan(
        self, plan: _Plan, target_date: date, start_time: time, end_time: time
    ) -> Appointment:
        """
        Take the plan's locks, re-check committed state and write the rows.

        Raises:
            _PlanInvalidated: Another booking now holds a planned resource
        """
        try:
            with self.locks.hold(plan.lock_keys(target_date)):
                # End the planning read so the checks below see the latest commits.
                self.db.rollback()
                self._begin_write()
                try:
                    self._verify_plan(plan, target_date, start_time, end_time)
                except _PlanInvalidated:
                    self.db.rollback()
                    raise
                with self.transaction():
                    appointment = Appointment(
                        customer_id=plan.customer.id,
                        bay_id=plan.bay.id,
                        appointment_date=target_date,
                        start_time=start_time,
                        end_time=end_time,
                    )
                    segments = [
                        AppointmentSegment(
                            operation_id=segment.operation_id,
                            staff_id=segment.staff_id,
                            start_time=segment.start_time,
                            end_time=segment.end_time,
                        )
                        for segment in plan.segments
                    ]
                    self.appointment_repository.save_appointment_atomically(appointment, segments)
                return appointment
        except ResourceLockTimeout as exc:
            raise _PlanInvalidated(exc.key.kind, "lock_timeout") from exc
        except IntegrityError as exc:
            scope = self._resolve_integrity_conflict_scope(exc)
            if scope is None:
                self.logger.error(f"Appointment rejected by database: {str(exc)}")
                raise ServiceException("Failed to save appointment") from exc
            raise _PlanInvalidated(scope, "integrity") from exc
        except OperationalError as exc:
            self.db.rollback()
            if self._is_serialization_or_deadlock(exc):
                raise _PlanInvalidated(None, "serialization") from exc
            raise

    def _begin_write(self) -> None:
        """
        On SQLite, take the database write lock before re-verifying.

        SQLite has no exclusion constraints; BEGIN IMMEDIATE serializes
        verify-and-write across connections, whichever lock registry each
        worker holds. Other databases begin their transaction lazily.
        """
        connection = self.db.connection()
        if connection.dialect.name == "sqlite":
            connection.exec_driver_sql("BEGIN IMMEDIATE")

    def _verify_plan(
        self, plan: _Plan, target_date: date, start_time: time, end_time: time
    ) -> None:
        if not self.conflict_checker.bay_is_free(plan.bay.id, target_date, start_time, end_time):
            raise _PlanInvalidated(ResourceKind.BAY.value, "verification")
        for segment in plan.segments:
            if self.conflict_checker.has_committed_conflict(
                segment.staff_id, target_date, segment.start_time, segment.end_time
            ):
                raise _PlanInvalidated(ResourceKind.STAFF.value, "verification")

    def _conflict_error(
        self,
        exc: _PlanInvalidated,
        plan: _Plan,
        target_date: date,
        start_time: time,
        end_time: time,
    ) -> DomainException:
        """Map a plan that lost its final race to the error for the contested resource."""
        if exc.reason == "lock_timeout":
            return ResourceBusyException(str(exc.scope), self.locks.timeout_seconds)
        if exc.scope == ResourceKind.STAFF.value and plan.segments:
            for segment in plan.segments:
                if self.conflict_checker.has_committed_conflict(
                    segment.staff_id, target_date, segment.start_time, segment.end_time
                ):
                    break
            else:
                segment = plan.segments[0]
            return NoStaffAvailableException(
                segment.operation_id,
                segment.operation_name,
                segment.start_time.strftime("%H:%M"),
                segment.end_time.strftime("%H:%M"),
            )
        return NoBayAvailableException(target_date, start_time, end_time)

    @staticmethod
    def _resolve_integrity_conflict_scope(integrity_error: IntegrityError) -> Optional[str]:
        """
        Determine which resource an IntegrityError protects, if any.
        """
        constraint_name: str = ""
        orig = getattr(integrity_error, "orig", None)
        diag = getattr(orig, "diag", None)

        if diag is not None:
            constraint_name = getattr(diag, "constraint_name", "") or ""

        if not constraint_name and orig is not None:
            text = str(orig)
            if BAY_OVERLAP_CONSTRAINT in text:
                constraint_name = BAY_OVERLAP_CONSTRAINT
            elif STAFF_OVERLAP_CONSTRAINT in text:
                constraint_name = STAFF_OVERLAP_CONSTRAINT

        if constraint_name == BAY_OVERLAP_CONSTRAINT:
            return ResourceKind.BAY.value
        if constraint_name == STAFF_OVERLAP_CONSTRAINT:
            return ResourceKind.STAFF.value
        return None

    @staticmethod
    def _is_serialization_or_deadlock(exc: OperationalError) -> bool:
        orig = getattr(exc, "orig", None)
        pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
        if pgcode in (SERIALIZATION_FAILURE, DEADLOCK_DETECTED):
            return True
        message = str(exc).lower()
        return (
            "deadlock detected" in message
            or "could not serialize access" in message
            or "database is locked" in message
        )
