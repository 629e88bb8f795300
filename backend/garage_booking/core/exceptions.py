# backend/garage_booking/core/exceptions.py
"""
Domain-specific exceptions for the garage booking engine.

Three request-scoped families mirror the scheduling error taxonomy:

- ValidationException: malformed input or a date outside the booking horizon,
  rejected before any resource lookup.
- NotFoundException: unknown operation or customer id.
- ProcessingException: no bay/staff can serve the requested window.

None of them is retried internally; the API layer converts them to HTTP
problem responses through ``to_http_exception``.
"""

from datetime import date, time
from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Default conversion to HTTPException (override in subclasses)."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when request validation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ProcessingException(DomainException):
    """Raised when resources cannot be allocated for an otherwise valid request."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific scheduling exceptions


class InvalidDateRangeException(ValidationException):
    """Raised when a date lies before today or past the booking horizon."""

    def __init__(self, requested: date, earliest: date, latest: date):
        if requested < earliest:
            message = "Date cannot be in the past"
        else:
            message = f"Date cannot be more than {(latest - earliest).days} days in advance"
        super().__init__(
            message=message,
            code="INVALID_DATE_RANGE",
            details={
                "date": requested.isoformat(),
                "earliest": earliest.isoformat(),
                "latest": latest.isoformat(),
            },
        )


class ImpossibleDurationException(ValidationException):
    """Raised when the operations do not exactly fill the requested window."""

    def __init__(self, requested_end: time, sequenced_end: str, total_minutes: int):
        super().__init__(
            message=(
                f"Requested operations take {total_minutes} minutes and end at "
                f"{sequenced_end}, not {requested_end.strftime('%H:%M')}"
            ),
            code="IMPOSSIBLE_DURATION",
            details={
                "requested_end": requested_end.isoformat(),
                "sequenced_end": sequenced_end,
                "total_minutes": total_minutes,
            },
        )


class OutsideOpeningHoursException(ValidationException):
    """Raised when the requested window is not inside the garage's opening hours."""

    def __init__(
        self,
        requested_date: date,
        start_time: time,
        end_time: time,
        opening_time: Optional[time] = None,
        closing_time: Optional[time] = None,
    ):
        super().__init__(
            message="Requested time slot is outside of working hours",
            code="OUTSIDE_OPENING_HOURS",
            details={
                "date": requested_date.isoformat(),
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
                "opening_time": opening_time.isoformat() if opening_time else None,
                "closing_time": closing_time.isoformat() if closing_time else None,
            },
        )


class UnknownOperationException(NotFoundException):
    """Raised when one or more operation ids do not resolve."""

    def __init__(self, missing_ids: Iterable[str]):
        missing = sorted(set(missing_ids))
        super().__init__(
            message="One or more operations not found",
            code="UNKNOWN_OPERATION",
            details={"missing_operation_ids": missing},
        )


class UnknownCustomerException(NotFoundException):
    """Raised when the customer id does not resolve."""

    def __init__(self, customer_id: str):
        super().__init__(
            message=f"Customer {customer_id} not found",
            code="UNKNOWN_CUSTOMER",
            details={"customer_id": customer_id},
        )


class NoMechanicAvailableException(ProcessingException):
    """Raised when no staff working window touches the requested window."""

    def __init__(self, requested_date: date, start_time: time, end_time: time):
        super().__init__(
            message="No mechanic is working during the requested time",
            code="NO_MECHANIC_AVAILABLE",
            details={
                "date": requested_date.isoformat(),
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
            },
        )


class NoBayAvailableException(ProcessingException):
    """Raised when every bay is occupied for the requested window."""

    def __init__(self, requested_date: date, start_time: time, end_time: time):
        super().__init__(
            message="No service bay is free for the requested time",
            code="NO_BAY_AVAILABLE",
            details={
                "date": requested_date.isoformat(),
                "start_time": start_time.isoformat(),
                "end_time": end_time.isoformat(),
            },
        )


class NoStaffAvailableException(ProcessingException):
    """Raised when no qualified, free staff member can take an operation segment."""

    def __init__(self, operation_id: str, operation_name: str, start_time: str, end_time: str):
        super().__init__(
            message=f"No staff member available for {operation_name} ({start_time}-{end_time})",
            code="NO_STAFF_AVAILABLE",
            details={
                "operation_id": operation_id,
                "operation_name": operation_name,
                "start_time": start_time,
                "end_time": end_time,
            },
        )


class GarageClosedException(ProcessingException):
    """Raised when the garage is closed on the requested date."""

    def __init__(self, requested_date: date, closure_type: str, description: Optional[str]):
        super().__init__(
            message=f"The garage is closed on {requested_date.isoformat()}",
            code="GARAGE_CLOSED",
            details={
                "date": requested_date.isoformat(),
                "closure_type": closure_type,
                "description": description or "",
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class ResourceBusyException(ProcessingException):
    """Raised when a bay or staff lock stays held by another booking for too long."""

    def __init__(self, resource: str, timeout_seconds: float):
        super().__init__(
            message="The requested resources are busy, please retry",
            code="RESOURCE_BUSY",
            details={"resource": resource, "timeout_seconds": timeout_seconds},
        )
