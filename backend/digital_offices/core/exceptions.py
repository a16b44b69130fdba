# backend/digital_offices/core/exceptions.py
"""
Domain-specific exceptions for the Digital Offices platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

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
        """Convert to an HTTPException carrying the structured detail payload."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


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


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking overlaps an active booking of the same provider."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot is already reserved",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class OutsideWorkingHoursException(ValidationException):
    """Raised when a requested interval is not covered by the expert's weekly schedule."""

    def __init__(self, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Selected time is outside the provider's working hours",
            code="OUTSIDE_WORKING_HOURS",
            details=details or {},
        )


class BookingStatusUnchangedException(ValidationException):
    """Raised when a status update requests the status the booking already has."""

    def __init__(self, current_status: str):
        super().__init__(
            message=f"Booking is already {current_status.lower()}",
            code="BOOKING_STATUS_UNCHANGED",
            details={"status": current_status},
        )


class InvalidStatusTransitionException(ConflictException):
    """Raised when a status change is not an edge of the booking state machine."""

    def __init__(self, current_status: str, requested_status: str):
        super().__init__(
            message=(
                f"Cannot change booking status from {current_status} to {requested_status}"
            ),
            code="INVALID_STATUS_TRANSITION",
            details={"from": current_status, "to": requested_status},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
