# backend/tutorly/core/exceptions.py
"""
Domain-specific exceptions for the Tutorly platform.

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
        """Convert to an HTTPException carrying the standard error detail."""
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

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        return exc


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


class DependencyFailureException(ServiceException):
    """
    Raised when the database or a downstream provider fails for reasons
    unrelated to the business rule (network, quota, outage).

    Clients may retry these.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(
        self,
        message: str = "A dependency is temporarily unavailable",
        code: Optional[str] = "DEPENDENCY_FAILURE",
        details: Optional[Dict[str, Any]] = None,
        retry_after_seconds: int = 2,
    ) -> None:
        super().__init__(message, code=code, details=details)
        self.retry_after_seconds = retry_after_seconds

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"Retry-After": str(self.retry_after_seconds)}
        return exc


# Specific business exceptions


class SlotOverlapException(ConflictException):
    """Raised when a proposed availability slot overlaps an existing one."""

    def __init__(
        self,
        scope_label: str,
        new_range: str,
        conflicting_range: Optional[str] = None,
        *,
        conflicting_slot_id: Optional[str] = None,
    ):
        if conflicting_range:
            message = (
                f"This time overlaps with your existing {conflicting_range} slot on {scope_label}."
            )
        else:
            message = f"This time slot overlaps with an existing one on {scope_label}."
        super().__init__(
            message=message,
            code="AVAILABILITY_OVERLAP",
            details={
                "scope": scope_label,
                "new_slot": new_range,
                "conflicting_slot": conflicting_range,
                "conflicting_slot_id": conflicting_slot_id,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class SlotStorageConflictError(RepositoryException):
    """
    A slot insert was rejected by the storage-level overlap constraint.

    Happens when two writers pass the application-level check at the same
    time; services translate it into SlotOverlapException.
    """
