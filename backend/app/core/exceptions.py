# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the Disciplix platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Each exception knows the HTTP status it maps to; conversion into the
response envelope happens in ``app.errors``.
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
        """Convert to an HTTPException carrying message, code and details."""
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


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = status.HTTP_400_BAD_REQUEST


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
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class SlotUnavailableException(ConflictException):
    """Raised when a requested time overlaps an active session of the trainer."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot is not available",
            code="SLOT_UNAVAILABLE",
            details=details or {},
        )


class TrainerUnavailableException(BusinessRuleException):
    """Raised when booking a trainer who is not accepting sessions."""

    def __init__(self, trainer_id: str):
        super().__init__(
            message="Trainer is not currently available",
            code="TRAINER_UNAVAILABLE",
            details={"trainer_id": trainer_id},
        )


class InvalidSessionStateException(BusinessRuleException):
    """Raised when a lifecycle transition is attempted from the wrong state."""

    def __init__(self, message: str, *, current_status: str):
        super().__init__(
            message=message,
            code="INVALID_STATE",
            details={"current_status": current_status},
        )


class TooLateToCancelException(BusinessRuleException):
    """Raised when cancellation is requested inside the cancellation window."""

    def __init__(self, required_hours: int, hours_until: float):
        super().__init__(
            message=f"Cannot cancel within {required_hours} hours of scheduled time",
            code="TOO_LATE_TO_CANCEL",
            details={
                "required_hours": required_hours,
                "hours_until": round(hours_until, 2),
            },
        )


class SubscriptionRequiredException(ForbiddenException):
    """Raised when the caller's subscription tier does not include a feature."""

    def __init__(self, required_tiers: list[str], current_tier: str):
        super().__init__(
            message="Subscription upgrade required",
            code="SUBSCRIPTION_REQUIRED",
            details={"required_tiers": required_tiers, "current_tier": current_tier},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations. Services translate it into a
    ServiceException when it cannot be handled.
    """
