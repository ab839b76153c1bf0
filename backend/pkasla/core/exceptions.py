# backend/pkasla/core/exceptions.py
"""
Domain-specific exceptions for the PKASLA platform.

Every domain exception carries the HTTP status it maps to, so services can
raise business-focused errors and the API layer renders them in the standard
``{success: false, message}`` envelope.
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
        details: Optional[Any] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.code and self.code != self.__class__.__name__:
            body["error"] = self.code
        if self.details:
            body["errors"] = self.details
        return body


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = 422


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message or "An error occurred processing your request", code, details)


class NotImplementedServiceException(DomainException):
    """Raised for features that exist on the API surface but are not available yet."""

    status_code = status.HTTP_501_NOT_IMPLEMENTED


class BadGatewayException(DomainException):
    """Raised when an upstream HTTP dependency fails."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ServiceUnavailableException(DomainException):
    """Raised when a required external integration is not configured."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class RepositoryException(Exception):
    """Raised when a data access operation fails."""
