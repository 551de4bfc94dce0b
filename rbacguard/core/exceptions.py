"""
Centralized Exception Handling Module
=====================================

Defines custom exception classes for the RBAC engine and its guards.

Decision functions never raise; these exceptions belong to the
construction boundary (permission parsing, configuration) and to the
route-guard layer that turns a denial into an HTTP response.

Usage:
    raise AccessDeniedError(resource="/admin/dashboard", action="GET")
    raise InvalidPermissionError("users")
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class RbacGuardException(Exception):
    """
    Base exception class for rbacguard.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ==========================
# Authentication Exceptions
# ==========================

class AuthenticationError(RbacGuardException):
    """Raised when no user session is available for a guarded request."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


# ==========================
# Authorization Exceptions
# ==========================

class AuthorizationError(RbacGuardException):
    """Raised when user lacks required permissions."""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class AccessDeniedError(AuthorizationError):
    """Raised by a route guard when the access decision is negative."""

    def __init__(self, resource: str, action: str, reason: str = "access_denied"):
        super().__init__(
            message="Insufficient permissions for this action",
            details={"resource": resource, "action": action, "reason": reason},
        )


# ==========================
# Validation Exceptions
# ==========================

class ValidationError(RbacGuardException):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str = "Validation error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details,
        )


class InvalidPermissionError(ValidationError, ValueError):
    """Raised when a permission token is not ``resource:action`` shaped."""

    def __init__(self, value: Any, reason: str = "expected 'resource:action'"):
        super().__init__(
            message=f"Invalid permission {value!r}: {reason}",
            details={"value": str(value), "reason": reason},
        )


class UnknownRoleVocabularyError(ValidationError, ValueError):
    """Raised when the configured role vocabulary does not exist."""

    def __init__(self, vocabulary: str):
        super().__init__(
            message=f"Unknown role vocabulary {vocabulary!r}",
            details={"vocabulary": vocabulary},
        )


# ==========================
# Helper Functions
# ==========================

def exception_to_http_exception(exc: RbacGuardException) -> HTTPException:
    """
    Convert a RbacGuardException to FastAPI HTTPException.

    Args:
        exc: RbacGuardException instance

    Returns:
        HTTPException with appropriate status code and detail
    """
    return HTTPException(
        status_code=exc.status_code,
        detail={
            "message": exc.message,
            "details": exc.details,
        }
    )
