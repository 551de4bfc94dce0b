"""
Core Package Initialization
===========================

Configuration, logging, exceptions and FastAPI integration points.
"""

from rbacguard.core.config import Settings, get_settings, reset_settings
from rbacguard.core.exceptions import (
    RbacGuardException,
    AuthenticationError,
    AuthorizationError,
    AccessDeniedError,
    ValidationError,
    InvalidPermissionError,
    UnknownRoleVocabularyError,
)

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "RbacGuardException",
    "AuthenticationError",
    "AuthorizationError",
    "AccessDeniedError",
    "ValidationError",
    "InvalidPermissionError",
    "UnknownRoleVocabularyError",
]
