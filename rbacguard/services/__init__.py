"""
Services Package Initialization
===============================

Registry, matcher, decision engine, endpoint resolver, audit trail
and rate limiter.
"""

from rbacguard.services.registry import (
    RoleRegistry,
    STANDARD_REGISTRY,
    LEGACY_REGISTRY,
    PERMISSION_CATALOG,
    get_registry,
)
from rbacguard.services.matcher import matches, matches_all, matches_any, covers
from rbacguard.services.access_engine import (
    AccessContext,
    UserAccessView,
    has_access,
    has_role,
    has_permission,
    has_all_permissions,
    has_any_permission,
    has_role_level,
)
from rbacguard.services.endpoint_resolver import API_ENDPOINTS, EndpointAccessResolver
from rbacguard.services.audit_service import AuditTrail, get_audit_trail
from rbacguard.services.rate_limiter import RoleRateLimiter, get_rate_limiter, reset_rate_limiter

__all__ = [
    "RoleRegistry",
    "STANDARD_REGISTRY",
    "LEGACY_REGISTRY",
    "PERMISSION_CATALOG",
    "get_registry",
    "matches",
    "matches_all",
    "matches_any",
    "covers",
    "AccessContext",
    "UserAccessView",
    "has_access",
    "has_role",
    "has_permission",
    "has_all_permissions",
    "has_any_permission",
    "has_role_level",
    "API_ENDPOINTS",
    "EndpointAccessResolver",
    "AuditTrail",
    "get_audit_trail",
    "RoleRateLimiter",
    "get_rate_limiter",
    "reset_rate_limiter",
]
