"""
FastAPI dependencies for sessions and route guards.
"""

from rbacguard.core.dependencies.session import (
    get_optional_session,
    get_current_session,
    get_current_access_context,
)
from rbacguard.core.dependencies.rbac import (
    require_access,
    require_role,
    require_permissions,
    require_role_level,
    require_endpoint_access,
)

__all__ = [
    "get_optional_session",
    "get_current_session",
    "get_current_access_context",
    "require_access",
    "require_role",
    "require_permissions",
    "require_role_level",
    "require_endpoint_access",
]
