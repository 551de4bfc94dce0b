"""
Role-Based Access Control (RBAC) Dependencies Module
=====================================================

FastAPI dependency factories that wrap the access decision engine.

Features:
- Role and permission criteria (ALL or ANY)
- Minimum role level checks
- Path-based checks against role endpoint descriptors
- Security logging of every decision
- Audit trail entry for every denial

Usage:
    @router.get("/admin-only")
    def admin_route(ctx: AccessContext = Depends(require_role(Role.ADMIN))):
        return {"message": "Admin access granted"}
"""

from typing import Callable, Optional

from fastapi import Depends, Request

from rbacguard.core.dependencies.session import get_current_access_context
from rbacguard.core.enums import AuditResult, SecurityLevel
from rbacguard.core.exceptions import AccessDeniedError
from rbacguard.core.logging import security_logger
from rbacguard.models.permission import Permission
from rbacguard.schemas.access import AccessCheckCriteria
from rbacguard.services.access_engine import AccessContext
from rbacguard.services.audit_service import get_audit_trail
from rbacguard.services.endpoint_resolver import EndpointAccessResolver
from rbacguard.services.registry import role_key

# =====================================
# Decision handling
# =====================================

def _deny(
    request: Request,
    context: AccessContext,
    reason: str,
    security_level: SecurityLevel = SecurityLevel.MEDIUM,
    **details,
) -> AccessDeniedError:
    """Log, audit and build the exception for a negative decision."""
    resource = request.url.path
    action = request.method

    security_logger.log_access_denied(
        user_id=context.user_id,
        resource=resource,
        action=action,
        reason=reason,
        roles=list(context.roles or ()),
        **details,
    )

    get_audit_trail().record(
        user_id=context.user_id or "anonymous",
        role=",".join(context.roles or ()) or "none",
        action=f"{action} {resource}",
        resource=resource,
        result=AuditResult.BLOCKED,
        details={
            "reason": reason,
            "ip_address": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
            **details,
        },
        security_level=security_level,
    )

    return AccessDeniedError(resource=resource, action=action, reason=reason)


def _grant(request: Request, context: AccessContext, guard: str) -> AccessContext:
    security_logger.log_access_granted(
        user_id=context.user_id,
        resource=request.url.path,
        action=request.method,
        guard=guard,
    )
    return context


# =====================================
# Criteria Dependencies
# =====================================

def require_access(criteria: Optional[AccessCheckCriteria]) -> Callable:
    """
    Create a dependency that evaluates ``criteria`` for the current user.

    Args:
        criteria: Role and permission requirements; None places no restriction

    Returns:
        Dependency function resolving to the user's AccessContext

    Usage:
        @router.post("/users")
        def create_user(ctx = Depends(require_access(AccessCheckCriteria(
            required_role=Role.ADMIN, required_permissions=["users:create"],
        )))):
            ...
    """
    async def access_checker(
        request: Request,
        context: AccessContext = Depends(get_current_access_context),
    ) -> AccessContext:
        if not context.has_access(criteria):
            raise _deny(
                request,
                context,
                "criteria_not_met",
                required_roles=list(criteria.required_roles) if criteria else [],
                required_permissions=list(criteria.required_permissions or []) if criteria else [],
            )
        return _grant(request, context, "require_access")

    return access_checker


def require_role(*allowed_roles: object) -> Callable:
    """
    Create a dependency that requires one of ``allowed_roles``.

    Usage:
        @router.get("/manager")
        def manager_route(ctx = Depends(require_role(Role.MANAGER, Role.ADMIN))):
            ...
    """
    required = [role_key(r) for r in allowed_roles]

    async def role_checker(
        request: Request,
        context: AccessContext = Depends(get_current_access_context),
    ) -> AccessContext:
        if not context.has_role(required):
            raise _deny(request, context, "role_not_authorized", required_roles=required)
        return _grant(request, context, "require_role")

    return role_checker


def require_permissions(*permissions: str, require_all: bool = False) -> Callable:
    """
    Create a dependency that requires ANY (default) or ALL of ``permissions``.

    Permissions are validated when the dependency is built, so a typo fails
    at import time instead of silently denying every request.
    """
    required = [Permission(p) for p in permissions]

    async def permission_checker(
        request: Request,
        context: AccessContext = Depends(get_current_access_context),
    ) -> AccessContext:
        if require_all:
            granted = context.has_all_permissions(required)
        else:
            granted = context.has_any_permission(required)
        if not granted:
            raise _deny(
                request,
                context,
                "missing_permissions",
                required_permissions=[str(p) for p in required],
                require_all=require_all,
            )
        return _grant(request, context, "require_permissions")

    return permission_checker


def require_role_level(min_level: int) -> Callable:
    """
    Create a dependency that requires a minimum role level.

    Users whose highest role is at ``min_level`` or above can access.

    Usage:
        @router.get("/reports")
        def reports(ctx = Depends(require_role_level(RoleLevel.MANAGER))):
            ...
    """
    async def level_checker(
        request: Request,
        context: AccessContext = Depends(get_current_access_context),
    ) -> AccessContext:
        if not context.has_role_level(min_level):
            raise _deny(
                request,
                context,
                "insufficient_role_level",
                security_level=SecurityLevel.HIGH,
                min_level=min_level,
            )
        return _grant(request, context, "require_role_level")

    return level_checker


def require_endpoint_access(resolver: Optional[EndpointAccessResolver] = None) -> Callable:
    """
    Create a dependency that checks the request method and path against
    the endpoint descriptors of the user's roles.

    Args:
        resolver: Resolver to consult; defaults to the one built from the
            active registry
    """
    async def endpoint_checker(
        request: Request,
        context: AccessContext = Depends(get_current_access_context),
    ) -> AccessContext:
        active = resolver or EndpointAccessResolver.from_registry(context.registry)
        if not active.can_access_endpoint(request.method, request.url.path, context.roles):
            raise _deny(request, context, "endpoint_not_allowed")
        return _grant(request, context, "require_endpoint_access")

    return endpoint_checker
