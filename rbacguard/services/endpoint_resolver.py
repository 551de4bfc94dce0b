"""
Endpoint Access Resolver
========================

Maps an HTTP method and path to a reachability decision for a set of
roles. Client-side gating only; it mirrors, and never replaces, the
enforcement done by the backend.

Two tables are consulted:
- role endpoint descriptors (``/*`` prefix patterns) answer
  ``can_access_endpoint``
- the declared API table (``:param`` templates) answers
  ``get_endpoint_permissions`` and ``can_call_api``
"""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Mapping, Optional, Sequence

from rbacguard.models.endpoint import ApiEndpoint, EndpointDescriptor
from rbacguard.models.role_definition import RoleDefinition
from rbacguard.schemas.access import EndpointRequirements
from rbacguard.services import matcher
from rbacguard.services.registry import RoleRegistry, role_key


# =====================================
# Declared API table
# =====================================

API_ENDPOINTS: tuple[ApiEndpoint, ...] = (
    # Health checks
    ApiEndpoint("/health", "GET", public=True, description="Health check"),
    ApiEndpoint("/health/ping", "GET", public=True, description="Ping endpoint"),
    # Authentication
    ApiEndpoint("/auth/login", "POST", public=True, description="User login"),
    ApiEndpoint("/auth/register", "POST", public=True, description="User registration"),
    ApiEndpoint("/auth/refresh-token", "POST", public=True, description="Refresh access token"),
    ApiEndpoint("/auth/logout", "POST", ("user",), description="Logout user"),
    # Email verification
    ApiEndpoint("/auth/send-verification", "POST", public=True, description="Send verification email"),
    ApiEndpoint("/auth/verify-email", "POST", public=True, description="Verify email with token"),
    ApiEndpoint("/auth/resend-verification", "POST", ("user",), description="Resend verification email"),
    # Password management
    ApiEndpoint("/auth/forgot-password", "POST", public=True, description="Request password reset"),
    ApiEndpoint("/auth/reset-password", "POST", public=True, description="Reset password with token"),
    ApiEndpoint("/auth/change-password", "POST", ("user",), description="Change password"),
    # User profile
    ApiEndpoint("/user/profile", "GET", ("user",), ("profile:view_own",), description="Get current user profile"),
    ApiEndpoint("/user/profile", "PUT", ("user",), ("profile:edit_own",), description="Update user profile"),
    # MFA management
    ApiEndpoint("/mfa/enable", "POST", ("user",), ("mfa:enable",), description="Enable MFA"),
    ApiEndpoint("/mfa/disable", "POST", ("user",), ("mfa:disable",), description="Disable MFA"),
    ApiEndpoint("/mfa/verify", "POST", public=True, description="Verify MFA code"),
    # Session management
    ApiEndpoint("/sessions", "GET", ("user",), ("sessions:view_own",), description="List user sessions"),
    ApiEndpoint("/sessions/:sessionId/revoke", "POST", ("user",), ("sessions:revoke",), description="Revoke session"),
    ApiEndpoint("/sessions/revoke-all", "POST", ("user",), ("sessions:revoke",), description="Revoke all sessions"),
    # User management
    ApiEndpoint("/users", "GET", ("employee",), ("users:view_list",), description="List users"),
    ApiEndpoint("/users/:userId", "GET", ("employee",), ("users:view_detail",), description="Get user details"),
    ApiEndpoint("/users", "POST", ("admin",), ("users:create",), description="Create new user"),
    ApiEndpoint("/users/:userId", "PUT", ("admin",), ("users:update",), description="Update user"),
    ApiEndpoint("/users/:userId", "DELETE", ("admin",), ("users:delete",), description="Delete user"),
    # RBAC management
    ApiEndpoint("/rbac/roles", "GET", ("admin",), ("rbac:view_roles",), description="List all roles"),
    ApiEndpoint("/rbac/permissions", "GET", ("admin",), ("rbac:view_permissions",), description="List all permissions"),
    ApiEndpoint("/rbac/user-roles/:userId", "GET", ("admin",), ("rbac:view_roles",), description="Get user roles"),
    ApiEndpoint("/rbac/assign-role", "POST", ("admin",), ("rbac:assign_roles",), description="Assign role to user"),
    ApiEndpoint("/rbac/remove-role", "POST", ("admin",), ("rbac:assign_roles",), description="Remove role from user"),
    # Audit logging
    ApiEndpoint("/audit/logs", "GET", ("admin",), ("audit:view_all_logs",), description="List all audit logs"),
    ApiEndpoint("/audit/logs/my", "GET", ("user",), ("audit:view_own_logs",), description="List own audit logs"),
    ApiEndpoint("/audit/logs/export", "GET", ("admin",), ("audit:export_logs",), description="Export audit logs"),
    # Admin dashboard
    ApiEndpoint("/admin/dashboard", "GET", ("admin",), ("admin:dashboard",), description="Admin dashboard stats"),
    ApiEndpoint("/admin/system-config", "GET", ("admin",), ("admin:system_config",), description="Get system configuration"),
    ApiEndpoint("/admin/system-config", "PUT", ("super_admin",), ("admin:system_config",), description="Update system configuration"),
    # Features
    ApiEndpoint("/features", "GET", ("user",), ("features:view",), description="Get user features"),
    ApiEndpoint("/features", "PUT", ("admin",), ("features:manage",), description="Manage features"),
    # GDPR
    ApiEndpoint("/gdpr/export", "POST", ("user",), ("gdpr:export_data",), description="Export personal data"),
    ApiEndpoint("/gdpr/delete", "DELETE", ("super_admin",), ("gdpr:delete_data",), description="Delete user data"),
)


# =====================================
# Path matching
# =====================================

def normalize_path(path: str) -> str:
    """Drop query string, fragment and trailing slash."""
    path = path.split("?", 1)[0].split("#", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def descriptor_path_matches(path: str, pattern: str) -> bool:
    """
    Structural match of a role endpoint pattern.

    ``/admin/*`` matches ``/admin`` and anything below it on a segment
    boundary. A pattern without the trailing ``/*`` is an exact literal.
    """
    path = normalize_path(path)
    if pattern.endswith("/*"):
        base = pattern[:-2]
        return path == base or path.startswith(base + "/")
    return path == pattern


def template_path_matches(path: str, template: str) -> bool:
    """Match an API path template where ``:name`` stands for one segment."""
    if template.endswith("/*"):
        return descriptor_path_matches(path, template)
    path_segments = normalize_path(path).split("/")
    template_segments = template.split("/")
    if len(path_segments) != len(template_segments):
        return False
    for actual, expected in zip(path_segments, template_segments):
        if expected.startswith(":") and len(expected) > 1:
            if not actual:
                return False
        elif actual != expected:
            return False
    return True


def _is_template(path: str) -> bool:
    return any(segment.startswith(":") for segment in path.split("/")) or path.endswith("/*")


# =====================================
# Resolver
# =====================================

class EndpointAccessResolver:
    """
    Reachability decisions over role endpoint descriptors and the API table.
    """

    def __init__(
        self,
        role_endpoints: Mapping[str, Sequence[EndpointDescriptor]],
        api_endpoints: Sequence[ApiEndpoint] = API_ENDPOINTS,
    ) -> None:
        self._role_endpoints = {
            role_key(role): tuple(endpoints) for role, endpoints in role_endpoints.items()
        }
        # Literal paths win over templates when both match.
        self._api_endpoints = tuple(sorted(api_endpoints, key=lambda e: _is_template(e.path)))

    @classmethod
    def from_role_table(
        cls,
        role_table: Mapping[str, RoleDefinition],
        api_endpoints: Sequence[ApiEndpoint] = API_ENDPOINTS,
    ) -> "EndpointAccessResolver":
        return cls(
            {role: definition.endpoints for role, definition in role_table.items()},
            api_endpoints,
        )

    @classmethod
    def from_registry(cls, registry: RoleRegistry) -> "EndpointAccessResolver":
        return _resolver_for_registry(registry)

    # ---------------------------------------------------------
    # Role endpoint descriptors
    # ---------------------------------------------------------

    def endpoints_for_role(self, role: object) -> tuple[EndpointDescriptor, ...]:
        return self._role_endpoints.get(role_key(role), ())

    def can_access_endpoint(
        self, method: str, path: str, user_roles: Optional[Iterable[object]]
    ) -> bool:
        """True when any held role declares an endpoint covering ``method`` and ``path``."""
        method = method.upper()
        for role in user_roles or ():
            for endpoint in self.endpoints_for_role(role):
                if method in endpoint.methods and descriptor_path_matches(path, endpoint.path):
                    return True
        return False

    # ---------------------------------------------------------
    # Declared API table
    # ---------------------------------------------------------

    def find_api_endpoint(self, method: str, path: str) -> Optional[ApiEndpoint]:
        method = method.upper()
        for endpoint in self._api_endpoints:
            if endpoint.method == method and template_path_matches(path, endpoint.path):
                return endpoint
        return None

    def get_endpoint_permissions(self, method: str, path: str) -> Optional[EndpointRequirements]:
        """Declared requirements of the endpoint, or None when none is declared."""
        endpoint = self.find_api_endpoint(method, path)
        if endpoint is None:
            return None
        return EndpointRequirements(
            required_roles=list(endpoint.required_roles),
            required_permissions=list(endpoint.required_permissions),
            public=endpoint.public,
        )

    def is_endpoint_public(self, method: str, path: str) -> bool:
        endpoint = self.find_api_endpoint(method, path)
        return endpoint.public if endpoint else False

    def get_accessible_endpoints(
        self, user_roles: Optional[Iterable[object]]
    ) -> list[ApiEndpoint]:
        held = {role_key(r) for r in user_roles or ()}
        return [
            endpoint
            for endpoint in self._api_endpoints
            if endpoint.public
            or not endpoint.required_roles
            or held.intersection(endpoint.required_roles)
        ]

    def can_call_api(
        self,
        method: str,
        path: str,
        user_roles: Optional[Iterable[object]],
        user_permissions: Optional[Iterable[str]],
    ) -> bool:
        """
        Decision against the declared API table.

        Undeclared endpoints are denied, public ones allowed; otherwise the
        user needs one of the roles AND all of the permissions.
        """
        endpoint = self.find_api_endpoint(method, path)
        if endpoint is None:
            return False
        if endpoint.public:
            return True
        if endpoint.required_roles:
            held = {role_key(r) for r in user_roles or ()}
            if not held.intersection(endpoint.required_roles):
                return False
        if endpoint.required_permissions:
            if not matcher.matches_all(user_permissions, endpoint.required_permissions):
                return False
        return True


@lru_cache(maxsize=8)
def _resolver_for_registry(registry: RoleRegistry) -> EndpointAccessResolver:
    return EndpointAccessResolver.from_role_table(registry.as_role_table())
