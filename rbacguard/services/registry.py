"""
Role/Permission Registry
========================

Single source of truth mapping each role to its permissions, its
hierarchy level and the endpoints it may reach.

Two registries are declared and never merged:
- STANDARD_REGISTRY: public/user/employee/manager/admin/super_admin/auditor
- LEGACY_REGISTRY: admin/moderator/user/guest

``get_registry()`` returns the one selected by ``role_vocabulary``.

Registry data is immutable after import: definitions are frozen
dataclasses held in a read-only mapping and no mutation method exists.
"""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from rbacguard.core.config import get_settings
from rbacguard.core.enums import RoleVocabulary
from rbacguard.core.exceptions import UnknownRoleVocabularyError
from rbacguard.core.logging import get_logger
from rbacguard.models.endpoint import EndpointDescriptor
from rbacguard.models.permission import Permission
from rbacguard.models.role_definition import RoleDefinition
from rbacguard.models.role_enum import LegacyRole, Role, RoleLevel

logger = get_logger(__name__)


def role_key(role: object) -> str:
    """Normalize a Role/LegacyRole member or a raw string to its value."""
    return getattr(role, "value", role)  # type: ignore[return-value]


def _unique(items: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


class RoleRegistry:
    """
    Read-only lookup over a set of role definitions.

    Unknown roles are never an error: they resolve to level 0 and an
    empty permission set so that callers fail closed.
    """

    def __init__(
        self,
        name: str,
        definitions: Iterable[RoleDefinition],
        level_names: Optional[Mapping[int, str]] = None,
        catalog: Optional[Mapping[str, tuple[str, ...]]] = None,
    ) -> None:
        self.name = name
        self._definitions: Mapping[str, RoleDefinition] = MappingProxyType(
            {definition.role: definition for definition in definitions}
        )
        self._level_names: Mapping[int, str] = MappingProxyType(dict(level_names or {}))
        self._catalog: Mapping[str, tuple[str, ...]] = MappingProxyType(dict(catalog or {}))
        self._effective = lru_cache(maxsize=256)(self._compute_effective)

    def __repr__(self) -> str:
        return f"RoleRegistry(name={self.name!r}, roles={list(self._definitions)!r})"

    # ---------------------------------------------------------
    # Lookups
    # ---------------------------------------------------------

    def get_definition(self, role: object) -> Optional[RoleDefinition]:
        return self._definitions.get(role_key(role))

    def is_known_role(self, role: object) -> bool:
        return role_key(role) in self._definitions

    def roles(self) -> tuple[str, ...]:
        return tuple(self._definitions)

    def get_permissions_for_role(self, role: object) -> tuple[str, ...]:
        """Declared permissions of ``role``; empty for an unknown role."""
        definition = self.get_definition(role)
        return definition.permissions if definition else ()

    def get_level_for_role(self, role: object) -> int:
        """Declared level of ``role``; the lowest level for an unknown role."""
        definition = self.get_definition(role)
        return definition.level if definition else int(RoleLevel.PUBLIC)

    def get_endpoints_for_role(self, role: object) -> tuple[EndpointDescriptor, ...]:
        definition = self.get_definition(role)
        return definition.endpoints if definition else ()

    def max_level(self, roles: Optional[Iterable[object]]) -> Optional[int]:
        """Highest level among ``roles``, or None when no role is given."""
        levels = [self.get_level_for_role(r) for r in roles or ()]
        return max(levels) if levels else None

    # ---------------------------------------------------------
    # Effective permissions
    # ---------------------------------------------------------

    def _compute_effective(self, keys: tuple[str, ...]) -> tuple[str, ...]:
        return _unique(p for key in keys for p in self.get_permissions_for_role(key))

    def get_effective_permissions_for_roles(
        self, roles: Optional[Iterable[object]]
    ) -> tuple[str, ...]:
        """Ordered union of the permissions of every role, memoised per role list."""
        keys = tuple(role_key(r) for r in roles or ())
        return self._effective(keys)

    def all_permissions(self) -> tuple[str, ...]:
        """Every permission the registry knows, catalogue first."""
        declared = (p for definition in self._definitions.values() for p in definition.permissions)
        catalogued = (p for group in self._catalog.values() for p in group)
        return _unique([*catalogued, *declared])

    # ---------------------------------------------------------
    # Display helpers
    # ---------------------------------------------------------

    def get_role_display_name(self, role: object) -> str:
        definition = self.get_definition(role)
        return definition.display_name if definition else str(role_key(role))

    def get_level_name(self, level: int) -> str:
        return self._level_names.get(level, "Unknown")

    def as_role_table(self) -> dict[str, RoleDefinition]:
        """Plain snapshot in the role-table shape used by the harness."""
        return dict(self._definitions)


# =====================================
# Standard vocabulary
# =====================================

def _perms(*values: str) -> tuple[Permission, ...]:
    return tuple(Permission(v) for v in values)


PERMISSION_CATALOG: Mapping[str, tuple[Permission, ...]] = MappingProxyType({
    "auth": _perms("auth:login", "auth:logout", "auth:register", "auth:refresh_token", "auth:*"),
    "profile": _perms(
        "profile:view_own", "profile:edit_own", "profile:view_any", "profile:edit_any", "profile:*",
    ),
    "users": _perms(
        "users:view_list", "users:view_detail", "users:create", "users:update",
        "users:delete", "users:manage_team", "users:*",
    ),
    "rbac": _perms(
        "rbac:view_roles", "rbac:view_permissions", "rbac:assign_roles", "rbac:manage_roles", "rbac:*",
    ),
    "audit": _perms("audit:view_own_logs", "audit:view_all_logs", "audit:export_logs", "audit:*"),
    "admin": _perms("admin:dashboard", "admin:system_config", "admin:monitoring", "admin:*"),
    "email": _perms("email:send_verification", "email:verify", "email:*"),
    "mfa": _perms("mfa:enable", "mfa:disable", "mfa:verify", "mfa:*"),
    "sessions": _perms("sessions:view_own", "sessions:view_all", "sessions:revoke", "sessions:*"),
    "features": _perms("features:view", "features:manage", "features:*"),
    "gdpr": _perms("gdpr:export_data", "gdpr:delete_data", "gdpr:*"),
})

# Permissions each role adds on top of the roles it inherits from
_BASE_PERMISSIONS: dict[Role, tuple[Permission, ...]] = {
    Role.PUBLIC: _perms("auth:login", "auth:register"),
    Role.USER: _perms(
        "auth:logout",
        "auth:refresh_token",
        "profile:view_own",
        "profile:edit_own",
        "sessions:view_own",
        "email:verify",
        "mfa:enable",
        "mfa:disable",
        "gdpr:export_data",
    ),
    Role.EMPLOYEE: _perms("users:view_list", "users:view_detail", "audit:view_own_logs"),
    Role.MANAGER: _perms("users:manage_team", "audit:view_all_logs"),
    Role.ADMIN: _perms(
        "users:*",
        "rbac:*",
        "audit:*",
        "admin:*",
        "email:*",
        "mfa:*",
        "sessions:*",
        "features:manage",
    ),
    Role.SUPER_ADMIN: _perms("gdpr:delete_data"),
    Role.AUDITOR: _perms("audit:view_all_logs", "audit:export_logs"),
}

_ALL_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

_BASE_ENDPOINTS: dict[Role, tuple[EndpointDescriptor, ...]] = {
    Role.PUBLIC: (
        EndpointDescriptor("/health/*", ("GET",)),
        EndpointDescriptor("/auth/*", ("POST",)),
    ),
    Role.USER: (
        EndpointDescriptor("/user/*", ("GET", "PUT")),
        EndpointDescriptor("/mfa/*", ("POST",)),
        EndpointDescriptor("/sessions/*", ("GET", "POST")),
        EndpointDescriptor("/audit/logs/my", ("GET",)),
        EndpointDescriptor("/features", ("GET",)),
        EndpointDescriptor("/gdpr/export", ("POST",)),
    ),
    Role.EMPLOYEE: (
        EndpointDescriptor("/users/*", ("GET",)),
    ),
    Role.MANAGER: (
        EndpointDescriptor("/audit/logs", ("GET",)),
    ),
    Role.ADMIN: (
        EndpointDescriptor("/users/*", ("GET", "POST", "PUT", "DELETE")),
        EndpointDescriptor("/rbac/*", ("GET", "POST")),
        EndpointDescriptor("/audit/*", ("GET",)),
        EndpointDescriptor("/admin/*", ("GET",)),
        EndpointDescriptor("/features", ("GET", "PUT")),
    ),
    Role.SUPER_ADMIN: (
        EndpointDescriptor("/*", _ALL_METHODS),
    ),
    Role.AUDITOR: (
        EndpointDescriptor("/audit/*", ("GET",)),
    ),
}

# Each role inherits everything its ancestors declare
_INHERITANCE: dict[Role, tuple[Role, ...]] = {
    Role.PUBLIC: (Role.PUBLIC,),
    Role.USER: (Role.PUBLIC, Role.USER),
    Role.EMPLOYEE: (Role.PUBLIC, Role.USER, Role.EMPLOYEE),
    Role.MANAGER: (Role.PUBLIC, Role.USER, Role.EMPLOYEE, Role.MANAGER),
    Role.ADMIN: (Role.PUBLIC, Role.USER, Role.EMPLOYEE, Role.MANAGER, Role.ADMIN),
    Role.SUPER_ADMIN: (
        Role.PUBLIC, Role.USER, Role.EMPLOYEE, Role.MANAGER, Role.ADMIN, Role.SUPER_ADMIN,
    ),
    Role.AUDITOR: (Role.PUBLIC, Role.USER, Role.AUDITOR),
}

_ROLE_LEVELS: dict[Role, RoleLevel] = {
    Role.PUBLIC: RoleLevel.PUBLIC,
    Role.USER: RoleLevel.USER,
    Role.EMPLOYEE: RoleLevel.EMPLOYEE,
    Role.MANAGER: RoleLevel.MANAGER,
    Role.ADMIN: RoleLevel.ADMIN,
    Role.SUPER_ADMIN: RoleLevel.SUPER_ADMIN,
    Role.AUDITOR: RoleLevel.ADMIN,  # admin-level, outside the chain
}

_ROLE_DISPLAY_NAMES: dict[Role, str] = {
    Role.PUBLIC: "Public",
    Role.USER: "User",
    Role.EMPLOYEE: "Employee",
    Role.MANAGER: "Manager",
    Role.ADMIN: "Administrator",
    Role.SUPER_ADMIN: "Super Administrator",
    Role.AUDITOR: "Auditor",
}

_ROLE_DESCRIPTIONS: dict[Role, str] = {
    Role.PUBLIC: "Unauthenticated visitor",
    Role.USER: "Authenticated user managing their own account",
    Role.EMPLOYEE: "Internal employee with read access to the user directory",
    Role.MANAGER: "Team lead managing their team and reading audit logs",
    Role.ADMIN: "System administrator",
    Role.SUPER_ADMIN: "Highest privilege, including data deletion",
    Role.AUDITOR: "Compliance auditor with read/export access to audit logs",
}

_LEVEL_NAMES: dict[int, str] = {
    RoleLevel.PUBLIC: "Public",
    RoleLevel.USER: "User",
    RoleLevel.EMPLOYEE: "Employee",
    RoleLevel.MANAGER: "Manager",
    RoleLevel.ADMIN: "Administrator",
    RoleLevel.SUPER_ADMIN: "Super Administrator",
}


def _standard_definition(role: Role) -> RoleDefinition:
    ancestors = _INHERITANCE[role]
    return RoleDefinition(
        role=role.value,
        level=int(_ROLE_LEVELS[role]),
        permissions=_unique(p for a in ancestors for p in _BASE_PERMISSIONS[a]),
        description=_ROLE_DESCRIPTIONS[role],
        display_name=_ROLE_DISPLAY_NAMES[role],
        endpoints=tuple(dict.fromkeys(e for a in ancestors for e in _BASE_ENDPOINTS[a])),
    )


STANDARD_REGISTRY = RoleRegistry(
    name=RoleVocabulary.STANDARD.value,
    definitions=[_standard_definition(role) for role in Role],
    level_names=_LEVEL_NAMES,
    catalog=PERMISSION_CATALOG,
)


# =====================================
# Legacy vocabulary
# =====================================

_LEGACY_PERMISSIONS: dict[LegacyRole, tuple[Permission, ...]] = {
    LegacyRole.ADMIN: _perms(
        "user:create",
        "user:read",
        "user:update",
        "user:delete",
        "admin:panel",
        "admin:users",
        "admin:system",
        "moderate:content",
        "moderate:reports",
    ),
    LegacyRole.MODERATOR: _perms("user:read", "moderate:content", "moderate:reports"),
    LegacyRole.USER: _perms("user:read"),
    LegacyRole.GUEST: (),
}

_LEGACY_LEVELS: dict[LegacyRole, int] = {
    LegacyRole.GUEST: 0,
    LegacyRole.USER: 1,
    LegacyRole.MODERATOR: 2,
    LegacyRole.ADMIN: 3,
}

_LEGACY_DISPLAY_NAMES: dict[LegacyRole, str] = {
    LegacyRole.ADMIN: "Administrator",
    LegacyRole.MODERATOR: "Moderator",
    LegacyRole.USER: "User",
    LegacyRole.GUEST: "Guest",
}

LEGACY_REGISTRY = RoleRegistry(
    name=RoleVocabulary.LEGACY.value,
    definitions=[
        RoleDefinition(
            role=role.value,
            level=_LEGACY_LEVELS[role],
            permissions=_LEGACY_PERMISSIONS[role],
            description=f"Legacy {role.value} role",
            display_name=_LEGACY_DISPLAY_NAMES[role],
        )
        for role in LegacyRole
    ],
    level_names={0: "Guest", 1: "User", 2: "Moderator", 3: "Administrator"},
)


_REGISTRIES: Mapping[str, RoleRegistry] = MappingProxyType({
    RoleVocabulary.STANDARD.value: STANDARD_REGISTRY,
    RoleVocabulary.LEGACY.value: LEGACY_REGISTRY,
})


def get_registry(vocabulary: Optional[str] = None) -> RoleRegistry:
    """
    Return the registry for ``vocabulary``, or the configured one.

    Raises:
        UnknownRoleVocabularyError: If the vocabulary is not declared.
    """
    name = role_key(vocabulary) if vocabulary is not None else get_settings().role_vocabulary
    registry = _REGISTRIES.get(name)
    if registry is None:
        logger.error("unknown_role_vocabulary", vocabulary=name)
        raise UnknownRoleVocabularyError(name)
    return registry
