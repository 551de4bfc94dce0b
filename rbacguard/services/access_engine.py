"""
Access Decision Engine
======================

The single authorization boolean consumed by every guard.

Every decision is a pure function of the user's roles and permissions.
Nothing here raises: absent data resolves to "no access".

Decision rule of ``has_access``:
    role_satisfied = no role requirement OR user holds one required role
    perm_satisfied = no permission requirement OR ALL/ANY required held
    decision       = role_satisfied AND perm_satisfied

A caller that names both a role and permissions requires both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from rbacguard.schemas.access import AccessCheckCriteria, SessionPayload
from rbacguard.services import matcher
from rbacguard.services.endpoint_resolver import EndpointAccessResolver
from rbacguard.services.registry import RoleRegistry, get_registry, role_key

RoleInput = Union[str, Sequence[str], None]


def _role_values(roles: Optional[Iterable[object]]) -> frozenset[str]:
    return frozenset(role_key(r) for r in roles or ())


def _as_role_list(role: object) -> list[object]:
    if role is None:
        return []
    if isinstance(role, (list, tuple, set, frozenset)):
        return list(role)
    return [role]


# =====================================
# Pure decision functions
# =====================================

def has_role(user_roles: Optional[Iterable[object]], role: object) -> bool:
    """True when the user holds ``role`` or any of a list of roles."""
    if user_roles is None:
        return False
    held = _role_values(user_roles)
    return any(role_key(r) in held for r in _as_role_list(role))


def has_permission(user_permissions: Optional[Iterable[str]], permission: str) -> bool:
    if user_permissions is None:
        return False
    return matcher.matches(user_permissions, permission)


def has_all_permissions(
    user_permissions: Optional[Iterable[str]], permissions: Iterable[str]
) -> bool:
    if user_permissions is None:
        return False
    return matcher.matches_all(user_permissions, permissions)


def has_any_permission(
    user_permissions: Optional[Iterable[str]], permissions: Iterable[str]
) -> bool:
    if user_permissions is None:
        return False
    return matcher.matches_any(user_permissions, permissions)


def has_role_level(
    user_roles: Optional[Iterable[object]],
    min_level: int,
    registry: Optional[RoleRegistry] = None,
) -> bool:
    """True when the highest level among ``user_roles`` is at least ``min_level``."""
    try:
        threshold = int(min_level)
    except (TypeError, ValueError):
        return False
    registry = registry or get_registry()
    highest = registry.max_level(user_roles)
    if highest is None:
        return False
    return highest >= threshold


def has_access(
    criteria: Optional[AccessCheckCriteria],
    user_roles: Optional[Iterable[object]],
    user_permissions: Optional[Iterable[str]],
) -> bool:
    """
    Evaluate ``criteria`` against a user's roles and permissions.

    A null user context (both inputs None) is always denied.
    """
    if user_roles is None and user_permissions is None:
        return False
    if criteria is None:
        return True

    role_satisfied = True
    if criteria.has_role_requirement:
        role_satisfied = bool(_role_values(user_roles) & set(criteria.required_roles))

    perm_satisfied = True
    if criteria.has_permission_requirement:
        held = list(user_permissions or ())
        if criteria.require_all_permissions:
            perm_satisfied = matcher.matches_all(held, criteria.required_permissions)
        else:
            perm_satisfied = matcher.matches_any(held, criteria.required_permissions)

    return role_satisfied and perm_satisfied


# =====================================
# Bound context
# =====================================

@dataclass(frozen=True)
class AccessContext:
    """
    The engine bound to one user's roles and permissions.

    ``roles``/``permissions`` of None mean there is no user at all;
    every check then answers False.
    """

    roles: Optional[tuple[str, ...]]
    permissions: Optional[tuple[str, ...]]
    registry: RoleRegistry = field(default_factory=get_registry, repr=False, compare=False)
    resolver: Optional[EndpointAccessResolver] = field(default=None, repr=False, compare=False)
    user_id: Optional[str] = None

    @classmethod
    def anonymous(cls, registry: Optional[RoleRegistry] = None) -> "AccessContext":
        return cls(roles=None, permissions=None, registry=registry or get_registry())

    @classmethod
    def for_user(
        cls,
        roles: Optional[Iterable[object]],
        permissions: Optional[Iterable[str]] = None,
        registry: Optional[RoleRegistry] = None,
        user_id: Optional[str] = None,
    ) -> "AccessContext":
        """
        Bind roles, deriving permissions from the registry when omitted.

        ``roles`` of None is a missing user and binds the anonymous context.
        """
        if roles is None:
            return cls.anonymous(registry)
        registry = registry or get_registry()
        role_values = tuple(role_key(r) for r in roles)
        if permissions is None:
            resolved = registry.get_effective_permissions_for_roles(role_values)
        else:
            resolved = tuple(permissions)
        return cls(roles=role_values, permissions=resolved, registry=registry, user_id=user_id)

    @classmethod
    def from_session(
        cls,
        payload: Optional[SessionPayload],
        registry: Optional[RoleRegistry] = None,
    ) -> "AccessContext":
        if payload is None:
            return cls.anonymous(registry)
        return cls.for_user(
            payload.roles,
            payload.permissions,
            registry=registry,
            user_id=payload.user_id,
        )

    @property
    def is_anonymous(self) -> bool:
        return self.roles is None and self.permissions is None

    def has_role(self, role: object) -> bool:
        return has_role(self.roles, role)

    def has_permission(self, permission: str) -> bool:
        return has_permission(self.permissions, permission)

    def has_all_permissions(self, permissions: Iterable[str]) -> bool:
        return has_all_permissions(self.permissions, permissions)

    def has_any_permission(self, permissions: Iterable[str]) -> bool:
        return has_any_permission(self.permissions, permissions)

    def has_access(self, criteria: Optional[AccessCheckCriteria]) -> bool:
        return has_access(criteria, self.roles, self.permissions)

    def get_role_level(self, role: object) -> int:
        return self.registry.get_level_for_role(role)

    def has_role_level(self, min_level: int) -> bool:
        return has_role_level(self.roles, min_level, self.registry)

    def can_access_endpoint(self, method: str, path: str) -> bool:
        if self.roles is None:
            return False
        resolver = self.resolver or EndpointAccessResolver.from_registry(self.registry)
        return resolver.can_access_endpoint(method, path, self.roles)


@dataclass(frozen=True)
class UserAccessView:
    """
    RBAC projection of a user.

    Permissions are flattened from roles once, at construction. A later
    registry change is not reflected in views built before it.
    """

    id: str
    email: str
    roles: tuple[str, ...]
    permissions: tuple[str, ...]

    @classmethod
    def from_roles(
        cls,
        id: str,
        email: str,
        roles: Optional[Iterable[object]],
        registry: Optional[RoleRegistry] = None,
    ) -> "UserAccessView":
        registry = registry or get_registry()
        role_values = tuple(role_key(r) for r in roles or ())
        return cls(
            id=id,
            email=email,
            roles=role_values,
            permissions=registry.get_effective_permissions_for_roles(role_values),
        )

    def context(self, registry: Optional[RoleRegistry] = None) -> AccessContext:
        return AccessContext.for_user(
            self.roles, self.permissions, registry=registry, user_id=self.id
        )
