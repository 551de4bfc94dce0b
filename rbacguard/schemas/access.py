"""
Access Schemas Module
=====================

Pydantic models for the values exchanged with the access engine.

- AccessCheckCriteria: request-scoped requirements of one check
- SessionPayload: the ``{roles, permissions?}`` shape supplied by the
  external session provider
- EndpointRequirements: declared requirements of an API endpoint
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rbacguard.models.permission import Permission
from rbacguard.models.role_enum import LegacyRole, Role

RoleLike = Union[Role, LegacyRole, str]


class AccessCheckCriteria(BaseModel):
    """
    Requirements of a single access check.

    Constructed fresh by the caller for each check and never persisted.
    An empty criteria object places no restriction.
    """

    model_config = ConfigDict(frozen=True)

    required_role: Optional[Union[RoleLike, list[RoleLike]]] = Field(
        default=None,
        description="Role or roles of which the user must hold at least one",
    )
    required_permissions: Optional[list[Permission]] = Field(
        default=None,
        description="Permissions to check",
    )
    require_all_permissions: bool = Field(
        default=False,
        description="Require ALL permissions instead of ANY",
    )

    @property
    def required_roles(self) -> tuple[str, ...]:
        """Role requirement normalised to a tuple of role values."""
        if self.required_role is None:
            return ()
        roles = self.required_role if isinstance(self.required_role, list) else [self.required_role]
        return tuple(getattr(r, "value", r) for r in roles)

    @property
    def has_role_requirement(self) -> bool:
        return self.required_role is not None

    @property
    def has_permission_requirement(self) -> bool:
        return bool(self.required_permissions)


class SessionPayload(BaseModel):
    """
    Roles and (optionally) permissions of the current user.

    When ``permissions`` is absent the engine derives it from ``roles``
    through the registry.
    """

    user_id: Optional[str] = Field(default=None, description="Identifier of the user")
    roles: list[str] = Field(default_factory=list, description="Role identifiers")
    permissions: Optional[list[str]] = Field(
        default=None,
        description="Resolved permissions, derived from roles when absent",
    )


class EndpointRequirements(BaseModel):
    """Declared requirements of an API endpoint (display/debugging only)."""

    model_config = ConfigDict(frozen=True)

    required_roles: list[str] = Field(default_factory=list)
    required_permissions: list[str] = Field(default_factory=list)
    public: bool = False
