"""Registry entry describing one role."""

from __future__ import annotations

from dataclasses import dataclass

from rbacguard.models.endpoint import EndpointDescriptor


@dataclass(frozen=True)
class RoleDefinition:
    """Static role definition: level, permissions, reachable endpoints."""

    role: str
    level: int
    permissions: tuple[str, ...]
    description: str
    display_name: str
    endpoints: tuple[EndpointDescriptor, ...] = ()
