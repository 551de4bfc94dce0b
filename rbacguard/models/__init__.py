"""
Models Package Initialization
=============================

Exports the role, permission and endpoint models.
"""

from rbacguard.models.role_enum import Role, LegacyRole, RoleLevel
from rbacguard.models.permission import (
    Permission,
    GLOBAL_WILDCARD,
    is_valid_permission,
    split_permission,
)
from rbacguard.models.endpoint import EndpointDescriptor, ApiEndpoint
from rbacguard.models.role_definition import RoleDefinition

__all__ = [
    "Role",
    "LegacyRole",
    "RoleLevel",
    "Permission",
    "GLOBAL_WILDCARD",
    "is_valid_permission",
    "split_permission",
    "EndpointDescriptor",
    "ApiEndpoint",
    "RoleDefinition",
]
