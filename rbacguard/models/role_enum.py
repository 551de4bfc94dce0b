"""
Role Enumeration Module
=======================

Defines the closed role vocabularies and the role hierarchy levels.

Two vocabularies exist and are kept as separate typed domains:
- Role: the standard hierarchy (public ... super_admin, plus auditor)
- LegacyRole: the older admin/moderator/user/guest table whose
  permissions use the ``user:read`` shape
"""

from enum import Enum, IntEnum


class Role(str, Enum):
    """
    Standard roles, in order of increasing privilege.

    AUDITOR sits at administrator level but is outside the
    inheritance chain.
    """

    PUBLIC = "public"
    USER = "user"
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"
    AUDITOR = "auditor"


class LegacyRole(str, Enum):
    """
    Roles of the legacy permission table.
    """

    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"
    GUEST = "guest"


class RoleLevel(IntEnum):
    """Numeric rank used for "at least as privileged as" checks."""

    PUBLIC = 0
    USER = 1
    EMPLOYEE = 2
    MANAGER = 3
    ADMIN = 4
    SUPER_ADMIN = 5
