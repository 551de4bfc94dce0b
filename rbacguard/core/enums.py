"""
Enumeration Module
==================

Defines enumerations used across the application.
"""

from enum import Enum


class RoleVocabulary(str, Enum):
    """Role tables that can be selected as authoritative."""

    STANDARD = "standard"
    LEGACY = "legacy"


class AuditResult(str, Enum):
    """Outcome of an audited access decision."""

    SUCCESS = "success"
    FAILURE = "failure"
    BLOCKED = "blocked"


class SecurityLevel(str, Enum):
    """Severity attached to an audit event."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
