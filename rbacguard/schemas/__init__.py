"""
Schemas Package Initialization
==============================

Exports all Pydantic schemas for the application.

Usage:
    from rbacguard.schemas import AccessCheckCriteria, SessionPayload
"""

# Access schemas
from rbacguard.schemas.access import (
    AccessCheckCriteria,
    SessionPayload,
    EndpointRequirements,
)

# Audit schemas
from rbacguard.schemas.audit import (
    AuditEvent,
    AuditQuery,
    AuditSummary,
    ActionCount,
    RoleUsage,
)

# Rate limit schemas
from rbacguard.schemas.rate_limit import RateLimitDecision, RateLimitStats

# Harness schemas
from rbacguard.schemas.harness import (
    TestUser,
    TestUserProfile,
    PermissionCase,
    PermissionScenario,
    PermissionMatrixReport,
    RoleHierarchyReport,
    ExpectedEndpointAccess,
    EndpointAccessReport,
    PermissionPerformance,
    PerformanceRecord,
    PerformanceReport,
    SuiteSummary,
    SuiteReport,
)

__all__ = [
    # Access
    "AccessCheckCriteria",
    "SessionPayload",
    "EndpointRequirements",
    # Audit
    "AuditEvent",
    "AuditQuery",
    "AuditSummary",
    "ActionCount",
    "RoleUsage",
    # Rate limit
    "RateLimitDecision",
    "RateLimitStats",
    # Harness
    "TestUser",
    "TestUserProfile",
    "PermissionCase",
    "PermissionScenario",
    "PermissionMatrixReport",
    "RoleHierarchyReport",
    "ExpectedEndpointAccess",
    "EndpointAccessReport",
    "PermissionPerformance",
    "PerformanceRecord",
    "PerformanceReport",
    "SuiteSummary",
    "SuiteReport",
]
