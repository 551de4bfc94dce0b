"""
Harness Report Schemas
======================

Pydantic models for the results produced by the validation harness.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class TestUserProfile(BaseModel):
    """Display data of a synthetic user."""

    __test__ = False

    name: str
    department: str
    status: Optional[str] = None


class TestUser(BaseModel):
    """Synthetic user used by the harness."""

    __test__ = False

    id: str
    email: EmailStr
    roles: list[str]
    permissions: list[str]
    profile: TestUserProfile


class PermissionCase(BaseModel):
    """One expected permission outcome for a persona."""

    permission: str
    should_have: bool


class PermissionScenario(BaseModel):
    name: str
    user: TestUser
    test_cases: list[PermissionCase]


class PermissionCaseResult(BaseModel):
    scenario: str
    user: str
    permission: str
    expected: bool
    actual: bool
    passed: bool


class PermissionMatrixReport(BaseModel):
    passed: int
    failed: int
    results: list[PermissionCaseResult]


class RoleMatrixEntry(BaseModel):
    permissions: list[str]
    level: int
    inconsistencies: list[str] = Field(default_factory=list)


class RoleHierarchyReport(BaseModel):
    is_valid: bool
    issues: list[str]
    role_matrix: dict[str, RoleMatrixEntry]


class ExpectedEndpointAccess(BaseModel):
    """Independently declared expectation for one role/method/path."""

    role: str
    method: str
    path: str
    should_have_access: bool


class EndpointAccessEntry(BaseModel):
    role: str
    endpoint: str
    method: str
    has_access: bool
    should_have_access: bool
    is_correct: bool


class EndpointAccessReport(BaseModel):
    is_valid: bool
    access_matrix: list[EndpointAccessEntry]
    issues: list[str]


class PermissionPerformance(BaseModel):
    """Average milliseconds per call of each engine operation."""

    has_permission: float
    has_all_permissions: float
    has_any_permission: float
    has_role: float
    has_access: float


class PerformanceRecord(BaseModel):
    operation: str
    duration: float
    iterations: int
    timestamp: datetime


class PerformanceSummary(BaseModel):
    total_tests: int
    average_duration: float
    slowest_operation: str
    fastest_operation: str


class PerformanceDetail(BaseModel):
    operation: str
    avg_duration: float
    total_iterations: int
    last_run: str


class PerformanceReport(BaseModel):
    summary: PerformanceSummary
    details: list[PerformanceDetail]


class PerformanceResults(BaseModel):
    permission_performance: PermissionPerformance
    role_hierarchy_performance: float
    performance_report: PerformanceReport


class SuiteSummary(BaseModel):
    total_tests: int
    passed: int
    failed: int
    is_valid: bool
    issues: list[str]


class SuiteReport(BaseModel):
    permission_tests: PermissionMatrixReport
    role_hierarchy_tests: RoleHierarchyReport
    endpoint_tests: EndpointAccessReport
    performance_tests: PerformanceResults
    summary: SuiteSummary
