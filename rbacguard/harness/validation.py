"""
Harness Validators
==================

Black-box checks of the engine against the harness fixtures.

Each validator returns a report and never raises on a failed
expectation: every inconsistency becomes a string in ``issues``.
Validators accept an explicit role table so they can also be pointed at
the production registry (``registry.as_role_table()``).
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from rbacguard.core.logging import get_logger, log_execution_time
from rbacguard.harness.fixtures import (
    generate_expected_endpoint_access,
    generate_permission_scenarios,
    generate_test_roles,
)
from rbacguard.models.endpoint import EndpointDescriptor
from rbacguard.models.role_definition import RoleDefinition
from rbacguard.schemas.harness import (
    EndpointAccessEntry,
    EndpointAccessReport,
    ExpectedEndpointAccess,
    PermissionCaseResult,
    PermissionMatrixReport,
    PermissionScenario,
    RoleHierarchyReport,
    RoleMatrixEntry,
)
from rbacguard.services import matcher
from rbacguard.services.access_engine import has_permission
from rbacguard.services.endpoint_resolver import EndpointAccessResolver

logger = get_logger(__name__)

ADMIN_ROLE = "admin"
SAMPLE_SEGMENT = "sample"


# =====================================
# Permission matrix
# =====================================

@log_execution_time(logger, "validate_permission_matrix")
def validate_permission_matrix(
    scenarios: Optional[Sequence[PermissionScenario]] = None,
) -> PermissionMatrixReport:
    """Evaluate ``has_permission`` for every persona case."""
    if scenarios is None:
        scenarios = generate_permission_scenarios()

    results: list[PermissionCaseResult] = []
    for scenario in scenarios:
        for case in scenario.test_cases:
            actual = has_permission(scenario.user.permissions, case.permission)
            results.append(
                PermissionCaseResult(
                    scenario=scenario.name,
                    user=scenario.user.email,
                    permission=case.permission,
                    expected=case.should_have,
                    actual=actual,
                    passed=actual == case.should_have,
                )
            )

    passed = sum(1 for r in results if r.passed)
    return PermissionMatrixReport(passed=passed, failed=len(results) - passed, results=results)


# =====================================
# Role hierarchy
# =====================================

def _is_valid_level(level: object) -> bool:
    return isinstance(level, int) and not isinstance(level, bool) and level >= 0


@log_execution_time(logger, "validate_role_hierarchy")
def validate_role_hierarchy(
    role_table: Optional[Mapping[str, RoleDefinition]] = None,
) -> RoleHierarchyReport:
    """
    Check the structural invariants of a role table.

    - levels are non-negative integers
    - the admin role covers every role of a strictly lower level
    - the top-level role covers every other role

    Roles with an invalid level are reported once and left out of the
    level comparisons.
    """
    if role_table is None:
        role_table = generate_test_roles()

    role_matrix: dict[str, RoleMatrixEntry] = {}
    issues: list[str] = []
    ranked: dict[str, RoleDefinition] = {}

    for role, definition in role_table.items():
        inconsistencies: list[str] = []
        level = definition.level
        if _is_valid_level(level):
            ranked[role] = definition
        else:
            inconsistencies.append(f"Role '{role}' has invalid level {level!r}")
        role_matrix[role] = RoleMatrixEntry(
            permissions=list(definition.permissions),
            level=level if _is_valid_level(level) else 0,
            inconsistencies=inconsistencies,
        )

    admin = ranked.get(ADMIN_ROLE)
    if ADMIN_ROLE not in role_table:
        issues.append(f"Role table has no '{ADMIN_ROLE}' role")
    elif admin is not None:
        for role, definition in ranked.items():
            if role == ADMIN_ROLE or definition.level >= admin.level:
                continue
            missing = matcher.uncovered_permissions(admin.permissions, definition.permissions)
            if missing:
                message = (
                    f"Admin role missing permissions from '{role}': {', '.join(missing)}"
                )
                role_matrix[ADMIN_ROLE].inconsistencies.append(message)

    if ranked:
        top_role, top = max(ranked.items(), key=lambda item: item[1].level)
        for role, definition in role_table.items():
            if role == top_role:
                continue
            missing = matcher.uncovered_permissions(top.permissions, definition.permissions)
            if missing:
                role_matrix[top_role].inconsistencies.append(
                    f"Top-level role '{top_role}' missing permissions from '{role}': "
                    f"{', '.join(missing)}"
                )

    for entry in role_matrix.values():
        issues.extend(entry.inconsistencies)

    return RoleHierarchyReport(is_valid=not issues, issues=issues, role_matrix=role_matrix)


# =====================================
# Endpoint access
# =====================================

def sample_path(pattern: str) -> str:
    """A concrete path that a descriptor pattern must match."""
    if pattern == "/*":
        return f"/{SAMPLE_SEGMENT}"
    if pattern.endswith("/*"):
        return f"{pattern[:-2]}/{SAMPLE_SEGMENT}"
    return pattern


def _declared_endpoint_entries(
    role_table: Mapping[str, RoleDefinition],
    resolver: EndpointAccessResolver,
) -> list[EndpointAccessEntry]:
    entries: list[EndpointAccessEntry] = []
    for role, definition in role_table.items():
        endpoint: EndpointDescriptor
        for endpoint in definition.endpoints:
            path = sample_path(endpoint.path)
            for method in endpoint.methods:
                granted = resolver.can_access_endpoint(method, path, [role])
                entries.append(
                    EndpointAccessEntry(
                        role=role,
                        endpoint=path,
                        method=method,
                        has_access=granted,
                        should_have_access=True,
                        is_correct=granted,
                    )
                )
    return entries


def _expected_endpoint_entries(
    expectations: Sequence[ExpectedEndpointAccess],
    resolver: EndpointAccessResolver,
) -> list[EndpointAccessEntry]:
    entries: list[EndpointAccessEntry] = []
    for expected in expectations:
        granted = resolver.can_access_endpoint(expected.method, expected.path, [expected.role])
        entries.append(
            EndpointAccessEntry(
                role=expected.role,
                endpoint=expected.path,
                method=expected.method.upper(),
                has_access=granted,
                should_have_access=expected.should_have_access,
                is_correct=granted == expected.should_have_access,
            )
        )
    return entries


@log_execution_time(logger, "validate_endpoint_access")
def validate_endpoint_access(
    role_table: Optional[Mapping[str, RoleDefinition]] = None,
    expectations: Optional[Sequence[ExpectedEndpointAccess]] = None,
) -> EndpointAccessReport:
    """
    Check endpoint reachability.

    Every role must reach a concrete path under each of its own declared
    endpoints. The expected-access rows (positive and negative) are then
    checked against the same resolver. When no role table is given the
    fixture table and its hand-written expectations are used; an explicit
    table is only checked against expectations passed alongside it.
    """
    if role_table is None:
        role_table = generate_test_roles()
        if expectations is None:
            expectations = generate_expected_endpoint_access()

    resolver = EndpointAccessResolver.from_role_table(role_table)
    access_matrix = _declared_endpoint_entries(role_table, resolver)
    access_matrix.extend(_expected_endpoint_entries(expectations or (), resolver))

    issues = [
        f"Role '{entry.role}' should {'have' if entry.should_have_access else 'not have'} "
        f"access to {entry.method} {entry.endpoint}"
        for entry in access_matrix
        if not entry.is_correct
    ]
    return EndpointAccessReport(is_valid=not issues, access_matrix=access_matrix, issues=issues)
