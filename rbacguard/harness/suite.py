"""
Full validation suite: permission matrix, role hierarchy, endpoint
access and latency probes, summarised into one report.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional

from rbacguard.core.config import get_settings
from rbacguard.core.logging import get_logger, log_execution_time
from rbacguard.harness.performance import (
    build_performance_report,
    measure_permission_performance,
    measure_role_hierarchy_performance,
    permission_records,
    resolve_iterations,
)
from rbacguard.harness.validation import (
    validate_endpoint_access,
    validate_permission_matrix,
    validate_role_hierarchy,
)
from rbacguard.models.role_definition import RoleDefinition
from rbacguard.schemas.harness import (
    PerformanceRecord,
    PerformanceResults,
    SuiteReport,
    SuiteSummary,
)

logger = get_logger(__name__)


@log_execution_time(logger, "run_full_test_suite")
def run_full_test_suite(
    iterations: Optional[int] = None,
    role_table: Optional[Mapping[str, RoleDefinition]] = None,
) -> SuiteReport:
    """
    Run every validator and probe.

    Args:
        iterations: Probe iterations; defaults to ``perf_iterations``.
            Values below 1 raise ValueError
        role_table: Table for the hierarchy and endpoint checks; defaults
            to the fixture table

    Returns:
        SuiteReport whose summary is valid only when no check failed and
        no hierarchy or endpoint issue was found.
        Latency above ``perf_budget_ms`` is listed in ``issues`` without
        failing the suite.
    """
    settings = get_settings()
    iterations = resolve_iterations(iterations)

    permission_tests = validate_permission_matrix()
    role_hierarchy_tests = validate_role_hierarchy(role_table)
    endpoint_tests = validate_endpoint_access(role_table)

    permission_performance = measure_permission_performance(iterations=iterations)
    role_hierarchy_performance = measure_role_hierarchy_performance(iterations)
    now = datetime.now(timezone.utc)
    records = permission_records(permission_performance, iterations, now)
    records.append(
        PerformanceRecord(
            operation="role_hierarchy_test",
            duration=role_hierarchy_performance,
            iterations=iterations,
            timestamp=now,
        )
    )
    performance_report = build_performance_report(records)

    role_count = len(role_hierarchy_tests.role_matrix)
    total_tests = (
        len(permission_tests.results)
        + role_count
        + len(endpoint_tests.access_matrix)
    )
    passed = (
        permission_tests.passed
        + (role_count if role_hierarchy_tests.is_valid else 0)
        + sum(1 for entry in endpoint_tests.access_matrix if entry.is_correct)
    )
    failed = total_tests - passed

    issues = [
        *role_hierarchy_tests.issues,
        *endpoint_tests.issues,
        *(
            f"Permission test failed: {r.user} should "
            f"{'have' if r.expected else 'not have'} '{r.permission}'"
            for r in permission_tests.results
            if not r.passed
        ),
    ]
    for record in records:
        if record.operation != "role_hierarchy_test" and record.duration > settings.perf_budget_ms:
            issues.append(
                f"Performance: {record.operation} averaged {record.duration:.4f}ms "
                f"(budget {settings.perf_budget_ms}ms)"
            )

    summary = SuiteSummary(
        total_tests=total_tests,
        passed=passed,
        failed=failed,
        is_valid=failed == 0 and role_hierarchy_tests.is_valid and endpoint_tests.is_valid,
        issues=issues,
    )

    if summary.is_valid:
        logger.info("validation_suite_passed", passed=passed, total_tests=total_tests)
    else:
        logger.warning(
            "validation_suite_failed",
            passed=passed,
            failed=failed,
            total_tests=total_tests,
            issues=issues,
        )

    return SuiteReport(
        permission_tests=permission_tests,
        role_hierarchy_tests=role_hierarchy_tests,
        endpoint_tests=endpoint_tests,
        performance_tests=PerformanceResults(
            permission_performance=permission_performance,
            role_hierarchy_performance=role_hierarchy_performance,
            performance_report=performance_report,
        ),
        summary=summary,
    )
