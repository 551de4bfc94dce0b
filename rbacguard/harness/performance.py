"""
Harness Latency Probes
======================

Average per-call latency of the engine's decision functions.

Probes return their measurements instead of accumulating them on a
shared object; ``build_performance_report`` summarises whatever records
the caller collected. Durations are milliseconds.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from rbacguard.core.config import get_settings
from rbacguard.core.logging import get_logger
from rbacguard.harness.fixtures import generate_test_roles, generate_test_users
from rbacguard.schemas.access import AccessCheckCriteria
from rbacguard.schemas.harness import (
    PerformanceDetail,
    PerformanceRecord,
    PerformanceReport,
    PerformanceSummary,
    PermissionPerformance,
    TestUser,
)
from rbacguard.services.access_engine import (
    has_access,
    has_all_permissions,
    has_any_permission,
    has_permission,
    has_role,
)
from rbacguard.services.endpoint_resolver import EndpointAccessResolver

logger = get_logger(__name__)

PROBE_PERMISSIONS = ("content:view", "content:create", "admin:dashboard")


def _average_ms(func: Callable[[], object], iterations: int) -> float:
    start = time.perf_counter()
    for _ in range(iterations):
        func()
    return (time.perf_counter() - start) * 1000 / iterations


def resolve_iterations(iterations: Optional[int]) -> int:
    """Iteration count to probe with; None falls back to ``perf_iterations``."""
    if iterations is None:
        iterations = get_settings().perf_iterations
    if iterations < 1:
        raise ValueError(f"iterations must be positive, got {iterations}")
    return iterations


def measure_permission_performance(
    user: Optional[TestUser] = None,
    iterations: Optional[int] = None,
) -> PermissionPerformance:
    """
    Time each decision function for one user.

    Args:
        user: Persona to evaluate; defaults to the admin persona
        iterations: Calls per operation; defaults to ``perf_iterations``

    Returns:
        Average milliseconds per call of each operation.
    """
    iterations = resolve_iterations(iterations)
    if user is None:
        user = generate_test_users()[0]

    roles = user.roles
    permissions = user.permissions
    criteria = AccessCheckCriteria(
        required_role="admin",
        required_permissions=list(PROBE_PERMISSIONS[:2]),
        require_all_permissions=True,
    )

    results = PermissionPerformance(
        has_permission=_average_ms(lambda: has_permission(permissions, PROBE_PERMISSIONS[0]), iterations),
        has_all_permissions=_average_ms(lambda: has_all_permissions(permissions, PROBE_PERMISSIONS), iterations),
        has_any_permission=_average_ms(lambda: has_any_permission(permissions, PROBE_PERMISSIONS), iterations),
        has_role=_average_ms(lambda: has_role(roles, "admin"), iterations),
        has_access=_average_ms(lambda: has_access(criteria, roles, permissions), iterations),
    )
    logger.debug("permission_performance_measured", user=user.email, iterations=iterations)
    return results


def measure_role_hierarchy_performance(iterations: Optional[int] = None) -> float:
    """
    Average milliseconds of one pass of mixed checks over every persona.

    A pass runs an ALL check, an ANY check and an endpoint check for each
    persona against the fixture role table.
    """
    iterations = resolve_iterations(iterations)
    users = generate_test_users()
    resolver = EndpointAccessResolver.from_role_table(generate_test_roles())

    def one_pass() -> None:
        for user in users:
            has_all_permissions(user.permissions, ["content:view", "content:create"])
            has_any_permission(user.permissions, ["admin:dashboard", "users:view_list"])
            resolver.can_access_endpoint("GET", "/admin/users", user.roles)

    return _average_ms(one_pass, iterations)


def permission_records(
    performance: PermissionPerformance,
    iterations: int,
    timestamp: Optional[datetime] = None,
) -> list[PerformanceRecord]:
    """One record per timed operation of a permission probe."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return [
        PerformanceRecord(operation=operation, duration=duration, iterations=iterations, timestamp=timestamp)
        for operation, duration in performance.model_dump().items()
    ]


def build_performance_report(records: Sequence[PerformanceRecord]) -> PerformanceReport:
    """Summarise records: average, slowest and fastest operation."""
    if not records:
        return PerformanceReport(
            summary=PerformanceSummary(
                total_tests=0,
                average_duration=0.0,
                slowest_operation="N/A",
                fastest_operation="N/A",
            ),
            details=[],
        )

    slowest = max(records, key=lambda r: r.duration)
    fastest = min(records, key=lambda r: r.duration)
    return PerformanceReport(
        summary=PerformanceSummary(
            total_tests=len(records),
            average_duration=sum(r.duration for r in records) / len(records),
            slowest_operation=slowest.operation,
            fastest_operation=fastest.operation,
        ),
        details=[
            PerformanceDetail(
                operation=r.operation,
                avg_duration=r.duration,
                total_iterations=r.iterations,
                last_run=r.timestamp.isoformat(),
            )
            for r in records
        ],
    )
