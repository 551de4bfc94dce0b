"""
Test & Validation Harness
=========================

Fixtures, validators and latency probes that exercise the engine as a
black box. Everything here is plain data and plain functions.
"""

from rbacguard.harness.fixtures import (
    generate_test_users,
    generate_test_roles,
    generate_permission_scenarios,
    generate_expected_endpoint_access,
)
from rbacguard.harness.validation import (
    validate_permission_matrix,
    validate_role_hierarchy,
    validate_endpoint_access,
)
from rbacguard.harness.performance import (
    measure_permission_performance,
    measure_role_hierarchy_performance,
    build_performance_report,
)
from rbacguard.harness.suite import run_full_test_suite

__all__ = [
    "generate_test_users",
    "generate_test_roles",
    "generate_permission_scenarios",
    "generate_expected_endpoint_access",
    "validate_permission_matrix",
    "validate_role_hierarchy",
    "validate_endpoint_access",
    "measure_permission_performance",
    "measure_role_hierarchy_performance",
    "build_performance_report",
    "run_full_test_suite",
]
