"""
Validation Suite Entry Point
============================

Runs the RBAC validation suite from the command line.

Usage:
    rbacguard-validate                      # fixture role table
    rbacguard-validate --target registry    # active production registry
    rbacguard-validate --iterations 200 --json

Exit status is 0 when the suite is valid and 1 otherwise.
"""

import argparse
import sys
from typing import Optional, Sequence

from rbacguard.core.config import get_settings
from rbacguard.core.logging import configure_logging
from rbacguard.harness.suite import run_full_test_suite
from rbacguard.schemas.harness import SuiteReport
from rbacguard.services.registry import get_registry


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rbacguard-validate",
        description="Run the RBAC validation suite",
    )
    parser.add_argument(
        "--iterations",
        type=_positive_int,
        default=None,
        help="Iterations per latency probe (default: RBACGUARD_PERF_ITERATIONS)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full report as JSON",
    )
    parser.add_argument(
        "--target",
        choices=("fixtures", "registry"),
        default="fixtures",
        help="Role table to validate (default: fixtures)",
    )
    return parser


def print_summary(report: SuiteReport, target: str) -> None:
    settings = get_settings()
    summary = report.summary
    perf = report.performance_tests.performance_report.summary

    print(f"\n{'=' * 50}")
    print(f"  {settings.app_name} v{settings.app_version}")
    print(f"  Target: {target} ({settings.role_vocabulary} vocabulary)")
    print(f"{'=' * 50}\n")

    print(f"Tests:  {summary.passed}/{summary.total_tests} passed, {summary.failed} failed")
    print(
        f"Perf:   avg {perf.average_duration:.4f}ms "
        f"(slowest: {perf.slowest_operation}, fastest: {perf.fastest_operation})"
    )

    if summary.issues:
        print("\nIssues:")
        for issue in summary.issues:
            print(f"  - {issue}")

    print(f"\nResult: {'VALID' if summary.is_valid else 'INVALID'}\n")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the suite and return the process exit status."""
    args = build_parser().parse_args(argv)
    # stdout carries the report
    configure_logging(stream=sys.stderr)

    role_table = None
    if args.target == "registry":
        role_table = get_registry().as_role_table()

    report = run_full_test_suite(iterations=args.iterations, role_table=role_table)

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print_summary(report, args.target)

    return 0 if report.summary.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
