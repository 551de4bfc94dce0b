"""
Harness Fixtures
================

Synthetic users, roles and expectations for the validation harness.

The role table here is declared on its own and does not read the
production registry, so drift between the two shows up as failures.
Every function returns fresh data; nothing is cached between runs.
"""

from __future__ import annotations

from rbacguard.models.endpoint import EndpointDescriptor
from rbacguard.models.role_definition import RoleDefinition
from rbacguard.schemas.harness import (
    ExpectedEndpointAccess,
    PermissionCase,
    PermissionScenario,
    TestUser,
    TestUserProfile,
)


def generate_test_users() -> list[TestUser]:
    """Five personas: admin, manager, employee, user and a suspended user."""
    return [
        TestUser(
            id="test-admin-001",
            email="admin@test.com",
            roles=["admin", "employee", "user"],
            permissions=["admin:*", "users:*", "rbac:*", "content:*", "profile:*"],
            profile=TestUserProfile(name="Test Admin", department="IT"),
        ),
        TestUser(
            id="test-manager-001",
            email="manager@test.com",
            roles=["manager", "employee", "user"],
            permissions=["profile:*", "content:*", "users:view_list", "users:view_details"],
            profile=TestUserProfile(name="Test Manager", department="Management"),
        ),
        TestUser(
            id="test-employee-001",
            email="employee@test.com",
            roles=["employee", "user"],
            permissions=["profile:view_own", "profile:edit_own", "content:view", "content:create"],
            profile=TestUserProfile(name="Test Employee", department="Operations"),
        ),
        TestUser(
            id="test-user-001",
            email="user@test.com",
            roles=["user"],
            permissions=["profile:view_own", "profile:edit_own", "content:view"],
            profile=TestUserProfile(name="Test User", department="General"),
        ),
        TestUser(
            id="test-suspended-001",
            email="suspended@test.com",
            roles=[],
            permissions=[],
            profile=TestUserProfile(name="Suspended User", department="None", status="suspended"),
        ),
    ]


def generate_test_roles() -> dict[str, RoleDefinition]:
    """Role table mirroring the registry's intent, declared independently."""
    return {
        "public": RoleDefinition(
            role="public",
            level=0,
            permissions=("public:*",),
            description="Public guest access",
            display_name="Public",
            endpoints=(
                EndpointDescriptor("/public/*", ("GET",)),
                EndpointDescriptor("/api/public/*", ("GET",)),
            ),
        ),
        "user": RoleDefinition(
            role="user",
            level=1,
            permissions=("profile:view_own", "profile:edit_own", "content:view"),
            description="Standard user access",
            display_name="User",
            endpoints=(
                EndpointDescriptor("/profile/*", ("GET", "PUT")),
                EndpointDescriptor("/api/profile/*", ("GET", "PUT")),
            ),
        ),
        "employee": RoleDefinition(
            role="employee",
            level=2,
            permissions=("profile:view_own", "profile:edit_own", "content:view", "content:create"),
            description="Employee access with content creation",
            display_name="Employee",
            endpoints=(
                EndpointDescriptor("/employee/*", ("GET", "POST", "PUT")),
                EndpointDescriptor("/api/content/*", ("GET", "POST", "PUT")),
            ),
        ),
        "manager": RoleDefinition(
            role="manager",
            level=3,
            permissions=("profile:*", "content:*", "users:view_list", "users:view_details"),
            description="Management level access",
            display_name="Manager",
            endpoints=(
                EndpointDescriptor("/manager/*", ("GET", "POST", "PUT")),
                EndpointDescriptor("/api/users/*", ("GET",)),
            ),
        ),
        "admin": RoleDefinition(
            role="admin",
            level=4,
            permissions=("admin:*", "users:*", "rbac:*", "content:*", "profile:*", "public:*"),
            description="Full system administrator access",
            display_name="Administrator",
            endpoints=(
                EndpointDescriptor("/admin/*", ("GET", "POST", "PUT", "DELETE")),
                EndpointDescriptor("/api/users/*", ("GET", "POST", "PUT", "DELETE")),
                EndpointDescriptor("/api/rbac/*", ("GET", "POST", "PUT", "DELETE")),
            ),
        ),
        "super_admin": RoleDefinition(
            role="super_admin",
            level=5,
            permissions=("*:*",),
            description="Super administrator with all permissions",
            display_name="Super Administrator",
            endpoints=(
                EndpointDescriptor("/*", ("GET", "POST", "PUT", "DELETE")),
            ),
        ),
        "auditor": RoleDefinition(
            role="auditor",
            level=4,
            permissions=("audit:*", "users:view_list", "rbac:view"),
            description="Audit and compliance access",
            display_name="Auditor",
            endpoints=(
                EndpointDescriptor("/audit/*", ("GET",)),
                EndpointDescriptor("/api/audit/*", ("GET",)),
            ),
        ),
    }


def generate_permission_scenarios() -> list[PermissionScenario]:
    """Expected permission outcomes for each persona."""
    admin, manager, employee, user, suspended = generate_test_users()

    def cases(*pairs: tuple[str, bool]) -> list[PermissionCase]:
        return [PermissionCase(permission=p, should_have=s) for p, s in pairs]

    return [
        PermissionScenario(
            name="Admin User - Full Access",
            user=admin,
            test_cases=cases(
                ("admin:dashboard", True),
                ("users:delete", True),
                ("rbac:assign_roles", True),
                ("system:shutdown", False),
            ),
        ),
        PermissionScenario(
            name="Manager User - Management Access",
            user=manager,
            test_cases=cases(
                ("content:create", True),
                ("users:view_list", True),
                ("admin:dashboard", False),
                ("users:delete", False),
            ),
        ),
        PermissionScenario(
            name="Employee User - Content Access",
            user=employee,
            test_cases=cases(
                ("content:view", True),
                ("content:create", True),
                ("users:view_list", False),
                ("admin:dashboard", False),
            ),
        ),
        PermissionScenario(
            name="Regular User - Limited Access",
            user=user,
            test_cases=cases(
                ("profile:view_own", True),
                ("profile:edit_own", True),
                ("content:view", True),
                ("content:create", False),
            ),
        ),
        PermissionScenario(
            name="Suspended User - No Access",
            user=suspended,
            test_cases=cases(
                ("content:view", False),
                ("profile:view_own", False),
                ("admin:dashboard", False),
            ),
        ),
    ]


def generate_expected_endpoint_access() -> list[ExpectedEndpointAccess]:
    """
    Reachability expectations written by hand, not derived from the
    role table, so a missing or over-broad descriptor is caught.
    """
    rows = [
        ("public", "GET", "/public/info", True),
        ("public", "POST", "/public/info", False),
        ("public", "GET", "/profile/me", False),
        ("user", "GET", "/profile/me", True),
        ("user", "PUT", "/api/profile/settings", True),
        ("user", "DELETE", "/profile/me", False),
        ("user", "GET", "/admin/dashboard", False),
        ("employee", "POST", "/api/content/articles", True),
        ("employee", "DELETE", "/api/content/articles/7", False),
        ("employee", "GET", "/manager/reports", False),
        ("manager", "GET", "/api/users/42", True),
        ("manager", "POST", "/api/users", False),
        ("manager", "PUT", "/manager/team", True),
        ("admin", "DELETE", "/admin/users/42", True),
        ("admin", "DELETE", "/api/rbac/roles/3", True),
        ("admin", "DELETE", "/public/info", False),
        ("admin", "GET", "/administrator", False),
        ("super_admin", "DELETE", "/anything/at/all", True),
        ("super_admin", "PATCH", "/admin/users/42", False),
        ("auditor", "GET", "/audit/logs", True),
        ("auditor", "POST", "/audit/logs", False),
        ("auditor", "GET", "/admin/dashboard", False),
    ]
    return [
        ExpectedEndpointAccess(role=r, method=m, path=p, should_have_access=s)
        for r, m, p, s in rows
    ]
