"""
Test Configuration and Fixtures
================================

Central configuration for pytest with all shared fixtures.

Features:
- Environment reset before each test
- A FastAPI application wired with the route guards
- TestClient setup
- Header helpers that stand in for the host's session provider
"""

import os
from typing import Generator, Optional

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

# Set testing environment before importing rbacguard modules
os.environ["RBACGUARD_ROLE_VOCABULARY"] = "standard"
os.environ["RBACGUARD_PERF_ITERATIONS"] = "50"
os.environ["RBACGUARD_RATE_LIMIT_ENABLED"] = "false"  # Enabled per test where needed

from rbacguard.core.config import reset_settings
from rbacguard.core.dependencies import (
    get_current_access_context,
    require_access,
    require_endpoint_access,
    require_permissions,
    require_role,
    require_role_level,
)
from rbacguard.core.handlers import register_exception_handlers
from rbacguard.middleware import RbacSessionMiddleware
from rbacguard.models.role_enum import Role, RoleLevel
from rbacguard.schemas.access import AccessCheckCriteria, SessionPayload
from rbacguard.services.access_engine import AccessContext
from rbacguard.services.audit_service import get_audit_trail
from rbacguard.services.rate_limiter import reset_rate_limiter


# =====================================
# Session Provider Stand-in
# =====================================

USER_HEADER = "X-Test-User"
ROLES_HEADER = "X-Test-Roles"
PERMISSIONS_HEADER = "X-Test-Permissions"


def header_session_loader(request: Request) -> Optional[SessionPayload]:
    """
    Build the session from test headers.

    No roles header means an anonymous request. A permissions header,
    even empty, is passed through; without it permissions are derived.
    """
    roles = request.headers.get(ROLES_HEADER)
    if roles is None:
        return None
    permissions = request.headers.get(PERMISSIONS_HEADER)
    return SessionPayload(
        user_id=request.headers.get(USER_HEADER, "test-user"),
        roles=[r for r in roles.split(",") if r],
        permissions=None if permissions is None else [p for p in permissions.split(",") if p],
    )


def session_headers(
    roles: list[str],
    permissions: Optional[list[str]] = None,
    user_id: str = "test-user",
) -> dict[str, str]:
    headers = {USER_HEADER: user_id, ROLES_HEADER: ",".join(roles)}
    if permissions is not None:
        headers[PERMISSIONS_HEADER] = ",".join(permissions)
    return headers


# =====================================
# Application
# =====================================

def create_test_app() -> FastAPI:
    """Application exposing one route per guard."""
    app = FastAPI()
    app.add_middleware(RbacSessionMiddleware, session_loader=header_session_loader)
    register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    @app.get("/me")
    def me(ctx: AccessContext = Depends(get_current_access_context)):
        return {"user_id": ctx.user_id, "roles": list(ctx.roles), "permissions": list(ctx.permissions)}

    @app.get("/admin/dashboard")
    def admin_dashboard(ctx: AccessContext = Depends(require_role(Role.ADMIN, Role.SUPER_ADMIN))):
        return {"message": "Admin access granted"}

    @app.post("/users")
    def create_user(
        ctx: AccessContext = Depends(
            require_access(
                AccessCheckCriteria(
                    required_role=Role.ADMIN,
                    required_permissions=["users:create"],
                )
            )
        ),
    ):
        return {"created": True}

    @app.get("/content")
    def content(ctx: AccessContext = Depends(require_permissions("content:view", "content:create"))):
        return {"message": "content"}

    @app.post("/content")
    def publish(
        ctx: AccessContext = Depends(
            require_permissions("content:view", "content:create", require_all=True)
        ),
    ):
        return {"message": "published"}

    @app.get("/reports")
    def reports(ctx: AccessContext = Depends(require_role_level(RoleLevel.MANAGER))):
        return {"message": "reports"}

    @app.get("/audit/logs")
    def audit_logs(ctx: AccessContext = Depends(require_endpoint_access())):
        return {"logs": []}

    @app.delete("/audit/logs")
    def purge_audit_logs(ctx: AccessContext = Depends(require_endpoint_access())):
        return {"purged": True}

    return app


# =====================================
# Fixtures
# =====================================

@pytest.fixture(autouse=True)
def reset_state() -> Generator[None, None, None]:
    """Fresh settings, audit trail and rate limiter for every test."""
    reset_settings()
    reset_rate_limiter()
    get_audit_trail().clear()
    yield
    get_audit_trail().clear()
    reset_rate_limiter()
    reset_settings()


@pytest.fixture(scope="function")
def client() -> Generator[TestClient, None, None]:
    """
    Create a TestClient over the guarded test application.

    Yields:
        TestClient instance
    """
    with TestClient(create_test_app()) as test_client:
        yield test_client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return session_headers([Role.ADMIN.value], user_id="admin-1")


@pytest.fixture
def manager_headers() -> dict[str, str]:
    return session_headers([Role.MANAGER.value], user_id="manager-1")


@pytest.fixture
def user_headers() -> dict[str, str]:
    return session_headers([Role.USER.value], user_id="user-1")


@pytest.fixture
def auditor_headers() -> dict[str, str]:
    return session_headers([Role.AUDITOR.value], user_id="auditor-1")


@pytest.fixture
def make_headers():
    """Factory for session headers with arbitrary roles and permissions."""
    return session_headers


@pytest.fixture
def session_loader():
    """The header-driven session loader, for apps built inside a test."""
    return header_session_loader
