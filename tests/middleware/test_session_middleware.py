"""
Session Middleware Unit Tests
=============================

Tests for RbacSessionMiddleware including:
- Tracing headers
- Sync and async session loaders
- Mapping payloads
"""

import pytest
from fastapi import Depends, FastAPI, Request
from fastapi.testclient import TestClient

from rbacguard.core.dependencies import get_current_session, require_role
from rbacguard.core.handlers import register_exception_handlers
from rbacguard.middleware import RbacSessionMiddleware
from rbacguard.schemas.access import SessionPayload


pytestmark = pytest.mark.middleware


def build_app(loader) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RbacSessionMiddleware, session_loader=loader)
    register_exception_handlers(app)

    @app.get("/whoami")
    def whoami(session: SessionPayload = Depends(get_current_session)):
        return {"user_id": session.user_id, "roles": session.roles}

    @app.get("/manager")
    def manager(ctx=Depends(require_role("manager"))):
        return {"ok": True}

    @app.get("/request-id")
    def request_id(request: Request):
        return {"request_id": request.state.request_id}

    return app


class TestTracingHeaders:
    """Tests for X-Request-ID and X-Process-Time."""

    def test_request_id_header_added(self, client: TestClient):
        """Test that X-Request-ID header is added to responses."""
        # Act
        response = client.get("/health")

        # Assert
        assert "X-Request-ID" in response.headers
        assert len(response.headers["X-Request-ID"]) > 0

    def test_process_time_header_added(self, client: TestClient):
        """Test that X-Process-Time header is added to responses."""
        # Act
        response = client.get("/health")

        # Assert
        assert "X-Process-Time" in response.headers

    def test_incoming_request_id_reused(self):
        """Test an incoming X-Request-ID is propagated."""
        # Arrange
        client = TestClient(build_app(lambda request: None))

        # Act
        response = client.get("/request-id", headers={"X-Request-ID": "req-42"})

        # Assert
        assert response.headers["X-Request-ID"] == "req-42"
        assert response.json() == {"request_id": "req-42"}

    def test_headers_on_denied_requests(self, client: TestClient):
        """Test tracing headers are present on 401 responses too."""
        # Act
        response = client.get("/admin/dashboard")

        # Assert
        assert response.status_code == 401
        assert "X-Request-ID" in response.headers


class TestSessionLoaders:
    """Tests for the different loader shapes."""

    def test_mapping_payload(self):
        """Test a plain mapping is validated into a SessionPayload."""
        # Arrange
        client = TestClient(build_app(lambda request: {"user_id": "m-1", "roles": ["manager"]}))

        # Act
        response = client.get("/whoami")

        # Assert
        assert response.status_code == 200
        assert response.json() == {"user_id": "m-1", "roles": ["manager"]}

    def test_async_loader(self):
        """Test an async loader is awaited."""
        # Arrange
        async def loader(request):
            return SessionPayload(user_id="a-1", roles=["manager"])

        client = TestClient(build_app(loader))

        # Act
        response = client.get("/manager")

        # Assert
        assert response.status_code == 200

    def test_anonymous_loader(self):
        """Test a None session is rejected by guarded routes."""
        # Arrange
        client = TestClient(build_app(lambda request: None))

        # Act
        response = client.get("/whoami")

        # Assert
        assert response.status_code == 401
