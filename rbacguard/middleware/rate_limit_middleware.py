"""
Rate Limit Middleware Module
============================

Starlette middleware that throttles callers per user, role and operation.

Note:
    The caller is read from ``request.state.rbac_session``, so this
    middleware must sit inside RbacSessionMiddleware. Starlette runs the
    last added middleware first; add this one before the session one:

        app.add_middleware(RateLimitMiddleware)
        app.add_middleware(RbacSessionMiddleware, session_loader=loader)

    Requests without a session are keyed by client IP.
"""

from typing import Callable, Optional

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from rbacguard.core.config import get_settings
from rbacguard.core.dependencies.session import SESSION_STATE_KEY
from rbacguard.core.enums import AuditResult, SecurityLevel
from rbacguard.services.audit_service import get_audit_trail
from rbacguard.services.rate_limiter import RoleRateLimiter, get_rate_limiter


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Refuse callers that exceed their request budget with 429.

    Responsibilities:
    - Count each request against ``(user, role, "METHOD path")``
    - Add X-RateLimit-Limit and X-RateLimit-Remaining to responses
    - Audit every refused request
    """

    def __init__(self, app: ASGIApp, limiter: Optional[RoleRateLimiter] = None):
        super().__init__(app)
        self._limiter = limiter

    @property
    def limiter(self) -> RoleRateLimiter:
        return self._limiter or get_rate_limiter()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip rate limiting if disabled
        if not get_settings().rate_limit_enabled:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        session = getattr(request.state, SESSION_STATE_KEY, None)
        if session is not None:
            user_id = session.user_id or f"ip:{client_ip}"
            role = ",".join(session.roles) or "none"
        else:
            user_id = f"ip:{client_ip}"
            role = "anonymous"
        operation = f"{request.method} {request.url.path}"

        decision = self.limiter.check_limit(user_id, role, operation)
        if not decision.allowed:
            get_audit_trail().record(
                user_id=user_id,
                role=role,
                action=operation,
                resource=request.url.path,
                result=AuditResult.BLOCKED,
                details={
                    "reason": "rate_limited",
                    "ip_address": client_ip,
                    "user_agent": request.headers.get("user-agent"),
                },
                security_level=SecurityLevel.HIGH,
            )
            return JSONResponse(
                status_code=429,
                content={
                    "message": "Too many requests. Please try again later.",
                    "details": {
                        "reason": decision.reason,
                        "retry_after_seconds": decision.retry_after_seconds,
                    },
                },
                headers={
                    "Retry-After": str(decision.retry_after_seconds),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining_requests)
        return response
