"""
Session Middleware Module
=========================

Starlette middleware that attaches the host's session to each request.

Features:
- Request ID generation for tracing
- Session lookup through a host-supplied loader
- Request timing headers

Note:
    The loader is the only link to the session provider. It receives the
    request and returns a ``SessionPayload``, a ``{roles, permissions?}``
    mapping, or None for anonymous requests. Route guards decide what an
    anonymous request may do.
"""

import inspect
import time
import uuid
from typing import Any, Awaitable, Callable, Optional, Union

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from rbacguard.core.dependencies.session import SESSION_STATE_KEY
from rbacguard.core.logging import get_logger, request_id_context, user_id_context
from rbacguard.schemas.access import SessionPayload

# Initialize logger
logger = get_logger(__name__)

SessionLoader = Callable[
    [Request],
    Union[Optional[Any], Awaitable[Optional[Any]]],
]


class RbacSessionMiddleware(BaseHTTPMiddleware):
    """
    Populate ``request.state.rbac_session`` and tracing headers.

    Responsibilities:
    - Generate a unique request ID (or reuse an incoming X-Request-ID)
    - Load the session through the configured loader
    - Add X-Request-ID and X-Process-Time to the response
    """

    def __init__(self, app: ASGIApp, session_loader: SessionLoader):
        super().__init__(app)
        self.session_loader = session_loader

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_token = request_id_context.set(request_id)
        user_token = None

        request.state.request_id = request_id
        setattr(request.state, SESSION_STATE_KEY, None)

        start_time = time.perf_counter()
        try:
            session = await self._load_session(request)
            setattr(request.state, SESSION_STATE_KEY, session)
            if session is not None and session.user_id:
                user_token = user_id_context.set(session.user_id)

            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_processing_error",
                error=str(e),
                path=request.url.path,
                method=request.method,
            )
            raise
        finally:
            if user_token is not None:
                user_id_context.reset(user_token)
            request_id_context.reset(request_token)

        process_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        logger.debug(
            "request_completed",
            path=request.url.path,
            method=request.method,
            status_code=response.status_code,
            duration_ms=round(process_time * 1000, 2),
            authenticated=session is not None,
        )
        return response

    async def _load_session(self, request: Request) -> Optional[SessionPayload]:
        payload = self.session_loader(request)
        if inspect.isawaitable(payload):
            payload = await payload
        if payload is None or isinstance(payload, SessionPayload):
            return payload
        return SessionPayload.model_validate(payload)
