"""
Session Dependencies Module
===========================

FastAPI dependencies that expose the current user's session.

The session itself is supplied by the host application (through
``RbacSessionMiddleware`` or by setting ``request.state.rbac_session``);
this package never issues or validates credentials.

Usage:
    @router.get("/me")
    def me(ctx: AccessContext = Depends(get_current_access_context)):
        return {"roles": ctx.roles}
"""

from typing import Optional

from fastapi import Depends, Request

from rbacguard.core.exceptions import AuthenticationError
from rbacguard.core.logging import get_logger, security_logger, user_id_context
from rbacguard.schemas.access import SessionPayload
from rbacguard.services.access_engine import AccessContext

# Initialize logger
logger = get_logger(__name__)

SESSION_STATE_KEY = "rbac_session"


def get_optional_session(request: Request) -> Optional[SessionPayload]:
    """
    Session attached to the request, or None.

    Accepts a ``SessionPayload`` or a plain ``{roles, permissions?}`` mapping.
    """
    payload = getattr(request.state, SESSION_STATE_KEY, None)
    if payload is None:
        return None
    if isinstance(payload, SessionPayload):
        return payload
    return SessionPayload.model_validate(payload)


def get_current_session(
    request: Request,
    session: Optional[SessionPayload] = Depends(get_optional_session),
) -> SessionPayload:
    """
    Session of the current user.

    Raises:
        AuthenticationError: If no session is attached to the request
    """
    if session is None:
        security_logger.log_unauthorized_access(
            resource=request.url.path,
            action=request.method,
        )
        raise AuthenticationError()

    if session.user_id:
        user_id_context.set(session.user_id)
    return session


def get_current_access_context(
    session: SessionPayload = Depends(get_current_session),
) -> AccessContext:
    """Engine bound to the current session, permissions derived when absent."""
    return AccessContext.from_session(session)
