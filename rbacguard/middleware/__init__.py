"""
Middleware package for request processing.
"""

from rbacguard.middleware.rate_limit_middleware import RateLimitMiddleware
from rbacguard.middleware.session_middleware import RbacSessionMiddleware, SessionLoader

__all__ = ["RateLimitMiddleware", "RbacSessionMiddleware", "SessionLoader"]
