"""
rbacguard - Logging Infrastructure

This module provides structured logging with support for:
- JSON formatted logs for production
- Text formatted logs for development
- Context binding for request tracing
- Security events for denied access
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar, Token
from functools import wraps
from typing import Any, Callable, Dict, Optional, TextIO, TypeVar, ParamSpec

import structlog
from structlog.types import Processor

from rbacguard.core.config import get_settings

# Context variables for request tracing
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_context: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

P = ParamSpec("P")
R = TypeVar("R")


def add_context_variables(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Add context variables to log entries.

    This processor adds request_id and user_id from context
    variables to every log entry.
    """
    request_id = request_id_context.get()
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_context.get()
    if user_id:
        event_dict["user_id"] = user_id

    return event_dict


def get_log_level(settings: Any) -> int:
    """Convert string log level to logging constant."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(settings.log_level.upper(), logging.INFO)


def get_processors(settings: Any) -> list[Processor]:
    """Get structlog processors based on settings."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_variables,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return processors


def configure_logging(stream: Optional[TextIO] = None) -> None:
    """
    Configure structured logging for the application.

    This should be called once at application startup.

    Args:
        stream: Destination of log lines; defaults to stdout
    """
    settings = get_settings()

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=get_log_level(settings),
    )

    # Configure structlog
    structlog.configure(
        processors=get_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A structlog BoundLogger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("access_checked", permission="users:delete", granted=False)
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for setting log context variables.

    Example:
        >>> with LogContext(request_id="req-123", user_id="user-1"):
        ...     log.info("evaluating_access")
    """

    def __init__(
        self,
        request_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        self.request_id = request_id
        self.user_id = user_id
        self._tokens: list[tuple[ContextVar, Token]] = []

    def __enter__(self) -> "LogContext":
        if self.request_id:
            self._tokens.append((request_id_context, request_id_context.set(self.request_id)))
        if self.user_id:
            self._tokens.append((user_id_context, user_id_context.set(self.user_id)))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()


def log_execution_time(
    log: structlog.stdlib.BoundLogger,
    operation: str,
    **extra_fields: Any
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to log execution time of a function.

    Args:
        log: Logger instance
        operation: Name of the operation being timed
        **extra_fields: Additional fields to include in the log

    Example:
        >>> @log_execution_time(log, "validate_permission_matrix")
        ... def validate_permission_matrix() -> PermissionMatrixReport:
        ...     ...
    """
    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.info(
                    f"{operation}_completed",
                    duration_ms=round(duration_ms, 2),
                    success=True,
                    **extra_fields
                )
                return result
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.error(
                    f"{operation}_failed",
                    duration_ms=round(duration_ms, 2),
                    success=False,
                    error=str(e),
                    error_type=type(e).__name__,
                    **extra_fields
                )
                raise
        return wrapper
    return decorator


class SecurityLogger:
    """
    Specialized logger for authorization events.

    Every denial raised by a route guard goes through here so that
    security events share one logger name and one field layout.
    """

    def __init__(self, name: str = "security"):
        self.log = get_logger(name)

    def log_access_denied(
        self,
        user_id: Optional[str],
        resource: str,
        action: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        """Log a request rejected by an access decision."""
        self.log.warning(
            "access_denied",
            user_id=user_id,
            resource=resource,
            action=action,
            reason=reason,
            **kwargs
        )

    def log_unauthorized_access(
        self,
        resource: str,
        action: str,
        **kwargs: Any,
    ) -> None:
        """Log a request that arrived without a user session."""
        self.log.warning(
            "unauthorized_access",
            resource=resource,
            action=action,
            **kwargs
        )

    def log_access_granted(
        self,
        user_id: Optional[str],
        resource: str,
        action: str,
        **kwargs: Any,
    ) -> None:
        """Log a granted decision at debug level."""
        self.log.debug(
            "access_granted",
            user_id=user_id,
            resource=resource,
            action=action,
            **kwargs
        )

    def log_rate_limit_exceeded(
        self,
        user_id: Optional[str],
        operation: str,
        **kwargs: Any,
    ) -> None:
        """Log a caller that went over its request limit."""
        self.log.warning(
            "rate_limit_exceeded",
            user_id=user_id,
            operation=operation,
            **kwargs
        )


security_logger = SecurityLogger()
