"""
Application configuration module.

Provides centralized, environment-safe configuration management
for the RBAC engine, its harness and its route guards.
"""

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Engine settings with environment variable support.

    All settings can be overridden via environment variables.
    Environment variables should be prefixed with RBACGUARD_.

    Attributes:
        app_name: Application name.
        app_version: Application version.
        debug: Debug mode flag.
        log_level: Logging level.
        log_format: ``json`` for production, ``console`` for development.
        role_vocabulary: Which role table is authoritative at runtime.
        perf_iterations: Default iteration count of the latency probes.
        perf_budget_ms: Average per-call latency above which the suite
            reports a performance issue.
        audit_max_events: Maximum number of events kept by the audit trail.
        audit_retention_hours: Age after which audit events are dropped.
        rate_limit_enabled: Whether RateLimitMiddleware enforces limits.
        rate_limit_max_requests: Requests allowed per user, role and
            operation within one window.
        rate_limit_window_seconds: Length of the counting window.
        rate_limit_block_seconds: How long a key stays blocked once it
            exceeds the limit.
    """

    # Application metadata
    app_name: str = Field(default="rbacguard")
    app_version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)

    # Logging configuration
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")

    # Registry selection
    role_vocabulary: str = Field(default="standard")

    # Harness configuration
    perf_iterations: int = Field(default=1000, ge=1)
    perf_budget_ms: float = Field(default=1.0, gt=0)

    # Audit trail configuration
    audit_max_events: int = Field(default=50000, ge=1)
    audit_retention_hours: int = Field(default=168, ge=1)

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_max_requests: int = Field(default=100, ge=1)
    rate_limit_window_seconds: float = Field(default=60.0, gt=0)
    rate_limit_block_seconds: float = Field(default=300.0, ge=0)

    model_config = {
        "env_prefix": "RBACGUARD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("role_vocabulary")
    @classmethod
    def _normalize_vocabulary(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        logger.info(
            f"Settings loaded: app_name={_settings.app_name}, "
            f"role_vocabulary={_settings.role_vocabulary}"
        )
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
