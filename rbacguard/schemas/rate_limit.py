"""
Rate Limit Schemas Module
=========================

Pydantic models returned by the role rate limiter.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RateLimitDecision(BaseModel):
    """Outcome of one ``check_limit`` call."""

    allowed: bool
    limit: int = Field(..., description="Requests allowed per window")
    remaining_requests: int = Field(..., ge=0)
    reset_at: float = Field(..., description="Epoch seconds when the window or block ends")
    retry_after_seconds: int = Field(default=0, ge=0)
    reason: Optional[str] = None


class RateLimitStats(BaseModel):
    total_entries: int
    blocked_keys: int
    active_windows: int
