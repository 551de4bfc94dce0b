"""
Role Rate Limiter
=================

In-memory fixed-window limiter keyed by user, role and operation.

- Each key may make ``max_requests`` calls per ``window_seconds``
- The call that finds the window full blocks the key for ``block_seconds``
- A blocked key is refused until the block ends, whatever the window says

Note:
    State lives in process memory. Several workers each keep their own
    counters, so the effective limit scales with the worker count.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Optional

from rbacguard.core.config import get_settings
from rbacguard.core.logging import get_logger, security_logger
from rbacguard.schemas.rate_limit import RateLimitDecision, RateLimitStats

logger = get_logger(__name__)

LimitKey = tuple[str, str, str]


@dataclass
class _LimitEntry:
    count: int
    window_start: float
    blocked_until: Optional[float] = None

    def is_blocked(self, now: float) -> bool:
        return self.blocked_until is not None and now < self.blocked_until


class RoleRateLimiter:
    """Per user, role and operation request counter."""

    def __init__(
        self,
        max_requests: Optional[int] = None,
        window_seconds: Optional[float] = None,
        block_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.max_requests = max_requests or settings.rate_limit_max_requests
        self.window_seconds = window_seconds or settings.rate_limit_window_seconds
        self.block_seconds = (
            settings.rate_limit_block_seconds if block_seconds is None else block_seconds
        )
        self._entries: dict[LimitKey, _LimitEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def check_limit(
        self,
        user_id: str,
        role: str,
        operation: str,
        now: Optional[float] = None,
    ) -> RateLimitDecision:
        """
        Count one call for the key and decide whether it may proceed.

        Args:
            user_id: Caller identity
            role: Caller role (comma-joined when the caller holds several)
            operation: What is being called, e.g. ``"GET /users"``
            now: Epoch seconds; defaults to the current time

        Returns:
            RateLimitDecision; refused calls carry a reason and the number
            of seconds until the block ends.
        """
        now = time.time() if now is None else now
        key = (user_id, role, operation)
        entry = self._entries.get(key)
        if entry is None:
            entry = _LimitEntry(count=0, window_start=now)
            self._entries[key] = entry

        if entry.is_blocked(now):
            return self._refused(entry.blocked_until, now, "Rate limit exceeded - blocked")

        if now - entry.window_start > self.window_seconds:
            entry.count = 0
            entry.window_start = now
            entry.blocked_until = None

        if entry.count >= self.max_requests:
            entry.blocked_until = now + self.block_seconds
            security_logger.log_rate_limit_exceeded(
                user_id=user_id,
                role=role,
                operation=operation,
                count=entry.count,
                limit=self.max_requests,
            )
            return self._refused(entry.blocked_until, now, "Rate limit exceeded")

        entry.count += 1
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining_requests=self.max_requests - entry.count,
            reset_at=entry.window_start + self.window_seconds,
        )

    def _refused(self, until: float, now: float, reason: str) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=False,
            limit=self.max_requests,
            remaining_requests=0,
            reset_at=until,
            retry_after_seconds=max(0, math.ceil(until - now)),
            reason=reason,
        )

    def reset_limit(
        self,
        user_id: str,
        role: Optional[str] = None,
        operation: Optional[str] = None,
    ) -> int:
        """
        Forget counters for a user.

        With both ``role`` and ``operation`` only that key is dropped;
        otherwise every key of the user is.

        Returns:
            Number of keys removed.
        """
        if role is not None and operation is not None:
            return 1 if self._entries.pop((user_id, role, operation), None) else 0

        keys = [key for key in self._entries if key[0] == user_id]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def stats(self, now: Optional[float] = None) -> RateLimitStats:
        now = time.time() if now is None else now
        return RateLimitStats(
            total_entries=len(self._entries),
            blocked_keys=sum(1 for e in self._entries.values() if e.is_blocked(now)),
            active_windows=sum(
                1 for e in self._entries.values() if now - e.window_start < self.window_seconds
            ),
        )

    def cleanup(self, now: Optional[float] = None) -> int:
        """
        Drop idle keys and lift expired blocks.

        A key is idle when it is not blocked and its window started more
        than two windows ago.

        Returns:
            Number of keys removed.
        """
        now = time.time() if now is None else now
        expired = []
        for key, entry in self._entries.items():
            if entry.blocked_until is not None and not entry.is_blocked(now):
                entry.blocked_until = None
            if entry.blocked_until is None and now - entry.window_start > self.window_seconds * 2:
                expired.append(key)

        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("rate_limit_entries_expired", removed=len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()


# Global rate limiter instance
_rate_limiter: Optional[RoleRateLimiter] = None


def get_rate_limiter() -> RoleRateLimiter:
    """Get the limiter singleton used by RateLimitMiddleware."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RoleRateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Drop the singleton so the next call rebuilds it from current settings."""
    global _rate_limiter
    _rate_limiter = None
