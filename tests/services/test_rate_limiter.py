"""
Role Rate Limiter Unit Tests
============================

Tests for the per user, role and operation limiter including:
- Counting within a window
- Blocking once the window is full
- Window and block expiry
- Reset, stats and cleanup
"""

import pytest

from rbacguard.core.logging import security_logger
from rbacguard.services.rate_limiter import RoleRateLimiter, get_rate_limiter


pytestmark = pytest.mark.rbac


T0 = 1_000_000.0


@pytest.fixture
def limiter() -> RoleRateLimiter:
    return RoleRateLimiter(max_requests=3, window_seconds=60, block_seconds=300)


class TestCheckLimit:
    """Tests for RoleRateLimiter.check_limit."""

    def test_counts_down_within_window(self, limiter):
        """Test remaining requests shrink with each call."""
        # Act
        decisions = [limiter.check_limit("u-1", "user", "GET /a", now=T0 + i) for i in range(3)]

        # Assert
        assert all(d.allowed for d in decisions)
        assert [d.remaining_requests for d in decisions] == [2, 1, 0]
        assert decisions[0].reset_at == T0 + 60

    def test_full_window_blocks(self, limiter, monkeypatch):
        """Test the call past the limit is refused and blocks the key."""
        # Arrange
        logged = []
        monkeypatch.setattr(
            security_logger, "log_rate_limit_exceeded", lambda **kwargs: logged.append(kwargs)
        )
        for i in range(3):
            limiter.check_limit("u-1", "user", "GET /a", now=T0 + i)

        # Act
        decision = limiter.check_limit("u-1", "user", "GET /a", now=T0 + 10)

        # Assert
        assert decision.allowed is False
        assert decision.reason == "Rate limit exceeded"
        assert decision.reset_at == T0 + 310
        assert decision.retry_after_seconds == 300
        assert logged[0]["user_id"] == "u-1"
        assert logged[0]["limit"] == 3

    def test_block_outlasts_window(self, limiter):
        """Test a blocked key stays refused after its window would reset."""
        # Arrange
        for i in range(4):
            limiter.check_limit("u-1", "user", "GET /a", now=T0 + i)

        # Act
        decision = limiter.check_limit("u-1", "user", "GET /a", now=T0 + 120)

        # Assert
        assert decision.allowed is False
        assert decision.reason == "Rate limit exceeded - blocked"

    def test_allowed_after_block_ends(self, limiter):
        """Test a fresh window starts once the block is over."""
        # Arrange
        for i in range(4):
            limiter.check_limit("u-1", "user", "GET /a", now=T0 + i)

        # Act
        decision = limiter.check_limit("u-1", "user", "GET /a", now=T0 + 400)

        # Assert
        assert decision.allowed is True
        assert decision.remaining_requests == 2

    def test_keys_are_independent(self, limiter):
        """Test user, role and operation each form a separate key."""
        # Arrange
        for i in range(4):
            limiter.check_limit("u-1", "user", "GET /a", now=T0 + i)

        # Act & Assert
        assert limiter.check_limit("u-2", "user", "GET /a", now=T0).allowed is True
        assert limiter.check_limit("u-1", "manager", "GET /a", now=T0).allowed is True
        assert limiter.check_limit("u-1", "user", "GET /b", now=T0).allowed is True


class TestMaintenance:
    """Tests for reset_limit, stats and cleanup."""

    def test_reset_single_key(self, limiter):
        """Test resetting one key leaves the user's other keys."""
        # Arrange
        limiter.check_limit("u-1", "user", "GET /a", now=T0)
        limiter.check_limit("u-1", "user", "GET /b", now=T0)

        # Act
        removed = limiter.reset_limit("u-1", "user", "GET /a")

        # Assert
        assert removed == 1
        assert len(limiter) == 1

    def test_reset_all_keys_of_user(self, limiter):
        """Test resetting a user without role and operation clears all its keys."""
        # Arrange
        for i in range(4):
            limiter.check_limit("u-1", "user", "GET /a", now=T0 + i)
        limiter.check_limit("u-1", "user", "GET /b", now=T0)
        limiter.check_limit("u-2", "user", "GET /a", now=T0)

        # Act
        removed = limiter.reset_limit("u-1")

        # Assert
        assert removed == 2
        assert limiter.check_limit("u-1", "user", "GET /a", now=T0 + 5).allowed is True

    def test_stats(self, limiter):
        """Test entry, blocked and active window counts."""
        # Arrange
        for i in range(4):
            limiter.check_limit("u-1", "user", "GET /a", now=T0 + i)
        limiter.check_limit("u-2", "user", "GET /a", now=T0)

        # Act
        stats = limiter.stats(now=T0 + 30)

        # Assert
        assert stats.total_entries == 2
        assert stats.blocked_keys == 1
        assert stats.active_windows == 2

    def test_cleanup_drops_idle_keys(self, limiter):
        """Test idle keys go and blocked keys stay until the block ends."""
        # Arrange
        for i in range(4):
            limiter.check_limit("u-1", "user", "GET /a", now=T0 + i)
        limiter.check_limit("u-2", "user", "GET /a", now=T0)

        # Act
        removed = limiter.cleanup(now=T0 + 200)

        # Assert
        assert removed == 1
        assert limiter.stats(now=T0 + 200).blocked_keys == 1
        assert limiter.cleanup(now=T0 + 400) == 1
        assert len(limiter) == 0


class TestSingleton:
    """Tests for get_rate_limiter."""

    def test_built_from_settings(self, monkeypatch):
        """Test the shared limiter reads its limits from settings."""
        # Arrange
        from rbacguard.core.config import reset_settings
        from rbacguard.services.rate_limiter import reset_rate_limiter

        monkeypatch.setenv("RBACGUARD_RATE_LIMIT_MAX_REQUESTS", "7")
        monkeypatch.setenv("RBACGUARD_RATE_LIMIT_BLOCK_SECONDS", "0")
        reset_settings()
        reset_rate_limiter()

        # Act
        limiter = get_rate_limiter()

        # Assert
        assert limiter is get_rate_limiter()
        assert limiter.max_requests == 7
        assert limiter.window_seconds == 60
        assert limiter.block_seconds == 0
