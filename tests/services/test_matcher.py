"""
Permission Matcher Unit Tests
=============================

Tests for wildcard-aware permission matching including:
- Exact, resource wildcard and global wildcard matches
- Non-wildcard patterns that must only match themselves
- ALL / ANY semantics and vacuous truth
- Set coverage
"""

import pytest

from rbacguard.services.matcher import (
    covers,
    matches,
    matches_all,
    matches_any,
    permission_covers,
    uncovered_permissions,
)


pytestmark = pytest.mark.rbac


class TestPermissionCovers:
    """Tests for permission_covers."""

    def test_exact_match(self):
        """Test an identical permission covers itself."""
        # Act & Assert
        assert permission_covers("users:read", "users:read") is True

    def test_resource_wildcard_covers_same_resource(self):
        """Test admin:* covers any admin action."""
        # Act & Assert
        assert permission_covers("admin:*", "admin:dashboard") is True
        assert permission_covers("admin:*", "admin:system_config") is True

    def test_resource_wildcard_does_not_cover_other_resource(self):
        """Test admin:* does not cover a different resource."""
        # Act & Assert
        assert permission_covers("admin:*", "users:delete") is False
        assert permission_covers("admin:*", "administrator:view") is False

    def test_global_wildcard_covers_everything(self):
        """Test *:* covers every permission."""
        # Act & Assert
        assert permission_covers("*:*", "gdpr:delete_data") is True
        assert permission_covers("*:*", "admin:*") is True

    @pytest.mark.parametrize("held", ["users*", "*", "*:read", "users:read*"])
    def test_other_patterns_are_literal(self, held):
        """Test only X:* and *:* act as wildcards."""
        # Act & Assert
        assert permission_covers(held, "users:read") is False

    def test_concrete_does_not_cover_wildcard(self):
        """Test a concrete permission does not cover a wildcard requirement."""
        # Act & Assert
        assert permission_covers("admin:dashboard", "admin:*") is False


class TestMatches:
    """Tests for matches / matches_all / matches_any."""

    def test_matches_none_held(self):
        """Test a None held set never matches."""
        # Act & Assert
        assert matches(None, "users:read") is False

    def test_matches_all_empty_required_is_true(self):
        """Test an empty requirement is vacuously satisfied under ALL."""
        # Act & Assert
        assert matches_all(["users:read"], []) is True
        assert matches_all([], []) is True
        assert matches_all(None, []) is True

    def test_matches_any_empty_required_is_true(self):
        """Test an empty requirement is vacuously satisfied under ANY."""
        # Act & Assert
        assert matches_any(["users:read"], []) is True
        assert matches_any([], []) is True

    def test_matches_all_requires_every_permission(self):
        """Test ALL fails when one permission is missing."""
        # Arrange
        held = ["content:view", "profile:*"]

        # Act & Assert
        assert matches_all(held, ["content:view", "profile:edit_own"]) is True
        assert matches_all(held, ["content:view", "content:create"]) is False

    def test_matches_any_requires_one_permission(self):
        """Test ANY succeeds with a single held permission."""
        # Arrange
        held = ["content:view"]

        # Act & Assert
        assert matches_any(held, ["admin:dashboard", "content:view"]) is True
        assert matches_any(held, ["admin:dashboard", "users:delete"]) is False

    def test_accepts_generators(self):
        """Test held and required may be one-shot iterables."""
        # Act
        result = matches_all((p for p in ["a:*"]), (r for r in ["a:x", "a:y"]))

        # Assert
        assert result is True

    def test_idempotent(self):
        """Test repeated evaluation returns the same answer."""
        # Arrange
        held = ["admin:*", "users:read"]
        required = ["admin:dashboard", "users:delete"]

        # Act
        first = [matches_all(held, required), matches_any(held, required)]
        second = [matches_all(held, required), matches_any(held, required)]

        # Assert
        assert first == second == [False, True]


class TestCoverage:
    """Tests for covers / uncovered_permissions."""

    def test_wildcard_covers_concrete_set(self):
        """Test a wildcard set covers concrete permissions of its resource."""
        # Act & Assert
        assert covers(["content:*"], ["content:view", "content:create"]) is True

    def test_uncovered_lists_missing(self):
        """Test uncovered permissions are listed in order."""
        # Act
        missing = uncovered_permissions(["content:*"], ["content:view", "users:read", "public:*"])

        # Assert
        assert missing == ["users:read", "public:*"]

    def test_concrete_set_does_not_cover_wildcard(self):
        """Test concrete permissions never add up to a wildcard."""
        # Act & Assert
        assert covers(["public:read", "public:list"], ["public:*"]) is False
