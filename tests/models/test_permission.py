"""
Permission Model Unit Tests
===========================

Tests for the validated permission token including:
- Accepted and rejected shapes
- Resource/action accessors
- Pydantic integration
"""

import pytest
from pydantic import BaseModel

from rbacguard.core.exceptions import InvalidPermissionError
from rbacguard.models.permission import (
    GLOBAL_WILDCARD,
    Permission,
    is_valid_permission,
    split_permission,
)


pytestmark = pytest.mark.schema


class TestSplitPermission:
    """Tests for split_permission."""

    def test_split_concrete(self):
        """Test a concrete token splits into resource and action."""
        # Act
        parts = split_permission("users:delete")

        # Assert
        assert parts == ("users", "delete")

    @pytest.mark.parametrize("value", ["users", "users:", ":delete", "a:b:c", ""])
    def test_split_malformed_returns_none(self, value):
        """Test malformed tokens do not split."""
        # Act & Assert
        assert split_permission(value) is None


class TestPermissionValidation:
    """Tests for Permission construction."""

    @pytest.mark.parametrize(
        "value",
        ["users:delete", "admin:*", "*:*", "profile:view_own", "auth:refresh-token"],
    )
    def test_valid_tokens(self, value):
        """Test accepted permission shapes."""
        # Act
        permission = Permission(value)

        # Assert
        assert permission == value
        assert is_valid_permission(value) is True

    @pytest.mark.parametrize("value", ["users", "*:delete", "users:de lete", "users*", "*"])
    def test_invalid_tokens_raise(self, value):
        """Test rejected permission shapes raise InvalidPermissionError."""
        # Act & Assert
        with pytest.raises(InvalidPermissionError):
            Permission(value)
        assert is_valid_permission(value) is False

    def test_invalid_permission_is_value_error(self):
        """Test InvalidPermissionError can be caught as ValueError."""
        # Act & Assert
        with pytest.raises(ValueError):
            Permission("nope")

    def test_non_string_rejected(self):
        """Test non-string input is rejected."""
        # Act & Assert
        assert is_valid_permission(42) is False


class TestPermissionAccessors:
    """Tests for Permission properties."""

    def test_resource_and_action(self):
        """Test resource and action accessors."""
        # Arrange
        permission = Permission("rbac:assign_roles")

        # Assert
        assert permission.resource == "rbac"
        assert permission.action == "assign_roles"
        assert permission.is_wildcard is False
        assert permission.is_global is False

    def test_resource_wildcard(self):
        """Test a resource wildcard is flagged."""
        # Arrange
        permission = Permission("admin:*")

        # Assert
        assert permission.is_wildcard is True
        assert permission.is_global is False

    def test_global_wildcard(self):
        """Test the global wildcard is flagged."""
        # Arrange
        permission = Permission(GLOBAL_WILDCARD)

        # Assert
        assert permission.is_wildcard is True
        assert permission.is_global is True

    def test_behaves_as_str(self):
        """Test Permission hashes and compares like its string."""
        # Assert
        assert Permission("users:read") in {"users:read"}
        assert {Permission("users:read")} == {"users:read"}


class TestPermissionInPydantic:
    """Tests for Permission as a pydantic field type."""

    class Holder(BaseModel):
        permission: Permission

    def test_field_validates(self):
        """Test a valid value is converted to Permission."""
        # Act
        holder = self.Holder(permission="users:read")

        # Assert
        assert isinstance(holder.permission, Permission)
        assert holder.model_dump() == {"permission": "users:read"}

    def test_field_rejects_invalid(self):
        """Test an invalid value fails model validation."""
        # Act & Assert
        with pytest.raises(ValueError):
            self.Holder(permission="users")
