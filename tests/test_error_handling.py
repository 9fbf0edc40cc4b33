"""Tests for the exception hierarchy and error registry."""

from __future__ import annotations

import pytest

from contextacl import (
    AclError,
    Group,
    HasDependentsError,
    HierarchyError,
    InvalidParentError,
    TypeMismatchError,
    UnknownGroupError,
    UnknownPermissionError,
    UnknownServiceError,
    UnknownUserError,
    User,
)
from contextacl.exceptions import UnknownEntityError, error_registry, register_error


class TestAclError:
    """Tests for the base error."""

    def test_defaults(self) -> None:
        """Test AclError defaults."""
        error = AclError()
        assert error.code == "ACL_ERROR"
        assert error.message == "An access control error occurred"
        assert error.details == {}
        assert str(error) == error.message

    def test_message_code_and_details(self) -> None:
        """Test AclError with message, code and details."""
        error = AclError("boom", code="CUSTOM", group_id="g")
        assert error.message == "boom"
        assert error.code == "CUSTOM"
        assert error.details == {"group_id": "g"}

    def test_subclass_codes(self) -> None:
        """Test subclasses carry their own codes."""
        assert UnknownGroupError().code == "UNKNOWN_GROUP"
        assert HasDependentsError().code == "HAS_DEPENDENTS"
        assert InvalidParentError().code == "INVALID_PARENT"

    def test_hierarchy(self) -> None:
        """Test the exception class hierarchy."""
        assert issubclass(HasDependentsError, HierarchyError)
        for error in (UnknownGroupError, UnknownUserError, UnknownServiceError, UnknownPermissionError):
            assert issubclass(error, UnknownEntityError)
            assert issubclass(error, LookupError)
        assert issubclass(TypeMismatchError, TypeError)


class TestTypeMismatchError:
    """Tests for the bulk-operation type error."""

    def test_identifies_argument_and_call_site(self) -> None:
        """Test TypeMismatchError names the argument, expected type and operation."""
        error = TypeMismatchError(42, User, "Group.add_users")
        assert error.code == "TYPE_MISMATCH"
        assert error.details == {"argument": "42", "expected": "User", "operation": "Group.add_users"}
        assert str(error) == "Group.add_users: 42 must be an instance of User"

    def test_equivalent_operations_are_distinguishable(self) -> None:
        """Test add and delete failures report different operations."""
        group = Group("g")
        with pytest.raises(TypeMismatchError) as added:
            group.add_users([None])  # type: ignore[list-item]
        with pytest.raises(TypeMismatchError) as deleted:
            group.delete_users([None])  # type: ignore[list-item]
        assert added.value.details["operation"] != deleted.value.details["operation"]


class TestErrorRegistry:
    """Tests for ErrorRegistry."""

    def test_builtin_codes_registered(self) -> None:
        """Test built-in error codes are registered."""
        assert error_registry.get("UNKNOWN_GROUP") is UnknownGroupError
        assert error_registry.get("HAS_DEPENDENTS") is HasDependentsError
        assert error_registry.get("TYPE_MISMATCH") is TypeMismatchError
        assert error_registry.get("NOPE") is None

    def test_all_returns_copy(self) -> None:
        """Test all() returns a copy of the registry."""
        codes = error_registry.all()
        codes.clear()
        assert error_registry.get("ACL_ERROR") is AclError

    def test_register_error_decorator(self) -> None:
        """Test register_error adds a custom error class."""
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(AclError):
            code = "QUOTA_EXCEEDED"

        assert error_registry.get("QUOTA_EXCEEDED") is QuotaExceededError
        assert QuotaExceededError().code == "QUOTA_EXCEEDED"
