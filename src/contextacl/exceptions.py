"""Unified exception hierarchy for contextacl.

All errors raised by the library inherit from AclError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to classes

Every error describes API misuse (unknown ids, wrong entity kinds, hierarchy
violations). A denied access is never an error: ``Acl.is_allowed`` returns
``False`` instead.

Usage:
    from contextacl.exceptions import AclError, UnknownGroupError

    try:
        acl.allow(group, [Permission(id="edit")])
    except UnknownGroupError as e:
        print(e.code, e.details["group_id"])
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "AclError",
    "ConfigurationError",
    "TypeMismatchError",
    "InvalidParentError",
    "HierarchyError",
    "HasDependentsError",
    "UnknownEntityError",
    "UnknownGroupError",
    "UnknownUserError",
    "UnknownServiceError",
    "UnknownPermissionError",
    "DuplicateEntityError",
    "DuplicateUserError",
    "DuplicateServiceError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class AclError(Exception):
    """Base exception for contextacl.

    Attributes:
        code: Stable error code string (e.g. "UNKNOWN_GROUP").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "ACL_ERROR"
    message: str = "An access control error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(AclError):
    """Invalid configuration."""

    code: str = "CONFIGURATION_ERROR"


class TypeMismatchError(AclError, TypeError):
    """A bulk operation received an element of the wrong entity kind.

    ``details`` carries ``argument`` (repr of the element), ``expected``
    (entity class name) and ``operation`` (call site, e.g. "Group.add_users").
    """

    code: str = "TYPE_MISMATCH"

    def __init__(self, argument: Any, expected: type, operation: str) -> None:
        super().__init__(
            f"{operation}: {argument!r} must be an instance of {expected.__name__}",
            argument=repr(argument),
            expected=expected.__name__,
            operation=operation,
        )


class InvalidParentError(AclError, TypeError):
    """A declared parent of a group is not a Group."""

    code: str = "INVALID_PARENT"


class HierarchyError(AclError):
    """The group hierarchy rejected an operation (cycle, duplicate, missing node)."""

    code: str = "HIERARCHY_ERROR"


class HasDependentsError(HierarchyError):
    """Restricted delete of a group that still has children."""

    code: str = "HAS_DEPENDENTS"


class UnknownEntityError(AclError, LookupError):
    """Lookup of an id that does not exist."""

    code: str = "UNKNOWN_ENTITY"


class UnknownGroupError(UnknownEntityError):
    code: str = "UNKNOWN_GROUP"


class UnknownUserError(UnknownEntityError):
    code: str = "UNKNOWN_USER"


class UnknownServiceError(UnknownEntityError):
    code: str = "UNKNOWN_SERVICE"


class UnknownPermissionError(UnknownEntityError):
    code: str = "UNKNOWN_PERMISSION"


class DuplicateEntityError(AclError):
    """An entity with the same id is already registered."""

    code: str = "DUPLICATE_ENTITY"


class DuplicateUserError(DuplicateEntityError):
    code: str = "DUPLICATE_USER"


class DuplicateServiceError(DuplicateEntityError):
    code: str = "DUPLICATE_SERVICE"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[AclError])


class ErrorRegistry:
    """Registry for mapping error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[AclError]] = {}

    def register(self, code: str, error_cls: type[AclError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[AclError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[AclError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(AclError):
            code = "QUOTA_EXCEEDED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


for _cls in (
    AclError,
    ConfigurationError,
    TypeMismatchError,
    InvalidParentError,
    HierarchyError,
    HasDependentsError,
    UnknownEntityError,
    UnknownGroupError,
    UnknownUserError,
    UnknownServiceError,
    UnknownPermissionError,
    DuplicateEntityError,
    DuplicateUserError,
    DuplicateServiceError,
):
    error_registry.register(_cls.code, _cls)
del _cls
