"""Identity-only entities and the helpers shared by entity containers.

Provides:
- ``Permission`` / ``Service``: immutable identity tokens.
- ``to_id()``: normalize an "entity or bare id" argument to its id.
- ``add_entities()`` / ``delete_entities()``: idempotent, type-checked bulk
  mutation of an id-keyed store, used by ``User`` and ``Group``.
"""

from __future__ import annotations

from typing import Any, Hashable, Iterable, MutableMapping, Optional

from pydantic import BaseModel, ConfigDict

from ..exceptions import TypeMismatchError

EntityId = Hashable


class Permission(BaseModel):
    """A grantable action, identified by ``id`` alone."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: EntityId
    label: Optional[str] = None

    def __init__(self, id: EntityId, label: Optional[str] = None) -> None:
        super().__init__(id=id, label=label)


class Service(BaseModel):
    """A protected resource, owned privately by a user or shared by a group."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: EntityId
    label: Optional[str] = None

    def __init__(self, id: EntityId, label: Optional[str] = None) -> None:
        super().__init__(id=id, label=label)


def to_id(value: Any, kind: type) -> Any:
    """Reduce an instance of ``kind`` to its id; return anything else unchanged.

    Example::

        >>> to_id(Permission("edit"), Permission)
        'edit'
        >>> to_id("edit", Permission)
        'edit'
    """
    if isinstance(value, kind):
        return value.id
    return value


def add_entities(
    store: MutableMapping[Any, Any],
    items: Iterable[Any],
    kind: type,
    operation: str,
) -> None:
    """Insert each item into ``store`` keyed by id, skipping ids already present.

    Raises:
        TypeMismatchError: On the first item that is not a ``kind``. Items
            before it remain inserted.
    """
    for item in items:
        if not isinstance(item, kind):
            raise TypeMismatchError(item, kind, operation)
        if item.id not in store:
            store[item.id] = item


def delete_entities(
    store: MutableMapping[Any, Any],
    items: Iterable[Any],
    kind: type,
    operation: str,
) -> None:
    """Remove each item's id from ``store``; absent ids are ignored.

    Raises:
        TypeMismatchError: On the first item that is not a ``kind``. Items
            before it remain removed.
    """
    for item in items:
        if not isinstance(item, kind):
            raise TypeMismatchError(item, kind, operation)
        store.pop(item.id, None)


__all__ = [
    "EntityId",
    "Permission",
    "Service",
    "add_entities",
    "delete_entities",
    "to_id",
]
