"""Group: a node of the group hierarchy.

A group contains zero or more users, carries zero or more permissions and
shares zero or more services. Permissions are inherited by child groups
through the hierarchy owned by ``Acl``; users and shared services are not
inherited. A service owned by a group is shared: every member may reach it.

Groups reference users, services and permissions; they never own their
lifetime. Every bulk mutator is idempotent and type-checked element by
element: the first element of the wrong kind raises ``TypeMismatchError``
and the elements before it stay applied.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..exceptions import UnknownPermissionError, UnknownServiceError, UnknownUserError
from .entities import (
    EntityId,
    Permission,
    Service,
    add_entities,
    delete_entities,
    to_id,
)
from .user import User


class Group:
    """Membership, local permission grants and shared services of one group.

    Example::

        editors = Group("editors", "Editors")
        editors.add_users([User("bob")]).add_permissions([Permission("edit")])
        editors.permission_exists("edit")  # True
    """

    def __init__(self, id: EntityId, label: Optional[str] = None) -> None:
        self._id = id
        self._label = label
        self._users: dict[EntityId, User] = {}
        self._permissions: dict[EntityId, Permission] = {}
        self._services: dict[EntityId, Service] = {}

    def __repr__(self) -> str:
        return f"Group(id={self._id!r}, label={self._label!r})"

    @property
    def id(self) -> EntityId:
        return self._id

    @property
    def label(self) -> Optional[str]:
        return self._label

    @label.setter
    def label(self, label: Optional[str]) -> None:
        self._label = label

    def set_label(self, label: Optional[str]) -> Optional[str]:
        """Replace the label and return the previous one."""
        old, self._label = self._label, label
        return old

    # ── Users ───────────────────────────────────────────

    def add_users(self, users: Iterable[User]) -> Group:
        add_entities(self._users, users, User, "Group.add_users")
        return self

    def delete_users(self, users: Iterable[User]) -> Group:
        delete_entities(self._users, users, User, "Group.delete_users")
        return self

    def user_exists(self, user: User | EntityId) -> bool:
        return to_id(user, User) in self._users

    def get_user(self, user: User | EntityId) -> User:
        user_id = to_id(user, User)
        try:
            return self._users[user_id]
        except KeyError:
            raise UnknownUserError(
                f"User {user_id!r} is not a member of group {self._id!r}",
                user_id=user_id,
                group_id=self._id,
            ) from None

    def get_users(self) -> Mapping[EntityId, User]:
        """Read-only snapshot of member users keyed by id."""
        return MappingProxyType(dict(self._users))

    # ── Permissions ─────────────────────────────────────

    def add_permissions(self, permissions: Iterable[Permission]) -> Group:
        add_entities(self._permissions, permissions, Permission, "Group.add_permissions")
        return self

    def delete_permissions(self, permissions: Iterable[Permission]) -> Group:
        delete_entities(self._permissions, permissions, Permission, "Group.delete_permissions")
        return self

    def permission_exists(self, permission: Permission | EntityId) -> bool:
        """Whether this group carries the permission locally (no inheritance)."""
        return to_id(permission, Permission) in self._permissions

    def get_permission(self, permission: Permission | EntityId) -> Permission:
        permission_id = to_id(permission, Permission)
        try:
            return self._permissions[permission_id]
        except KeyError:
            raise UnknownPermissionError(
                f"Permission {permission_id!r} does not exist in group {self._label or self._id!r}",
                permission_id=permission_id,
                group_id=self._id,
            ) from None

    def get_permissions(self) -> Mapping[EntityId, Permission]:
        """Read-only snapshot of local permissions keyed by id."""
        return MappingProxyType(dict(self._permissions))

    # ── Shared services ─────────────────────────────────

    def add_services(self, services: Iterable[Service]) -> Group:
        add_entities(self._services, services, Service, "Group.add_services")
        return self

    def delete_services(self, services: Iterable[Service]) -> Group:
        delete_entities(self._services, services, Service, "Group.delete_services")
        return self

    def service_exists(self, service: Service | EntityId) -> bool:
        return to_id(service, Service) in self._services

    def get_service(self, service: Service | EntityId) -> Service:
        service_id = to_id(service, Service)
        try:
            return self._services[service_id]
        except KeyError:
            raise UnknownServiceError(
                f"Service {service_id!r} is not shared by group {self._id!r}",
                service_id=service_id,
                group_id=self._id,
            ) from None

    def get_services(self) -> Mapping[EntityId, Service]:
        """Read-only snapshot of shared services keyed by id."""
        return MappingProxyType(dict(self._services))


__all__ = ["Group"]
