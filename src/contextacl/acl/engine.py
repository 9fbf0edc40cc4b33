"""Access control list: the decision engine.

``Acl`` owns the group hierarchy plus registries of users and services, and
is the only entry point for access decisions.

How a decision is reached (``Acl.check``):

1. Membership discovery: every group whose member set contains the user.
   No group means deny.
2. Sharing: when a service is given, is it shared by any member group?
3. Inheritance: walk each member group and its ancestors toward the roots;
   the first group carrying the permission grants it and stops the search.
4. Ownership gate: when a service is given, the user must own it privately
   or reach it through a sharing group, otherwise deny.
5. Assertion: an optional caller predicate consulted last. It can veto a
   grant, never turn a deny into a grant.

Permissions match by exact id only.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from ..config import AclConfig
from ..exceptions import (
    DuplicateServiceError,
    DuplicateUserError,
    HasDependentsError,
    HierarchyError,
    InvalidParentError,
    TypeMismatchError,
    UnknownGroupError,
    UnknownServiceError,
    UnknownUserError,
)
from ..logging import get_acl_logger
from .entities import EntityId, Permission, Service, to_id
from .group import Group
from .hierarchy import GraphError, GroupHierarchy, HasChildrenError, NodeNotFoundError
from .user import User

# (user_id, permission_id, service_id) -> bool
Assertion = Callable[[Any, Any, Any], bool]


class DecisionReason(str, Enum):
    """Why a decision came out the way it did."""

    GRANTED = "granted"
    NOT_A_MEMBER = "not_a_member"
    PERMISSION_NOT_GRANTED = "permission_not_granted"
    SERVICE_NOT_REACHABLE = "service_not_reachable"
    ASSERTION_VETOED = "assertion_vetoed"


class AccessDecision(BaseModel):
    """Immutable outcome of ``Acl.check``. Truthy iff access is allowed.

    Attributes:
        allowed: Final verdict.
        reason: Which step decided the verdict.
        user_id / permission_id / service_id: Normalized request ids.
        groups: Ids of the groups the user belongs to.
        granted_by: Id of the group (a member group or one of its ancestors)
            that carries the permission, or ``None``.
        service_owned: The user owns the service privately.
        service_shared: A member group shares the service.
        asserted: Result of the assertion callback, ``None`` if it did not run.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    allowed: bool
    reason: DecisionReason
    user_id: Any
    permission_id: Any
    service_id: Any = None
    groups: tuple[Any, ...] = ()
    granted_by: Any = None
    service_owned: bool = False
    service_shared: bool = False
    asserted: Optional[bool] = None

    def __bool__(self) -> bool:
        return self.allowed


class Acl:
    """Groups in an inheritance hierarchy, deciding who may do what.

    Instances are independent: construct one per policy and pass it around.
    Mutations are not synchronized; serialize writers externally. Decisions
    only read and may run concurrently while no mutation is in flight.

    Example::

        acl = Acl()
        admins, editors = Group("admins"), Group("editors")
        acl.add_group(admins).add_group(editors, parents=[admins])
        acl.allow(admins, [Permission("delete")])
        acl.allow(editors, [Permission("edit")])
        editors.add_users([User("bob")])

        acl.is_allowed("bob", "delete")   # True, inherited from admins
        acl.is_allowed("bob", "publish")  # False
    """

    def __init__(self, config: Optional[AclConfig] = None) -> None:
        self._config = config or AclConfig()
        self._groups: GroupHierarchy[Group] = GroupHierarchy()
        self._users: dict[EntityId, User] = {}
        self._services: dict[EntityId, Service] = {}
        self._logger = get_acl_logger(__name__, acl_name=self._config.name)

    def __str__(self) -> str:
        return self.to_dot()

    @property
    def config(self) -> AclConfig:
        return self._config

    @property
    def hierarchy(self) -> GroupHierarchy[Group]:
        return self._groups

    def to_dot(self) -> str:
        """DOT description of the group hierarchy, for diagnostics."""
        return self._groups.to_dot(name=self._config.name)

    # ── Groups ──────────────────────────────────────────

    def add_group(self, group: Group, parents: Iterable[Group] = ()) -> Acl:
        """Insert ``group`` into the hierarchy below every group in ``parents``.

        Raises:
            TypeMismatchError: ``group`` is not a Group.
            InvalidParentError: A parent is not a Group.
            HierarchyError: The hierarchy rejected the insertion (duplicate
                id, unknown parent, cycle). The underlying graph error is ``__cause__``.
        """
        if not isinstance(group, Group):
            raise TypeMismatchError(group, Group, "Acl.add_group")
        parents = list(parents)
        for parent in parents:
            if not isinstance(parent, Group):
                raise InvalidParentError(
                    f"Parent {parent!r} of group {group.id!r} must be an instance of Group",
                    parent=repr(parent),
                    group_id=group.id,
                )

        try:
            self._groups.add_node(group, parents)
        except GraphError as e:
            raise HierarchyError(str(e), group_id=group.id, node_id=e.node_id) from e

        self._logger.debug("Group added", group_id=group.id)
        return self

    def delete_group(self, group: Group | EntityId, cascade: Optional[bool] = None) -> Acl:
        """Remove a group from the hierarchy.

        Args:
            group: Group or group id.
            cascade: Also remove every descendant. ``None`` applies
                ``AclConfig.delete_cascade``.

        Raises:
            UnknownGroupError: The group is not registered.
            HasDependentsError: The group has children and the delete is
                restricted. Nothing is removed.
        """
        group_id = to_id(group, Group)
        if cascade is None:
            cascade = self._config.delete_cascade

        try:
            removed = self._groups.delete_node(group_id, cascade=cascade)
        except HasChildrenError as e:
            raise HasDependentsError(
                f"Cannot delete group {group_id!r}: it has at least one child",
                group_id=group_id,
            ) from e
        except NodeNotFoundError as e:
            raise UnknownGroupError(f"Group {group_id!r} does not exist", group_id=group_id) from e

        self._logger.debug("Groups deleted: %s", removed, group_id=group_id)
        return self

    def group_exists(self, group: Group | EntityId) -> bool:
        return self._groups.node_exists(to_id(group, Group))

    def get_group(self, group: Group | EntityId) -> Group:
        group_id = to_id(group, Group)
        if not self._groups.node_exists(group_id):
            raise UnknownGroupError(f"Group {group_id!r} does not exist", group_id=group_id)
        return self._groups.get_node(group_id)

    def get_groups(self) -> Mapping[EntityId, Group]:
        """Read-only snapshot of registered groups keyed by id."""
        return MappingProxyType({g.id: g for g in self._groups})

    # ── Permissions ─────────────────────────────────────

    def allow(self, group: Group | EntityId, permissions: Iterable[Permission]) -> Acl:
        """Grant permissions to a registered group (and, by inheritance, its descendants)."""
        self._require_group(group, "cannot add permissions").add_permissions(permissions)
        return self

    def deny(self, group: Group | EntityId, permissions: Iterable[Permission]) -> Acl:
        """Withdraw permissions from a registered group."""
        self._require_group(group, "cannot delete permissions").delete_permissions(permissions)
        return self

    def is_group_allowed(self, group: Group | EntityId, permission: Permission | EntityId) -> bool:
        """Whether a group carries a permission itself or through an ancestor."""
        group_id = to_id(group, Group)
        permission_id = to_id(permission, Permission)
        if not self._groups.node_exists(group_id):
            raise UnknownGroupError(f"Group {group_id!r} does not exist", group_id=group_id)
        return self._find_grant([self._groups.get_node(group_id)], permission_id) is not None

    def _require_group(self, group: Group | EntityId, action: str) -> Group:
        group_id = to_id(group, Group)
        if not self._groups.node_exists(group_id):
            raise UnknownGroupError(
                f"Group {group_id!r} is not declared in this ACL, {action}",
                group_id=group_id,
            )
        return self._groups.get_node(group_id)

    # ── Decisions ───────────────────────────────────────

    def is_allowed(
        self,
        user: User | EntityId,
        permission: Permission | EntityId,
        service: Service | EntityId | None = None,
        assertion: Optional[Assertion] = None,
    ) -> bool:
        """Decide whether ``user`` may use ``permission`` (on ``service``).

        Never raises for a deny: an unknown user simply belongs to no group.
        See ``check`` for the structured outcome.
        """
        return self.check(user, permission, service, assertion).allowed

    def check(
        self,
        user: User | EntityId,
        permission: Permission | EntityId,
        service: Service | EntityId | None = None,
        assertion: Optional[Assertion] = None,
    ) -> AccessDecision:
        """Run the decision algorithm and explain its outcome."""
        user_id = to_id(user, User)
        permission_id = to_id(permission, Permission)
        service_id = to_id(service, Service)

        groups, member = self._member_groups(user_id)
        request = {
            "user_id": user_id,
            "permission_id": permission_id,
            "service_id": service_id,
            "groups": tuple(g.id for g in groups),
        }
        if member is None:
            return self._decided(AccessDecision(allowed=False, reason=DecisionReason.NOT_A_MEMBER, **request))

        service_shared = service_id is not None and any(g.service_exists(service_id) for g in groups)
        granted_by = self._find_grant(groups, permission_id)
        service_owned = service_id is not None and member.service_exists(service_id)
        outcome = {
            "granted_by": granted_by.id if granted_by is not None else None,
            "service_owned": service_owned,
            "service_shared": service_shared,
            **request,
        }

        if granted_by is None:
            return self._decided(
                AccessDecision(allowed=False, reason=DecisionReason.PERMISSION_NOT_GRANTED, **outcome)
            )
        if service_id is not None and not (service_owned or service_shared):
            return self._decided(
                AccessDecision(allowed=False, reason=DecisionReason.SERVICE_NOT_REACHABLE, **outcome)
            )
        if assertion is None:
            return self._decided(AccessDecision(allowed=True, reason=DecisionReason.GRANTED, **outcome))

        asserted = bool(assertion(user_id, permission_id, service_id))
        reason = DecisionReason.GRANTED if asserted else DecisionReason.ASSERTION_VETOED
        return self._decided(AccessDecision(allowed=asserted, reason=reason, asserted=asserted, **outcome))

    def _member_groups(self, user_id: Any) -> tuple[list[Group], Optional[User]]:
        """Groups containing ``user_id`` and the User instance of the first of them."""
        groups: list[Group] = []
        member: Optional[User] = None
        for group in self._groups:
            if group.user_exists(user_id):
                groups.append(group)
                if member is None:
                    member = group.get_user(user_id)
        return groups, member

    def _find_grant(self, groups: Iterable[Group], permission_id: Any) -> Optional[Group]:
        """First group, among ``groups`` and their ancestors, carrying the permission."""
        for group in groups:
            for ancestor in self._groups.iter_ancestors(group):
                if ancestor.permission_exists(permission_id):
                    return ancestor
        return None

    def _decided(self, decision: AccessDecision) -> AccessDecision:
        level = logging.INFO if self._config.log_decisions else logging.DEBUG
        self._logger.log(
            level,
            "Access %s (%s)",
            "allowed" if decision.allowed else "denied",
            decision.reason,
            user_id=decision.user_id,
            permission_id=decision.permission_id,
            service_id=decision.service_id,
        )
        return decision

    # ── Users ───────────────────────────────────────────

    def add_user(self, user: User) -> Acl:
        """Register a user. Membership is managed on groups, not here."""
        if not isinstance(user, User):
            raise TypeMismatchError(user, User, "Acl.add_user")
        if user.id in self._users:
            raise DuplicateUserError(f"User {user.id!r} is already registered", user_id=user.id)
        self._users[user.id] = user
        return self

    def delete_user(self, user: User | EntityId) -> Acl:
        """Unregister a user and remove it from every group. Absent users are ignored."""
        user_id = to_id(user, User)
        self._users.pop(user_id, None)
        for group in self._groups:
            if group.user_exists(user_id):
                group.delete_users([group.get_user(user_id)])
        return self

    def user_exists(self, user: User | EntityId) -> bool:
        return to_id(user, User) in self._users

    def get_user(self, user: User | EntityId) -> User:
        user_id = to_id(user, User)
        try:
            return self._users[user_id]
        except KeyError:
            raise UnknownUserError(f"User {user_id!r} does not exist", user_id=user_id) from None

    def get_users(self) -> Mapping[EntityId, User]:
        """Read-only snapshot of registered users keyed by id."""
        return MappingProxyType(dict(self._users))

    # ── Services ────────────────────────────────────────

    def add_service(self, service: Service) -> Acl:
        if not isinstance(service, Service):
            raise TypeMismatchError(service, Service, "Acl.add_service")
        if service.id in self._services:
            raise DuplicateServiceError(
                f"Service {service.id!r} is already registered", service_id=service.id
            )
        self._services[service.id] = service
        return self

    def delete_service(self, service: Service | EntityId) -> Acl:
        """Unregister a service and withdraw it from every group and registered user."""
        service_id = to_id(service, Service)
        self._services.pop(service_id, None)
        holders: list[Group | User] = [*self._groups, *self._users.values()]
        for holder in holders:
            if holder.service_exists(service_id):
                holder.delete_services([holder.get_service(service_id)])
        return self

    def service_exists(self, service: Service | EntityId) -> bool:
        return to_id(service, Service) in self._services

    def get_service(self, service: Service | EntityId) -> Service:
        service_id = to_id(service, Service)
        try:
            return self._services[service_id]
        except KeyError:
            raise UnknownServiceError(
                f"Service {service_id!r} does not exist", service_id=service_id
            ) from None

    def get_services(self) -> Mapping[EntityId, Service]:
        """Read-only snapshot of registered services keyed by id."""
        return MappingProxyType(dict(self._services))


__all__ = [
    "AccessDecision",
    "Acl",
    "Assertion",
    "DecisionReason",
]
