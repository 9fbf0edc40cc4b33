"""User: an actor that privately owns zero or more services.

Users carry no permissions of their own: what a user may do is always
resolved through the groups it belongs to (see ``Acl.is_allowed``).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..exceptions import UnknownServiceError
from .entities import EntityId, Service, add_entities, delete_entities, to_id


class User:
    """An identity plus the set of services it owns privately.

    Example::

        bob = User("bob", "Bob").add_services([Service("blog")])
        bob.service_exists("blog")  # True
    """

    def __init__(self, id: EntityId, label: Optional[str] = None) -> None:
        self._id = id
        self._label = label
        self._services: dict[EntityId, Service] = {}

    def __repr__(self) -> str:
        return f"User(id={self._id!r}, label={self._label!r})"

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

    # ── Services ────────────────────────────────────────

    def add_services(self, services: Iterable[Service]) -> User:
        add_entities(self._services, services, Service, "User.add_services")
        return self

    def delete_services(self, services: Iterable[Service]) -> User:
        delete_entities(self._services, services, Service, "User.delete_services")
        return self

    def service_exists(self, service: Service | EntityId) -> bool:
        return to_id(service, Service) in self._services

    def get_service(self, service: Service | EntityId) -> Service:
        service_id = to_id(service, Service)
        try:
            return self._services[service_id]
        except KeyError:
            raise UnknownServiceError(
                f"Service {service_id!r} is not owned by user {self._id!r}",
                service_id=service_id,
                user_id=self._id,
            ) from None

    def get_services(self) -> Mapping[EntityId, Service]:
        """Read-only snapshot of owned services keyed by id."""
        return MappingProxyType(dict(self._services))


__all__ = ["User"]
