"""Group-based access control: entities, hierarchy and the decision engine.

Defines:
- Permission, Service: identity-only tokens
- User: an actor owning private services
- Group: a hierarchy node with members, permissions and shared services
- GroupHierarchy: the acyclic parent/child graph over groups
- Acl: owns the hierarchy and decides access (``is_allowed`` / ``check``)
"""

from .engine import AccessDecision, Acl, Assertion, DecisionReason
from .entities import EntityId, Permission, Service, to_id
from .group import Group
from .hierarchy import (
    CycleDetectedError,
    DuplicateNodeError,
    GraphError,
    GroupHierarchy,
    HasChildrenError,
    NodeNotFoundError,
)
from .user import User

__all__ = [
    "AccessDecision",
    "Acl",
    "Assertion",
    "CycleDetectedError",
    "DecisionReason",
    "DuplicateNodeError",
    "EntityId",
    "GraphError",
    "Group",
    "GroupHierarchy",
    "HasChildrenError",
    "NodeNotFoundError",
    "Permission",
    "Service",
    "User",
    "to_id",
]
