"""Group hierarchy: an acyclic parent/child graph over identified nodes.

Backed by a ``networkx.DiGraph`` whose edges point from parent to child, so
``predecessors`` are parents and ``successors`` are children. Each graph node
is keyed by the node's ``id`` and stores the node object under the ``node``
attribute.

Provides:
- ``GroupHierarchy``: add/delete/lookup of nodes, ancestor traversal, DOT export.
- ``GraphError`` and its subclasses: failures raised by the hierarchy itself.
  ``Acl`` wraps them into ``HierarchyError``.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Hashable, Iterable, Iterator, Protocol, TypeVar, runtime_checkable

import networkx as nx

logger = logging.getLogger(__name__)


@runtime_checkable
class Node(Protocol):
    """Anything with a hashable ``id`` can live in the hierarchy."""

    @property
    def id(self) -> Hashable: ...


N = TypeVar("N", bound=Node)


# ── Errors ──────────────────────────────────────────────


class GraphError(Exception):
    """Base class for hierarchy failures."""

    def __init__(self, message: str, node_id: Any = None) -> None:
        super().__init__(message)
        self.node_id = node_id


class DuplicateNodeError(GraphError):
    pass


class NodeNotFoundError(GraphError, LookupError):
    pass


class CycleDetectedError(GraphError):
    pass


class HasChildrenError(GraphError):
    pass


def _node_id(value: Any) -> Hashable:
    return value.id if isinstance(value, Node) else value


def _quote(value: Any) -> str:
    """DOT double-quoted string; only the quote and backslash are escaped."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


# ── Hierarchy ───────────────────────────────────────────


class GroupHierarchy(Generic[N]):
    """Directed acyclic graph of nodes with declared parents.

    Example::

        hierarchy = GroupHierarchy()
        hierarchy.add_node(admins)
        hierarchy.add_node(editors, parents=[admins])
        [g.id for g in hierarchy.iter_ancestors(editors)]  # ['editors', 'admins']
    """

    def __init__(self) -> None:
        self._graph = nx.DiGraph()

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, node: Any) -> bool:
        return self.node_exists(node)

    def __iter__(self) -> Iterator[N]:
        """Iterate nodes in insertion order."""
        for node_id in list(self._graph.nodes):
            yield self._graph.nodes[node_id]["node"]

    def __str__(self) -> str:
        return self.to_dot()

    # ── Mutation ────────────────────────────────────────

    def add_node(self, node: N, parents: Iterable[N | Hashable] = ()) -> None:
        """Insert ``node`` as a child of every node in ``parents``.

        All checks run before the graph is touched, so a failure leaves the
        hierarchy unchanged.

        Raises:
            DuplicateNodeError: A node with the same id already exists.
            CycleDetectedError: ``node`` is listed among its own parents.
            NodeNotFoundError: A parent is not in the hierarchy.
        """
        node_id = node.id
        if self._graph.has_node(node_id):
            raise DuplicateNodeError(f"Node {node_id!r} already exists", node_id)

        parent_ids: list[Hashable] = []
        for parent in parents:
            parent_id = _node_id(parent)
            if parent_id == node_id:
                raise CycleDetectedError(f"Node {node_id!r} cannot be its own parent", node_id)
            if not self._graph.has_node(parent_id):
                raise NodeNotFoundError(f"Parent node {parent_id!r} does not exist", parent_id)
            if parent_id not in parent_ids:
                parent_ids.append(parent_id)

        self._graph.add_node(node_id, node=node)
        self._graph.add_edges_from((parent_id, node_id) for parent_id in parent_ids)
        logger.debug("Node %r added under %r", node_id, parent_ids)

    def delete_node(self, node: N | Hashable, cascade: bool = False) -> list[Hashable]:
        """Remove a node, and with ``cascade`` every descendant.

        Returns:
            Ids of the removed nodes, in insertion order.

        Raises:
            NodeNotFoundError: The node does not exist.
            HasChildrenError: The node has children and ``cascade`` is false.
        """
        node_id = _node_id(node)
        if not self._graph.has_node(node_id):
            raise NodeNotFoundError(f"Node {node_id!r} does not exist", node_id)

        doomed = {node_id}
        if self._graph.out_degree(node_id):
            if not cascade:
                raise HasChildrenError(f"Node {node_id!r} has at least one child", node_id)
            doomed |= nx.descendants(self._graph, node_id)

        removed = [n for n in self._graph.nodes if n in doomed]
        self._graph.remove_nodes_from(removed)
        logger.debug("Nodes removed: %r", removed)
        return removed

    # ── Lookup ──────────────────────────────────────────

    def node_exists(self, node: N | Hashable) -> bool:
        return self._graph.has_node(_node_id(node))

    def get_node(self, node: N | Hashable) -> N:
        node_id = _node_id(node)
        if not self._graph.has_node(node_id):
            raise NodeNotFoundError(f"Node {node_id!r} does not exist", node_id)
        return self._graph.nodes[node_id]["node"]

    def parents(self, node: N | Hashable) -> list[N]:
        node_id = self.get_node(node).id
        return [self._graph.nodes[p]["node"] for p in self._graph.predecessors(node_id)]

    def children(self, node: N | Hashable) -> list[N]:
        node_id = self.get_node(node).id
        return [self._graph.nodes[c]["node"] for c in self._graph.successors(node_id)]

    def iter_ancestors(self, node: N | Hashable) -> Iterator[N]:
        """Backward breadth-first walk: the node itself, then parents, grandparents, …

        Each node is yielded once, even when reachable along several paths.
        Order among nodes at the same depth is not part of the contract.
        """
        start = self.get_node(node).id
        yield self._graph.nodes[start]["node"]
        for _, ancestor_id in nx.bfs_edges(self._graph, start, reverse=True):
            yield self._graph.nodes[ancestor_id]["node"]

    # ── Export ──────────────────────────────────────────

    def to_dot(self, name: str = "hierarchy") -> str:
        """Describe the hierarchy in the DOT language (parent -> child edges)."""
        lines = [f"digraph {_quote(name)} {{"]
        for node_id, data in self._graph.nodes(data=True):
            label = getattr(data["node"], "label", None) or str(node_id)
            lines.append(f"    {_quote(node_id)} [label={_quote(label)}];")
        for parent_id, child_id in self._graph.edges:
            lines.append(f"    {_quote(parent_id)} -> {_quote(child_id)};")
        lines.append("}")
        return "\n".join(lines) + "\n"


__all__ = [
    "CycleDetectedError",
    "DuplicateNodeError",
    "GraphError",
    "GroupHierarchy",
    "HasChildrenError",
    "Node",
    "NodeNotFoundError",
]
