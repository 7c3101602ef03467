"""
DAG container and traversal primitives.

This module provides the graph structure consumed by every layout:
- Dag: ordered node storage with root/leaf/link queries
- Depth-first descendant and ancestor iteration
- Short-circuiting predicate search
- Topological ordering with cycle detection
- connect(): building a DAG from (source_id, target_id) pairs

Nodes compare by identity, so all lookups here are identity based.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, Iterator, Optional, Sequence

from .types import Link, LinkLike, Node, NodeLike
from .validation import CycleError, InvalidLinkError, validate_link_indices

# DFS states
_UNVISITED = 0
_IN_PROGRESS = 1
_DONE = 2


class Dag:
    """
    Directed acyclic graph over a fixed, ordered list of nodes.

    The node list order is the tie-break order used by every algorithm in
    the package. Links are owned by their source node (``node.links``).

    Example:
        a, b, c = Node("a"), Node("b"), Node("c")
        a.add_child(b)
        a.add_child(c)
        dag = Dag([a, b, c])
        [n.data for n in topological_order(dag)]  # ['a', 'b', 'c']
    """

    def __init__(self, nodes: Iterable[Node]) -> None:
        """
        Initialize DAG from its nodes.

        Assigns ``node.index`` to the position of each node in the list.

        Args:
            nodes: All nodes of the DAG, each exactly once

        Raises:
            InvalidLinkError: If a node appears twice or a link leaves the DAG
        """
        self._nodes: list[Node] = list(nodes)
        members: set[int] = set()
        for node in self._nodes:
            if id(node) in members:
                raise InvalidLinkError(f"node {node!r} appears more than once")
            members.add(id(node))

        for node in self._nodes:
            for link in node.links:
                if link.source is not node:
                    raise InvalidLinkError(f"{link!r} is stored on a node that is not its source")
                if id(link.target) not in members:
                    raise InvalidLinkError(f"{link!r} points to a node outside the DAG")

        for i, node in enumerate(self._nodes):
            node.index = i

    @classmethod
    def from_links(cls, nodes: Sequence[NodeLike], links: Sequence[LinkLike]) -> Dag:
        """
        Build a DAG from a node list and index-based links.

        Args:
            nodes: Node objects, dicts of Node properties, or raw payloads
            links: Dicts (``{'source': 0, 'target': 1}``), ``(source, target)``
                pairs, or objects with integer source/target attributes.
                Dicts may carry a ``data`` entry for the link payload.

        Returns:
            The new DAG

        Raises:
            InvalidLinkError: If a link index is out of bounds
        """
        built: list[Node] = []
        for node_data in nodes:
            if isinstance(node_data, Node):
                built.append(node_data)
            elif isinstance(node_data, dict):
                built.append(Node(**node_data))
            else:
                built.append(Node(node_data))

        validate_link_indices(links, len(built), strict=True)

        for link_data in links:
            if isinstance(link_data, dict):
                src, tgt = link_data["source"], link_data["target"]
                data = link_data.get("data")
            elif isinstance(link_data, (tuple, list)):
                src, tgt = link_data
                data = None
            else:
                src, tgt = link_data.source, link_data.target
                data = getattr(link_data, "data", None)
            built[src].add_child(built[tgt], data)

        return cls(built)

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> list[Node]:
        """Get the list of nodes in DAG order."""
        return self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def size(self) -> int:
        """Number of nodes."""
        return len(self._nodes)

    def links(self) -> Iterator[Link]:
        """Iterate over all links, grouped by source in node order."""
        for node in self._nodes:
            yield from node.links

    def parents_map(self) -> dict[Node, list[Node]]:
        """Map every node to its parents, in node order."""
        parents: dict[Node, list[Node]] = {node: [] for node in self._nodes}
        for link in self.links():
            parents[link.target].append(link.source)
        return parents

    def parents(self, node: Node) -> list[Node]:
        """Get the parents of a node."""
        return [link.source for link in self.links() if link.target is node]

    def roots(self) -> list[Node]:
        """Nodes without incoming links, in node order."""
        has_parent = {id(link.target) for link in self.links()}
        return [node for node in self._nodes if id(node) not in has_parent]

    def leaves(self) -> list[Node]:
        """Nodes without outgoing links, in node order."""
        return [node for node in self._nodes if not node.links]

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def descendants(self, node: Node) -> Iterator[Node]:
        """
        Iterate over a node and everything reachable from it.

        Depth-first pre-order, children visited in link order, each node once.
        """
        return _depth_first([node], Node.children)

    def ancestors(self, node: Node) -> Iterator[Node]:
        """
        Iterate over a node and everything that reaches it.

        Depth-first pre-order, parents visited in node order, each node once.
        """
        parents = self.parents_map()
        return _depth_first([node], parents.__getitem__)

    def exists_match(self, predicate: Callable[[Node], bool]) -> bool:
        """
        Check whether any node satisfies ``predicate``.

        Traverses depth-first from the roots (then any node not reached from
        a root) and stops at the first match; later nodes are never passed to
        the predicate.
        """
        for node in _depth_first(self.roots() + self._nodes, Node.children):
            if predicate(node):
                return True
        return False


def _depth_first(starts: Sequence[Node], neighbors: Callable[[Node], list[Node]]) -> Iterator[Node]:
    """Depth-first pre-order over everything reachable from ``starts``."""
    seen: set[int] = set()
    for start in starts:
        if id(start) in seen:
            continue
        seen.add(id(start))
        stack = [start]
        while stack:
            node = stack.pop()
            yield node
            for neighbor in reversed(neighbors(node)):
                if id(neighbor) not in seen:
                    seen.add(id(neighbor))
                    stack.append(neighbor)


# =============================================================================
# Topological Order
# =============================================================================


def topological_order(dag: Dag) -> list[Node]:
    """
    Compute a topological ordering of the DAG's nodes.

    Uses an iterative depth-first search with per-node states (unvisited,
    in progress, done). Start nodes and children are explored in reverse so
    that the reversed post-order keeps the DAG's own node and link order
    wherever the partial order allows.

    Args:
        dag: The graph to order

    Returns:
        Nodes such that every link's source precedes its target.

    Raises:
        CycleError: If the graph has a cycle. ``path`` runs from the first
            node found on the cycle back to itself.

    Example:
        >>> dag = connect([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        >>> [node.data for node in topological_order(dag)]
        ['a', 'b', 'c', 'd']
    """
    state: dict[Node, int] = {}
    postorder: list[Node] = []

    for start in reversed(dag.nodes):
        if state.get(start, _UNVISITED) != _UNVISITED:
            continue

        state[start] = _IN_PROGRESS
        path = [start]
        stack = [iter(reversed(start.children()))]

        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                node = path.pop()
                state[node] = _DONE
                postorder.append(node)
                continue

            child_state = state.get(child, _UNVISITED)
            if child_state == _IN_PROGRESS:
                cycle_start = next(i for i, n in enumerate(path) if n is child)
                raise CycleError(path[cycle_start:] + [child])
            if child_state == _UNVISITED:
                state[child] = _IN_PROGRESS
                path.append(child)
                stack.append(iter(reversed(child.children())))

    postorder.reverse()
    return postorder


def has_cycle(dag: Dag) -> bool:
    """Check if the graph contains any cycle."""
    try:
        topological_order(dag)
    except CycleError:
        return True
    return False


# =============================================================================
# Construction
# =============================================================================


def connect(
    links: Sequence[Any],
    single: bool = False,
    source_id: Optional[Callable[[Any], Hashable]] = None,
    target_id: Optional[Callable[[Any], Hashable]] = None,
) -> Dag:
    """
    Build a DAG from a list of links between node ids.

    Nodes are created in the order their ids are first seen, with the id as
    their payload.

    Args:
        links: Link data, by default ``(source_id, target_id)`` pairs
        single: If True, a link from an id to itself declares a lone node
            instead of a cycle
        source_id: Extracts the source id from a link datum (default: ``d[0]``)
        target_id: Extracts the target id from a link datum (default: ``d[1]``)

    Returns:
        The new DAG. Each link's datum becomes the link payload.

    Raises:
        InvalidLinkError: On empty input or duplicate links
        CycleError: If the links contain a cycle

    Example:
        >>> dag = connect([("a", "b"), ("b", "c")])
        >>> [node.data for node in dag]
        ['a', 'b', 'c']
    """
    if not links:
        raise InvalidLinkError("can't connect empty data")

    get_source = source_id if source_id is not None else _default_source_id
    get_target = target_id if target_id is not None else _default_target_id

    by_id: dict[Hashable, Node] = {}
    seen_pairs: set[tuple[Hashable, Hashable]] = set()

    def lookup(key: Hashable) -> Node:
        node = by_id.get(key)
        if node is None:
            node = by_id[key] = Node(key)
        return node

    for datum in links:
        src_key = get_source(datum)
        tgt_key = get_target(datum)
        source = lookup(src_key)
        target = lookup(tgt_key)

        if src_key == tgt_key and single:
            continue
        if (src_key, tgt_key) in seen_pairs:
            raise InvalidLinkError(f"node {src_key!r} contained duplicate children {tgt_key!r}")
        seen_pairs.add((src_key, tgt_key))
        source.add_child(target, datum)

    dag = Dag(by_id.values())
    topological_order(dag)
    return dag


def _default_source_id(datum: Any) -> Hashable:
    return datum[0]


def _default_target_id(datum: Any) -> Hashable:
    return datum[1]


__all__ = [
    "Dag",
    "topological_order",
    "has_cycle",
    "connect",
]
