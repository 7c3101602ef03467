"""
Dummy node insertion for layered DAG layout.

Crossing minimization and coordinate assignment only handle links between
adjacent layers. insert_dummies() builds a LayeredGraph in which every link
spanning more than one layer is replaced by a chain of DummyNodes, one per
intermediate layer. The caller's nodes and links are never modified: dummy
nodes exist only inside the LayeredGraph, and collapse() writes the final
waypoints back onto the original links.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..dag import Dag
from ..types import DummyNode, Link, Node, Point
from ..validation import InternalInvariantError


@dataclass
class LayeredGraph:
    """
    Per-layer node orders plus the unit-span adjacency between them.

    Attributes:
        layers: Nodes of each layer, dummies included, in drawing order.
            This is the only state mutated by crossing minimization.
        children: Unit-span successors of every node
        parents: Unit-span predecessors of every node
        links: The original links, in DAG order
        chains: Dummy nodes standing in for each long link, top to bottom
    """

    layers: list[list[Node]] = field(default_factory=list)
    children: dict[Node, list[Node]] = field(default_factory=dict)
    parents: dict[Node, list[Node]] = field(default_factory=dict)
    links: list[Link] = field(default_factory=list)
    chains: dict[Link, list[DummyNode]] = field(default_factory=dict)

    def nodes(self) -> list[Node]:
        """All nodes, layer by layer."""
        return [node for layer in self.layers for node in layer]

    def collapse(self) -> None:
        """
        Write waypoints onto every original link.

        Each link gets its source position, the position of each dummy in its
        chain, then its target position.
        """
        for link in self.links:
            chain = self.chains.get(link, [])
            link.points = [Point(link.source.x, link.source.y)]
            link.points.extend(Point(dummy.x, dummy.y) for dummy in chain)
            link.points.append(Point(link.target.x, link.target.y))


def insert_dummies(dag: Dag) -> LayeredGraph:
    """
    Build the layered view of a layered DAG.

    Every link with span ``k > 1`` is replaced by ``k - 1`` dummy nodes on
    layers ``source.layer + 1`` through ``target.layer - 1``. Within each
    layer, nodes keep DAG order; dummies follow the real nodes in the order
    their links are encountered.

    Args:
        dag: A DAG whose nodes all carry a layer

    Returns:
        The LayeredGraph

    Raises:
        InternalInvariantError: If a node is unlayered or a link does not
            point to a strictly higher layer
    """
    graph = LayeredGraph()
    if len(dag) == 0:
        return graph

    for node in dag:
        if node.layer is None or node.layer < 0:
            raise InternalInvariantError(f"{node!r} has no valid layer")

    num_layers = max(node.layer for node in dag) + 1  # type: ignore[type-var,operator]
    graph.layers = [[] for _ in range(num_layers)]
    for node in dag:
        graph.layers[node.layer].append(node)  # type: ignore[index]
        graph.children[node] = []
        graph.parents[node] = []

    for link in dag.links():
        span = link.span
        if span < 1:
            raise InternalInvariantError(
                f"{link!r} goes from layer {link.source.layer} to layer {link.target.layer}"
            )
        graph.links.append(link)

        previous = link.source
        chain: list[DummyNode] = []
        for layer in range(link.source.layer + 1, link.target.layer):  # type: ignore[operator]
            dummy = DummyNode(layer, link)
            graph.layers[layer].append(dummy)
            graph.children[dummy] = []
            graph.parents[dummy] = []
            _join(graph, previous, dummy)
            chain.append(dummy)
            previous = dummy
        _join(graph, previous, link.target)

        if chain:
            graph.chains[link] = chain

    return graph


def _join(graph: LayeredGraph, source: Node, target: Node) -> None:
    graph.children[source].append(target)
    graph.parents[target].append(source)


__all__ = [
    "LayeredGraph",
    "insert_dummies",
]
