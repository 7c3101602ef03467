"""
Common types for DAG layout algorithms.

This module provides the fundamental types used across all layout algorithms:
- Node: DAG vertex with layer, position and outgoing links
- DummyNode: Placeholder node used to split links spanning several layers
- Link: Directed edge carrying the waypoints of its rendered path
- Point: A single waypoint
- EventType: Layout lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Optional, Sequence, TypedDict, Union


class EventType(IntEnum):
    """
    Layout lifecycle events.

    - start: Layout computation has begun
    - end: Layout computation has finished
    """

    start = 0
    end = 1


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    width: float
    height: float


@dataclass
class Point:
    """A waypoint of a rendered link."""

    x: float
    y: float


class Node:
    """
    DAG node with layer, position and outgoing links.

    Nodes compare by identity: two nodes carrying equal data are still
    distinct vertices.

    Attributes:
        data: Optional payload
        index: Position in the owning DAG's node list (set by the DAG)
        layer: Layer assigned by a layering or by the lane layout
        x: X coordinate (centroid)
        y: Y coordinate (centroid)
        width: Node width used by the default node-size accessor
        height: Node height used by the default node-size accessor
        links: Outgoing links in insertion order
    """

    def __init__(self, data: Any = None, **kwargs: Any) -> None:
        """Initialize node with optional payload and properties."""
        self.data: Any = data
        self.index: Optional[int] = kwargs.get("index")
        self.layer: Optional[int] = kwargs.get("layer")
        self.x: float = kwargs.get("x", 0.0)
        self.y: float = kwargs.get("y", 0.0)
        self.width: Optional[float] = kwargs.get("width")
        self.height: Optional[float] = kwargs.get("height")
        self.links: list[Link] = []

        # Copy any additional custom properties
        for key, value in kwargs.items():
            if not hasattr(self, key):
                setattr(self, key, value)

    def children(self) -> list[Node]:
        """Get the targets of this node's outgoing links, in link order."""
        return [link.target for link in self.links]

    def add_child(self, target: Node, data: Any = None) -> Link:
        """
        Append a link from this node to ``target``.

        Args:
            target: Child node
            data: Optional link payload

        Returns:
            The new link
        """
        link = Link(self, target, data)
        self.links.append(link)
        return link

    def __repr__(self) -> str:
        return f"Node(data={self.data!r}, layer={self.layer}, x={self.x:.2f}, y={self.y:.2f})"


class DummyNode(Node):
    """
    Placeholder node on an intermediate layer of a long link.

    Dummy nodes exist only for the duration of one layered layout and carry
    no payload. Their size defaults to zero.
    """

    def __init__(self, layer: int, link: Link) -> None:
        super().__init__(None, layer=layer, width=0.0, height=0.0)
        self.link = link

    def __repr__(self) -> str:
        return f"DummyNode(layer={self.layer}, x={self.x:.2f})"


class Link:
    """
    Directed edge between two nodes.

    Attributes:
        source: Source node
        target: Target node
        data: Optional payload
        points: Waypoints of the rendered path, source first, target last
    """

    def __init__(self, source: Node, target: Node, data: Any = None) -> None:
        """
        Initialize link between two nodes.

        Args:
            source: Source node (required)
            target: Target node (required)
            data: Optional payload

        Raises:
            ValueError: If source or target is None
        """
        if source is None:
            raise ValueError("Link source cannot be None")
        if target is None:
            raise ValueError("Link target cannot be None")

        self.source = source
        self.target = target
        self.data = data
        self.points: list[Point] = []

    @property
    def span(self) -> int:
        """Number of layers crossed by this link (target layer - source layer)."""
        if self.source.layer is None or self.target.layer is None:
            raise ValueError("span requires both endpoints to be layered")
        return self.target.layer - self.source.layer

    def __repr__(self) -> str:
        return f"Link({self.source.data!r} -> {self.target.data!r})"


# Type aliases for callbacks
NodeSizeAccessor = Callable[[Node], tuple[float, float]]
"""Maps a node (real or dummy) to its (width, height)."""

# Type aliases for Pythonic API
# These allow flexible input types while maintaining type safety
NodeLike = Union[Node, dict[str, Any], Any]
"""Input type for nodes: Node objects, dicts, or arbitrary payloads."""

LinkLike = Union[dict[str, Any], Sequence[int], Any]
"""Input type for index-based links: dicts or objects with source/target."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Canvas size: (width, height) tuple, list, or sequence."""


def default_node_size(node: Node) -> tuple[float, float]:
    """
    Default node-size accessor.

    Real nodes use their ``width``/``height`` attributes, falling back to 1;
    dummy nodes are zero-sized.
    """
    if isinstance(node, DummyNode):
        return 0.0, 0.0
    width = 1.0 if node.width is None else float(node.width)
    height = 1.0 if node.height is None else float(node.height)
    return width, height


__all__ = [
    "EventType",
    "Event",
    "Point",
    "Node",
    "DummyNode",
    "Link",
    "NodeSizeAccessor",
    "default_node_size",
    # Pythonic API type aliases
    "NodeLike",
    "LinkLike",
    "SizeType",
]
