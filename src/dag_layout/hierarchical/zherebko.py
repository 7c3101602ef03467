"""
Zherebko compact lane layout.

A topological drawing of a DAG that needs no optimization: nodes are
placed one per layer along a single vertical axis in topological order, and
links spanning more than one layer are routed through vertical "lanes" to
the left and right of that axis.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from ..base import StaticLayout
from ..dag import Dag, topological_order
from ..types import Event, Link, LinkLike, Node, NodeLike, Point, SizeType
from ..validation import InternalInvariantError, validate_canvas_size

LaneMap = dict[tuple[Node, Node], int]
"""Lane of every long link, keyed by (source, target)."""


def assign_lanes(ordered: Sequence[Node]) -> LaneMap:
    """
    Greedily assign a lane to every link spanning more than one layer.

    Nodes are visited in layer order. At each node, lanes held by links that
    end at or above it are released first; then its long links, shortest
    first, each take the free lane closest to the axis (1, -1, 2, -2, ...).
    Lane 0 is the node axis and is never assigned.

    Two links share a lane only if their spans (source layer, target layer)
    do not overlap.

    Args:
        ordered: Nodes with ``layer`` set to their topological index

    Returns:
        Lane of each long link.
    """
    lanes: LaneMap = {}
    occupied: dict[int, int] = {}  # lane -> layer where its link ends

    for node in ordered:
        for lane, end in list(occupied.items()):
            if end <= node.layer:  # type: ignore[operator]
                del occupied[lane]

        long_links = sorted((link for link in node.links if link.span > 1), key=lambda link: link.span)
        for link in long_links:
            lane = _closest_free_lane(occupied)
            occupied[lane] = link.target.layer  # type: ignore[assignment]
            lanes[(link.source, link.target)] = lane

    return lanes


def _closest_free_lane(occupied: dict[int, int]) -> int:
    magnitude = 1
    while True:
        if magnitude not in occupied:
            return magnitude
        if -magnitude not in occupied:
            return -magnitude
        magnitude += 1


def _lane_of(lanes: LaneMap, link: Link) -> int:
    lane = lanes.get((link.source, link.target))
    if lane is None:
        raise InternalInvariantError(f"no lane was assigned to long link {link!r}")
    return lane


def zherebko(dag: Dag, size: SizeType = (1.0, 1.0)) -> LaneMap:
    """
    Lay out a DAG with one node per layer and lanes for long links.

    Sets ``layer`` (the topological index), ``x`` and ``y`` on every node and
    the waypoints of every link.

    Args:
        dag: The graph to lay out
        size: Canvas size as (width, height)

    Returns:
        Lane of each long link.

    Raises:
        CycleError: If the graph has a cycle
        InvalidCanvasSizeError: If the canvas size is not positive
        InternalInvariantError: If a long link ends up without a lane
    """
    width, height = validate_canvas_size(size)
    ordered = topological_order(dag)
    if not ordered:
        return {}

    for layer, node in enumerate(ordered):
        node.layer = layer

    max_layer = len(ordered) - 1
    if max_layer == 0:
        # center if only one node
        node = ordered[0]
        node.x = width / 2
        node.y = height / 2
        return {}

    lanes = assign_lanes(ordered)

    min_lane = 0
    max_lane = 0
    for link in dag.links():
        if link.span > 1:
            lane = _lane_of(lanes, link)
            min_lane = min(min_lane, lane)
            max_lane = max(max_lane, lane)
    if min_lane == max_lane:
        # a simple line: keep the axis in the middle
        min_lane, max_lane = -1, 1

    for node in ordered:
        node.x = -min_lane / (max_lane - min_lane) * width
        node.y = node.layer / max_layer * height  # type: ignore[operator]

    for link in dag.links():
        source, target = link.source, link.target
        link.points = [Point(source.x, source.y)]
        if link.span > 1:
            x = (_lane_of(lanes, link) - min_lane) / (max_lane - min_lane) * width
            y1 = (source.layer + 1) / max_layer * height  # type: ignore[operator]
            y2 = (target.layer - 1) / max_layer * height  # type: ignore[operator]
            link.points.append(Point(x, y1))
            if link.span > 2:
                link.points.append(Point(x, y2))
        link.points.append(Point(target.x, target.y))

    return lanes


class ZherebkoLayout(StaticLayout):
    """
    Compact topological layout with lanes for long links.

    Example:
        layout = ZherebkoLayout(
            nodes=["a", "b", "c"],
            links=[
                {'source': 0, 'target': 1},
                {'source': 1, 'target': 2},
                {'source': 0, 'target': 2},
            ],
            size=(400, 600),
        )
        layout.run()
    """

    def __init__(
        self,
        *,
        dag: Optional[Dag] = None,
        nodes: Optional[Sequence[NodeLike]] = None,
        links: Optional[Sequence[LinkLike]] = None,
        size: SizeType = (1.0, 1.0),
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Initialize Zherebko layout.

        Args:
            dag: The DAG to lay out
            nodes: Alternatively, nodes (Node objects, dicts or payloads)
            links: Index-based links between ``nodes``
            size: Canvas size as (width, height)
            on_start: Callback for start event
            on_end: Callback for end event
        """
        super().__init__(
            dag=dag,
            nodes=nodes,
            links=links,
            size=size,
            on_start=on_start,
            on_end=on_end,
        )
        self._lanes: LaneMap = {}

    @property
    def size(self) -> tuple[float, float]:
        """Get canvas size as (width, height)."""
        return self._canvas_size  # type: ignore[return-value]

    @size.setter
    def size(self, value: SizeType) -> None:
        """Set canvas size; the lane layout always needs one."""
        self._canvas_size = validate_canvas_size(value)

    @property
    def lanes(self) -> LaneMap:
        """Lanes assigned to long links by the last run."""
        return self._lanes

    def _compute(self, **kwargs: Any) -> tuple[float, float]:
        """Compute Zherebko layout."""
        self._lanes = zherebko(self._dag, self.size)
        return self.size


__all__ = ["LaneMap", "ZherebkoLayout", "assign_lanes", "zherebko"]
