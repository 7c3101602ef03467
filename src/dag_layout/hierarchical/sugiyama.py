"""
Sugiyama layered DAG layout.

Based on the framework from:
"Methods for Visual Understanding of Hierarchical System Structures"
by Sugiyama, Tagawa, and Toda (1981)

The pipeline runs these phases:
1. Layer assignment (longest path, Coffman-Graham or simplex)
2. Dummy node insertion for links spanning several layers
3. Crossing minimization (median, barycenter or exact two-layer sweeps)
4. Coordinate assignment (quadratic program)
5. Waypoints written back onto the original links

Configuration is an immutable SugiyamaConfig; sugiyama() applies it to a DAG.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Sequence

from ..base import StaticLayout
from ..dag import Dag
from ..solver import FEASIBILITY_TOLERANCE
from ..types import (
    Event,
    LinkLike,
    NodeLike,
    NodeSizeAccessor,
    SizeType,
)
from ..validation import (
    ConfigurationError,
    validate_canvas_size,
    validate_choice,
    validate_iterations,
    validate_non_negative,
    validate_weight,
)
from .coord import QuadWeights, assign_coordinates, min_curve_weights
from .decross import DECROSS_METHODS, reorder_layers
from .dummy import insert_dummies
from .layering import LAYERINGS, assign_layers


@dataclass(frozen=True)
class SugiyamaConfig:
    """
    Options of the layered layout. Validated on construction.

    Attributes:
        layering: ``"simplex"``, ``"longest-path"`` or ``"coffman-graham"``
        max_width: Layer width bound for Coffman-Graham (None for automatic)
        decross: ``"median"``, ``"barycenter"`` or ``"opt"``
        decross_iterations: Maximum crossing minimization sweeps
        weight: Curvature versus closeness trade-off in [0, 1)
        gap: Extra horizontal space between adjacent nodes
        node_size: (width, height) accessor for real and dummy nodes
        size: Canvas to scale the drawing into, or None for node units
    """

    layering: str = "simplex"
    max_width: Optional[int] = None
    decross: str = "median"
    decross_iterations: int = 24
    weight: float = 0.5
    gap: float = 0.0
    node_size: Optional[NodeSizeAccessor] = None
    size: Optional[tuple[float, float]] = None

    def __post_init__(self) -> None:
        validate_choice(self.layering, LAYERINGS, "layering")
        if self.max_width is not None and self.max_width < 1:
            raise ConfigurationError(f"max_width must be at least 1, got {self.max_width}")
        validate_choice(self.decross, DECROSS_METHODS, "decross method")
        object.__setattr__(
            self, "decross_iterations", validate_iterations(self.decross_iterations)
        )
        object.__setattr__(self, "weight", validate_weight(self.weight))
        object.__setattr__(self, "gap", validate_non_negative(self.gap, "gap"))
        if self.node_size is not None and not callable(self.node_size):
            raise ConfigurationError("node_size must be callable")
        if self.size is not None:
            object.__setattr__(self, "size", validate_canvas_size(self.size))

    @property
    def weights(self) -> QuadWeights:
        """Coordinate objective weights derived from ``weight``."""
        return min_curve_weights(self.weight)


def sugiyama(dag: Dag, config: Optional[SugiyamaConfig] = None) -> tuple[float, float]:
    """
    Lay out a DAG in layers.

    Sets ``layer``, ``x`` and ``y`` on every node and the waypoints of every
    link. Dummy nodes live only inside this call.

    Args:
        dag: The graph to lay out
        config: Layout options (default SugiyamaConfig())

    Returns:
        (width, height) of the drawing; the canvas size when one is configured.

    Raises:
        CycleError: If the graph has a cycle
        SolverInfeasibleError: If an optimization step fails
        ConfigurationError: If the canvas is narrower than the drawing
    """
    if config is None:
        config = SugiyamaConfig()
    if len(dag) == 0:
        return 0.0, 0.0

    assign_layers(dag, config.layering, config.max_width)
    layered = insert_dummies(dag)
    reorder_layers(layered, config.decross_iterations, config.decross)
    width, height = assign_coordinates(layered, config.node_size, config.weights, config.gap)

    if config.size is not None:
        canvas_w, canvas_h = config.size
        if canvas_w < width - FEASIBILITY_TOLERANCE:
            raise ConfigurationError(
                f"canvas width {canvas_w} is narrower than the drawing ({width:.6g}); "
                "nodes would not fit without overlapping"
            )
        for node in layered.nodes():
            node.x = node.x * canvas_w / width if width > 0 else canvas_w / 2
            node.y = node.y * canvas_h / height
        width, height = canvas_w, canvas_h

    layered.collapse()
    return width, height


class SugiyamaLayout(StaticLayout):
    """
    Sugiyama layered DAG layout.

    Arranges nodes in horizontal layers with links flowing downward,
    minimizing link crossings and bends.

    Example:
        layout = SugiyamaLayout(
            nodes=["a", "b", "c", "d"],
            links=[
                {'source': 0, 'target': 1},
                {'source': 0, 'target': 2},
                {'source': 1, 'target': 3},
                {'source': 2, 'target': 3},
            ],
            layering="longest-path",
        )
        layout.run()
        for link in layout.links:
            print(link.points)
    """

    def __init__(
        self,
        *,
        dag: Optional[Dag] = None,
        nodes: Optional[Sequence[NodeLike]] = None,
        links: Optional[Sequence[LinkLike]] = None,
        size: Optional[SizeType] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
        # Sugiyama-specific parameters
        layering: str = "simplex",
        max_width: Optional[int] = None,
        decross: str = "median",
        decross_iterations: int = 24,
        weight: float = 0.5,
        gap: float = 0.0,
        node_size: Optional[NodeSizeAccessor] = None,
    ) -> None:
        """
        Initialize Sugiyama layout.

        Args:
            dag: The DAG to lay out
            nodes: Alternatively, nodes (Node objects, dicts or payloads)
            links: Index-based links between ``nodes``
            size: Canvas size as (width, height); None keeps node units
            on_start: Callback for start event
            on_end: Callback for end event
            layering: Layer assignment strategy.
            max_width: Maximum layer width for Coffman-Graham layering.
            decross: Crossing minimization method.
            decross_iterations: Maximum number of crossing minimization sweeps.
            weight: Trade-off between straight links (towards 1) and compact
                layers (towards 0), in [0, 1).
            gap: Extra horizontal space between adjacent nodes.
            node_size: Function returning (width, height) for any node,
                including DummyNode instances.

        Raises:
            ConfigurationError: If any option is out of range.
        """
        super().__init__(
            dag=dag,
            nodes=nodes,
            links=links,
            size=size,
            on_start=on_start,
            on_end=on_end,
        )

        self._config = SugiyamaConfig(
            layering=layering,
            max_width=max_width,
            decross=decross,
            decross_iterations=decross_iterations,
            weight=weight,
            gap=gap,
            node_size=node_size,
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def config(self) -> SugiyamaConfig:
        """Get the full configuration, including the canvas size."""
        return replace(self._config, size=self.size)

    @property
    def layering(self) -> str:
        """Get the layer assignment strategy."""
        return self._config.layering

    @layering.setter
    def layering(self, value: str) -> None:
        """Set the layer assignment strategy."""
        self._config = replace(self._config, layering=value)

    @property
    def max_width(self) -> Optional[int]:
        """Get the Coffman-Graham layer width bound."""
        return self._config.max_width

    @max_width.setter
    def max_width(self, value: Optional[int]) -> None:
        """Set the Coffman-Graham layer width bound."""
        self._config = replace(self._config, max_width=value)

    @property
    def decross(self) -> str:
        """Get the crossing minimization method."""
        return self._config.decross

    @decross.setter
    def decross(self, value: str) -> None:
        """Set the crossing minimization method."""
        self._config = replace(self._config, decross=value)

    @property
    def decross_iterations(self) -> int:
        """Get the maximum number of crossing minimization sweeps."""
        return self._config.decross_iterations

    @decross_iterations.setter
    def decross_iterations(self, value: int) -> None:
        """Set the maximum number of crossing minimization sweeps."""
        self._config = replace(self._config, decross_iterations=value)

    @property
    def weight(self) -> float:
        """Get the curvature versus closeness weight."""
        return self._config.weight

    @weight.setter
    def weight(self, value: float) -> None:
        """Set the curvature versus closeness weight, in [0, 1)."""
        self._config = replace(self._config, weight=value)

    @property
    def gap(self) -> float:
        """Get the horizontal gap between adjacent nodes."""
        return self._config.gap

    @gap.setter
    def gap(self, value: float) -> None:
        """Set the horizontal gap between adjacent nodes."""
        self._config = replace(self._config, gap=value)

    @property
    def node_size(self) -> Optional[NodeSizeAccessor]:
        """Get the node size accessor."""
        return self._config.node_size

    @node_size.setter
    def node_size(self, value: Optional[NodeSizeAccessor]) -> None:
        """Set the node size accessor."""
        self._config = replace(self._config, node_size=value)

    # -------------------------------------------------------------------------
    # Layout Computation
    # -------------------------------------------------------------------------

    def _compute(self, **kwargs: Any) -> tuple[float, float]:
        """Compute Sugiyama layout."""
        return sugiyama(self._dag, self.config)


__all__ = ["SugiyamaConfig", "SugiyamaLayout", "sugiyama"]
