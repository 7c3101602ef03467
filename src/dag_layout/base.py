"""
Base classes for DAG layout algorithms.

This module provides abstract base classes that define the common interface
and shared functionality for all layout algorithms:

- BaseLayout: Abstract base with event system, DAG input and canvas size
- StaticLayout: For single-pass layouts (layered, lane)
"""

from __future__ import annotations

import warnings
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

if TYPE_CHECKING:
    from typing_extensions import Self

from .dag import Dag, topological_order
from .types import (
    Event,
    EventType,
    Link,
    LinkLike,
    Node,
    NodeLike,
    SizeType,
)
from .validation import validate_canvas_size


class GraphStructureWarning(UserWarning):
    """Warning issued when graph structure makes a layout degenerate."""

    pass


class BaseLayout(ABC):
    """
    Abstract base class for all layout algorithms.

    Provides shared infrastructure:
    - Event system (start/end events)
    - DAG input, either as a Dag or as nodes plus index-based links
    - Canvas size management

    Example:
        layout = SomeLayout(
            nodes=["a", "b", "c"],
            links=[{"source": 0, "target": 1}, {"source": 0, "target": 2}],
            size=(800, 600),
        )
        layout.run()

        # Access results via properties
        for node in layout.nodes:
            print(f"Node {node.data}: ({node.x}, {node.y})")
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
    ) -> None:
        """
        Initialize layout with configuration.

        Args:
            dag: The DAG to lay out
            nodes: Alternatively, nodes (Node objects, dicts or payloads)
            links: Index-based links between ``nodes``
            size: Canvas size as (width, height)
            on_start: Callback for start event
            on_end: Callback for end event

        Raises:
            ValueError: If both dag and nodes are given
        """
        if dag is not None and (nodes is not None or links is not None):
            raise ValueError("pass either dag or nodes/links, not both")

        self._dag: Dag = Dag([])
        self._canvas_size: Optional[tuple[float, float]] = None
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}

        # Set initial values via properties (triggers normalization)
        if dag is not None:
            self.dag = dag
        elif nodes is not None:
            self._dag = Dag.from_links(nodes, links or [])
        self.size = size

        # Register event callbacks
        if on_start:
            self._events[EventType.start] = on_start
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def dag(self) -> Dag:
        """Get the DAG being laid out."""
        return self._dag

    @dag.setter
    def dag(self, value: Dag) -> None:
        """Set the DAG to lay out."""
        if not isinstance(value, Dag):
            raise TypeError(f"dag must be a Dag, got {type(value).__name__}")
        self._dag = value

    @property
    def nodes(self) -> list[Node]:
        """Get the list of nodes."""
        return self._dag.nodes

    @property
    def links(self) -> list[Link]:
        """Get the list of links."""
        return list(self._dag.links())

    @property
    def size(self) -> Optional[tuple[float, float]]:
        """Get canvas size as (width, height), or None if unset."""
        return self._canvas_size

    @size.setter
    def size(self, value: Optional[SizeType]) -> None:
        """
        Set canvas size.

        Args:
            value: (width, height) tuple, list, or sequence; None to unset

        Raises:
            InvalidCanvasSizeError: If width or height is not positive.
        """
        if value is None:
            self._canvas_size = None
        else:
            self._canvas_size = validate_canvas_size(value)

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a layout event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> Self:
        """
        Validate current configuration.

        Checks that the graph is acyclic. Called automatically by run() but
        can be called early for fail-fast behavior.

        Returns:
            self (for chaining)

        Raises:
            CycleError: If the graph contains a cycle.
        """
        topological_order(self._dag)
        return self

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    @abstractmethod
    def run(self, **kwargs: Any) -> Self:
        """
        Run the layout algorithm.

        Returns:
            self (for chaining)
        """
        pass


class StaticLayout(BaseLayout):
    """
    Base class for single-pass layout algorithms.

    These layouts compute positions in one pass without iteration.
    Subclasses implement ``_compute()`` and return the drawing's extent.
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._width: float = 0.0
        self._height: float = 0.0

    @property
    def width(self) -> float:
        """Width of the last computed drawing."""
        return self._width

    @property
    def height(self) -> float:
        """Height of the last computed drawing."""
        return self._height

    def run(self, **kwargs: Any) -> Self:
        """
        Run the layout algorithm.

        Fires start event, computes layout, fires end event. A graph
        without nodes is left untouched.

        Args:
            **kwargs: Additional arguments passed to _compute()

        Returns:
            self (for chaining)
        """
        self.trigger({"type": EventType.start})

        if len(self._dag) == 0:
            warnings.warn(
                "Layout run on a graph without nodes; nothing to position.",
                GraphStructureWarning,
                stacklevel=2,
            )
            self._width, self._height = 0.0, 0.0
        else:
            self._width, self._height = self._compute(**kwargs)

        self.trigger({"type": EventType.end, "width": self._width, "height": self._height})
        return self

    @abstractmethod
    def _compute(self, **kwargs: Any) -> tuple[float, float]:
        """
        Compute node positions and link waypoints.

        Returns:
            (width, height) of the drawing
        """
        pass


__all__ = [
    "BaseLayout",
    "StaticLayout",
    "GraphStructureWarning",
]
