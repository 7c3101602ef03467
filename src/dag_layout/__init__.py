"""
dag-layout: Layered and lane layouts for directed acyclic graphs.

This package positions the nodes of a DAG and routes its links:
- hierarchical: Sugiyama layered layout and Zherebko lane layout
- dag: DAG container, traversal, topological order and connect()
- solver: linear and quadratic program solvers used by the layouts
"""

__version__ = "0.1.0"

# Base classes for building layouts
from .base import (
    BaseLayout,
    GraphStructureWarning,
    StaticLayout,
)

# DAG structure
from .dag import (
    Dag,
    connect,
    has_cycle,
    topological_order,
)

# Hierarchical layouts
from .hierarchical import (
    LayeredGraph,
    LayoutPerformanceWarning,
    QuadWeights,
    SugiyamaConfig,
    SugiyamaLayout,
    ZherebkoLayout,
    assign_coordinates,
    assign_lanes,
    assign_layers,
    count_crossings,
    insert_dummies,
    min_curve_weights,
    reorder_layers,
    sugiyama,
    zherebko,
)

# Shared types for all algorithms
from .types import (
    DummyNode,
    Event,
    EventType,
    Link,
    LinkLike,
    Node,
    NodeLike,
    NodeSizeAccessor,
    Point,
    SizeType,
)

# Validation utilities
from .validation import (
    ConfigurationError,
    CycleError,
    InternalInvariantError,
    InvalidCanvasSizeError,
    InvalidLinkError,
    SolverInfeasibleError,
    ValidationError,
    validate_canvas_size,
    validate_link_indices,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Node",
    "DummyNode",
    "Link",
    "Point",
    "EventType",
    "Event",
    "NodeSizeAccessor",
    # Type aliases for API
    "NodeLike",
    "LinkLike",
    "SizeType",
    # DAG structure
    "Dag",
    "connect",
    "topological_order",
    "has_cycle",
    # Base classes
    "BaseLayout",
    "StaticLayout",
    "GraphStructureWarning",
    # Hierarchical layouts
    "SugiyamaLayout",
    "SugiyamaConfig",
    "sugiyama",
    "ZherebkoLayout",
    "zherebko",
    "assign_lanes",
    # Layout phases
    "assign_layers",
    "insert_dummies",
    "LayeredGraph",
    "reorder_layers",
    "count_crossings",
    "LayoutPerformanceWarning",
    "assign_coordinates",
    "QuadWeights",
    "min_curve_weights",
    # Validation
    "ValidationError",
    "ConfigurationError",
    "InvalidCanvasSizeError",
    "InvalidLinkError",
    "CycleError",
    "SolverInfeasibleError",
    "InternalInvariantError",
    "validate_canvas_size",
    "validate_link_indices",
]
