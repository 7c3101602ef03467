"""
Hierarchical DAG layout algorithms.

This module provides the layered and lane layouts for DAGs:
- SugiyamaLayout: Layered layout (layering, decrossing, coordinates)
- ZherebkoLayout: Compact topological layout with lanes for long links

The individual phases of the layered layout are exported as well, so they
can be run and inspected separately.
"""

from .coord import QuadWeights, assign_coordinates, min_curve_weights
from .decross import (
    DECROSS_METHODS,
    LayoutPerformanceWarning,
    count_crossings,
    reorder_layers,
    two_layer_barycenter,
    two_layer_median,
    two_layer_opt,
)
from .dummy import LayeredGraph, insert_dummies
from .layering import (
    LAYERINGS,
    assign_layers,
    layering_coffman_graham,
    layering_longest_path,
    layering_simplex,
)
from .sugiyama import SugiyamaConfig, SugiyamaLayout, sugiyama
from .zherebko import LaneMap, ZherebkoLayout, assign_lanes, zherebko

__all__ = [
    # Layouts
    "SugiyamaLayout",
    "SugiyamaConfig",
    "sugiyama",
    "ZherebkoLayout",
    "zherebko",
    "assign_lanes",
    "LaneMap",
    # Layering
    "LAYERINGS",
    "assign_layers",
    "layering_longest_path",
    "layering_coffman_graham",
    "layering_simplex",
    # Dummy nodes
    "LayeredGraph",
    "insert_dummies",
    # Crossing minimization
    "DECROSS_METHODS",
    "LayoutPerformanceWarning",
    "two_layer_median",
    "two_layer_barycenter",
    "two_layer_opt",
    "count_crossings",
    "reorder_layers",
    # Coordinates
    "QuadWeights",
    "min_curve_weights",
    "assign_coordinates",
]
