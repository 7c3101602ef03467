"""
Horizontal coordinate assignment for layered DAG layout.

Given the final node order of every layer, x coordinates are found by
solving a quadratic program over one variable per node (dummies included):

    minimize   sum over links (u, v) of          vertical * (x_u - x_v)^2
             + sum over paths p -> n -> c of     curve * (x_p - 2 x_n + x_c)^2
             + sum over layer neighbors (i, j) of component * (x_j - x_i)^2
    subject to x_j - x_i >= w_i / 2 + w_j / 2 + gap   for layer neighbors i, j

The vertical term keeps links straight up and down, the curve term keeps
long links from bending at their dummy nodes, and the component term keeps
each layer compact. y coordinates follow directly from the layer index.

Only problem construction lives here; the solve is delegated to
dag_layout.solver.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from ..solver import FEASIBILITY_TOLERANCE, solve_qp
from ..types import DummyNode, Node, NodeSizeAccessor, default_node_size
from ..validation import (
    ConfigurationError,
    SolverInfeasibleError,
    validate_non_negative,
    validate_weight,
)
from .dummy import LayeredGraph

# Strict convexity; the objective is otherwise invariant under translation
_RIDGE = 1e-6


@dataclass(frozen=True)
class QuadWeights:
    """
    Weights of the coordinate objective.

    Attributes:
        vertical: (regular, dummy) weight of keeping links vertical. A link
            uses the mean of its endpoints' weights.
        curve: (regular, dummy) weight of keeping links straight through a
            node, by the type of the middle node.
        component: Weight of keeping horizontally adjacent nodes close.
    """

    vertical: tuple[float, float] = (1.0, 0.0)
    curve: tuple[float, float] = (0.0, 1.0)
    component: float = 1.0

    def __post_init__(self) -> None:
        for name in ("vertical", "curve"):
            pair = getattr(self, name)
            if len(pair) != 2:
                raise ConfigurationError(f"{name} must be a (regular, dummy) pair, got {pair}")
            for value in pair:
                validate_non_negative(value, f"{name} weight")
        validate_non_negative(self.component, "component weight")
        if not any(self.vertical) and not self.component:
            raise ConfigurationError(
                "at least one vertical or component weight must be positive; "
                "minimizing curvature alone is under-constrained"
            )


def min_curve_weights(weight: float = 0.5) -> QuadWeights:
    """
    Weights trading curvature against closeness with a single parameter.

    Higher weights favor straight links, lower weights favor nodes close to
    their neighbors.

    Args:
        weight: Trade-off in [0, 1)

    Raises:
        ConfigurationError: If weight is not in [0, 1)
    """
    weight = validate_weight(weight)
    vertical = (1 - weight) / 2
    return QuadWeights(vertical=(vertical, vertical), curve=(weight, weight), component=0.5)


def assign_coordinates(
    layered: LayeredGraph,
    node_size: Optional[NodeSizeAccessor] = None,
    weights: Optional[QuadWeights] = None,
    gap: float = 0.0,
) -> tuple[float, float]:
    """
    Write x and y onto every node of a layered graph.

    x values are shifted so the leftmost node edge sits at 0. Each layer is
    as tall as the tallest node, and nodes are vertically centered in their
    layer.

    Args:
        layered: Layered graph with its final layer orders
        node_size: (width, height) of each node; defaults to the node's own
            width/height (1 if unset) and zero for dummies
        weights: Objective weights (default QuadWeights())
        gap: Extra horizontal space between adjacent nodes

    Returns:
        (width, height) of the drawing.

    Raises:
        ConfigurationError: If a node size or the gap is negative
        SolverInfeasibleError: If the solver returns no feasible assignment
    """
    if node_size is None:
        node_size = default_node_size
    if weights is None:
        weights = QuadWeights()
    gap = validate_non_negative(gap, "gap")

    nodes = layered.nodes()
    if not nodes:
        return 0.0, 0.0

    index = {node: i for i, node in enumerate(nodes)}
    widths = np.zeros(len(nodes))
    max_height = 0.0
    for i, node in enumerate(nodes):
        width, height = node_size(node)
        widths[i] = validate_non_negative(width, "node width")
        max_height = max(max_height, validate_non_negative(height, "node height"))

    P = _objective(layered, index, weights)
    A, b = _separation_constraints(layered, index, widths, gap)

    result = solve_qp(P, A=A, b=b, x0=_initial_positions(layered, index, widths, gap))
    if not result.success or result.x is None:
        layer, pair = _first_violation(layered, index, widths, gap, result.x)
        raise SolverInfeasibleError(
            f"coordinate assignment found no feasible solution: {result.status}",
            layer=layer,
            pair=pair,
        )

    x = _enforce_separation(layered, index, widths, gap, result.x)
    x -= np.min(x - widths / 2)

    layer_height = max_height if max_height > 0 else 1.0
    for layer_index, layer in enumerate(layered.layers):
        for node in layer:
            node.x = float(x[index[node]])
            node.y = (layer_index + 0.5) * layer_height

    width = float(np.max(x + widths / 2))
    height = len(layered.layers) * layer_height
    return width, height


# =============================================================================
# Problem Construction
# =============================================================================


def _objective(layered: LayeredGraph, index: dict[Node, int], weights: QuadWeights) -> np.ndarray:
    n = len(index)
    P = np.zeros((n, n))

    def kind(node: Node) -> int:
        return 1 if isinstance(node, DummyNode) else 0

    for node, children in layered.children.items():
        for child in children:
            weight = (weights.vertical[kind(node)] + weights.vertical[kind(child)]) / 2
            _add_square(P, [index[node], index[child]], [1.0, -1.0], weight)

    for node, parents in layered.parents.items():
        weight = weights.curve[kind(node)]
        if not weight:
            continue
        for parent in parents:
            for child in layered.children[node]:
                _add_square(
                    P, [index[parent], index[node], index[child]], [1.0, -2.0, 1.0], weight
                )

    if weights.component:
        for layer in layered.layers:
            for left, right in zip(layer, layer[1:]):
                _add_square(P, [index[left], index[right]], [1.0, -1.0], weights.component)

    P += _RIDGE * np.eye(n)
    return P


def _add_square(P: np.ndarray, indices: Sequence[int], coeffs: Sequence[float], weight: float) -> None:
    """Add ``weight * (sum coeffs[k] * x[indices[k]])^2`` as ``0.5 * x @ P @ x``."""
    if not weight:
        return
    for i, ci in zip(indices, coeffs):
        for j, cj in zip(indices, coeffs):
            P[i, j] += 2 * weight * ci * cj


def _separations(
    layer: Sequence[Node], index: dict[Node, int], widths: np.ndarray, gap: float
) -> list[float]:
    return [
        widths[index[left]] / 2 + widths[index[right]] / 2 + gap
        for left, right in zip(layer, layer[1:])
    ]


def _separation_constraints(
    layered: LayeredGraph, index: dict[Node, int], widths: np.ndarray, gap: float
) -> tuple[Optional[np.ndarray], Optional[np.ndarray]]:
    rows = []
    bounds = []
    for layer in layered.layers:
        for (left, right), sep in zip(zip(layer, layer[1:]), _separations(layer, index, widths, gap)):
            row = np.zeros(len(index))
            row[index[right]] = 1.0
            row[index[left]] = -1.0
            rows.append(row)
            bounds.append(sep)
    if not rows:
        return None, None
    return np.array(rows), np.array(bounds)


def _initial_positions(
    layered: LayeredGraph, index: dict[Node, int], widths: np.ndarray, gap: float
) -> np.ndarray:
    """Each layer packed tightly and centered on 0; always feasible."""
    x0 = np.zeros(len(index))
    for layer in layered.layers:
        offsets = np.concatenate([[0.0], np.cumsum(_separations(layer, index, widths, gap))])
        offsets -= offsets[-1] / 2
        for node, offset in zip(layer, offsets):
            x0[index[node]] = offset
    return x0


def _enforce_separation(
    layered: LayeredGraph,
    index: dict[Node, int],
    widths: np.ndarray,
    gap: float,
    x: np.ndarray,
) -> np.ndarray:
    """Push nodes right to remove constraint violations within solver tolerance."""
    x = np.array(x, dtype=float)
    for layer in layered.layers:
        for (left, right), sep in zip(zip(layer, layer[1:]), _separations(layer, index, widths, gap)):
            x[index[right]] = max(x[index[right]], x[index[left]] + sep)
    return x


def _first_violation(
    layered: LayeredGraph,
    index: dict[Node, int],
    widths: np.ndarray,
    gap: float,
    x: Optional[np.ndarray],
) -> tuple[Optional[int], Optional[tuple[Node, Node]]]:
    if x is None:
        return None, None
    for layer_index, layer in enumerate(layered.layers):
        for (left, right), sep in zip(zip(layer, layer[1:]), _separations(layer, index, widths, gap)):
            if x[index[right]] - x[index[left]] < sep - FEASIBILITY_TOLERANCE:
                return layer_index, (left, right)
    return None, None


__all__ = [
    "QuadWeights",
    "min_curve_weights",
    "assign_coordinates",
]
