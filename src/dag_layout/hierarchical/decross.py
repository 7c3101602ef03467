"""
Crossing minimization for layered DAG layout.

Reorders nodes within layers to reduce link crossings between adjacent
layers. Every function here only permutes the per-layer node lists.

Two-layer operators reorder a free layer against a fixed neighbor layer:
- two_layer_median: median position of neighbors
- two_layer_barycenter: mean position of neighbors
- two_layer_opt: exact minimum for the two-layer subproblem (integer program)

reorder_layers() sweeps an operator down and up the layers.
"""

from __future__ import annotations

import warnings
from typing import Callable, Mapping, Sequence

import numpy as np
from scipy.sparse import coo_array

from ..solver import solve_milp
from ..types import Node
from ..validation import SolverInfeasibleError, validate_choice, validate_iterations
from .dummy import LayeredGraph

DECROSS_METHODS = ("median", "barycenter", "opt")

# Largest free layer two_layer_opt handles without warning
DEFAULT_MAX_OPT_SIZE = 50

TwoLayerOperator = Callable[[Sequence[Node], list[Node], Mapping[Node, Sequence[Node]]], None]
"""Reorders ``free`` in place given the ``fixed`` layer and each free node's neighbors."""


class LayoutPerformanceWarning(UserWarning):
    """Warning issued when an exact step is likely to be very slow."""

    pass


# =============================================================================
# Two-Layer Operators
# =============================================================================


def two_layer_median(
    fixed: Sequence[Node], free: list[Node], neighbors: Mapping[Node, Sequence[Node]]
) -> None:
    """
    Order ``free`` by the median position of each node's neighbors in ``fixed``.

    Nodes without neighbors keep their current index as key. The sort is
    stable, so equal keys keep their current relative order.
    """
    _order_by_key(fixed, free, neighbors, _median)


def two_layer_barycenter(
    fixed: Sequence[Node], free: list[Node], neighbors: Mapping[Node, Sequence[Node]]
) -> None:
    """
    Order ``free`` by the mean position of each node's neighbors in ``fixed``.

    Nodes without neighbors keep their current index as key. The sort is
    stable, so equal keys keep their current relative order.
    """
    _order_by_key(fixed, free, neighbors, lambda values: sum(values) / len(values))


def two_layer_opt(
    fixed: Sequence[Node],
    free: list[Node],
    neighbors: Mapping[Node, Sequence[Node]],
    max_size: int = DEFAULT_MAX_OPT_SIZE,
) -> None:
    """
    Order ``free`` to minimize crossings with ``fixed`` exactly.

    One binary variable per pair ``i < j`` of free nodes states whether ``i``
    stays before ``j``; transitivity constraints on every triple make the
    pairs a total order. The objective counts the crossings each pair order
    induces, plus a small bonus for keeping the current order so that ties
    are resolved deterministically.

    Optimal for this pair of layers only, not for the whole drawing.

    Raises:
        SolverInfeasibleError: If the integer program cannot be solved
    """
    n = len(free)
    if n < 2:
        return
    if n > max_size:
        warnings.warn(
            f"Exact two-layer ordering of {n} nodes builds {n * (n - 1) * (n - 2) // 6} "
            "constraints and may be very slow.",
            LayoutPerformanceWarning,
            stacklevel=2,
        )

    position = {node: i for i, node in enumerate(fixed)}
    adjacent = [sorted(position[m] for m in neighbors.get(node, ()) if m in position) for node in free]

    # one ordering variable per pair i < j
    pairs = [(i, j) for i in range(n) for j in range(i + 1, n)]
    pair_index = {pair: k for k, pair in enumerate(pairs)}

    tie_break = 1.0 / (n * n)
    c = np.zeros(len(pairs))
    for k, (i, j) in enumerate(pairs):
        # crossings with i before j minus crossings with j before i
        c[k] = _pair_crossings(adjacent[i], adjacent[j]) - _pair_crossings(
            adjacent[j], adjacent[i]
        )
        c[k] -= tie_break

    # 0 <= x_ij + x_jk - x_ik <= 1 for every triple i < j < k; three nonzeros per row
    rows: list[int] = []
    cols: list[int] = []
    vals: list[float] = []
    num_triples = 0
    for i in range(n):
        for j in range(i + 1, n):
            for k in range(j + 1, n):
                rows.extend((num_triples, num_triples, num_triples))
                cols.extend((pair_index[(i, j)], pair_index[(j, k)], pair_index[(i, k)]))
                vals.extend((1.0, 1.0, -1.0))
                num_triples += 1

    A = None
    if num_triples:
        A = coo_array((vals, (rows, cols)), shape=(num_triples, len(pairs))).tocsr()

    result = solve_milp(
        c,
        A,
        b_ub=np.ones(num_triples),
        b_lb=np.zeros(num_triples),
        ub=np.ones(len(pairs)),
    )
    if not result.success or result.x is None:
        raise SolverInfeasibleError(f"two-layer ordering failed: {result.status}")

    # Number of free nodes each node precedes
    precedes = [0] * n
    for k, (i, j) in enumerate(pairs):
        if result.x[k] > 0.5:
            precedes[i] += 1
        else:
            precedes[j] += 1

    ranked = sorted(range(n), key=lambda i: -precedes[i])
    free[:] = [free[i] for i in ranked]


def _order_by_key(
    fixed: Sequence[Node],
    free: list[Node],
    neighbors: Mapping[Node, Sequence[Node]],
    aggregate: Callable[[list[int]], float],
) -> None:
    position = {node: i for i, node in enumerate(fixed)}
    keys: dict[Node, float] = {}
    for index, node in enumerate(free):
        values = [position[m] for m in neighbors.get(node, ()) if m in position]
        keys[node] = aggregate(values) if values else float(index)
    free.sort(key=keys.__getitem__)


def _median(values: list[int]) -> float:
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def _pair_crossings(first: list[int], second: list[int]) -> int:
    """Crossings between two free nodes' links when ``first`` is left of ``second``."""
    return sum(1 for p in first for q in second if p > q)


# =============================================================================
# Crossing Count
# =============================================================================


def count_crossings(layers: Sequence[Sequence[Node]], children: Mapping[Node, Sequence[Node]]) -> int:
    """
    Count link crossings between every pair of adjacent layers.

    Links between layers i and i + 1 are sorted by their upper then lower
    position; the crossings are the inversions of the lower positions,
    counted with an accumulator tree in O(E log V) per layer pair
    (Barth, Juenger and Mutzel).

    Args:
        layers: Node order of each layer
        children: Successors of each node; only those on the next layer count

    Returns:
        Total number of crossings.
    """
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        position = {node: i for i, node in enumerate(lower)}
        sequence: list[int] = []
        for node in upper:
            sequence.extend(sorted(position[c] for c in children.get(node, ()) if c in position))
        total += _count_inversions(sequence, len(lower))
    return total


def _count_inversions(sequence: list[int], size: int) -> int:
    if len(sequence) < 2:
        return 0
    first = 1
    while first < size:
        first *= 2
    tree = [0] * (2 * first - 1)
    first -= 1

    inversions = 0
    for value in sequence:
        index = value + first
        tree[index] += 1
        while index > 0:
            # left child: earlier values under the right sibling are larger
            if index % 2:
                inversions += tree[index + 1]
            index = (index - 1) // 2
            tree[index] += 1
    return inversions


# =============================================================================
# Layer Sweep
# =============================================================================


def reorder_layers(
    layered: LayeredGraph,
    iterations: int = 24,
    method: str = "median",
    max_opt_size: int = DEFAULT_MAX_OPT_SIZE,
) -> int:
    """
    Reduce crossings by sweeping a two-layer operator down and up the layers.

    Even sweeps go top to bottom, reordering each layer against the one above
    it; odd sweeps go bottom to top. After every sweep the crossings are
    recounted: a sweep that adds crossings is undone, so the count never
    increases. The loop ends after ``iterations`` sweeps, when no crossings
    remain, or once a sweep in each direction failed to improve.

    Args:
        layered: Layered graph whose ``layers`` are reordered in place
        iterations: Maximum number of sweeps
        method: ``"median"``, ``"barycenter"`` or ``"opt"``
        max_opt_size: Layer size above which ``"opt"`` warns

    Returns:
        The final number of crossings.

    Raises:
        ConfigurationError: If iterations or method is invalid
    """
    iterations = validate_iterations(iterations)
    validate_choice(method, DECROSS_METHODS, "decross method")
    operator = _operator(method, max_opt_size)

    layers = layered.layers
    best = count_crossings(layers, layered.children)
    if len(layers) < 2 or best == 0:
        return best

    snapshot = [list(layer) for layer in layers]
    stale = 0
    for sweep in range(iterations):
        if sweep % 2 == 0:
            for i in range(1, len(layers)):
                operator(layers[i - 1], layers[i], layered.parents)
        else:
            for i in range(len(layers) - 2, -1, -1):
                operator(layers[i + 1], layers[i], layered.children)

        crossings = count_crossings(layers, layered.children)
        if crossings < best:
            best = crossings
            snapshot = [list(layer) for layer in layers]
            stale = 0
        else:
            if crossings > best:
                for layer, saved in zip(layers, snapshot):
                    layer[:] = saved
            stale += 1

        if best == 0 or stale >= 2:
            break

    return best


def _operator(method: str, max_opt_size: int) -> TwoLayerOperator:
    if method == "median":
        return two_layer_median
    if method == "barycenter":
        return two_layer_barycenter

    def opt(fixed: Sequence[Node], free: list[Node], neighbors: Mapping[Node, Sequence[Node]]) -> None:
        two_layer_opt(fixed, free, neighbors, max_size=max_opt_size)

    return opt


__all__ = [
    "DECROSS_METHODS",
    "LayoutPerformanceWarning",
    "TwoLayerOperator",
    "two_layer_median",
    "two_layer_barycenter",
    "two_layer_opt",
    "count_crossings",
    "reorder_layers",
]
