"""
Layer assignment for layered DAG layout.

Every strategy sets ``node.layer`` so that each link goes from a lower layer
to a strictly higher one, with the minimum layer normalized to 0:

- longest path: sources on layer 0, every node one below its deepest parent
- Coffman-Graham: bounded layer width with a stable priority order
- simplex: minimum total link length, solved as an integer linear program
"""

from __future__ import annotations

import heapq
import math
from typing import Optional

import numpy as np

from ..dag import Dag, topological_order
from ..solver import solve_milp
from ..types import Node
from ..validation import ConfigurationError, SolverInfeasibleError, validate_choice

LAYERINGS = ("simplex", "longest-path", "coffman-graham")


def layering_longest_path(dag: Dag) -> None:
    """
    Assign layers using the longest path from any source.

    Sources are placed on layer 0 and every other node on
    ``max(layer(parent) + 1)``. Runs in O(V + E).

    Raises:
        CycleError: If the graph has a cycle
    """
    ordered = topological_order(dag)
    for node in ordered:
        node.layer = 0
    for node in ordered:
        for child in node.children():
            child.layer = max(child.layer, node.layer + 1)  # type: ignore[type-var,operator]
    _normalize(ordered)


def layering_coffman_graham(dag: Dag, max_width: Optional[int] = None) -> None:
    """
    Assign layers with at most ``max_width`` nodes per layer.

    Nodes become available once all their parents have been placed. Among
    available nodes, the one whose parents were placed earliest goes first:
    the placement indices of its parents, sorted descending, are compared
    lexicographically. Equal priorities fall back to DAG node order, so the
    result is fully deterministic.

    A node joins the current layer when the layer still has room and none of
    its parents are on it; otherwise it opens the next layer.

    Args:
        dag: The graph to layer
        max_width: Maximum nodes per layer. None means
            ``floor(sqrt(n) + 0.5)``.

    Raises:
        ConfigurationError: If max_width is less than 1
        CycleError: If the graph has a cycle
    """
    ordered = topological_order(dag)
    if max_width is None:
        max_width = max(1, math.floor(math.sqrt(len(ordered)) + 0.5))
    elif max_width < 1:
        raise ConfigurationError(f"max_width must be at least 1, got {max_width}")

    parents = dag.parents_map()
    order = {node: i for i, node in enumerate(dag.nodes)}
    unplaced = {node: len(parents[node]) for node in ordered}
    before: dict[Node, list[int]] = {node: [] for node in ordered}

    queue: list[tuple[list[int], int, Node]] = []
    for node in ordered:
        if not unplaced[node]:
            heapq.heappush(queue, ([], order[node], node))

    layer = 0
    width = 0
    placed = 0
    while queue:
        _, _, node = heapq.heappop(queue)
        if width < max_width and all(p.layer < layer for p in parents[node]):  # type: ignore[operator]
            node.layer = layer
            width += 1
        else:
            layer += 1
            node.layer = layer
            width = 1

        for child in node.children():
            before[child].append(placed)
            unplaced[child] -= 1
            if not unplaced[child]:
                key = sorted(before[child], reverse=True)
                heapq.heappush(queue, (key, order[child], child))
        placed += 1

    _normalize(ordered)


def layering_simplex(dag: Dag) -> None:
    """
    Assign layers minimizing the total length of all links.

    Formulates ``min sum(layer(t) - layer(s))`` subject to
    ``layer(t) - layer(s) >= 1`` for every link, with integral non-negative
    layers, and hands it to the MILP solver. Ties are broken towards the
    lowest layers, so disconnected parts never leave empty layers behind.

    Raises:
        CycleError: If the graph has a cycle
        SolverInfeasibleError: If the solver fails to produce a layering
    """
    ordered = topological_order(dag)
    n = len(ordered)
    if n == 0:
        return
    index = {node: i for i, node in enumerate(ordered)}
    links = list(dag.links())

    # Objective: each link contributes +1 to its target and -1 to its source
    c = np.zeros(n)
    A_rows = []
    for link in links:
        s, t = index[link.source], index[link.target]
        c[t] += 1.0
        c[s] -= 1.0
        # layer(s) - layer(t) <= -1
        row = np.zeros(n)
        row[s] = 1.0
        row[t] = -1.0
        A_rows.append(row)

    A_ub = np.array(A_rows) if A_rows else None
    b_ub = np.full(len(A_rows), -1.0) if A_rows else None

    # Among optimal layerings prefer low layers; the bias totals less than one
    # unit of link length, so it never trades one away
    c += 1.0 / (n * n)

    # Layers never need to exceed the longest possible chain
    result = solve_milp(c, A_ub, b_ub, ub=np.full(n, float(n - 1)))
    if not result.success or result.x is None:
        raise SolverInfeasibleError(f"simplex layering failed: {result.status}")

    for node, value in zip(ordered, result.x):
        node.layer = int(value)
    _normalize(ordered)


def assign_layers(dag: Dag, strategy: str = "simplex", max_width: Optional[int] = None) -> None:
    """
    Assign layers with the named strategy.

    Args:
        dag: The graph to layer
        strategy: One of ``"simplex"``, ``"longest-path"``, ``"coffman-graham"``
        max_width: Layer width bound for ``"coffman-graham"``

    Raises:
        ConfigurationError: If the strategy is unknown
        CycleError: If the graph has a cycle
    """
    validate_choice(strategy, LAYERINGS, "layering")
    if strategy == "simplex":
        layering_simplex(dag)
    elif strategy == "longest-path":
        layering_longest_path(dag)
    else:
        layering_coffman_graham(dag, max_width)


def _normalize(nodes: list[Node]) -> None:
    """Shift layers so the minimum is 0."""
    if not nodes:
        return
    offset = min(node.layer for node in nodes)  # type: ignore[type-var]
    for node in nodes:
        node.layer -= offset  # type: ignore[operator]


__all__ = [
    "LAYERINGS",
    "assign_layers",
    "layering_longest_path",
    "layering_coffman_graham",
    "layering_simplex",
]
