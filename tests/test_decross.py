"""
Tests for crossing counting and minimization.
"""

import importlib
import warnings

import pytest
from scipy.sparse import issparse

from dag_layout import ConfigurationError, Dag, Node, connect
from dag_layout.hierarchical import (
    DECROSS_METHODS,
    LayoutPerformanceWarning,
    count_crossings,
    insert_dummies,
    layering_longest_path,
    reorder_layers,
    two_layer_barycenter,
    two_layer_median,
    two_layer_opt,
)

# =============================================================================
# Test Fixtures
# =============================================================================


def create_crossed_pair():
    """Two parallel links drawn crossed: a -> d and b -> c."""
    dag = Dag.from_links(["a", "b", "c", "d"], [(0, 3), (1, 2)])
    layering_longest_path(dag)
    return insert_dummies(dag)


def create_tangle():
    """A three-layer graph with several crossings in DAG order."""
    dag = Dag.from_links(
        ["a", "b", "c", "d", "e", "f", "g", "h", "i"],
        [(0, 5), (0, 4), (1, 3), (2, 3), (2, 5), (3, 8), (4, 6), (5, 7), (1, 8)],
    )
    layering_longest_path(dag)
    return insert_dummies(dag)


def create_two_layers(targets):
    """Fixed layer f0..fn and a free node per entry linked to fixed[target]."""
    fixed = [Node(f"f{i}") for i in range(len(targets))]
    free = [Node(f"n{i}") for i in range(len(targets))]
    neighbors = {node: [fixed[target]] for node, target in zip(free, targets)}
    return fixed, free, neighbors


# =============================================================================
# Two-Layer Operators
# =============================================================================


class TestTwoLayerOperators:
    """Tests for the single layer reordering operators."""

    @pytest.mark.parametrize("operator", [two_layer_median, two_layer_barycenter, two_layer_opt])
    def test_swaps_crossed_pair(self, operator):
        fixed, free, neighbors = create_two_layers([1, 0])
        first, second = free
        operator(fixed, free, neighbors)
        assert free == [second, first]

    @pytest.mark.parametrize("operator", [two_layer_median, two_layer_barycenter, two_layer_opt])
    def test_keeps_uncrossed_pair(self, operator):
        fixed, free, neighbors = create_two_layers([0, 1])
        original = list(free)
        operator(fixed, free, neighbors)
        assert free == original

    def test_opt_reverses_three(self):
        fixed, free, neighbors = create_two_layers([2, 1, 0])
        original = list(free)
        two_layer_opt(fixed, free, neighbors)
        assert free == original[::-1]

    def test_nodes_without_neighbors_keep_index(self):
        fixed, free, neighbors = create_two_layers([1, 0])
        loner = Node("loner")
        free.insert(0, loner)
        two_layer_median(fixed, free, neighbors)
        assert free[0] is loner

    def test_median_of_even_neighbors(self):
        fixed = [Node(f"f{i}") for i in range(4)]
        wide, narrow = Node("wide"), Node("narrow")
        # wide spans 0..3 (median 1.5), narrow sits on 1
        neighbors = {wide: [fixed[0], fixed[3]], narrow: [fixed[1]]}
        free = [wide, narrow]
        two_layer_median(fixed, free, neighbors)
        assert free == [narrow, wide]

    def test_opt_large_layer_uses_sparse_constraints(self, monkeypatch):
        decross_module = importlib.import_module("dag_layout.hierarchical.decross")
        real_solve = decross_module.solve_milp
        seen = []

        def recording_solve(c, A_ub=None, *args, **kwargs):
            seen.append(A_ub)
            return real_solve(c, A_ub, *args, **kwargs)

        monkeypatch.setattr(decross_module, "solve_milp", recording_solve)

        n = 40
        fixed, free, neighbors = create_two_layers(list(range(n - 1, -1, -1)))
        original = list(free)
        with warnings.catch_warnings():
            warnings.simplefilter("error", LayoutPerformanceWarning)
            two_layer_opt(fixed, free, neighbors)

        assert free == original[::-1]
        (matrix,) = seen
        assert issparse(matrix)
        triples = n * (n - 1) * (n - 2) // 6
        assert matrix.shape == (triples, n * (n - 1) // 2)
        assert matrix.nnz == 3 * triples

    def test_opt_warns_on_large_layers(self):
        fixed, free, neighbors = create_two_layers([1, 0])
        with pytest.warns(LayoutPerformanceWarning):
            two_layer_opt(fixed, free, neighbors, max_size=1)


# =============================================================================
# Crossing Count
# =============================================================================


class TestCountCrossings:
    """Tests for the accumulator tree crossing count."""

    def test_crossed_pair(self):
        a, b, c, d = (Node(x) for x in "abcd")
        assert count_crossings([[a, b], [c, d]], {a: [d], b: [c]}) == 1
        assert count_crossings([[a, b], [c, d]], {a: [c], b: [d]}) == 0

    def test_complete_bipartite(self):
        a, b, c, d = (Node(x) for x in "abcd")
        assert count_crossings([[a, b], [c, d]], {a: [c, d], b: [c, d]}) == 1

    def test_shared_endpoints_do_not_cross(self):
        a, b, c = (Node(x) for x in "abc")
        assert count_crossings([[a], [b, c]], {a: [b, c]}) == 0

    def test_brute_force_agreement(self):
        layered = create_tangle()
        expected = 0
        for upper, lower in zip(layered.layers, layered.layers[1:]):
            up = {node: i for i, node in enumerate(upper)}
            low = {node: i for i, node in enumerate(lower)}
            pairs = [(up[n], low[c]) for n in upper for c in layered.children[n]]
            for i, (s1, t1) in enumerate(pairs):
                for s2, t2 in pairs[i + 1 :]:
                    if (s1 - s2) * (t1 - t2) < 0:
                        expected += 1
        assert count_crossings(layered.layers, layered.children) == expected


# =============================================================================
# Layer Sweep
# =============================================================================


class TestReorderLayers:
    """Tests for the layer sweep."""

    @pytest.mark.parametrize("method", DECROSS_METHODS)
    def test_removes_crossing(self, method):
        layered = create_crossed_pair()
        assert count_crossings(layered.layers, layered.children) == 1
        assert reorder_layers(layered, method=method) == 0
        assert count_crossings(layered.layers, layered.children) == 0

    @pytest.mark.parametrize("method", DECROSS_METHODS)
    def test_never_increases(self, method):
        layered = create_tangle()
        before = count_crossings(layered.layers, layered.children)
        after = reorder_layers(layered, iterations=5, method=method)
        assert after <= before
        assert count_crossings(layered.layers, layered.children) == after

    def test_only_permutes_layers(self):
        layered = create_tangle()
        before = [set(layer) for layer in layered.layers]
        reorder_layers(layered)
        assert [set(layer) for layer in layered.layers] == before

    def test_square_has_no_crossings(self):
        dag = connect([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])
        layering_longest_path(dag)
        layered = insert_dummies(dag)
        assert reorder_layers(layered) == 0

    def test_bad_method(self):
        with pytest.raises(ConfigurationError, match="decross method"):
            reorder_layers(create_crossed_pair(), method="random")

    def test_bad_iterations(self):
        with pytest.raises(ConfigurationError, match="iterations"):
            reorder_layers(create_crossed_pair(), iterations=0)
