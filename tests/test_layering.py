"""
Tests for layer assignment.
"""

import pytest

from dag_layout import ConfigurationError, CycleError, Dag, Node, connect
from dag_layout.hierarchical import (
    LAYERINGS,
    assign_layers,
    layering_coffman_graham,
    layering_longest_path,
    layering_simplex,
)

# =============================================================================
# Test Fixtures
# =============================================================================


def create_square():
    return connect([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])


def create_chain_with_late_source():
    """a -> b -> c -> d plus e -> d; e belongs next to c, not on top."""
    return connect([("a", "b"), ("b", "c"), ("c", "d"), ("e", "d")])


def create_wide_tree():
    return connect([("r", "x"), ("r", "y"), ("r", "z")])


def create_cycle():
    a, b = Node("a"), Node("b")
    a.add_child(b)
    b.add_child(a)
    return Dag([a, b])


def layers_of(dag):
    layers = {}
    for node in dag:
        layers.setdefault(node.layer, []).append(node.data)
    return [layers[i] for i in sorted(layers)]


# =============================================================================
# Strategies
# =============================================================================


class TestLongestPath:
    """Tests for longest path layering."""

    def test_square(self):
        dag = create_square()
        layering_longest_path(dag)
        assert layers_of(dag) == [["a"], ["b", "c"], ["d"]]

    def test_sources_on_top(self):
        dag = create_chain_with_late_source()
        layering_longest_path(dag)
        nodes = {node.data: node for node in dag}
        assert nodes["e"].layer == 0
        assert nodes["d"].layer == 3


class TestSimplex:
    """Tests for minimum total link length layering."""

    def test_square(self):
        dag = create_square()
        layering_simplex(dag)
        assert layers_of(dag) == [["a"], ["b", "c"], ["d"]]

    def test_minimizes_link_length(self):
        dag = create_chain_with_late_source()
        layering_simplex(dag)
        nodes = {node.data: node for node in dag}
        assert nodes["a"].layer == 0
        assert nodes["e"].layer == 2
        assert sum(link.span for link in dag.links()) == 4

    def test_isolated_nodes_stay_on_top(self):
        dag = connect([("a", "b"), ("b", "c"), ("x", "x")], single=True)
        layering_simplex(dag)
        assert layers_of(dag) == [["a", "x"], ["b"], ["c"]]


class TestCoffmanGraham:
    """Tests for width-bounded layering."""

    def test_square(self):
        dag = create_square()
        layering_coffman_graham(dag)
        assert layers_of(dag) == [["a"], ["b", "c"], ["d"]]

    def test_width_bound(self):
        dag = create_wide_tree()
        layering_coffman_graham(dag, max_width=1)
        assert sorted(node.layer for node in dag) == [0, 1, 2, 3]

    def test_default_width(self):
        dag = create_wide_tree()
        layering_coffman_graham(dag)
        # floor(sqrt(4) + 0.5) == 2
        assert layers_of(dag) == [["r"], ["x", "y"], ["z"]]

    def test_ties_follow_node_order(self):
        forward = create_wide_tree()
        layering_coffman_graham(forward, max_width=2)
        assert layers_of(forward) == [["r"], ["x", "y"], ["z"]]

        backward = connect([("r", "z"), ("r", "y"), ("r", "x")])
        layering_coffman_graham(backward, max_width=2)
        assert layers_of(backward) == [["r"], ["z", "y"], ["x"]]

    @pytest.mark.parametrize("width", [0, -3])
    def test_bad_width_raises(self, width):
        with pytest.raises(ConfigurationError, match="max_width"):
            layering_coffman_graham(create_square(), max_width=width)


# =============================================================================
# Shared Invariants
# =============================================================================


class TestAssignLayers:
    """Invariants every strategy satisfies."""

    @pytest.mark.parametrize("strategy", LAYERINGS)
    def test_links_point_down(self, strategy):
        dag = connect(
            [("1", "2"), ("1", "5"), ("2", "3"), ("2", "5"), ("3", "6"), ("5", "6"), ("4", "6")]
        )
        assign_layers(dag, strategy)
        for link in dag.links():
            assert link.target.layer > link.source.layer
        assert min(node.layer for node in dag) == 0

    @pytest.mark.parametrize("strategy", LAYERINGS)
    def test_single_node(self, strategy):
        dag = Dag([Node("a")])
        assign_layers(dag, strategy)
        assert dag.nodes[0].layer == 0

    @pytest.mark.parametrize("strategy", LAYERINGS)
    def test_cycle_raises(self, strategy):
        with pytest.raises(CycleError):
            assign_layers(create_cycle(), strategy)

    def test_unknown_strategy(self):
        with pytest.raises(ConfigurationError, match="layering must be one of"):
            assign_layers(create_square(), "topological")
