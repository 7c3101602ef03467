"""
Tests for dummy node insertion and waypoint collapse.
"""

import pytest

from dag_layout import Dag, DummyNode, InternalInvariantError, Node, connect
from dag_layout.hierarchical import insert_dummies, layering_longest_path


def create_long_link():
    """a -> b -> c -> d with a direct a -> d link spanning three layers."""
    dag = connect([("a", "b"), ("b", "c"), ("c", "d"), ("a", "d")])
    layering_longest_path(dag)
    return dag


def by_data(dag):
    return {node.data: node for node in dag}


class TestInsertDummies:
    """Tests for the layered view."""

    def test_chain_length(self):
        dag = create_long_link()
        layered = insert_dummies(dag)
        long_link = next(link for link in dag.links() if link.span == 3)

        chain = layered.chains[long_link]
        assert len(chain) == 2
        assert all(isinstance(dummy, DummyNode) for dummy in chain)
        assert [dummy.layer for dummy in chain] == [1, 2]
        assert all(dummy.link is long_link for dummy in chain)

    def test_unit_links_have_no_chain(self):
        dag = create_long_link()
        layered = insert_dummies(dag)
        assert len(layered.chains) == 1

    def test_layers_put_dummies_after_real_nodes(self):
        dag = create_long_link()
        layered = insert_dummies(dag)
        assert [len(layer) for layer in layered.layers] == [1, 2, 2, 1]
        for layer in layered.layers[1:3]:
            assert not isinstance(layer[0], DummyNode)
            assert isinstance(layer[1], DummyNode)

    def test_adjacency_is_unit_span(self):
        dag = create_long_link()
        layered = insert_dummies(dag)
        for node, children in layered.children.items():
            for child in children:
                assert child.layer == node.layer + 1
                assert node in layered.parents[child]

    def test_caller_graph_untouched(self):
        dag = create_long_link()
        nodes = by_data(dag)
        insert_dummies(dag)

        assert len(dag) == 4
        assert [child.data for child in nodes["a"].children()] == ["b", "d"]
        assert not any(isinstance(node, DummyNode) for node in dag)

    def test_empty(self):
        layered = insert_dummies(Dag([]))
        assert layered.layers == []

    def test_unlayered_node_raises(self):
        dag = Dag([Node("a")])
        with pytest.raises(InternalInvariantError, match="no valid layer"):
            insert_dummies(dag)

    def test_flat_link_raises(self):
        a, b = Node("a", layer=0), Node("b", layer=0)
        a.add_child(b)
        with pytest.raises(InternalInvariantError):
            insert_dummies(Dag([a, b]))


class TestCollapse:
    """Tests for writing waypoints back onto links."""

    def test_points_follow_chain(self):
        dag = create_long_link()
        layered = insert_dummies(dag)
        for i, node in enumerate(layered.nodes()):
            node.x = float(i)
            node.y = float(node.layer)
        layered.collapse()

        for link in dag.links():
            assert len(link.points) == link.span + 1
            assert (link.points[0].x, link.points[0].y) == (link.source.x, link.source.y)
            assert (link.points[-1].x, link.points[-1].y) == (link.target.x, link.target.y)

        long_link = next(link for link in dag.links() if link.span == 3)
        chain = layered.chains[long_link]
        assert [p.x for p in long_link.points[1:-1]] == [dummy.x for dummy in chain]
