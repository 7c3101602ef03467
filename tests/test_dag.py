"""
Tests for the DAG container, traversal and construction.
"""

import pytest

from dag_layout import (
    CycleError,
    Dag,
    InvalidLinkError,
    Node,
    connect,
    has_cycle,
    topological_order,
)

# =============================================================================
# Test Fixtures
# =============================================================================


def create_square():
    """Create the diamond a -> (b, c) -> d."""
    return connect([("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")])


def create_zherebko():
    """Create the 11-node graph from Zherebko's lane layout example."""
    return connect(
        [
            ("1", "2"),
            ("1", "5"),
            ("1", "7"),
            ("2", "3"),
            ("2", "4"),
            ("2", "5"),
            ("2", "7"),
            ("2", "8"),
            ("3", "6"),
            ("3", "8"),
            ("4", "7"),
            ("5", "7"),
            ("5", "8"),
            ("5", "9"),
            ("6", "8"),
            ("7", "8"),
            ("9", "10"),
            ("9", "11"),
        ]
    )


def by_data(dag):
    return {node.data: node for node in dag}


def assert_valid_cycle(path):
    assert len(path) >= 2
    assert path[0] is path[-1]
    for source, target in zip(path, path[1:]):
        assert any(child is target for child in source.children())


# =============================================================================
# Construction
# =============================================================================


class TestConnect:
    """Tests for building a DAG from id pairs."""

    def test_square(self):
        dag = create_square()
        assert len(dag) == 4
        assert [node.data for node in dag.roots()] == ["a"]
        assert [node.data for node in dag.leaves()] == ["d"]

        root = dag.roots()[0]
        left, right = root.children()
        assert left.children()[0] is right.children()[0]

    def test_link_payload_is_datum(self):
        dag = connect([("a", "b")])
        link = next(dag.links())
        assert link.data == ("a", "b")

    def test_zherebko(self):
        dag = create_zherebko()
        assert dag.size() == 11
        assert len(list(dag.links())) == 18

    def test_vee_has_two_roots(self):
        dag = connect([("a", "c"), ("b", "c")])
        assert len(dag.roots()) == 2

    def test_empty_raises(self):
        with pytest.raises(InvalidLinkError, match="can't connect empty data"):
            connect([])

    def test_duplicate_link_raises(self):
        with pytest.raises(InvalidLinkError, match="duplicate"):
            connect([("a", "b"), ("a", "b")])

    def test_cycle_raises(self):
        with pytest.raises(CycleError, match="cycle") as excinfo:
            connect([("c", "a"), ("a", "b"), ("b", "a")])
        assert_valid_cycle(excinfo.value.path)
        assert {node.data for node in excinfo.value.path} == {"a", "b"}

    def test_self_loop_is_cycle(self):
        with pytest.raises(CycleError):
            connect([("a", "a")])

    def test_single_declares_lone_node(self):
        dag = connect([("a", "a"), ("b", "c")], single=True)
        assert len(dag) == 3
        nodes = by_data(dag)
        assert nodes["a"].links == []

    def test_custom_id_accessors(self):
        data = [{"from": "x", "to": "y"}, {"from": "y", "to": "z"}]
        dag = connect(data, source_id=lambda d: d["from"], target_id=lambda d: d["to"])
        assert [node.data for node in topological_order(dag)] == ["x", "y", "z"]


class TestDagConstruction:
    """Tests for Dag and Dag.from_links."""

    def test_assigns_indices(self):
        dag = create_square()
        assert [node.index for node in dag] == [0, 1, 2, 3]

    def test_duplicate_node_raises(self):
        node = Node("a")
        with pytest.raises(InvalidLinkError, match="more than once"):
            Dag([node, node])

    def test_link_outside_dag_raises(self):
        a, b = Node("a"), Node("b")
        a.add_child(b)
        with pytest.raises(InvalidLinkError, match="outside the DAG"):
            Dag([a])

    def test_from_links_dicts(self):
        dag = Dag.from_links(
            ["a", "b", "c"],
            [{"source": 0, "target": 1, "data": "ab"}, {"source": 1, "target": 2}],
        )
        links = list(dag.links())
        assert [(link.source.data, link.target.data) for link in links] == [("a", "b"), ("b", "c")]
        assert links[0].data == "ab"

    def test_from_links_pairs_and_node_dicts(self):
        dag = Dag.from_links([{"width": 2.0}, {}], [(0, 1)])
        assert dag.nodes[0].width == 2.0
        assert dag.nodes[0].children() == [dag.nodes[1]]

    def test_from_links_out_of_bounds(self):
        with pytest.raises(InvalidLinkError, match="out of bounds"):
            Dag.from_links(["a"], [{"source": 0, "target": 5}])

    def test_empty(self):
        dag = Dag([])
        assert len(dag) == 0
        assert dag.roots() == []
        assert topological_order(dag) == []


# =============================================================================
# Traversal
# =============================================================================


class TestTraversal:
    """Tests for descendants, ancestors and exists_match."""

    def test_descendants_include_start(self):
        dag = create_square()
        nodes = by_data(dag)
        assert [node.data for node in dag.descendants(nodes["b"])] == ["b", "d"]

    def test_descendants_visit_each_node_once(self):
        dag = create_square()
        nodes = by_data(dag)
        visited = [node.data for node in dag.descendants(nodes["a"])]
        assert visited[0] == "a"
        assert sorted(visited) == ["a", "b", "c", "d"]

    def test_ancestors(self):
        dag = create_square()
        nodes = by_data(dag)
        visited = [node.data for node in dag.ancestors(nodes["d"])]
        assert visited[0] == "d"
        assert sorted(visited) == ["a", "b", "c", "d"]

    def test_parents(self):
        dag = create_square()
        nodes = by_data(dag)
        assert [node.data for node in dag.parents(nodes["d"])] == ["b", "c"]

    def test_exists_match_stops_at_first_match(self):
        dag = create_square()
        seen = []

        def predicate(node):
            seen.append(node.data)
            return node.data == "a"

        assert dag.exists_match(predicate)
        assert seen == ["a"]

    def test_exists_match_false(self):
        dag = create_square()
        seen = []

        def predicate(node):
            seen.append(node.data)
            return False

        assert not dag.exists_match(predicate)
        assert sorted(seen) == ["a", "b", "c", "d"]


# =============================================================================
# Topological Order
# =============================================================================


class TestTopologicalOrder:
    """Tests for topological ordering and cycle detection."""

    def test_square_order(self):
        dag = create_square()
        assert [node.data for node in topological_order(dag)] == ["a", "b", "c", "d"]

    def test_every_link_points_forward(self):
        dag = create_zherebko()
        position = {node: i for i, node in enumerate(topological_order(dag))}
        assert len(position) == 11
        for link in dag.links():
            assert position[link.source] < position[link.target]

    def test_cycle_path(self):
        a, b, c = Node("a"), Node("b"), Node("c")
        a.add_child(b)
        b.add_child(c)
        c.add_child(a)
        dag = Dag([a, b, c])

        with pytest.raises(CycleError) as excinfo:
            topological_order(dag)
        assert_valid_cycle(excinfo.value.path)
        assert len(excinfo.value.path) == 4

    def test_has_cycle(self):
        a, b = Node("a"), Node("b")
        a.add_child(b)
        assert not has_cycle(Dag([a, b]))
        b.add_child(a)
        assert has_cycle(Dag([a, b]))
