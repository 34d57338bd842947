# test_graph.py
import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from socnet.core import (
    EdgeType,
    InvalidParameterError,
    NotFoundError,
    SocNet,
)


class TestVertices(unittest.TestCase):
    def setUp(self):
        self.g = SocNet(directed=True, random_seed=1)

    def test_default_ids_are_sequential(self):
        ids = [self.g.add_vertex() for _ in range(3)]
        self.assertEqual(ids, [1, 2, 3])
        self.assertEqual(self.g.vertices(), [1, 2, 3])
        self.assertEqual(self.g.number_of_vertices(), 3)

    def test_explicit_id_and_duplicate(self):
        self.assertEqual(self.g.add_vertex(10, label="ten"), 10)
        self.assertEqual(self.g.vertex_label(10), "ten")
        with self.assertRaises(InvalidParameterError):
            self.g.add_vertex(10)
        # also a ValueError for callers that only know builtins
        with self.assertRaises(ValueError):
            self.g.add_vertex(10)
        self.assertEqual(self.g.add_vertex(), 11)

    def test_bad_ids_rejected(self):
        for bad in (0, -3, "a", True, 1.5):
            with self.assertRaises(InvalidParameterError):
                self.g.add_vertex(bad)

    def test_random_position_within_canvas(self):
        v = self.g.add_vertex()
        x, y = self.g.vertex_position(v)
        self.assertTrue(0 <= x <= self.g.canvas_width)
        self.assertTrue(0 <= y <= self.g.canvas_height)

    def test_metadata_roundtrip(self):
        v = self.g.add_vertex(x=10, y=20, size=12, shape="box", color="blue")
        self.assertEqual(self.g.vertex_position(v), (10.0, 20.0))
        self.assertEqual(self.g.vertex_size(v), 12)
        self.assertEqual(self.g.vertex_shape(v), "box")
        self.assertEqual(self.g.vertex_color(v), "blue")
        self.g.set_vertex_label(v, "hub")
        self.assertEqual(self.g.find_vertices_by_label("hub"), [v])

    def test_remove_vertex_compacts_index_without_renumbering(self):
        self.g.add_vertices(3)
        self.g.remove_vertex(2)
        self.assertEqual(self.g.vertices(), [1, 3])
        self.assertEqual(self.g.idx.vertex_to_row(3), 1)
        self.assertEqual(self.g.idx.row_to_vertex(1), 3)
        self.assertFalse(self.g.has_vertex(2))
        # a removed id may be recreated explicitly; default ids follow the max
        self.assertEqual(self.g.add_vertex(), 4)
        self.assertEqual(self.g.add_vertex(2), 2)

    def test_remove_missing_vertex(self):
        with self.assertRaises(NotFoundError):
            self.g.remove_vertex(99)
        with self.assertRaises(KeyError):
            self.g.remove_vertex(99)


class TestEdges(unittest.TestCase):
    def setUp(self):
        self.g = SocNet(directed=True, random_seed=1)
        self.g.add_vertices(4)

    def test_missing_endpoint(self):
        with self.assertRaises(NotFoundError):
            self.g.add_edge(1, 42)

    def test_self_loop_requires_flag(self):
        with self.assertRaises(InvalidParameterError):
            self.g.add_edge(1, 1)
        self.g.add_edge(1, 1, allow_loop=True)
        self.assertEqual(self.g.has_edge(1, 1), 1.0)

    def test_directed_edge_and_reciprocation(self):
        self.g.add_edge(1, 2, weight=2.0)
        self.assertEqual(self.g.has_edge(1, 2), 2.0)
        self.assertEqual(self.g.has_edge(2, 1), 0.0)
        self.assertEqual(self.g.edge_kind(1, 2), EdgeType.DIRECTED)

        self.g.add_edge(2, 1, weight=3.0)
        self.assertEqual(self.g.edge_kind(1, 2), EdgeType.RECIPROCATED)
        self.assertEqual(self.g.edge_kind(2, 1), EdgeType.RECIPROCATED)
        self.assertTrue(self.g.edge_symmetric(1, 2))
        self.assertEqual(self.g.has_edge(1, 2, reciprocal=True), 2.0)

        self.g.remove_edge(1, 2)
        self.assertEqual(self.g.has_edge(1, 2), 0.0)
        self.assertEqual(self.g.edge_kind(2, 1), EdgeType.DIRECTED)

    def test_remove_opposite(self):
        self.g.add_edge(1, 2)
        self.g.add_edge(2, 1)
        self.g.remove_edge(1, 2, remove_opposite=True)
        self.assertEqual(self.g.number_of_edges(), 0)

    def test_undirected_edge_written_both_ways(self):
        self.g.add_edge(1, 2, weight=3.0, kind="undirected")
        self.assertEqual(self.g.has_edge(1, 2), 3.0)
        self.assertEqual(self.g.has_edge(2, 1), 3.0)
        self.g.set_edge_weight(2, 1, 5.0)
        self.assertEqual(self.g.edge_weight(1, 2), 5.0)
        self.assertEqual(self.g.number_of_edges(), 2)
        self.assertEqual(self.g.number_of_edges(count_undirected_once=True), 1)
        self.g.remove_edge(2, 1)
        self.assertEqual(self.g.number_of_edges(), 0)

    def test_existing_edge_is_updated_not_duplicated(self):
        self.g.add_edge(1, 2, weight=1.0)
        self.g.add_edge(1, 2, weight=4.0)
        self.assertEqual(self.g.number_of_edges(), 1)
        self.assertEqual(self.g.edge_weight(1, 2), 4.0)

    def test_set_edge_type(self):
        self.g.add_edge(1, 2, weight=2.0)
        self.g.set_edge_type(1, 2, EdgeType.UNDIRECTED)
        self.assertEqual(self.g.has_edge(2, 1), 2.0)
        self.assertEqual(self.g.edge_kind(2, 1), EdgeType.UNDIRECTED)
        self.g.set_edge_type(1, 2, "DIRECTED")
        self.assertEqual(self.g.has_edge(2, 1), 0.0)
        with self.assertRaises(InvalidParameterError):
            self.g.set_edge_type(1, 2, "sideways")

    def test_edge_label_and_color(self):
        self.g.add_edge(1, 2, label="knows", color="green")
        self.assertEqual(self.g.edge_label(1, 2), "knows")
        self.g.set_edge_color(1, 2, "red")
        self.assertEqual(self.g.edge_color(1, 2), "red")

    def test_missing_edge_lookups(self):
        self.assertEqual(self.g.has_edge(1, 3), 0.0)
        self.assertEqual(self.g.has_edge(1, 99), 0.0)
        with self.assertRaises(NotFoundError):
            self.g.edge_weight(1, 3)
        with self.assertRaises(NotFoundError):
            self.g.remove_edge(1, 3)

    def test_degrees_and_neighbors(self):
        self.g.add_edge(1, 2, weight=2.0)
        self.g.add_edge(1, 3, weight=0.5)
        self.g.add_edge(4, 1)
        self.assertEqual(self.g.degree_out(1), 2)
        self.assertEqual(self.g.degree_out(1, weighted=True), 2.5)
        self.assertEqual(self.g.degree_in(1), 1)
        self.assertEqual(self.g.successors(1), [2, 3])
        self.assertEqual(self.g.predecessors(1), [4])
        self.assertEqual(self.g.neighbors(1), [2, 3, 4])
        self.assertEqual(self.g.vertices_with_outbound_edges(), 2)
        self.assertEqual(self.g.vertices_with_inbound_edges(), 3)

    def test_edges_iteration(self):
        self.g.add_edge(1, 2, weight=2.0)
        self.g.add_edge(3, 4)
        self.assertEqual(sorted(self.g.edges()), [(1, 2, 2.0), (3, 4, 1.0)])


class TestFiltersAndVersion(unittest.TestCase):
    def setUp(self):
        self.g = SocNet(directed=True, random_seed=1)
        self.g.add_vertices(3)
        self.g.add_edge(1, 2, weight=1.0)
        self.g.add_edge(2, 3, weight=5.0)

    def test_weight_filter_hides_and_reset_restores(self):
        self.g.filter_edges_by_weight(3.0, over=True)
        self.assertEqual(self.g.has_edge(2, 3), 0.0)
        self.assertEqual(self.g.has_edge(1, 2), 1.0)
        self.assertEqual(self.g.number_of_edges(), 1)
        self.assertTrue(self.g.is_isolated(3))
        self.g.filter_edges_by_weight(3.0, over=False)
        self.assertEqual(self.g.has_edge(1, 2), 0.0)
        self.assertEqual(self.g.has_edge(2, 3), 5.0)
        self.g.filter_edges_reset()
        self.assertEqual(self.g.number_of_edges(), 2)

    def test_unilateral_filter(self):
        self.g.add_edge(2, 1)
        self.g.filter_edges_unilateral(True)
        self.assertEqual(self.g.has_edge(2, 3), 0.0)
        self.assertEqual(self.g.has_edge(1, 2), 1.0)
        self.g.filter_edges_unilateral(False)
        self.assertEqual(self.g.has_edge(2, 3), 5.0)

    def test_structural_changes_bump_version(self):
        v0 = self.g.version
        self.g.add_edge(3, 1)
        self.assertGreater(self.g.version, v0)
        v1 = self.g.version
        self.g.set_edge_weight(3, 1, 2.0)
        self.assertGreater(self.g.version, v1)
        self.assertTrue(self.g.is_modified())

    def test_metadata_does_not_bump_version(self):
        v0 = self.g.version
        self.g.set_vertex_label(1, "a")
        self.g.set_vertex_color(1, "blue")
        self.g.set_vertex_position(1, 5, 5)
        self.g.set_edge_label(1, 2, "x")
        self.assertEqual(self.g.version, v0)

    def test_set_saved(self):
        self.g.set_saved()
        self.assertFalse(self.g.is_modified())
        self.g.add_vertex()
        self.assertTrue(self.g.is_modified())


class TestStreamAndClear(unittest.TestCase):
    def test_apply_messages(self):
        g = SocNet(directed=True, random_seed=1)
        out = g.apply(
            [
                {"op": "add_vertex"},
                ("add_vertex", {"label": "b"}),
                {"op": "add_edge", "source": 1, "target": 2, "weight": 2.0},
            ]
        )
        self.assertEqual(out, [1, 2, None])
        self.assertEqual(g.has_edge(1, 2), 2.0)
        self.assertEqual(g.vertex_label(2), "b")

    def test_apply_rejects_unknown_operation(self):
        g = SocNet()
        with self.assertRaises(InvalidParameterError):
            g.apply([{"op": "drop_database"}])

    def test_clear_resets_everything(self):
        g = SocNet(directed=True, random_seed=1)
        g.add_vertices(3)
        g.add_edge(1, 2)
        g.add_relation("other", change=True)
        g.geodesics()
        g.clear()
        self.assertEqual(len(g), 0)
        self.assertEqual(g.list_relations(), ["default"])
        self.assertEqual(g.current_relation(), 0)
        self.assertEqual(g.cache.info(), {})
        self.assertEqual(g.add_vertex(), 1)

    def test_repr_and_contains(self):
        g = SocNet(directed=False, random_seed=1)
        g.add_vertices(2)
        g.add_edge(1, 2)
        self.assertIn(1, g)
        self.assertNotIn(3, g)
        self.assertIn("vertices=2", repr(g))


def test_star_vertex_removal_isolates_leaves(star_graph):
    G = star_graph
    G.remove_vertex(1)
    assert 1 not in G
    assert G.number_of_edges() == 0
    for leaf in (2, 3, 4, 5):
        assert G.degree_out(leaf) == 0
        assert G.degree_in(leaf) == 0
    assert G.isolated_vertices() == [2, 3, 4, 5]


if __name__ == "__main__":
    unittest.main()
