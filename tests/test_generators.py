import math

import pytest

from socnet.core import InvalidParameterError, SocNet


@pytest.fixture
def G():
    return SocNet(random_seed=0)


class TestErdosRenyi:
    def test_gnm_exact_edge_count(self, G):
        G.erdos_renyi(10, m=15, seed=1)
        assert G.number_of_vertices() == 10
        assert G.number_of_edges(count_undirected_once=True) == 15
        assert G.is_symmetric()

    def test_full_probability_gives_complete_graph(self, G):
        G.erdos_renyi(5, p=1.0, seed=0)
        assert G.density() == 1.0
        assert G.maximal_cliques() == [(1, 2, 3, 4, 5)]

    def test_directed_gnm(self, G):
        G.erdos_renyi(8, m=20, directed=True, seed=2)
        assert G.directed
        assert G.number_of_edges() == 20

    def test_probability_extremes(self, G):
        G.erdos_renyi(6, p=0.0, seed=3)
        assert G.number_of_edges() == 0
        G.erdos_renyi(6, p=1.0, seed=3)
        assert G.number_of_edges(count_undirected_once=True) == 15

    def test_seed_reproducible(self):
        a = SocNet().erdos_renyi(20, p=0.2, seed=42)
        b = SocNet().erdos_renyi(20, p=0.2, seed=42)
        assert sorted(a.edges()) == sorted(b.edges())

    def test_replaces_previous_graph(self, path_graph):
        path_graph.add_relation("other")
        path_graph.erdos_renyi(3, p=0.0, seed=0)
        assert path_graph.vertices() == [1, 2, 3]
        assert path_graph.list_relations() == ["default"]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"n": 0, "p": 0.5},
            {"n": 5},
            {"n": 5, "p": 0.5, "m": 3},
            {"n": 5, "p": 1.5},
            {"n": 5, "m": 11},
        ],
    )
    def test_invalid(self, G, kwargs):
        G.add_vertex()
        with pytest.raises(InvalidParameterError):
            G.erdos_renyi(**kwargs)
        # validation happens before the graph is cleared
        assert G.number_of_vertices() == 1


class TestScaleFree:
    def test_edge_count(self, G):
        G.scale_free(30, power=1.0, m0=3, m=2, seed=4)
        assert G.number_of_vertices() == 30
        # C(3, 2) seed ties plus m per new vertex
        assert G.number_of_edges(count_undirected_once=True) == 3 + 27 * 2

    def test_hubs_emerge(self, G):
        G.scale_free(200, power=1.0, m0=2, m=1, seed=5)
        degrees = sorted((G.degree_out(v) for v in G.vertices()), reverse=True)
        assert degrees[0] > 5
        assert G.is_connected()

    def test_invalid(self, G):
        with pytest.raises(InvalidParameterError):
            G.scale_free(10, m0=2, m=3)
        with pytest.raises(InvalidParameterError):
            G.scale_free(10, power=0)


class TestLattices:
    def test_ring_lattice(self, G):
        G.ring_lattice(10, 4)
        assert all(G.degree_out(v) == 4 for v in G.vertices())
        assert G.has_edge(1, 3) and G.has_edge(1, 9)
        assert not G.has_edge(1, 4)

    def test_ring_lattice_invalid(self, G):
        for degree in (3, 0, 10):
            with pytest.raises(InvalidParameterError):
                G.ring_lattice(10, degree)

    def test_small_world_keeps_edge_count(self, G):
        G.small_world(30, 4, 0.3, seed=6)
        assert G.number_of_edges(count_undirected_once=True) == 60
        assert all(not G.has_edge(v, v) for v in G.vertices())

    def test_small_world_beta_zero_is_ring(self):
        a = SocNet().small_world(12, 2, 0.0, seed=1)
        b = SocNet().ring_lattice(12, 2)
        assert sorted(a.edges()) == sorted(b.edges())

    def test_lattice_2d(self, G):
        G.lattice(4, dimension=2)
        assert G.number_of_vertices() == 16
        # 2 * length * (length - 1) ties in an open grid
        assert G.number_of_edges(count_undirected_once=True) == 24
        assert G.degree_out(1) == 2

    def test_lattice_circular_directed(self, G):
        G.lattice(5, dimension=1, circular=True, directed=True)
        assert all(G.degree_out(v) == 1 and G.degree_in(v) == 1 for v in G.vertices())
        assert G.has_edge(5, 1)

    def test_lattice_invalid(self, G):
        with pytest.raises(InvalidParameterError):
            G.lattice(3, neighborhood=3)


class TestRegular:
    @pytest.mark.parametrize("n,degree", [(10, 3), (9, 4), (6, 5)])
    def test_undirected_degrees(self, G, n, degree):
        G.regular(n, degree, seed=7)
        assert all(G.degree_out(v) == degree for v in G.vertices())
        assert G.number_of_edges(count_undirected_once=True) == n * degree // 2

    def test_directed_degrees(self, G):
        G.regular(8, 3, directed=True, seed=8)
        assert all(G.degree_out(v) == 3 and G.degree_in(v) == 3 for v in G.vertices())
        assert all(not G.has_edge(v, v) for v in G.vertices())

    def test_odd_total_rejected(self, G):
        with pytest.raises(InvalidParameterError):
            G.regular(5, 3)

    def test_loops_relax_directed_bound(self, G):
        with pytest.raises(InvalidParameterError):
            G.regular(4, 4, directed=True)
        G.regular(4, 4, directed=True, allow_loops=True, seed=9)
        assert G.number_of_edges() == 16


def test_generated_positions_on_canvas(G):
    G.erdos_renyi(12, p=0.1, seed=0)
    for x, y in G.positions().values():
        assert 0 <= x <= G.canvas_width
        assert 0 <= y <= G.canvas_height
    cx, cy = G.canvas_width / 2, G.canvas_height / 2
    radii = {round(math.hypot(x - cx, y - cy), 6) for x, y in G.positions().values()}
    assert len(radii) == 1
