import math

import pytest

from socnet.algorithms.triads import TRIAD_NAMES
from socnet.core import NotFoundError, SocNet

nx = pytest.importorskip("networkx")


def _bowtie():
    # triangles 1-2-3 and 2-3-4 share the tie 2-3; 5 hangs off 4
    G = SocNet(directed=False, random_seed=0)
    G.add_vertices(5)
    for u, v in [(1, 2), (1, 3), (2, 3), (2, 4), (3, 4), (4, 5)]:
        G.add_edge(u, v)
    return G


class TestCliques:
    def test_complete_graph_is_one_clique(self, complete_graph):
        census = complete_graph.clique_census()
        assert census.cliques == [(1, 2, 3, 4, 5)]
        assert census.max_size == 5
        assert census.co_membership.value(1, 2) == 1
        assert complete_graph.cliques_containing(3) == 1

    def test_overlapping_triangles(self):
        G = _bowtie()
        assert G.maximal_cliques() == [(1, 2, 3), (2, 3, 4), (4, 5)]
        assert G.cliques_of_size(3) == [(1, 2, 3), (2, 3, 4)]
        assert G.clique_census().size_distribution == {2: 1, 3: 2}
        assert G.cliques_containing(2) == 2
        assert G.cliques_containing(4, min_size=3) == 1
        co = G.clique_census().co_membership
        assert co.value(2, 3) == 2
        assert co.value(1, 4) == 0
        assert co.value(4, 4) == 2

    def test_direction_is_ignored(self):
        G = SocNet(directed=True, random_seed=0)
        G.add_vertices(3)
        G.add_edge(1, 2)
        G.add_edge(3, 2)
        G.add_edge(1, 3)
        assert G.maximal_cliques() == [(1, 2, 3)]

    def test_single_vertex_is_one_clique(self):
        G = SocNet(directed=False, random_seed=0)
        G.add_vertex()
        assert G.maximal_cliques() == [(1,)]
        assert G.clique_census().max_size == 1

    def test_isolate_is_a_singleton_clique(self, path_graph):
        path_graph.add_vertex()
        assert path_graph.maximal_cliques() == [(1, 2), (2, 3), (3, 4), (5,)]
        assert path_graph.cliques_containing(5) == 1
        assert path_graph.cliques_containing(5, min_size=2) == 0

    def test_matches_networkx(self):
        G = SocNet(directed=False, random_seed=5)
        G.erdos_renyi(14, p=0.4, seed=5)
        H = nx.Graph()
        H.add_nodes_from(G.vertices())
        H.add_edges_from((u, v) for u, v, _ in G.edges())
        expected = {tuple(sorted(c)) for c in nx.find_cliques(H)}
        assert set(G.maximal_cliques()) == expected

    def test_census_cached_until_mutation(self):
        G = _bowtie()
        first = G.clique_census()
        assert G.clique_census() is first
        G.add_edge(1, 4)
        assert G.clique_census().cliques[0] == (1, 2, 3, 4)

    def test_unknown_vertex(self):
        with pytest.raises(NotFoundError):
            _bowtie().cliques_containing(9)


class TestTriads:
    def test_empty_and_cycle(self):
        G = SocNet(directed=True, random_seed=0)
        G.add_vertices(3)
        assert G.triad_census()["003"] == 1
        for u, v in [(1, 2), (2, 3), (3, 1)]:
            G.add_edge(u, v)
        census = G.triad_census()
        assert list(census) == list(TRIAD_NAMES)
        assert census["030C"] == 1
        assert sum(census.values()) == 1

    def test_mutual_triangle(self, complete_graph):
        census = complete_graph.triad_census()
        assert census["300"] == math.comb(5, 3)

    def test_path_types(self, path_graph):
        census = path_graph.triad_census()
        # 1->2->3 and 2->3->4 are chains; the other two triples hold one tie
        assert census["021C"] == 2
        assert census["012"] == 2
        assert sum(census.values()) == math.comb(4, 3)

    def test_matches_networkx(self):
        G = SocNet(directed=True, random_seed=9)
        G.erdos_renyi(12, p=0.3, directed=True, seed=9)
        H = nx.DiGraph()
        H.add_nodes_from(G.vertices())
        H.add_edges_from((u, v) for u, v, _ in G.edges())
        expected = nx.triadic_census(H)
        census = G.triad_census()
        for name in TRIAD_NAMES:
            assert census[name] == expected[name], name

    def test_drop_isolates(self, path_graph):
        path_graph.add_vertex()
        assert sum(path_graph.triad_census().values()) == math.comb(5, 3)
        assert sum(path_graph.triad_census(drop_isolates=True).values()) == math.comb(4, 3)

    def test_returned_dict_is_a_copy(self, path_graph):
        census = path_graph.triad_census()
        census["003"] = 99
        assert path_graph.triad_census()["003"] == 0
