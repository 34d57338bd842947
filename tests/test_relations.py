import pytest

from socnet.core import InvalidParameterError


def test_single_default_relation(path_graph):
    G = path_graph
    assert G.list_relations() == ["default"]
    assert G.current_relation() == 0
    assert len(G.relations) == 1


def test_add_relation_without_switch(two_relation_graph):
    G = two_relation_graph
    assert G.list_relations() == ["default", "advice"]
    assert G.current_relation() == 0
    assert G.has_edge(1, 2) == 1.0
    assert G.has_edge(3, 1) == 0.0
    assert G.has_edge(3, 1, relation=1) == 1.0


def test_relations_are_independent_layers(two_relation_graph):
    G = two_relation_graph
    G.set_relation(1)
    assert G.current_relation_name() == "advice"
    assert G.number_of_edges() == 2
    assert G.successors(1) == []
    assert G.predecessors(1) == [3, 4]
    assert G.isolated_vertices() == [2]
    G.set_relation(0)
    assert G.isolated_vertices() == [4]


def test_switching_relation_invalidates_results(two_relation_graph):
    G = two_relation_graph
    d0 = G.distance(1, 3)
    assert d0 == 2
    v0 = G.version
    G.relations.next()
    assert G.version > v0
    assert G.distance(1, 3) == float("inf")
    assert G.distance(3, 1) == 1


def test_cursor_stops_at_both_ends(two_relation_graph):
    G = two_relation_graph
    assert G.previous_relation() is False
    assert G.current_relation() == 0
    assert G.next_relation() is True
    assert G.next_relation() is False
    assert G.current_relation() == 1
    assert G.relations.prev() is True
    assert G.current_relation() == 0


def test_set_relation_out_of_range(two_relation_graph):
    with pytest.raises(InvalidParameterError):
        two_relation_graph.set_relation(5)
    with pytest.raises(InvalidParameterError):
        two_relation_graph.add_edge(1, 2, relation=-1)


def test_rename_current_relation(two_relation_graph):
    G = two_relation_graph
    G.relations.set(1)
    G.relations.rename("trust")
    assert list(G.relations) == ["default", "trust"]
    assert G.has_edge(4, 1) == 1.0


def test_add_relation_with_change_emits_events(path_graph):
    G = path_graph
    seen = []
    G.subscribe(lambda evt: seen.append(evt["op"]))
    idx = G.relations.add("friendship", change=True)
    assert idx == 1
    assert G.current_relation() == 1
    assert "relation_added" in seen
    assert "relation_changed" in seen
    assert G.number_of_edges() == 0


def test_vertex_removal_spans_relations(two_relation_graph):
    G = two_relation_graph
    G.remove_vertex(3)
    assert G.number_of_edges(relation=0) == 1
    assert G.number_of_edges(relation=1) == 1
    assert G.vertices_with_edges_in(1) == [1, 4]


def test_clear_relations(two_relation_graph):
    G = two_relation_graph
    G.set_relation(1)
    G.relations.clear()
    assert G.list_relations() == ["default"]
    assert G.current_relation() == 0
    assert G.number_of_edges() == 0
    assert G.vertices() == [1, 2, 3, 4]
