import math

import pytest

from socnet.core import InvalidParameterError


def _on_canvas(G):
    return all(0 <= x <= G.canvas_width and 0 <= y <= G.canvas_height for x, y in G.positions().values())


def _dist(G, u, v):
    (x1, y1), (x2, y2) = G.vertex_position(u), G.vertex_position(v)
    return math.hypot(x1 - x2, y1 - y2)


@pytest.mark.parametrize(
    "method", ["layout_spring_embedder", "layout_fruchterman_reingold", "layout_kamada_kawai"]
)
def test_force_layouts_stay_on_canvas_and_keep_topology(star_graph, method):
    G = star_graph
    edges = sorted(G.edges())
    version = G.version
    getattr(G, method)(max_iterations=50)
    assert _on_canvas(G)
    assert sorted(G.edges()) == edges
    assert G.version == version


def test_layout_emits_single_positions_event(complete_graph):
    G = complete_graph
    changes = []
    G.subscribe(lambda evt: evt["op"] == "graph_modified" and changes.append(evt["change"]))
    G.layout_fruchterman_reingold(max_iterations=10)
    assert changes == ["positions"]


def test_kamada_kawai_stretches_a_path(path_graph):
    G = path_graph
    G.layout_circular()
    G.layout_kamada_kawai(max_iterations=200)
    assert _dist(G, 1, 4) > _dist(G, 1, 2)
    assert _on_canvas(G)


def test_kamada_kawai_options(path_graph):
    with pytest.raises(InvalidParameterError):
        path_graph.layout_kamada_kawai(initial="spectral")
    positions = path_graph.layout_kamada_kawai(initial="random", seed=3, max_iterations=20)
    assert set(positions) == {1, 2, 3, 4}


def test_circular(star_graph):
    G = star_graph
    G.layout_circular(radius=100)
    cx, cy = G.canvas_width / 2, G.canvas_height / 2
    for x, y in G.positions().values():
        assert math.hypot(x - cx, y - cy) == pytest.approx(100)
    with pytest.raises(InvalidParameterError):
        G.layout_circular(radius=-1)


def test_random_is_seeded(star_graph):
    a = dict(star_graph.layout_random(seed=11))
    b = dict(star_graph.layout_random(seed=11))
    assert a == b
    assert _on_canvas(star_graph)


class TestByIndex:
    def test_radial_puts_center_in_the_middle(self, star_graph):
        G = star_graph
        G.layout_by_index("DC", kind="radial")
        assert G.vertex_position(1) == pytest.approx((G.canvas_width / 2, G.canvas_height / 2))
        max_r = 0.45 * min(G.canvas_width, G.canvas_height)
        cx, cy = G.canvas_width / 2, G.canvas_height / 2
        x, y = G.vertex_position(2)
        assert math.hypot(x - cx, y - cy) == pytest.approx(max_r * 0.75)

    def test_level_puts_center_on_top(self, star_graph):
        G = star_graph
        G.layout_by_index("DC", kind="level")
        assert G.vertex_position(1)[1] == pytest.approx(0.05 * G.canvas_height)
        assert all(G.vertex_position(v)[1] > G.vertex_position(1)[1] for v in (2, 3, 4, 5))

    def test_size(self, star_graph):
        sizes = star_graph.layout_by_index("DC", kind="size")
        assert sizes[1] == 20
        assert sizes[2] == 8

    def test_bad_kind(self, star_graph):
        with pytest.raises(InvalidParameterError):
            star_graph.layout_by_index("DC", kind="spiral")


def test_canvas_and_optimal_distance(star_graph):
    G = star_graph
    G.set_canvas_size(100, 400)
    assert G.optimal_distance() == pytest.approx(math.sqrt(100 * 400 / 5))
    assert G.optimal_distance(0) == 0.0
    with pytest.raises(InvalidParameterError):
        G.set_canvas_size(0, 10)
    with pytest.raises(InvalidParameterError):
        G.layout_spring_embedder(max_iterations=0)
