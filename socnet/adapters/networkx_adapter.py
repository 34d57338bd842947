from __future__ import annotations

try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'networkx' is not installed. "
        "Install with: pip install socnet[networkx]"
    ) from e

from typing import TYPE_CHECKING

from ..core._helpers import EdgeType

if TYPE_CHECKING:
    from ..core.graph import SocNet

_VERTEX_FIELDS = ("label", "x", "y", "size", "shape", "color")


def to_nx(graph: SocNet, relation=None, directed: bool | None = None, include_hidden: bool = False):
    """Export one relation to a NetworkX graph.

    Parameters
    --
    graph : SocNet
    relation : int, optional
        Relation index; the current relation by default.
    directed : bool, optional
        Build a ``DiGraph`` (default: ``graph.directed``) or a ``Graph``.
    include_hidden : bool, default False
        Also export ties hidden by edge filters.

    Returns
    ---
    networkx.Graph | networkx.DiGraph
        Vertex attributes: label, x, y, size, shape, color. Edge attributes:
        weight, kind, label, color.

    """
    directed = graph.directed if directed is None else directed
    G = nx.DiGraph() if directed else nx.Graph()
    rel = graph._rel(relation)
    G.graph["relation"] = graph.list_relations()[rel]
    for vid in graph.vertices():
        v = graph.vertex(vid)
        G.add_node(vid, **{f: getattr(v, f) for f in _VERTEX_FIELDS})
    for vid in graph.vertices():
        for t, tie in graph.vertex(vid).out_ties(rel).items():
            if not (tie.enabled or include_hidden):
                continue
            G.add_edge(vid, t, weight=tie.weight, kind=tie.kind.value, label=tie.label, color=tie.color)
    return G


def _vertex_ids(nxG):
    nodes = list(nxG.nodes())
    if all(isinstance(v, int) and not isinstance(v, bool) and v >= 1 for v in nodes):
        return {v: v for v in nodes}
    return {v: i for i, v in enumerate(nodes, start=1)}


def nx_messages(nxG, weight: str = "weight", directed: bool | None = None):
    """Translate a NetworkX graph into a mutation stream for ``SocNet.apply``.

    Nodes that are not positive ints get ids ``1..n`` in iteration order and
    keep their original name as label. Ties are directed when ``directed``
    (default: ``nxG.is_directed()``) and undirected otherwise.
    """
    ids = _vertex_ids(nxG)
    for node, data in nxG.nodes(data=True):
        msg = {"op": "add_vertex", "vertex_id": ids[node], "label": data.get("label", str(node))}
        if "pos" in data:
            msg["x"], msg["y"] = data["pos"]
        for f in ("x", "y", "size", "shape", "color"):
            if f in data:
                msg[f] = data[f]
        yield msg
    directed = nxG.is_directed() if directed is None else directed
    kind = EdgeType.DIRECTED if directed else EdgeType.UNDIRECTED
    for u, v, data in nxG.edges(data=True):
        yield {
            "op": "add_edge",
            "source": ids[u],
            "target": ids[v],
            "weight": float(data.get(weight, 1.0)),
            "kind": kind,
            "label": str(data.get("label", "")),
            "color": data.get("color"),
            "allow_loop": True,
        }


def from_nx(nxG, directed: bool | None = None, weight: str = "weight", **settings_overrides) -> SocNet:
    """Build a SocNet from a NetworkX graph through the mutation stream.

    Parameters
    --
    nxG : networkx.Graph | networkx.DiGraph
        Multigraph edges between the same pair collapse into one tie (last wins).
    directed : bool, optional
        Defaults to ``nxG.is_directed()``.
    weight : str, default "weight"
        Edge attribute holding the tie weight (1 when absent).

    Returns
    ---
    SocNet

    """
    from ..core.graph import SocNet

    directed = nxG.is_directed() if directed is None else directed
    G = SocNet(directed=directed, **settings_overrides)
    G.apply(nx_messages(nxG, weight=weight, directed=directed))
    return G
