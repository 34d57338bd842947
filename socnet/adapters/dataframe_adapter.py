from __future__ import annotations

from typing import TYPE_CHECKING, Any

import narwhals as nw
import polars as pl
from narwhals.typing import IntoDataFrame

from ..core._errors import InvalidParameterError

if TYPE_CHECKING:
    from ..core.graph import SocNet

_VERTEX_SCHEMA = {
    "vertex_id": pl.Int64,
    "label": pl.Utf8,
    "x": pl.Float64,
    "y": pl.Float64,
    "size": pl.Int64,
    "shape": pl.Utf8,
    "color": pl.Utf8,
}
_EDGE_SCHEMA = {
    "relation": pl.Utf8,
    "source": pl.Int64,
    "target": pl.Int64,
    "weight": pl.Float64,
    "kind": pl.Utf8,
    "label": pl.Utf8,
    "color": pl.Utf8,
    "enabled": pl.Boolean,
}


def to_dataframes(graph: SocNet, all_relations: bool = True) -> dict[str, pl.DataFrame]:
    """Export vertices and ties to Polars DataFrames.

    Returns
    ---
    dict
        ``vertices``: one row per vertex with its metadata;
        ``edges``: one row per stored tie direction (``relation`` holds the
        relation name, ``enabled`` the filter state).

    """
    vertices = [
        {f: getattr(graph.vertex(vid), "id" if f == "vertex_id" else f) for f in _VERTEX_SCHEMA}
        for vid in graph.vertices()
    ]
    names = graph.list_relations()
    rels = range(len(names)) if all_relations else [graph.current_relation()]
    edges = []
    for rel in rels:
        for vid in graph.vertices():
            for t, tie in graph.vertex(vid).out_ties(rel).items():
                edges.append(
                    {
                        "relation": names[rel],
                        "source": vid,
                        "target": t,
                        "weight": tie.weight,
                        "kind": tie.kind.value,
                        "label": tie.label,
                        "color": tie.color,
                        "enabled": tie.enabled,
                    }
                )
    return {
        "vertices": pl.DataFrame(vertices, schema=_VERTEX_SCHEMA),
        "edges": pl.DataFrame(edges, schema=_EDGE_SCHEMA),
    }


def _to_dicts(df: nw.DataFrame[Any]) -> list[dict[str, Any]]:
    """Convert narwhals DataFrame to list of dicts."""
    return [dict(zip(df.columns, row)) for row in df.rows()]


def dataframe_messages(
    edges: IntoDataFrame | None = None,
    vertices: IntoDataFrame | None = None,
    *,
    source: str = "source",
    target: str = "target",
    weight: str = "weight",
    relation: str = "relation",
    default_relation: str | None = None,
):
    """Translate vertex/edge tables (any narwhals-supported backend) into mutation messages."""
    known = set()
    if vertices is not None:
        vdf = nw.from_native(vertices, eager_only=True)
        if "vertex_id" not in vdf.columns:
            raise InvalidParameterError("vertices DataFrame must have a 'vertex_id' column")
        for row in _to_dicts(vdf):
            msg = {"op": "add_vertex", "vertex_id": int(row.pop("vertex_id"))}
            msg.update({k: v for k, v in row.items() if k in _VERTEX_SCHEMA and v is not None})
            known.add(msg["vertex_id"])
            yield msg
    if edges is None:
        return
    edf = nw.from_native(edges, eager_only=True)
    missing = {source, target} - set(edf.columns)
    if missing:
        raise InvalidParameterError(f"edges DataFrame lacks columns {sorted(missing)}")
    relations = [default_relation] if default_relation is not None else []
    for row in _to_dicts(edf):
        u, v = int(row[source]), int(row[target])
        for x in (u, v):
            if x not in known:
                known.add(x)
                yield {"op": "add_vertex", "vertex_id": x}
        if relation in row and row[relation] is not None:
            name = str(row[relation])
            if name not in relations:
                if relations:
                    yield {"op": "add_relation", "name": name}
                else:
                    yield {"op": "rename_current_relation", "name": name}
                relations.append(name)
            rel = relations.index(name)
        else:
            rel = None
        msg = {
            "op": "add_edge",
            "source": u,
            "target": v,
            "weight": float(row[weight]) if row.get(weight) is not None else 1.0,
            "relation": rel,
            "allow_loop": True,
        }
        for k in ("kind", "label", "color"):
            if row.get(k) is not None:
                msg[k] = row[k]
        if str(msg.get("kind", "")).upper() == "RECIPROCATED":
            # one row per direction; the store re-tags the pair itself
            msg["kind"] = "DIRECTED"
        yield msg


def from_dataframes(
    edges: IntoDataFrame | None = None,
    vertices: IntoDataFrame | None = None,
    *,
    directed: bool = True,
    source: str = "source",
    target: str = "target",
    weight: str = "weight",
    relation: str = "relation",
    **settings_overrides,
) -> SocNet:
    """Build a SocNet from DataFrames (Pandas, Polars, PyArrow, ...).

    Vertices DataFrame (optional):
        - Required: vertex_id
        - Optional: label, x, y, size, shape, color

    Edges DataFrame (optional):
        - Required: source, target (column names configurable)
        - Optional: weight, relation (name), kind, label, color

    Endpoints missing from the vertex table are created with default metadata.
    Relations are created in order of first appearance.
    """
    from ..core.graph import SocNet

    G = SocNet(directed=directed, **settings_overrides)
    G.apply(
        dataframe_messages(edges, vertices, source=source, target=target, weight=weight, relation=relation)
    )
    return G
