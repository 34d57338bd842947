from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ._errors import InvalidParameterError, NotFoundError
from ._helpers import EdgeType, GraphChange

logger = logging.getLogger(__name__)


@dataclass
class Tie:
    """One direction of an edge, stored in both endpoints' adjacency maps.

    The same object sits in ``source.outbound[rel][target]`` and in
    ``target.inbound[rel][source]``, so the two views never disagree.
    """

    weight: float = 1.0
    kind: EdgeType = EdgeType.DIRECTED
    label: str = ""
    color: str | None = None
    enabled: bool = True


@dataclass
class Vertex:
    """Vertex record: identity, display metadata and per-relation adjacency."""

    id: int
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    size: int = 8
    shape: str = "circle"
    color: str = "red"
    outbound: dict[int, dict[int, Tie]] = field(default_factory=dict)  # rel -> target -> tie
    inbound: dict[int, dict[int, Tie]] = field(default_factory=dict)  # rel -> source -> tie

    def out_ties(self, rel: int) -> dict[int, Tie]:
        return self.outbound.get(rel, {})

    def in_ties(self, rel: int) -> dict[int, Tie]:
        return self.inbound.get(rel, {})


def _coerce_kind(kind) -> EdgeType:
    if isinstance(kind, EdgeType):
        return kind
    try:
        return EdgeType(str(kind).upper())
    except ValueError:
        raise InvalidParameterError(f"unknown edge type {kind!r}") from None


class StoreClass:
    # Vertex / edge store

    _MESSAGE_OPS = frozenset(
        {
            "add_vertex",
            "remove_vertex",
            "add_edge",
            "remove_edge",
            "set_edge_weight",
            "set_edge_type",
            "set_edge_label",
            "set_edge_color",
            "set_vertex_label",
            "set_vertex_size",
            "set_vertex_shape",
            "set_vertex_color",
            "set_vertex_position",
            "add_relation",
            "set_relation",
            "rename_current_relation",
            "clear",
        }
    )

    ## Internal lookups

    def _v(self, vertex_id) -> Vertex:
        try:
            return self._vertices[self.vertex_to_idx[vertex_id]]
        except KeyError:
            raise NotFoundError(f"vertex {vertex_id} not found") from None

    def _rel(self, relation=None) -> int:
        if relation is None:
            return self._current_relation
        if isinstance(relation, bool) or not isinstance(relation, int):
            raise InvalidParameterError(f"relation index must be an int, got {relation!r}")
        if not 0 <= relation < len(self._relations):
            raise InvalidParameterError(
                f"relation index {relation} out of range (0..{len(self._relations) - 1})"
            )
        return relation

    def _tie(self, source, target, relation=None) -> Tie:
        rel = self._rel(relation)
        tie = self._v(source).out_ties(rel).get(target)
        if tie is None:
            raise NotFoundError(f"edge ({source}, {target}) not found in relation {rel}")
        return tie

    def _visible_out(self, vertex: Vertex, rel: int | None = None):
        rel = self._current_relation if rel is None else rel
        return {t: tie for t, tie in vertex.out_ties(rel).items() if tie.enabled}

    def _visible_in(self, vertex: Vertex, rel: int | None = None):
        rel = self._current_relation if rel is None else rel
        return {s: tie for s, tie in vertex.in_ties(rel).items() if tie.enabled}

    def _link(self, src: Vertex, dst: Vertex, rel: int, tie: Tie):
        src.outbound.setdefault(rel, {})[dst.id] = tie
        dst.inbound.setdefault(rel, {})[src.id] = tie

    def _unlink(self, src: Vertex, dst: Vertex, rel: int):
        src.outbound.get(rel, {}).pop(dst.id, None)
        dst.inbound.get(rel, {}).pop(src.id, None)

    def _random_position(self):
        return (
            float(self._rng.uniform(0, self.canvas_width)),
            float(self._rng.uniform(0, self.canvas_height)),
        )

    ## Vertices

    def add_vertex(
        self,
        vertex_id=None,
        label=None,
        x=None,
        y=None,
        size=None,
        shape=None,
        color=None,
    ):
        """Create a vertex.

        Parameters
        --
        vertex_id : int, optional
            Explicit identifier. Defaults to one more than the largest live id.
        label, size, shape, color
            Display metadata, stored for pass-through only.
        x, y : float, optional
            Position; a random canvas position is used when omitted.

        Returns
        ---
        int
            The new vertex id.

        Raises
        --
        InvalidParameterError
            If ``vertex_id`` is not a positive int or is already live.

        """
        if vertex_id is None:
            vertex_id = max(self.vertex_to_idx, default=0) + 1
        elif isinstance(vertex_id, bool) or not isinstance(vertex_id, int) or vertex_id < 1:
            raise InvalidParameterError(f"vertex id must be a positive int, got {vertex_id!r}")
        elif vertex_id in self.vertex_to_idx:
            raise InvalidParameterError(f"vertex {vertex_id} already exists")

        if x is None or y is None:
            rx, ry = self._random_position()
            x = rx if x is None else x
            y = ry if y is None else y
        v = Vertex(
            id=vertex_id,
            label=str(vertex_id) if label is None else str(label),
            x=float(x),
            y=float(y),
        )
        if size is not None:
            v.size = int(size)
        if shape is not None:
            v.shape = str(shape)
        if color is not None:
            v.color = str(color)

        idx = len(self._vertices)
        self._vertices.append(v)
        self.vertex_to_idx[vertex_id] = idx
        self.idx_to_vertex[idx] = vertex_id
        self._mark_modified(GraphChange.VERTICES, vertex=vertex_id)
        return vertex_id

    def add_vertices(self, n: int, **metadata):
        """Create ``n`` vertices with default ids; returns their ids."""
        if n < 0:
            raise InvalidParameterError("n must be >= 0")
        return [self.add_vertex(**metadata) for _ in range(n)]

    def remove_vertex(self, vertex_id):
        """Remove a vertex and every incident tie, across all relations.

        Raises
        --
        NotFoundError
            If the vertex does not exist.

        Notes
        -
        Ids of other vertices are untouched; only the dense index is compacted.

        """
        v = self._v(vertex_id)
        for rel, ties in v.outbound.items():
            for t in list(ties):
                if t != vertex_id:
                    self._vertices[self.vertex_to_idx[t]].inbound[rel].pop(vertex_id, None)
        for rel, ties in v.inbound.items():
            for s in list(ties):
                if s != vertex_id:
                    self._vertices[self.vertex_to_idx[s]].outbound[rel].pop(vertex_id, None)

        idx = self.vertex_to_idx.pop(vertex_id)
        del self._vertices[idx]
        self.idx_to_vertex.pop(len(self._vertices), None)
        for i in range(idx, len(self._vertices)):
            vid = self._vertices[i].id
            self.vertex_to_idx[vid] = i
            self.idx_to_vertex[i] = vid
        self._mark_modified(GraphChange.VERTICES_EDGES, vertex=vertex_id, removed=True)

    def has_vertex(self, vertex_id) -> bool:
        return vertex_id in self.vertex_to_idx

    def vertex(self, vertex_id) -> Vertex:
        """Vertex record (read it; mutate only through the graph API)."""
        return self._v(vertex_id)

    def vertices(self, drop_isolates: bool = False):
        """Vertex ids in dense-index order.

        Parameters
        --
        drop_isolates : bool, default False
            Skip vertices without visible ties in the current relation.

        Returns
        ---
        list[int]

        """
        if not drop_isolates:
            return [v.id for v in self._vertices]
        return [v.id for v in self._vertices if not self._is_isolated(v)]

    def number_of_vertices(self, drop_isolates: bool = False) -> int:
        if not drop_isolates:
            return len(self._vertices)
        return sum(1 for v in self._vertices if not self._is_isolated(v))

    def _is_isolated(self, v: Vertex) -> bool:
        rel = self._current_relation
        return not any(t.enabled for t in v.out_ties(rel).values()) and not any(
            t.enabled for t in v.in_ties(rel).values()
        )

    def is_isolated(self, vertex_id) -> bool:
        return self._is_isolated(self._v(vertex_id))

    def isolated_vertices(self):
        return [v.id for v in self._vertices if self._is_isolated(v)]

    def find_vertices_by_label(self, labels):
        """Ids of vertices whose label equals any of ``labels``."""
        wanted = {labels} if isinstance(labels, str) else set(labels)
        return [v.id for v in self._vertices if v.label in wanted]

    ## Vertex metadata (no invalidation)

    def set_vertex_label(self, vertex_id, label):
        self._v(vertex_id).label = str(label)
        self._mark_modified(GraphChange.METADATA, vertex=vertex_id, label=label)

    def vertex_label(self, vertex_id) -> str:
        return self._v(vertex_id).label

    def set_vertex_size(self, vertex_id, size):
        self._v(vertex_id).size = int(size)
        self._mark_modified(GraphChange.METADATA, vertex=vertex_id, size=size)

    def vertex_size(self, vertex_id) -> int:
        return self._v(vertex_id).size

    def set_vertex_shape(self, vertex_id, shape):
        self._v(vertex_id).shape = str(shape)
        self._mark_modified(GraphChange.METADATA, vertex=vertex_id, shape=shape)

    def vertex_shape(self, vertex_id) -> str:
        return self._v(vertex_id).shape

    def set_vertex_color(self, vertex_id, color):
        self._v(vertex_id).color = str(color)
        self._mark_modified(GraphChange.METADATA, vertex=vertex_id, color=color)

    def vertex_color(self, vertex_id) -> str:
        return self._v(vertex_id).color

    def set_vertex_position(self, vertex_id, x, y):
        v = self._v(vertex_id)
        v.x, v.y = float(x), float(y)
        self._mark_modified(GraphChange.POSITIONS, vertex=vertex_id)

    def vertex_position(self, vertex_id):
        v = self._v(vertex_id)
        return (v.x, v.y)

    def positions(self):
        """Mapping ``{vertex_id: (x, y)}``."""
        return {v.id: (v.x, v.y) for v in self._vertices}

    ## Edges

    def add_edge(
        self,
        source,
        target,
        weight: float = 1.0,
        kind=None,
        label: str = "",
        color=None,
        relation=None,
        allow_loop: bool = False,
    ):
        """Create (or update) a tie from ``source`` to ``target``.

        Parameters
        --
        source, target : int
            Existing vertex ids.
        weight : float, default 1.0
        kind : EdgeType | str, optional
            ``DIRECTED``, ``RECIPROCATED`` or ``UNDIRECTED``. Defaults to
            ``DIRECTED`` on directed graphs and ``UNDIRECTED`` otherwise.
        label, color
            Edge metadata.
        relation : int, optional
            Relation index; defaults to the current relation.
        allow_loop : bool, default False
            Permit ``source == target``.

        Raises
        --
        NotFoundError
            If either endpoint does not exist.
        InvalidParameterError
            For a self-loop without ``allow_loop``, or an invalid relation.

        Notes
        -
        - Undirected and reciprocated edges write both directions at once with
          equal weights.
        - A directed tie added over an existing reverse tie makes both
          reciprocated.
        - An existing tie is updated in place (no multi-edges).

        """
        src, dst = self._v(source), self._v(target)
        rel = self._rel(relation)
        if source == target and not allow_loop:
            raise InvalidParameterError(f"self-loop on {source} not allowed")
        kind = _coerce_kind(kind) if kind is not None else (
            EdgeType.DIRECTED if self.directed else EdgeType.UNDIRECTED
        )
        weight = float(weight)

        existing = src.out_ties(rel).get(target)
        if kind is EdgeType.DIRECTED and existing is not None and existing.kind is EdgeType.UNDIRECTED:
            # updating one side of an undirected edge keeps it undirected
            kind = EdgeType.UNDIRECTED

        if kind is EdgeType.DIRECTED:
            reverse = dst.out_ties(rel).get(source)
            if reverse is not None and source != target:
                kind = EdgeType.RECIPROCATED
                reverse.kind = EdgeType.RECIPROCATED
            self._link(src, dst, rel, Tie(weight, kind, label, color))
        else:
            self._link(src, dst, rel, Tie(weight, kind, label, color))
            if source != target:
                self._link(dst, src, rel, Tie(weight, kind, label, color))

        self._mark_modified(
            GraphChange.EDGES, source=source, target=target, relation=rel, weight=weight, kind=kind
        )

    def remove_edge(self, source, target, remove_opposite: bool = False, relation=None):
        """Remove the tie ``source -> target``.

        Undirected edges always lose both directions; for directed or
        reciprocated ties the opposite direction is removed only when
        ``remove_opposite`` is True (otherwise it reverts to directed).

        Raises
        --
        NotFoundError
            If the tie does not exist.

        """
        rel = self._rel(relation)
        tie = self._tie(source, target, rel)
        src, dst = self._v(source), self._v(target)
        self._unlink(src, dst, rel)
        reverse = dst.out_ties(rel).get(source)
        if reverse is not None:
            if tie.kind is EdgeType.UNDIRECTED or remove_opposite:
                self._unlink(dst, src, rel)
            else:
                reverse.kind = EdgeType.DIRECTED
        self._mark_modified(GraphChange.EDGES, source=source, target=target, relation=rel, removed=True)

    def has_edge(self, source, target, reciprocal: bool = False, relation=None) -> float:
        """Weight of the visible tie ``source -> target``, or 0 when absent.

        With ``reciprocal=True`` the opposite tie must exist as well.
        """
        if source not in self.vertex_to_idx or target not in self.vertex_to_idx:
            return 0.0
        rel = self._rel(relation)
        tie = self._v(source).out_ties(rel).get(target)
        if tie is None or not tie.enabled:
            return 0.0
        if reciprocal:
            back = self._v(target).out_ties(rel).get(source)
            if back is None or not back.enabled:
                return 0.0
        return tie.weight

    def edge_symmetric(self, source, target, relation=None) -> bool:
        """True if both directions exist (with any weights)."""
        return bool(self.has_edge(source, target, reciprocal=True, relation=relation))

    def edge_weight(self, source, target, relation=None) -> float:
        return self._tie(source, target, relation).weight

    def set_edge_weight(self, source, target, weight, relation=None):
        """Change a tie weight; undirected edges change in both directions."""
        rel = self._rel(relation)
        tie = self._tie(source, target, rel)
        tie.weight = float(weight)
        if tie.kind is EdgeType.UNDIRECTED:
            back = self._v(target).out_ties(rel).get(source)
            if back is not None:
                back.weight = float(weight)
        self._mark_modified(GraphChange.EDGES, source=source, target=target, weight=weight)

    def edge_kind(self, source, target, relation=None) -> EdgeType:
        return self._tie(source, target, relation).kind

    def set_edge_type(self, source, target, kind, relation=None):
        """Change the type tag of an existing tie.

        - ``UNDIRECTED`` / ``RECIPROCATED``: the opposite tie is created (or
          aligned) with the same weight and both get the tag.
        - ``DIRECTED``: an undirected edge loses its opposite direction; the
          opposite of a reciprocated tie stays but is tagged directed.
        """
        rel = self._rel(relation)
        kind = _coerce_kind(kind)
        tie = self._tie(source, target, rel)
        src, dst = self._v(source), self._v(target)
        back = dst.out_ties(rel).get(source)
        if kind is EdgeType.DIRECTED:
            if back is not None and source != target:
                if tie.kind is EdgeType.UNDIRECTED:
                    self._unlink(dst, src, rel)
                else:
                    back.kind = EdgeType.DIRECTED
        elif source != target:
            if back is None:
                self._link(dst, src, rel, Tie(tie.weight, kind, tie.label, tie.color))
            else:
                back.kind = kind
                if kind is EdgeType.UNDIRECTED:
                    back.weight = tie.weight
        tie.kind = kind
        self._mark_modified(GraphChange.EDGES, source=source, target=target, kind=kind)

    def set_edge_label(self, source, target, label, relation=None):
        rel = self._rel(relation)
        tie = self._tie(source, target, rel)
        tie.label = str(label)
        if tie.kind is EdgeType.UNDIRECTED and (back := self._v(target).out_ties(rel).get(source)):
            back.label = str(label)
        self._mark_modified(GraphChange.METADATA, source=source, target=target, label=label)

    def edge_label(self, source, target, relation=None) -> str:
        return self._tie(source, target, relation).label

    def set_edge_color(self, source, target, color, relation=None):
        rel = self._rel(relation)
        tie = self._tie(source, target, rel)
        tie.color = str(color)
        if tie.kind is EdgeType.UNDIRECTED and (back := self._v(target).out_ties(rel).get(source)):
            back.color = str(color)
        self._mark_modified(GraphChange.METADATA, source=source, target=target, color=color)

    def edge_color(self, source, target, relation=None):
        return self._tie(source, target, relation).color

    def edges(self, relation=None, include_hidden: bool = False):
        """Iterate ``(source, target, weight)`` over ties of a relation.

        Undirected edges appear once per direction.
        """
        rel = self._rel(relation)
        for v in self._vertices:
            for t, tie in v.out_ties(rel).items():
                if include_hidden or tie.enabled:
                    yield v.id, t, tie.weight

    def number_of_edges(self, relation=None, count_undirected_once: bool = False) -> int:
        """Number of visible arcs; optionally counting each undirected edge once."""
        rel = self._rel(relation)
        total = 0
        for v in self._vertices:
            for t, tie in v.out_ties(rel).items():
                if not tie.enabled:
                    continue
                if count_undirected_once and tie.kind is EdgeType.UNDIRECTED and t < v.id:
                    continue
                total += 1
        return total

    ## Degrees and neighborhoods

    def degree_out(self, vertex_id, weighted: bool = False):
        ties = self._visible_out(self._v(vertex_id)).values()
        return sum(t.weight for t in ties) if weighted else len(ties)

    def degree_in(self, vertex_id, weighted: bool = False):
        ties = self._visible_in(self._v(vertex_id)).values()
        return sum(t.weight for t in ties) if weighted else len(ties)

    def successors(self, vertex_id):
        return sorted(self._visible_out(self._v(vertex_id)))

    def predecessors(self, vertex_id):
        return sorted(self._visible_in(self._v(vertex_id)))

    def neighbors(self, vertex_id):
        """Vertices tied to ``vertex_id`` in either direction (itself excluded)."""
        v = self._v(vertex_id)
        out = set(self._visible_out(v)) | set(self._visible_in(v))
        out.discard(vertex_id)
        return sorted(out)

    def vertices_with_outbound_edges(self) -> int:
        return sum(1 for v in self._vertices if self._visible_out(v))

    def vertices_with_inbound_edges(self) -> int:
        return sum(1 for v in self._vertices if self._visible_in(v))

    def vertices_with_reciprocal_edges(self) -> int:
        count = 0
        for v in self._vertices:
            out = self._visible_out(v)
            if any(t != v.id and t in self._visible_in(v) for t in out):
                count += 1
        return count

    ## Edge filters

    def filter_edges_by_weight(self, threshold: float, over: bool = True):
        """Hide ties of the current relation by weight.

        ``over=True`` hides ties heavier than ``threshold``; ``over=False``
        hides lighter ones. Every other tie of the relation is made visible.
        """
        rel = self._current_relation
        hidden = 0
        for v in self._vertices:
            for tie in v.out_ties(rel).values():
                tie.enabled = not (tie.weight > threshold if over else tie.weight < threshold)
                hidden += not tie.enabled
        logger.debug("weight filter %s %s hid %d ties", ">" if over else "<", threshold, hidden)
        self._mark_modified(GraphChange.EDGES, filter="weight", threshold=threshold, over=over)

    def filter_edges_unilateral(self, toggle: bool = True):
        """Hide (``toggle=True``) or restore non-reciprocated ties of the current relation."""
        rel = self._current_relation
        for v in self._vertices:
            for t, tie in v.out_ties(rel).items():
                if toggle:
                    tie.enabled = t == v.id or v.id in self._vertices[self.vertex_to_idx[t]].out_ties(rel)
                else:
                    tie.enabled = True
        self._mark_modified(GraphChange.EDGES, filter="unilateral", toggle=toggle)

    def filter_edges_reset(self):
        """Make every tie of every relation visible again."""
        for v in self._vertices:
            for ties in v.outbound.values():
                for tie in ties.values():
                    tie.enabled = True
        self._mark_modified(GraphChange.EDGES, filter="reset")

    ## Whole graph

    def clear(self, reason: str = ""):
        """Destroy all vertices and edges and reset relations and caches."""
        self._vertices = []
        self.vertex_to_idx = {}
        self.idx_to_vertex = {}
        self._relations = [self.settings.default_relation]
        self._current_relation = 0
        self.cache.clear()
        self._mark_modified(GraphChange.NEW, reason=reason)
        self._log_event("relations_cleared")

    def apply(self, stream):
        """Apply an explicit stream of mutation messages.

        Parameters
        --
        stream : Iterable[dict | tuple]
            Either ``{"op": name, **kwargs}`` or ``(name, kwargs)`` items, where
            ``name`` is one of the public mutators (``add_vertex``,
            ``add_edge``, ``remove_vertex``, ``set_edge_weight``,
            ``add_relation``, ...).

        Returns
        ---
        list
            The return value of each applied call, in order.

        Raises
        --
        InvalidParameterError
            For an unknown operation name.

        """
        results = []
        for msg in stream:
            if isinstance(msg, dict):
                kwargs = dict(msg)
                op = kwargs.pop("op", None)
            else:
                op, kwargs = msg[0], dict(msg[1]) if len(msg) > 1 else {}
            if op not in self._MESSAGE_OPS:
                raise InvalidParameterError(f"unknown mutation {op!r}")
            results.append(getattr(self, op)(**kwargs))
        return results
