import logging

from ..core._errors import InvalidParameterError
from ..core._helpers import UNDEFINED, AnalysisOptions, EdgeType, GraphChange
from ..core._Store import Tie

logger = logging.getLogger(__name__)

SUBGRAPH_KINDS = ("clique", "star", "cycle", "line")


class Structure:
    # Whole-graph properties and structural transforms

    ## Properties

    def is_symmetric(self) -> bool:
        """True if every visible tie has a visible opposite tie of equal weight."""
        for v in self._vertices:
            for t, tie in self._visible_out(v).items():
                if t == v.id:
                    continue
                back = self._vertices[self.vertex_to_idx[t]].out_ties(self._current_relation).get(v.id)
                if back is None or not back.enabled or back.weight != tie.weight:
                    return False
        return True

    def is_weighted(self) -> bool:
        """True if some visible tie has a weight other than 1."""
        return any(w != 1.0 for _u, _v, w in self.edges())

    def density(self, drop_isolates: bool = False) -> float:
        """Share of possible ordered pairs that are tied (loops ignored)."""
        opts = AnalysisOptions(drop_isolates=drop_isolates)
        order = self._analysed(opts)
        n = len(order)
        if n < 2:
            return 0.0
        ids = {v.id for v in order}
        arcs = sum(
            1 for v in order for t in self._visible_out(v) if t != v.id and t in ids
        )
        return arcs / (n * (n - 1))

    def reciprocity(self) -> dict:
        """Arc and dyad reciprocity of the current relation.

        Returns
        ---
        dict
            ``arc``: reciprocated arcs / arcs; ``dyad``: mutual dyads / tied
            dyads. Undefined (NaN) when there are no ties.

        """
        arcs = reciprocated = 0
        dyads, mutual = set(), set()
        for v in self._vertices:
            for t in self._visible_out(v):
                if t == v.id:
                    continue
                arcs += 1
                pair = (min(v.id, t), max(v.id, t))
                dyads.add(pair)
                if self.has_edge(t, v.id):
                    reciprocated += 1
                    mutual.add(pair)
        return {
            "arc": reciprocated / arcs if arcs else UNDEFINED,
            "dyad": len(mutual) / len(dyads) if dyads else UNDEFINED,
            "arcs": arcs,
            "reciprocated_arcs": reciprocated,
            "dyads": len(dyads),
            "mutual_dyads": len(mutual),
        }

    def clustering_coefficient_local(self, vertex_id) -> float:
        """Share of possible arcs present among the neighbors of ``vertex_id``.

        Neighbors are taken in either direction; 0 when there are fewer than two.
        """
        nbrs = set(self.neighbors(vertex_id))
        k = len(nbrs)
        if k < 2:
            return 0.0
        present = sum(
            1 for u in nbrs for t in self._visible_out(self._v(u)) if t != u and t in nbrs
        )
        return present / (k * (k - 1))

    def clustering_coefficient(self, drop_isolates: bool = False) -> float:
        """Mean local clustering coefficient over the analysed vertices."""
        order = self._analysed(AnalysisOptions(drop_isolates=drop_isolates))
        if not order:
            return UNDEFINED
        return sum(self.clustering_coefficient_local(v.id) for v in order) / len(order)

    ## Transforms

    def symmetrize(self) -> int:
        """Add the missing opposite of every visible tie.

        Pairs tied both ways with different weights take the larger weight.
        Symmetrizing a symmetric graph changes nothing.

        Returns
        ---
        int
            Number of ties added or adjusted.

        """
        rel = self._current_relation
        changed = 0
        for v in list(self._vertices):
            for t, tie in list(self._visible_out(v).items()):
                if t == v.id:
                    continue
                other = self._v(t)
                back = other.out_ties(rel).get(v.id)
                if back is None:
                    kind = EdgeType.UNDIRECTED if tie.kind is EdgeType.UNDIRECTED else EdgeType.RECIPROCATED
                    tie.kind = kind
                    self._link(other, v, rel, Tie(tie.weight, kind, tie.label, tie.color))
                    changed += 1
                elif not back.enabled or back.weight != tie.weight:
                    back.enabled = True
                    back.weight = tie.weight = max(back.weight, tie.weight)
                    changed += 1
                if tie.kind is EdgeType.DIRECTED:
                    tie.kind = back.kind = EdgeType.RECIPROCATED
        if changed:
            self._mark_modified(GraphChange.EDGES, transform="symmetrize", changed=changed)
        return changed

    def set_undirected(self):
        """Symmetrize and tag every tie of the current relation undirected."""
        self.symmetrize()
        for v in self._vertices:
            for tie in v.out_ties(self._current_relation).values():
                tie.kind = EdgeType.UNDIRECTED
        self.directed = False
        self._mark_modified(GraphChange.EDGES, transform="undirected")

    def set_directed(self):
        """Tag undirected ties as reciprocated arcs; new ties default to directed."""
        for v in self._vertices:
            for tie in v.out_ties(self._current_relation).values():
                if tie.kind is EdgeType.UNDIRECTED:
                    tie.kind = EdgeType.RECIPROCATED
        self.directed = True
        self._mark_modified(GraphChange.EDGES, transform="directed")

    def _new_relation_from(self, name, pairs, undirected: bool) -> int:
        """Create a relation holding ``{(u, v): weight}`` and make it current."""
        rel = self.add_relation(name)
        kind = EdgeType.UNDIRECTED if undirected else EdgeType.DIRECTED
        for (u, t), w in pairs.items():
            self._link(self._v(u), self._v(t), rel, Tie(float(w), kind))
            if undirected and u != t:
                self._link(self._v(t), self._v(u), rel, Tie(float(w), kind))
        if not undirected:
            for (u, t) in pairs:
                if (t, u) in pairs and u != t:
                    self._v(u).outbound[rel][t].kind = EdgeType.RECIPROCATED
        logger.info("relation %r derived with %d ties", name, len(pairs))
        self.set_relation(rel)
        return rel

    def symmetrize_strong_ties(self, all_relations: bool = False) -> int:
        """New relation with an undirected tie for every reciprocated pair.

        With ``all_relations`` a pair counts when each direction exists in
        some relation (not necessarily the same one).

        Returns
        ---
        int
            Index of the new relation, which becomes current.

        """
        rels = range(len(self._relations)) if all_relations else [self._current_relation]
        arcs = set()
        for rel in rels:
            for v in self._vertices:
                for t, tie in v.out_ties(rel).items():
                    if tie.enabled and t != v.id:
                        arcs.add((v.id, t))
        pairs = {(u, t): 1.0 for (u, t) in arcs if u < t and (t, u) in arcs}
        return self._new_relation_from("Strong ties", pairs, undirected=True)

    def cocitation(self) -> int:
        """New undirected relation weighting each pair by its common in-neighbors.

        Returns
        ---
        int
            Index of the new relation, which becomes current.

        """
        inbound = {v.id: set(self._visible_in(v)) - {v.id} for v in self._vertices}
        ids = [v.id for v in self._vertices]
        pairs = {}
        for a, u in enumerate(ids):
            for t in ids[a + 1 :]:
                common = len(inbound[u] & inbound[t])
                if common:
                    pairs[(u, t)] = common
        return self._new_relation_from("Cocitation", pairs, undirected=True)

    def dichotomize(self, threshold: float) -> int:
        """New binary relation of the ties heavier than ``threshold``.

        Returns
        ---
        int
            Index of the new relation, which becomes current.

        """
        pairs = {
            (v.id, t): 1.0
            for v in self._vertices
            for t, tie in self._visible_out(v).items()
            if tie.weight > threshold
        }
        return self._new_relation_from(f"Binary (>{threshold:g})", pairs, undirected=False)

    def create_subgraph(self, vertices, kind: str = "clique", center=None, weight: float = 1.0):
        """Tie existing vertices together as a clique, star, cycle or line.

        Ties use the graph's default type; ``center`` (star only) defaults to
        the first vertex.

        Raises
        --
        InvalidParameterError
            Unknown kind, fewer than two vertices, or a center outside the list.
        NotFoundError
            If a vertex does not exist.

        """
        vertices = list(vertices)
        if kind not in SUBGRAPH_KINDS:
            raise InvalidParameterError(f"kind must be one of {SUBGRAPH_KINDS}, got {kind!r}")
        if len(vertices) < 2:
            raise InvalidParameterError("a subgraph needs at least two vertices")
        for v in vertices:
            self._v(v)
        if kind == "clique":
            pairs = [(u, t) for i, u in enumerate(vertices) for t in vertices[i + 1 :]]
        elif kind == "star":
            center = vertices[0] if center is None else center
            if center not in vertices:
                raise InvalidParameterError(f"star center {center} is not among the vertices")
            pairs = [(center, t) for t in vertices if t != center]
        else:
            pairs = list(zip(vertices, vertices[1:]))
            if kind == "cycle" and len(vertices) > 2:
                pairs.append((vertices[-1], vertices[0]))
        for u, t in pairs:
            self.add_edge(u, t, weight=weight)
        return pairs
