from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass

import numpy as np

from ..core._errors import InvalidParameterError
from .matrices import VertexMatrix

logger = logging.getLogger(__name__)


@dataclass
class CliqueCensus:
    vertices: list
    cliques: list  # tuples of vertex ids, largest first
    co_membership: VertexMatrix  # cliques shared by each pair; diagonal: cliques per vertex

    @property
    def size_distribution(self) -> dict:
        return dict(sorted(Counter(len(c) for c in self.cliques).items()))

    @property
    def max_size(self) -> int:
        return max((len(c) for c in self.cliques), default=0)


def _bron_kerbosch(R: frozenset, P: frozenset, X: frozenset, nbrs, found: list):
    # every call receives its own immutable sets; siblings never share state
    if not P and not X:
        found.append(R)
        return
    pivot = max(P | X, key=lambda u: len(P & nbrs[u]))
    for v in P - nbrs[pivot]:
        _bron_kerbosch(R | {v}, P & nbrs[v], X & nbrs[v], nbrs, found)
        P = P - {v}
        X = X | {v}


class Cliques:
    # Maximal clique census

    def _undirected_neighborhoods(self):
        return {v.id: frozenset(self.neighbors(v.id)) for v in self._vertices}

    def clique_census(self) -> CliqueCensus:
        """Enumerate maximal cliques (Bron-Kerbosch with pivoting).

        Ties are read in either direction. An isolated vertex is a maximal
        clique of its own, so K1 yields the single clique ``(v,)``.
        """
        cached = self.cache.get("cliques")
        if cached is not None:
            return cached
        nbrs = self._undirected_neighborhoods()
        ids = [v.id for v in self._vertices]
        found = []
        with self._computation("clique_census", total=len(ids), vertices=len(ids)) as tick:
            # outer level unrolled to report progress per vertex
            P, X = frozenset(ids), frozenset()
            for done, v in enumerate(ids, start=1):
                _bron_kerbosch(frozenset({v}), P & nbrs[v], X & nbrs[v], nbrs, found)
                P = P - {v}
                X = X | {v}
                tick(done)

        cliques = sorted((tuple(sorted(c)) for c in found), key=lambda c: (-len(c), c))
        rows = {vid: i for i, vid in enumerate(ids)}
        co = np.zeros((len(ids), len(ids)))
        for c in cliques:
            idx = [rows[v] for v in c]
            co[np.ix_(idx, idx)] += 1.0
        logger.debug("clique census: %d maximal cliques over %d vertices", len(cliques), len(ids))
        census = CliqueCensus(ids, cliques, VertexMatrix(co, list(ids), list(ids), name="clique_co_membership"))
        self.cache.put("cliques", None, census)
        self._metric_available("cliques", count=len(cliques))
        return census

    def maximal_cliques(self):
        return list(self.clique_census().cliques)

    def cliques_of_size(self, k: int):
        return [c for c in self.clique_census().cliques if len(c) == k]

    def cliques_containing(self, vertex_id, min_size: int = 0) -> int:
        """Number of maximal cliques of at least ``min_size`` members containing ``vertex_id``."""
        self._v(vertex_id)
        if min_size < 0:
            raise InvalidParameterError("min_size must be >= 0")
        return sum(1 for c in self.clique_census().cliques if len(c) >= min_size and vertex_id in c)
