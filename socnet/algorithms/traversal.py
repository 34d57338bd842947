from __future__ import annotations

import heapq
import logging
import math
from collections import deque
from dataclasses import dataclass
from enum import Enum

import numpy as np

from ..core._errors import NotFoundError, UnsupportedError
from ..core._helpers import UNDEFINED, AnalysisOptions

logger = logging.getLogger(__name__)


class Connectedness(Enum):
    CONNECTED = "connected"  # symmetric, every pair reachable
    STRONGLY_CONNECTED = "strongly_connected"
    UNILATERALLY_CONNECTED = "unilaterally_connected"
    DISCONNECTED = "disconnected"


@dataclass
class GeodesicResult:
    """All-pairs geodesics over the analysed vertices.

    Row/column ``i`` of every array refers to ``vertices[i]``.
    ``distances`` holds ``inf`` for unreachable pairs and 0 on the diagonal.
    """

    vertices: list
    options: AnalysisOptions
    distances: np.ndarray
    sigma: np.ndarray
    reach: np.ndarray  # number of vertices reachable from each row (itself excluded)
    distance_sums: np.ndarray  # sum of finite distances from each row
    eccentricity: np.ndarray  # inf when some vertex is unreachable
    power: np.ndarray  # sum of 1/d over reachable vertices
    total_distance: float
    geodesics_count: int  # ordered reachable pairs
    diameter: float
    average_distance: float
    betweenness: np.ndarray | None = None
    stress: np.ndarray | None = None

    def row(self, vertex_id) -> int:
        try:
            return self.vertices.index(vertex_id)
        except ValueError:
            raise NotFoundError(f"vertex {vertex_id} is not among the analysed vertices") from None


def _bfs(adj, s):
    n = len(adj)
    dist = [math.inf] * n
    sigma = [0.0] * n
    preds = [[] for _ in range(n)]
    order = []
    dist[s] = 0
    sigma[s] = 1.0
    queue = deque([s])
    while queue:
        u = queue.popleft()
        order.append(u)
        du = dist[u] + 1
        for w, _cost in adj[u]:
            if dist[w] == math.inf:
                dist[w] = du
                queue.append(w)
            if dist[w] == du:
                sigma[w] += sigma[u]
                preds[w].append(u)
    return dist, sigma, preds, order


def _dijkstra(adj, s):
    n = len(adj)
    dist = [math.inf] * n
    sigma = [0.0] * n
    preds = [[] for _ in range(n)]
    order = []
    done = [False] * n
    dist[s] = 0.0
    sigma[s] = 1.0
    heap = [(0.0, s)]
    while heap:
        d, u = heapq.heappop(heap)
        if done[u] or d > dist[u]:
            continue
        done[u] = True
        order.append(u)
        for w, cost in adj[u]:
            nd = d + cost
            if nd < dist[w]:
                dist[w] = nd
                sigma[w] = sigma[u]
                preds[w] = [u]
                heapq.heappush(heap, (nd, w))
            elif nd == dist[w] and not done[w]:
                sigma[w] += sigma[u]
                preds[w].append(u)
    return dist, sigma, preds, order


class Traversal:
    # Traversal engine: BFS / Dijkstra fused with betweenness and stress

    def _analysed(self, opts: AnalysisOptions):
        """Vertex records taking part in an analysis, in arena order."""
        if opts.drop_isolates:
            return [v for v in self._vertices if not self._is_isolated(v)]
        return list(self._vertices)

    def _adjacency_lists(self, opts: AnalysisOptions, order, reverse: bool = False):
        """Per-row lists of ``(row, cost)`` over visible, non-loop ties.

        Raises
        --
        UnsupportedError
            Negative weights in weighted mode, or zero weights with inverse weights.

        """
        rows = {v.id: i for i, v in enumerate(order)}
        adj = [[] for _ in order]
        for i, v in enumerate(order):
            ties = self._visible_in(v) if reverse else self._visible_out(v)
            for t, tie in ties.items():
                j = rows.get(t)
                if j is None or j == i:
                    continue
                if opts.weighted:
                    if tie.weight < 0:
                        raise UnsupportedError(
                            f"negative weight {tie.weight} on ({v.id}, {t}); shortest paths need weights >= 0"
                        )
                    if opts.inverse_weights and tie.weight == 0:
                        raise UnsupportedError(f"zero weight on ({v.id}, {t}) cannot be inverted")
                adj[i].append((j, opts.cost(tie.weight)))
        return rows, adj

    def geodesics(self, options=None, centralities: bool = False, **kw) -> GeodesicResult:
        """Compute (or fetch) all-pairs geodesics.

        Parameters
        --
        options : AnalysisOptions, optional
            Tie reading; ``weighted``, ``inverse_weights`` and ``drop_isolates``
            may also be passed as keywords.
        centralities : bool, default False
            Also accumulate betweenness and stress during the same pass.

        Returns
        ---
        GeodesicResult

        Raises
        --
        UnsupportedError
            For weights Dijkstra cannot handle.

        Notes
        -
        - Unweighted graphs use BFS; weighted ones use Dijkstra with cost ``w``
          or ``1/w`` under inverse weights.
        - One pass per source; betweenness/stress reuse its predecessor sets.

        """
        opts = AnalysisOptions.coerce(options, **kw)
        cached = self.cache.get("geodesics", opts)
        if cached is not None and (cached.betweenness is not None or not centralities):
            return cached
        result = self._compute_geodesics(opts, centralities)
        self.cache.put("geodesics", opts, result)
        self._metric_available("geodesics", options=repr(opts))
        return result

    def _compute_geodesics(self, opts: AnalysisOptions, centralities: bool) -> GeodesicResult:
        order = self._analysed(opts)
        n = len(order)
        _rows, adj = self._adjacency_lists(opts, order)
        search = _dijkstra if opts.weighted else _bfs

        dm = np.full((n, n), math.inf)
        sg = np.zeros((n, n))
        bc = np.zeros(n) if centralities else None
        sc = np.zeros(n) if centralities else None

        with self._computation("geodesics", total=n, vertices=n, options=repr(opts)) as tick:
            for s in range(n):
                dist, sigma, preds, visit = search(adj, s)
                dm[s] = dist
                sg[s] = sigma
                if centralities:
                    delta = [0.0] * n
                    delta_s = [0.0] * n
                    for w in reversed(visit):
                        for u in preds[w]:
                            delta[u] += sigma[u] / sigma[w] * (1.0 + delta[w])
                            delta_s[u] += sigma[u] * (1.0 + delta_s[w] / sigma[w])
                        if w != s:
                            bc[w] += delta[w]
                            sc[w] += delta_s[w]
                tick(s + 1)

        finite = np.isfinite(dm)
        off = finite & ~np.eye(n, dtype=bool)
        reach = off.sum(axis=1)
        sums = np.where(off, dm, 0.0).sum(axis=1)
        with np.errstate(divide="ignore"):
            inv = np.where(off & (dm > 0), 1.0 / np.where(off, dm, 1.0), 0.0)
        power = inv.sum(axis=1)
        ecc = np.where(reach == n - 1, np.where(off, dm, 0.0).max(axis=1, initial=0.0), math.inf)

        pairs = int(off.sum())
        total = float(sums.sum())
        if centralities and self.is_symmetric():
            # each unordered pair was accumulated from both endpoints
            bc /= 2.0
            sc /= 2.0

        result = GeodesicResult(
            vertices=[v.id for v in order],
            options=opts,
            distances=dm,
            sigma=sg,
            reach=reach,
            distance_sums=sums,
            eccentricity=ecc,
            power=power,
            total_distance=total,
            geodesics_count=pairs,
            diameter=float(dm[off].max()) if pairs else 0.0,
            average_distance=total / pairs if pairs else UNDEFINED,
            betweenness=bc,
            stress=sc,
        )
        logger.debug(
            "geodesics: n=%d pairs=%d diameter=%s (%s)", n, pairs, result.diameter, opts
        )
        return result

    ## Queries

    def distance(self, source, target, options=None, **kw) -> float:
        """Geodesic distance ``source -> target``; ``inf`` when unreachable."""
        self._v(source), self._v(target)
        res = self.geodesics(options, **kw)
        return float(res.distances[res.row(source), res.row(target)])

    def diameter(self, options=None, **kw) -> float:
        """Largest finite geodesic distance (0 for an edgeless graph)."""
        return self.geodesics(options, **kw).diameter

    def average_distance(self, options=None, **kw) -> float:
        """Mean geodesic distance over reachable ordered pairs (undefined if none)."""
        return self.geodesics(options, **kw).average_distance

    def geodesics_count(self, options=None, **kw) -> int:
        """Number of ordered pairs joined by at least one path."""
        return self.geodesics(options, **kw).geodesics_count

    def eccentricity(self, vertex_id, options=None, **kw) -> float:
        res = self.geodesics(options, **kw)
        return float(res.eccentricity[res.row(vertex_id)])

    def _on_cycle(self, res: GeodesicResult, i: int) -> bool:
        vid = res.vertices[i]
        if self.has_edge(vid, vid):
            return True
        return any(
            p in res.vertices and math.isfinite(res.distances[i, res.row(p)])
            for p in self.predecessors(vid)
            if p != vid
        )

    def reachable(self, source, target, options=None, **kw) -> bool:
        """True if a path leads from ``source`` to ``target``.

        For ``source == target`` a closed walk is required (a cycle or loop).
        """
        self._v(source), self._v(target)
        res = self.geodesics(options, **kw)
        i = res.row(source)
        if source == target:
            return self._on_cycle(res, i)
        return bool(math.isfinite(res.distances[i, res.row(target)]))

    def influence_range(self, vertex_id, options=None, **kw):
        """Ids of vertices reachable from ``vertex_id`` (itself excluded)."""
        res = self.geodesics(options, **kw)
        i = res.row(vertex_id)
        return [w for j, w in enumerate(res.vertices) if j != i and math.isfinite(res.distances[i, j])]

    def influence_domain(self, vertex_id, options=None, **kw):
        """Ids of vertices from which ``vertex_id`` is reachable (itself excluded)."""
        res = self.geodesics(options, **kw)
        j = res.row(vertex_id)
        return [w for i, w in enumerate(res.vertices) if i != j and math.isfinite(res.distances[i, j])]

    def connectedness(self, options=None, **kw) -> Connectedness:
        """Classify the current relation's connectivity.

        Symmetric graphs are ``CONNECTED`` or ``DISCONNECTED``; otherwise
        ``STRONGLY_CONNECTED`` (every ordered pair reachable),
        ``UNILATERALLY_CONNECTED`` (every pair reachable in at least one
        direction) or ``DISCONNECTED``.
        """
        res = self.geodesics(options, **kw)
        n = len(res.vertices)
        reach = np.isfinite(res.distances)
        if reach.all():
            return Connectedness.CONNECTED if self.is_symmetric() else Connectedness.STRONGLY_CONNECTED
        if not self.is_symmetric() and (reach | reach.T).all() and n > 0:
            return Connectedness.UNILATERALLY_CONNECTED
        return Connectedness.DISCONNECTED

    def is_connected(self, options=None, **kw) -> bool:
        return self.connectedness(options, **kw) in (
            Connectedness.CONNECTED,
            Connectedness.STRONGLY_CONNECTED,
        )
