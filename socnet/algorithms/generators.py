"""Synthetic network generators.

Every generator clears the graph, validates its parameters before touching
anything, places the new vertices on a circle and draws randomness from a
``numpy.random.Generator`` seeded with ``seed`` (or ``settings.random_seed``).
"""

from __future__ import annotations

import itertools
import logging
import math

import numpy as np

from ..core._errors import InvalidParameterError
from ..core._helpers import EdgeType


logger = logging.getLogger(__name__)


def _require(cond, message):
    if not cond:
        raise InvalidParameterError(message)


def _check_n(n, minimum=1):
    _require(
        not isinstance(n, bool) and isinstance(n, int) and n >= minimum,
        f"n must be an int >= {minimum}, got {n!r}",
    )


class Generators:
    # Synthetic network generators

    def _start(self, name: str, n: int, directed: bool, seed):
        self.clear(reason=name)
        self.directed = bool(directed)
        rng = np.random.default_rng(self.settings.random_seed if seed is None else seed)
        cx, cy = self.canvas_width / 2.0, self.canvas_height / 2.0
        radius = 0.4 * min(self.canvas_width, self.canvas_height)
        for i in range(n):
            angle = 2.0 * math.pi * i / max(n, 1)
            self.add_vertex(x=cx + radius * math.cos(angle), y=cy + radius * math.sin(angle))
        logger.info("%s: %d vertices (directed=%s, seed=%s)", name, n, directed, seed)
        return rng, [v.id for v in self._vertices]

    def _gen_tie(self, u, v, directed: bool):
        self.add_edge(u, v, kind=EdgeType.DIRECTED if directed else EdgeType.UNDIRECTED, allow_loop=True)

    def erdos_renyi(self, n, p=None, m=None, directed=False, allow_loops=False, seed=None):
        """Random graph G(n, p) or G(n, m).

        Parameters
        --
        n : int
        p : float, optional
            Probability of each possible tie (exclusive with ``m``).
        m : int, optional
            Exact number of ties, drawn uniformly without repetition.
        directed : bool
            Ordered pairs instead of unordered ones.
        allow_loops : bool
            Also consider ``(v, v)`` pairs.

        Raises
        --
        InvalidParameterError
            Bad ``n``, both or neither of ``p``/``m``, ``p`` outside [0, 1] or
            ``m`` above the number of possible ties.

        """
        _check_n(n)
        _require((p is None) != (m is None), "give exactly one of p or m")
        if directed:
            pairs = [(u, v) for u in range(n) for v in range(n) if u != v or allow_loops]
        else:
            pairs = [(u, v) for u in range(n) for v in range(u, n) if u != v or allow_loops]
        if p is not None:
            _require(0.0 <= p <= 1.0, f"p must lie in [0, 1], got {p}")
        else:
            _require(
                not isinstance(m, bool) and isinstance(m, int) and 0 <= m <= len(pairs),
                f"m must be an int in [0, {len(pairs)}], got {m!r}",
            )

        rng, ids = self._start("erdos_renyi", n, directed, seed)
        with self._computation("erdos_renyi", total=len(pairs), n=n) as tick:
            if p is not None:
                chosen = [pr for pr, x in zip(pairs, rng.random(len(pairs))) if x < p]
            else:
                picks = rng.choice(len(pairs), size=m, replace=False) if m else []
                chosen = [pairs[k] for k in sorted(picks)]
            for k, (u, v) in enumerate(chosen, start=1):
                self._gen_tie(ids[u], ids[v], directed)
                tick(k)
        return self

    def scale_free(self, n, power=1.0, m0=1, m=1, alpha=1.0, directed=False, seed=None):
        """Preferential attachment.

        Starts from ``m0`` fully tied vertices; each new vertex ties to ``m``
        distinct existing vertices chosen with probability proportional to
        ``degree ** power + alpha``.

        Raises
        --
        InvalidParameterError
            Unless ``1 <= m <= m0 <= n``, ``power > 0`` and ``alpha >= 0``.

        """
        _check_n(n)
        _require(isinstance(m0, int) and 1 <= m0 <= n, f"m0 must lie in [1, n], got {m0!r}")
        _require(isinstance(m, int) and 1 <= m <= m0, f"m must lie in [1, m0], got {m!r}")
        _require(power > 0, f"power must be > 0, got {power}")
        _require(alpha >= 0, f"alpha must be >= 0, got {alpha}")

        rng, ids = self._start("scale_free", n, directed, seed)
        degree = np.zeros(n)
        for u, v in itertools.combinations(range(m0), 2):
            self._gen_tie(ids[u], ids[v], directed)
            degree[[u, v]] += 1
        with self._computation("scale_free", total=n - m0, n=n) as tick:
            for new in range(m0, n):
                weights = degree[:new] ** power + alpha
                probs = weights / weights.sum() if np.count_nonzero(weights) >= m else None
                targets = rng.choice(new, size=min(m, new), replace=False, p=probs)
                for t in sorted(int(x) for x in targets):
                    self._gen_tie(ids[new], ids[t], directed)
                    degree[[new, t]] += 1
                tick(new - m0 + 1)
        return self

    def ring_lattice(self, n, degree, directed=False, seed=None):
        """Each vertex tied to its ``degree / 2`` nearest neighbors on either side.

        Raises
        --
        InvalidParameterError
            Unless ``degree`` is even and ``2 <= degree <= n - 1``.

        """
        _check_n(n, minimum=3)
        _require(
            isinstance(degree, int) and degree % 2 == 0 and 2 <= degree <= n - 1,
            f"degree must be even and lie in [2, n - 1], got {degree!r}",
        )
        _rng, ids = self._start("ring_lattice", n, directed, seed)
        for i in range(n):
            for k in range(1, degree // 2 + 1):
                self._gen_tie(ids[i], ids[(i + k) % n], False)
        if directed:
            self.set_directed()
        return self

    def small_world(self, n, degree, beta, directed=False, seed=None):
        """Watts-Strogatz: ring lattice with each tie rewired with probability ``beta``.

        Rewiring keeps the first endpoint and never creates loops or duplicates.
        """
        _check_n(n, minimum=3)
        _require(
            isinstance(degree, int) and degree % 2 == 0 and 2 <= degree <= n - 1,
            f"degree must be even and lie in [2, n - 1], got {degree!r}",
        )
        _require(0.0 <= beta <= 1.0, f"beta must lie in [0, 1], got {beta}")
        rng, ids = self._start("small_world", n, directed, seed)
        succ = {i: set() for i in range(n)}
        for i in range(n):
            for k in range(1, degree // 2 + 1):
                j = (i + k) % n
                succ[i].add(j)
                succ[j].add(i)
        with self._computation("small_world", total=n, n=n) as tick:
            for k in range(1, degree // 2 + 1):
                for i in range(n):
                    j = (i + k) % n
                    if rng.random() >= beta or j not in succ[i]:
                        continue
                    free = [c for c in range(n) if c != i and c not in succ[i]]
                    if not free:
                        continue
                    new = free[int(rng.integers(len(free)))]
                    succ[i].discard(j)
                    succ[j].discard(i)
                    succ[i].add(new)
                    succ[new].add(i)
            for i in range(n):
                for j in sorted(succ[i]):
                    if i < j:
                        self._gen_tie(ids[i], ids[j], False)
                tick(i + 1)
        if directed:
            self.set_directed()
        return self

    def regular(self, n, degree, directed=False, allow_loops=False, seed=None):
        """Random ``degree``-regular graph.

        Built as a circulant graph and then randomized with degree-preserving
        double-edge swaps. Directed graphs get equal in- and out-degrees.
        ``allow_loops`` permits ``degree = n`` on directed graphs.

        Raises
        --
        InvalidParameterError
            If ``degree`` exceeds the number of available partners, or ``n * degree``
            is odd for an undirected graph.

        """
        _check_n(n, minimum=2)
        limit = n if (directed and allow_loops) else n - 1
        _require(
            isinstance(degree, int) and 1 <= degree <= limit,
            f"degree must lie in [1, {limit}], got {degree!r}",
        )
        _require(directed or (n * degree) % 2 == 0, "n * degree must be even for an undirected regular graph")
        rng, ids = self._start("regular", n, directed, seed)

        if directed:
            start = 0 if allow_loops and degree == n else 1
            arcs = {(i, (i + k) % n) for i in range(n) for k in range(start, start + degree)}
            arcs = self._swap_arcs(arcs, n * degree, rng, allow_loops)
            for u, v in sorted(arcs):
                self._gen_tie(ids[u], ids[v], True)
            return self

        edges = set()
        for i in range(n):
            for k in range(1, degree // 2 + 1):
                edges.add(frozenset((i, (i + k) % n)))
        if degree % 2:
            for i in range(n // 2):
                edges.add(frozenset((i, i + n // 2)))
        edges = self._swap_edges(edges, n * degree, rng)
        for e in sorted(tuple(sorted(e)) for e in edges):
            self._gen_tie(ids[e[0]], ids[e[1]], False)
        return self

    @staticmethod
    def _swap_edges(edges, attempts, rng):
        edges = set(edges)
        for _ in range(attempts):
            if len(edges) < 2:
                break
            pool = list(edges)
            e1, e2 = (pool[k] for k in rng.choice(len(pool), size=2, replace=False))
            a, b = tuple(e1)
            c, d = tuple(e2)
            if rng.random() < 0.5:
                c, d = d, c
            n1, n2 = frozenset((a, d)), frozenset((c, b))
            if len(n1) < 2 or len(n2) < 2 or n1 in edges or n2 in edges or n1 == n2:
                continue
            edges -= {e1, e2}
            edges |= {n1, n2}
        return edges

    @staticmethod
    def _swap_arcs(arcs, attempts, rng, allow_loops):
        arcs = set(arcs)
        for _ in range(attempts):
            if len(arcs) < 2:
                break
            pool = sorted(arcs)
            (a, b), (c, d) = (pool[k] for k in rng.choice(len(pool), size=2, replace=False))
            n1, n2 = (a, d), (c, b)
            if not allow_loops and (a == d or c == b):
                continue
            if n1 in arcs or n2 in arcs or n1 == n2:
                continue
            arcs -= {(a, b), (c, d)}
            arcs |= {n1, n2}
        return arcs

    def lattice(self, length, dimension=2, neighborhood=1, directed=False, circular=False, seed=None):
        """``dimension``-dimensional lattice with ``length ** dimension`` vertices.

        Vertices differing along one axis by at most ``neighborhood`` steps are
        tied (wrapping around when ``circular``). Directed lattices point
        towards increasing coordinates.

        Raises
        --
        InvalidParameterError
            Unless ``length >= 2``, ``dimension >= 1`` and
            ``1 <= neighborhood < length``.

        """
        _require(isinstance(length, int) and length >= 2, f"length must be >= 2, got {length!r}")
        _require(isinstance(dimension, int) and dimension >= 1, f"dimension must be >= 1, got {dimension!r}")
        _require(
            isinstance(neighborhood, int) and 1 <= neighborhood < length,
            f"neighborhood must lie in [1, length - 1], got {neighborhood!r}",
        )
        n = length**dimension
        _rng, ids = self._start("lattice", n, directed, seed)
        shape = (length,) * dimension
        if dimension == 2:
            step_x = self.canvas_width / (length + 1)
            step_y = self.canvas_height / (length + 1)
            for i, vid in enumerate(ids):
                r, c = np.unravel_index(i, shape)
                self.set_vertex_position(vid, (c + 1) * step_x, (r + 1) * step_y)

        seen = set()
        with self._computation("lattice", total=n, n=n) as tick:
            for i in range(n):
                coord = np.array(np.unravel_index(i, shape))
                for axis in range(dimension):
                    for k in range(1, neighborhood + 1):
                        nxt = coord.copy()
                        nxt[axis] += k
                        if nxt[axis] >= length:
                            if not circular:
                                continue
                            nxt[axis] %= length
                        j = int(np.ravel_multi_index(tuple(nxt), shape))
                        key = (i, j) if directed else frozenset((i, j))
                        if i == j or key in seen:
                            continue
                        seen.add(key)
                        self._gen_tie(ids[i], ids[j], directed)
                tick(i + 1)
        return self
