"""Centrality and prestige indices.

Every index returns a :class:`ProminenceResult` with raw and standardized
scores per analysed vertex and whole-graph :class:`IndexStats`. Results are
cached per ``AnalysisOptions`` and recomputed after structural mutations.
"""

from __future__ import annotations

import logging
import math
import warnings
from collections import Counter
from dataclasses import dataclass, field

import numpy as np
import polars as pl

from ..core._errors import InvalidParameterError, NotFoundError, SingularMatrixError
from ..core._helpers import UNDEFINED, AnalysisOptions, nan_to_null
from .matrices import invert_matrix

logger = logging.getLogger(__name__)

INDEX_NAMES = {
    "DC": "degree centrality",
    "CC": "closeness centrality",
    "IRCC": "influence-range closeness centrality",
    "BC": "betweenness centrality",
    "SC": "stress centrality",
    "EC": "eccentricity centrality",
    "PC": "power centrality",
    "IC": "information centrality",
    "EVC": "eigenvector centrality",
    "DP": "degree prestige",
    "PP": "proximity prestige",
    "PRP": "PageRank prestige",
}


@dataclass
class IndexStats:
    """Group-level summary of standardized scores (undefined scores excluded)."""

    min: float
    max: float
    argmin: list
    argmax: list
    sum: float
    mean: float
    variance: float
    centralization: float
    classes: dict = field(default_factory=dict)  # distinct score -> frequency


@dataclass
class ProminenceResult:
    index: str
    vertices: list
    raw: np.ndarray
    std: np.ndarray
    stats: IndexStats
    options: AnalysisOptions

    def _i(self, vertex_id) -> int:
        try:
            return self.vertices.index(vertex_id)
        except ValueError:
            raise NotFoundError(f"vertex {vertex_id} has no {self.index} score") from None

    def score(self, vertex_id) -> float:
        return float(self.raw[self._i(vertex_id)])

    def std_score(self, vertex_id) -> float:
        return float(self.std[self._i(vertex_id)])

    @property
    def undefined(self):
        """Ids whose raw score is undefined."""
        return [v for v, x in zip(self.vertices, self.raw) if math.isnan(x)]

    def as_dict(self, standardized: bool = False) -> dict:
        values = self.std if standardized else self.raw
        return {v: float(x) for v, x in zip(self.vertices, values)}

    def to_frame(self) -> pl.DataFrame:
        """Polars export with columns ``vertex``, ``<index>``, ``S<index>``."""
        df = pl.DataFrame(
            {
                "vertex": list(self.vertices),
                self.index: self.raw.astype(float),
                f"S{self.index}": self.std.astype(float),
            }
        )
        return nan_to_null(df)


def _centralization(index: str, std: np.ndarray, n: int) -> float:
    defined = std[~np.isnan(std)]
    if n <= 2 or defined.size == 0:
        return UNDEFINED
    gap = float(np.sum(defined.max() - defined))
    if index in ("DC", "DP"):
        return gap / (n - 2)
    if index == "CC":
        return gap * (2 * n - 3) / ((n - 1) * (n - 2))
    return gap / (n - 1)


def _stats(index: str, vertices, std: np.ndarray, n: int) -> IndexStats:
    mask = ~np.isnan(std)
    defined = std[mask]
    if defined.size == 0:
        return IndexStats(UNDEFINED, UNDEFINED, [], [], 0.0, UNDEFINED, UNDEFINED, UNDEFINED, {})
    lo, hi = float(defined.min()), float(defined.max())
    ids = [v for v, m in zip(vertices, mask) if m]
    return IndexStats(
        min=lo,
        max=hi,
        argmin=[v for v, x in zip(ids, defined) if x == lo],
        argmax=[v for v, x in zip(ids, defined) if x == hi],
        sum=float(defined.sum()),
        mean=float(defined.mean()),
        variance=float(defined.var()),
        centralization=_centralization(index, std, n),
        classes=dict(sorted(Counter(round(float(x), 6) for x in defined).items())),
    )


def _safe_div(a: np.ndarray, b) -> np.ndarray:
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.true_divide(a, b)
    return np.where(np.isfinite(out), out, UNDEFINED)


class Centrality:
    # Centrality & prestige indices

    def _prominence(self, index: str, opts: AnalysisOptions, compute, key=None) -> ProminenceResult:
        key = opts if key is None else key
        cached = self.cache.get(index, key)
        if cached is not None:
            return cached
        with self._computation(index, total=len(self._vertices), options=repr(opts)):
            vertices, raw, std = compute()
            raw = np.asarray(raw, dtype=float)
            std = np.asarray(std, dtype=float)
            result = ProminenceResult(
                index=index,
                vertices=list(vertices),
                raw=raw,
                std=std,
                stats=_stats(index, vertices, std, len(vertices)),
                options=opts,
            )
        logger.debug("%s over %d vertices (%s)", index, len(vertices), opts)
        self.cache.put(index, key, result)
        self._metric_available(index, options=repr(opts))
        return result

    def prominence(self, index: str, options=None, **kw) -> ProminenceResult:
        """Compute any index by its abbreviation (``DC``, ``CC``, ... ``PRP``)."""
        methods = {
            "DC": self.degree_centrality,
            "CC": self.closeness_centrality,
            "IRCC": self.influence_range_closeness,
            "BC": self.betweenness_centrality,
            "SC": self.stress_centrality,
            "EC": self.eccentricity_centrality,
            "PC": self.power_centrality,
            "IC": self.information_centrality,
            "EVC": self.eigenvector_centrality,
            "DP": self.degree_prestige,
            "PP": self.proximity_prestige,
            "PRP": self.pagerank_prestige,
        }
        key = str(index).upper()
        if key not in methods:
            raise InvalidParameterError(f"unknown prominence index {index!r}; expected one of {sorted(methods)}")
        return methods[key](options, **kw)

    ## Degree family

    def _degree_scores(self, opts: AnalysisOptions, inbound: bool):
        order = self._analysed(opts)
        ids = {v.id for v in order}
        n = len(order)
        raw, max_w = [], 0.0
        for v in order:
            ties = self._visible_in(v) if inbound else self._visible_out(v)
            ties = [t for u, t in ties.items() if u in ids and u != v.id]
            raw.append(sum(t.weight for t in ties) if opts.weighted else len(ties))
            max_w = max([max_w] + [t.weight for t in ties])
        bound = (n - 1) * (max_w if opts.weighted else 1.0)
        raw = np.asarray(raw, dtype=float)
        std = _safe_div(raw, bound) if bound > 0 else np.full(n, UNDEFINED if n <= 1 else 0.0)
        return [v.id for v in order], raw, std

    def degree_centrality(self, options=None, **kw) -> ProminenceResult:
        """Outdegree (weighted: sum of tie weights); standardized by ``N - 1``."""
        opts = AnalysisOptions.coerce(options, **kw)
        return self._prominence("DC", opts, lambda: self._degree_scores(opts, inbound=False))

    def degree_prestige(self, options=None, **kw) -> ProminenceResult:
        """Indegree (weighted: sum of inbound weights); standardized by ``N - 1``."""
        opts = AnalysisOptions.coerce(options, **kw)
        return self._prominence("DP", opts, lambda: self._degree_scores(opts, inbound=True))

    ## Distance family

    def closeness_centrality(self, options=None, **kw) -> ProminenceResult:
        """Closeness over each vertex's reachable set.

        ``CC = 1 / sum(d(u, v))`` over the vertices ``u`` reaches and
        ``SCC = J_u * CC`` where ``J_u`` is the size of that set. Vertices
        that reach nobody are undefined.
        """
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            res = self.geodesics(opts)
            raw = np.where(res.reach > 0, _safe_div(1.0, res.distance_sums), UNDEFINED)
            return res.vertices, raw, raw * res.reach

        return self._prominence("CC", opts, compute)

    def influence_range_closeness(self, options=None, **kw) -> ProminenceResult:
        """``IRCC = (J_u / (N - 1)) / (sum(d) / J_u)``; undefined when ``J_u = 0``."""
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            res = self.geodesics(opts)
            n = len(res.vertices)
            with np.errstate(divide="ignore", invalid="ignore"):
                share = res.reach / (n - 1) if n > 1 else np.zeros(n)
                mean_d = res.distance_sums / res.reach
                ircc = np.where(res.reach > 0, share / mean_d, UNDEFINED)
            ircc = np.where(np.isfinite(ircc), ircc, UNDEFINED)
            return res.vertices, ircc, ircc

        return self._prominence("IRCC", opts, compute)

    def betweenness_centrality(self, options=None, **kw) -> ProminenceResult:
        """Share of geodesics through each vertex (Brandes accumulation).

        Standardized by ``(N-1)(N-2)/2`` on symmetric graphs and
        ``(N-1)(N-2)`` otherwise.
        """
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            res = self.geodesics(opts, centralities=True)
            n = len(res.vertices)
            bound = (n - 1) * (n - 2)
            if self.is_symmetric():
                bound /= 2
            std = res.betweenness / bound if bound > 0 else np.full(n, UNDEFINED)
            return res.vertices, res.betweenness, std

        return self._prominence("BC", opts, compute)

    def stress_centrality(self, options=None, **kw) -> ProminenceResult:
        """Number of geodesics through each vertex; standardized by the largest score."""
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            res = self.geodesics(opts, centralities=True)
            top = res.stress.max() if res.stress.size else 0.0
            std = res.stress / top if top > 0 else np.zeros_like(res.stress)
            return res.vertices, res.stress, std

        return self._prominence("SC", opts, compute)

    def eccentricity_centrality(self, options=None, **kw) -> ProminenceResult:
        """``EC = 1 / eccentricity``; 0 when some vertex is unreachable."""
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            res = self.geodesics(opts)
            ecc = res.eccentricity
            with np.errstate(divide="ignore"):
                raw = np.where(ecc > 0, 1.0 / np.where(ecc > 0, ecc, 1.0), UNDEFINED)
            defined = raw[~np.isnan(raw)]
            top = defined.max() if defined.size else 0.0
            std = raw / top if top > 0 else np.where(np.isnan(raw), UNDEFINED, 0.0)
            return res.vertices, raw, std

        return self._prominence("EC", opts, compute)

    def power_centrality(self, options=None, **kw) -> ProminenceResult:
        """Gil-Schmidt power: ``PC = sum_k N_k / k`` with ``N_k`` vertices at distance ``k``.

        Standardized by the size of the reachable set (0 when empty).
        """
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            res = self.geodesics(opts)
            std = np.where(res.reach > 0, _safe_div(res.power, np.maximum(res.reach, 1)), 0.0)
            return res.vertices, res.power, std

        return self._prominence("PC", opts, compute)

    def proximity_prestige(self, options=None, **kw) -> ProminenceResult:
        """Proximity prestige over each vertex's influence domain.

        ``PP = (|I| / (N - 1)) / (sum(d(v, u)) / |I|)`` with ``I`` the vertices
        that reach ``u``; undefined when ``I`` is empty.
        """
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            res = self.geodesics(opts)
            n = len(res.vertices)
            off = np.isfinite(res.distances) & ~np.eye(n, dtype=bool)
            domain = off.sum(axis=0)
            sums = np.where(off, res.distances, 0.0).sum(axis=0)
            with np.errstate(divide="ignore", invalid="ignore"):
                pp = (domain / max(n - 1, 1)) / (sums / domain)
            pp = np.where((domain > 0) & np.isfinite(pp), pp, UNDEFINED)
            return res.vertices, pp, pp

        return self._prominence("PP", opts, compute)

    ## Spectral / linear-algebra family

    def information_centrality(self, options=None, **kw) -> ProminenceResult:
        """Stephenson-Zelen information centrality.

        Built on the symmetrized adjacency matrix without isolates:
        ``B_ii = 1 + s_i``, ``B_ij = 1 - a_ij``, ``C = B^-1`` and
        ``IC_i = 1 / (c_ii + (T - 2R) / n)`` where ``T`` is the trace of ``C``
        and ``R`` a row sum. ``SIC = IC / sum(IC)``.

        Notes
        -
        Isolated vertices are undefined. A singular ``B`` leaves every score
        undefined and issues a warning.
        """
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            everyone = self._analysed(opts)
            adj = self.adjacency_matrix(
                weighted=opts.weighted,
                inverse_weights=opts.inverse_weights,
                drop_isolates=True,
                symmetrize=True,
            )
            a = np.array(adj.values)
            np.fill_diagonal(a, 0.0)
            n = len(adj.rows)
            scores = {}
            if n > 0:
                b = 1.0 - a
                np.fill_diagonal(b, 1.0 + a.sum(axis=1))
                try:
                    c = invert_matrix(b, method="lu", tol=self.settings.singular_tol)
                except SingularMatrixError:
                    warnings.warn(
                        "information centrality: singular system, scores are undefined",
                        RuntimeWarning,
                        stacklevel=4,
                    )
                    c = None
                if c is not None:
                    t, r = np.trace(c), c[0].sum()
                    ic = _safe_div(1.0, np.diag(c) + (t - 2.0 * r) / n)
                    scores = dict(zip(adj.rows, ic))
            raw = np.array([scores.get(v.id, UNDEFINED) for v in everyone], dtype=float)
            total = np.nansum(raw)
            std = raw / total if total > 0 else np.full(len(raw), UNDEFINED)
            return [v.id for v in everyone], raw, std

        return self._prominence("IC", opts, compute)

    def eigenvector_centrality(self, options=None, **kw) -> ProminenceResult:
        """Leading eigenvector of the adjacency matrix by power iteration.

        Iterates ``x <- (A + I) x`` from the outdegree vector, normalizing to
        unit L2 length; ``SEVC = EVC / max(EVC)``.
        """
        opts = AnalysisOptions.coerce(options, **kw)

        def compute():
            adj = self.adjacency_matrix(options=opts)
            a = adj.values
            n = a.shape[0]
            if n == 0:
                return [], [], []
            m = a + np.eye(n)
            x = a.sum(axis=1) + 0.0
            if not x.any():
                x = np.ones(n)
            x /= np.linalg.norm(x)
            tol = self.settings.power_iteration_tol
            for _ in range(self.settings.power_iteration_max):
                nxt = m @ x
                norm = np.linalg.norm(nxt)
                if norm == 0:
                    break
                nxt /= norm
                if np.abs(nxt - x).max() < tol:
                    x = nxt
                    break
                x = nxt
            else:
                warnings.warn(
                    "eigenvector centrality did not converge; scores are approximate",
                    RuntimeWarning,
                    stacklevel=4,
                )
            top = x.max()
            return adj.rows, x, x / top if top > 0 else np.zeros(n)

        return self._prominence("EVC", opts, compute)

    def pagerank_prestige(self, options=None, damping=None, **kw) -> ProminenceResult:
        """PageRank with damping ``d`` (``settings.pagerank_damping`` by default).

        ``PR_i = (1 - d)/N + d * (sum_{j->i} PR_j * w_ji / w_j + dangling / N)``;
        weights are used only when ``weighted``. ``SPRP = PR / max(PR)``.
        """
        opts = AnalysisOptions.coerce(options, **kw)
        d = self.settings.pagerank_damping if damping is None else float(damping)
        if not 0.0 < d < 1.0:
            raise InvalidParameterError(f"damping must lie in (0, 1), got {d}")

        def compute():
            adj = self.adjacency_matrix(weighted=opts.weighted, drop_isolates=opts.drop_isolates)
            a = np.array(adj.values)
            np.fill_diagonal(a, 0.0)
            n = a.shape[0]
            if n == 0:
                return [], [], []
            out = a.sum(axis=1)
            dangling = out == 0
            p = np.divide(a, out[:, None], out=np.zeros_like(a), where=~dangling[:, None])
            pr = np.full(n, 1.0 / n)
            tol = self.settings.power_iteration_tol
            for _ in range(self.settings.power_iteration_max):
                nxt = (1.0 - d) / n + d * (pr @ p + pr[dangling].sum() / n)
                if np.abs(nxt - pr).sum() < tol:
                    pr = nxt
                    break
                pr = nxt
            else:
                warnings.warn("PageRank did not converge; scores are approximate", RuntimeWarning, stacklevel=4)
            top = pr.max()
            return adj.rows, pr, pr / top if top > 0 else np.zeros(n)

        return self._prominence("PRP", opts, compute, key=(opts, d))
