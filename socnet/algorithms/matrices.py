from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass, field

import numpy as np
import polars as pl
import scipy.linalg as sla

from ..core._errors import InvalidParameterError, SingularMatrixError, UnsupportedError
from ..core._helpers import UNDEFINED, AnalysisOptions, nan_to_null

logger = logging.getLogger(__name__)

SIMILARITY_MEASURES = ("simple", "jaccard", "hamming", "cosine", "pearson")
DISSIMILARITY_METRICS = ("euclidean", "manhattan", "hamming", "jaccard", "chebyshev")
LOCATIONS = ("rows", "columns", "both")


@dataclass
class VertexMatrix:
    """Dense real matrix whose rows and columns are labelled by vertex ids."""

    values: np.ndarray
    rows: list
    cols: list
    name: str = ""
    meta: dict = field(default_factory=dict)

    @property
    def shape(self):
        return self.values.shape

    def value(self, row_id, col_id) -> float:
        return float(self.values[self.rows.index(row_id), self.cols.index(col_id)])

    def is_symmetric(self, atol: float = 1e-12) -> bool:
        if self.values.shape[0] != self.values.shape[1] or self.rows != self.cols:
            return False
        return bool(np.allclose(self.values, self.values.T, atol=atol, rtol=0.0, equal_nan=True))

    def inverse(self, method: str = "lu", tol: float = 1e-12) -> VertexMatrix:
        """Inverse matrix, labelled with swapped row/column ids."""
        inv = invert_matrix(self.values, method=method, tol=tol)
        return VertexMatrix(inv, list(self.cols), list(self.rows), name=f"{self.name}^-1")

    def to_frame(self) -> pl.DataFrame:
        """Polars export: a ``vertex`` column plus one column per column id.

        Undefined entries (NaN) become nulls.
        """
        data = {"vertex": list(self.rows)}
        for j, c in enumerate(self.cols):
            data[str(c)] = self.values[:, j].astype(float)
        return nan_to_null(pl.DataFrame(data))

    def to_numpy(self) -> np.ndarray:
        return np.array(self.values)


def _as_array(M) -> np.ndarray:
    a = M.values if isinstance(M, VertexMatrix) else np.asarray(M, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise InvalidParameterError(f"square matrix required, got shape {a.shape}")
    return np.asarray(a, dtype=float)


def invert_matrix(M, method: str = "lu", tol: float = 1e-12):
    """Invert a square matrix.

    Parameters
    --
    M : array-like or VertexMatrix
    method : {"lu", "gauss"}
        ``lu`` factorizes with partial pivoting (scipy) and solves against the
        identity; ``gauss`` uses numpy's Gauss-Jordan based inverse.
    tol : float
        Relative pivot magnitude under which the matrix is treated as singular.

    Returns
    ---
    numpy.ndarray

    Raises
    --
    SingularMatrixError
        When the matrix is (numerically) singular.
    InvalidParameterError
        For non-square input or an unknown method.

    """
    a = _as_array(M)
    n = a.shape[0]
    if n == 0:
        return np.zeros((0, 0))
    if not np.all(np.isfinite(a)):
        raise InvalidParameterError("matrix contains non-finite entries")
    scale = max(1.0, float(np.abs(a).max()))

    if method == "lu":
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", sla.LinAlgWarning)
            lu, piv = sla.lu_factor(a)
        pivots = np.abs(np.diag(lu))
        if pivots.min() <= tol * scale:
            raise SingularMatrixError(
                f"matrix is singular (smallest LU pivot {pivots.min():.3g})"
            )
        inv = sla.lu_solve((lu, piv), np.eye(n))
    elif method == "gauss":
        try:
            inv = np.linalg.inv(a)
        except np.linalg.LinAlgError as exc:
            raise SingularMatrixError(f"matrix is singular ({exc})") from exc
        if not np.all(np.isfinite(inv)):
            raise SingularMatrixError("matrix is singular (non-finite inverse)")
    else:
        raise InvalidParameterError(f"unknown inversion method {method!r}")
    logger.debug("inverted %dx%d matrix with %s", n, n, method)
    return inv


def determinant(M) -> float:
    """Determinant of a square matrix (LU based)."""
    a = _as_array(M)
    if a.shape[0] == 0:
        return 1.0
    return float(sla.det(a))


## Profile comparisons


def _profiles(a: np.ndarray, location: str):
    if location == "rows":
        return [a]
    if location == "columns":
        return [a.T]
    if location == "both":
        return [a, a.T]
    raise InvalidParameterError(f"location must be one of {LOCATIONS}, got {location!r}")


def _pair_vectors(parts, i, j, diagonal):
    xs, ys = [], []
    for p in parts:
        x, y = p[i], p[j]
        if not diagonal:
            keep = np.ones(len(x), dtype=bool)
            keep[[i, j]] = False
            x, y = x[keep], y[keep]
        xs.append(x)
        ys.append(y)
    return np.concatenate(xs), np.concatenate(ys)


def _similarity(x, y, measure):
    if len(x) == 0:
        return UNDEFINED
    if measure == "simple":
        return float(np.mean(x == y))
    if measure == "hamming":
        return float(np.sum(x != y))
    if measure == "jaccard":
        bx, by = x != 0, y != 0
        union = np.sum(bx | by)
        return float(np.sum(bx & by) / union) if union else UNDEFINED
    if measure == "cosine":
        norm = math.sqrt(float(x @ x) * float(y @ y))
        return float(x @ y) / norm if norm else UNDEFINED
    # pearson
    dx, dy = x - x.mean(), y - y.mean()
    den = math.sqrt(float(dx @ dx) * float(dy @ dy))
    return float(dx @ dy) / den if den else UNDEFINED


def _dissimilarity(x, y, metric):
    if metric == "euclidean":
        return float(np.sqrt(np.sum((x - y) ** 2)))
    if metric == "manhattan":
        return float(np.sum(np.abs(x - y)))
    if metric == "hamming":
        return float(np.sum(x != y))
    if metric == "chebyshev":
        return float(np.max(np.abs(x - y))) if len(x) else 0.0
    # jaccard distance; two empty profiles are identical
    bx, by = x != 0, y != 0
    union = np.sum(bx | by)
    return float(1.0 - np.sum(bx & by) / union) if union else 0.0


class MatrixClass:
    # Matrix subsystem

    def _frozen(self, values, ids, name, **meta) -> VertexMatrix:
        values.setflags(write=False)
        return VertexMatrix(values, list(ids), list(ids), name=name, meta=meta)

    def adjacency_matrix(
        self,
        weighted=None,
        inverse_weights=None,
        drop_isolates=None,
        symmetrize: bool = False,
        options=None,
    ) -> VertexMatrix:
        """Adjacency matrix of the current relation.

        Parameters
        --
        weighted : bool
            Entries hold tie weights instead of 1.
        inverse_weights : bool
            With ``weighted``, entries hold ``1/w``.
        drop_isolates : bool
            Leave isolated vertices out.
        symmetrize : bool
            Copy each entry into its transposed slot when that slot is empty.

        Returns
        ---
        VertexMatrix
            Read-only; self-loops sit on the diagonal.

        """
        opts = AnalysisOptions.coerce(
            options, weighted=weighted, inverse_weights=inverse_weights, drop_isolates=drop_isolates
        )
        return self.cache.get_or_compute(
            "adjacency", (opts, symmetrize), lambda: self._build_adjacency(opts, symmetrize)
        )

    def _build_adjacency(self, opts: AnalysisOptions, symmetrize: bool) -> VertexMatrix:
        order = self._analysed(opts)
        rows = {v.id: i for i, v in enumerate(order)}
        a = np.zeros((len(order), len(order)))
        for i, v in enumerate(order):
            for t, tie in self._visible_out(v).items():
                j = rows.get(t)
                if j is None:
                    continue
                if opts.weighted and opts.inverse_weights and tie.weight == 0:
                    raise UnsupportedError(f"zero weight on ({v.id}, {t}) cannot be inverted")
                a[i, j] = opts.cost(tie.weight) if opts.weighted else 1.0
        if symmetrize:
            a = np.where(a == 0, a.T, a)
        return self._frozen(a, [v.id for v in order], "adjacency", options=opts, symmetrize=symmetrize)

    def degree_matrix(self, weighted=None, drop_isolates=None, options=None) -> VertexMatrix:
        """Diagonal matrix of out-degrees (row sums of the adjacency matrix)."""
        adj = self.adjacency_matrix(weighted=weighted, drop_isolates=drop_isolates, options=options)
        return VertexMatrix(np.diag(adj.values.sum(axis=1)), adj.rows, adj.cols, name="degree")

    def laplacian_matrix(self, weighted=None, drop_isolates=None, options=None) -> VertexMatrix:
        """``D - A`` with out-degrees on the diagonal."""
        adj = self.adjacency_matrix(weighted=weighted, drop_isolates=drop_isolates, options=options)
        lap = np.diag(adj.values.sum(axis=1)) - adj.values
        return VertexMatrix(lap, adj.rows, adj.cols, name="laplacian")

    def distance_matrix(self, options=None, **kw) -> VertexMatrix:
        """Geodesic distances; ``inf`` marks unreachable pairs."""
        res = self.geodesics(options, **kw)
        return VertexMatrix(np.array(res.distances), list(res.vertices), list(res.vertices), name="distance")

    def shortest_paths_matrix(self, options=None, **kw) -> VertexMatrix:
        """Number of geodesics between every ordered pair."""
        res = self.geodesics(options, **kw)
        return VertexMatrix(np.array(res.sigma), list(res.vertices), list(res.vertices), name="sigma")

    def reachability_matrix(self, options=None, **kw) -> VertexMatrix:
        """Boolean closure: 1 where a path exists.

        The diagonal is 1 only for vertices lying on a cycle (or with a loop).
        """
        res = self.geodesics(options, **kw)
        r = np.isfinite(res.distances).astype(float)
        for i in range(len(res.vertices)):
            r[i, i] = 1.0 if self._on_cycle(res, i) else 0.0
        return VertexMatrix(r, list(res.vertices), list(res.vertices), name="reachability")

    def walks_matrix(self, length: int, total: bool = False, options=None, **kw) -> VertexMatrix:
        """Number of walks of exactly ``length`` ties (or of any length 1..length).

        Raises
        --
        InvalidParameterError
            If ``length < 1``.

        """
        if isinstance(length, bool) or not isinstance(length, int) or length < 1:
            raise InvalidParameterError(f"walk length must be a positive int, got {length!r}")
        opts = AnalysisOptions.coerce(options, **kw)
        adj = self.adjacency_matrix(drop_isolates=opts.drop_isolates)
        a = adj.values
        power = a.copy()
        acc = a.copy()
        with self._computation("walks", total=length, length=length) as tick:
            tick(1)
            for k in range(2, length + 1):
                power = power @ a
                acc += power
                tick(k)
        return VertexMatrix(acc if total else power, adj.rows, adj.cols, name="walks", meta={"length": length})

    def walks_between(self, source, target, length: int, total: bool = False) -> int:
        """Number of walks of ``length`` ties from ``source`` to ``target``."""
        self._v(source)
        self._v(target)
        w = self.walks_matrix(length, total=total)
        return int(round(w.value(source, target)))

    def _input_matrix(self, matrix, opts: AnalysisOptions, weighted: bool) -> VertexMatrix:
        if isinstance(matrix, VertexMatrix):
            return matrix
        if matrix == "adjacency":
            return self.adjacency_matrix(
                weighted=weighted, inverse_weights=opts.inverse_weights, drop_isolates=opts.drop_isolates
            )
        if matrix == "distance":
            d = self.distance_matrix(opts)
            vals = np.array(d.values)
            finite = np.isfinite(vals)
            vals[~finite] = (vals[finite].max() if finite.any() else 0.0) + 1.0
            return VertexMatrix(vals, d.rows, d.cols, name="distance")
        raise InvalidParameterError(f"matrix must be 'adjacency', 'distance' or a VertexMatrix, got {matrix!r}")

    def similarity_matrix(
        self,
        measure: str = "simple",
        matrix="adjacency",
        location: str = "rows",
        diagonal: bool = False,
        weighted: bool = False,
        options=None,
        **kw,
    ) -> VertexMatrix:
        """Pairwise similarity of vertex tie profiles.

        Parameters
        --
        measure : {"simple", "jaccard", "hamming", "cosine", "pearson"}
            ``simple`` is the share of matching positions, ``hamming`` the
            number of differing ones.
        matrix : {"adjacency", "distance"} or VertexMatrix
            Source of the profiles.
        location : {"rows", "columns", "both"}
            Compare outbound profiles, inbound profiles, or both concatenated.
        diagonal : bool, default False
            When False, positions ``i`` and ``j`` are ignored when comparing
            vertices ``i`` and ``j``.

        Returns
        ---
        VertexMatrix
            Undefined similarities (zero variance, empty profiles) are NaN.

        """
        if measure not in SIMILARITY_MEASURES:
            raise InvalidParameterError(f"measure must be one of {SIMILARITY_MEASURES}, got {measure!r}")
        opts = AnalysisOptions.coerce(options, **kw)
        src = self._input_matrix(matrix, opts, weighted)
        return self._pairwise(src, location, diagonal, lambda x, y: _similarity(x, y, measure), measure)

    def dissimilarity_matrix(
        self,
        metric: str = "euclidean",
        matrix="adjacency",
        location: str = "rows",
        diagonal: bool = False,
        weighted: bool = False,
        options=None,
        **kw,
    ) -> VertexMatrix:
        """Pairwise distance of vertex tie profiles.

        ``metric`` is one of ``euclidean``, ``manhattan``, ``hamming``,
        ``jaccard`` (1 - Jaccard index) or ``chebyshev``; the other parameters
        are as for :meth:`similarity_matrix`.
        """
        if metric not in DISSIMILARITY_METRICS:
            raise InvalidParameterError(f"metric must be one of {DISSIMILARITY_METRICS}, got {metric!r}")
        opts = AnalysisOptions.coerce(options, **kw)
        src = self._input_matrix(matrix, opts, weighted)
        return self._pairwise(src, location, diagonal, lambda x, y: _dissimilarity(x, y, metric), metric)

    def _pairwise(self, src: VertexMatrix, location, diagonal, fn, name) -> VertexMatrix:
        parts = _profiles(np.asarray(src.values, dtype=float), location)
        n = len(src.rows)
        out = np.zeros((n, n))
        with self._computation(f"{name}_matrix", total=n, vertices=n) as tick:
            for i in range(n):
                for j in range(i, n):
                    x, y = _pair_vectors(parts, i, j, diagonal)
                    out[i, j] = out[j, i] = fn(x, y)
                tick(i + 1)
        return VertexMatrix(out, list(src.rows), list(src.rows), name=name, meta={"location": location})

    def invert_adjacency_matrix(self, method: str = "lu", **kw) -> VertexMatrix:
        """Inverse of the adjacency matrix.

        Raises
        --
        SingularMatrixError
            When the adjacency matrix is singular.

        """
        return self.adjacency_matrix(**kw).inverse(method=method, tol=self.settings.singular_tol)
