from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy.cluster import hierarchy
from scipy.spatial.distance import squareform

from ..core._errors import InvalidParameterError

logger = logging.getLogger(__name__)

LINKAGES = {
    "single": "single",
    "min": "single",
    "complete": "complete",
    "max": "complete",
    "average": "average",
    "upgma": "average",
}


@dataclass
class MergeStep:
    """One agglomeration: clusters ``left`` and ``right`` join at ``level``.

    Cluster ids follow scipy: ``0..n-1`` are the vertices (in the result's
    vertex order), ``n + i`` the cluster formed at step ``i``.
    """

    step: int
    level: float
    left: int
    right: int
    cluster: int
    size: int
    members: tuple | None = None  # vertex ids, only with dendrogram detail


@dataclass
class ClusteringResult:
    vertices: list
    steps: list
    linkage: str
    metric: str
    linkage_matrix: np.ndarray

    @property
    def levels(self):
        """Distinct merge levels, ascending."""
        return sorted({s.level for s in self.steps})

    def clusters_at(self, level: float):
        """Partition obtained after every merge at or below ``level``."""
        n = len(self.vertices)
        if n == 0:
            return []
        if n == 1:
            return [tuple(self.vertices)]
        labels = hierarchy.fcluster(self.linkage_matrix, t=level, criterion="distance")
        groups = {}
        for vid, lab in zip(self.vertices, labels):
            groups.setdefault(int(lab), []).append(vid)
        return sorted((tuple(g) for g in groups.values()), key=lambda g: (-len(g), g))


class Clustering:
    # Agglomerative hierarchical clustering

    def hierarchical_clustering(
        self,
        matrix="adjacency",
        metric: str = "euclidean",
        linkage: str = "complete",
        location: str = "rows",
        diagonal: bool = False,
        dendrogram: bool = False,
        weighted: bool = False,
        options=None,
        **kw,
    ) -> ClusteringResult:
        """Cluster vertices by the dissimilarity of their tie profiles.

        Parameters
        --
        matrix : {"adjacency", "distance"} or VertexMatrix
            Profiles to compare (see ``dissimilarity_matrix``).
        metric : str
            Any ``dissimilarity_matrix`` metric.
        linkage : {"single", "complete", "average"}
            Also accepted: ``min``, ``max``, ``upgma``.
        dendrogram : bool, default False
            Record the member vertices of every merged cluster.

        Returns
        ---
        ClusteringResult
            ``steps`` in merge order.

        Raises
        --
        InvalidParameterError
            Unknown linkage or metric.

        """
        method = LINKAGES.get(str(linkage).lower())
        if method is None:
            raise InvalidParameterError(f"linkage must be one of {sorted(LINKAGES)}, got {linkage!r}")
        dis = self.dissimilarity_matrix(
            metric, matrix=matrix, location=location, diagonal=diagonal, weighted=weighted, options=options, **kw
        )
        ids = list(dis.rows)
        n = len(ids)
        if n < 2:
            return ClusteringResult(ids, [], method, metric, np.zeros((0, 4)))

        d = np.nan_to_num(np.array(dis.values, dtype=float))
        d = (d + d.T) / 2.0
        np.fill_diagonal(d, 0.0)
        with self._computation("hierarchical_clustering", total=n - 1, linkage=method, distance=metric) as tick:
            z = hierarchy.linkage(squareform(d, checks=False), method=method)
            members = {i: (vid,) for i, vid in enumerate(ids)}
            steps = []
            for i, (a, b, level, size) in enumerate(z):
                a, b = int(a), int(b)
                members[n + i] = tuple(sorted(members[a] + members[b]))
                steps.append(
                    MergeStep(
                        step=i + 1,
                        level=float(level),
                        left=a,
                        right=b,
                        cluster=n + i,
                        size=int(size),
                        members=members[n + i] if dendrogram else None,
                    )
                )
                tick(i + 1)
        logger.debug("clustered %d vertices (%s linkage, %s)", n, method, metric)
        self._metric_available("hierarchical_clustering", linkage=method, distance=metric)
        return ClusteringResult(ids, steps, method, metric, z)
