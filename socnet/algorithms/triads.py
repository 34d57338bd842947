import itertools
import logging

from ..core._helpers import AnalysisOptions

logger = logging.getLogger(__name__)

# MAN triad types in canonical order
TRIAD_NAMES = (
    "003",
    "012",
    "102",
    "021D",
    "021U",
    "021C",
    "111D",
    "111U",
    "030T",
    "030C",
    "201",
    "120D",
    "120U",
    "120C",
    "210",
    "300",
)

# 6-bit tie code -> 1-based position in TRIAD_NAMES
_TRICODES = (
    1, 2, 2, 3, 2, 4, 6, 8, 2, 6, 5, 7, 3, 8, 7, 11,
    2, 6, 4, 8, 5, 9, 9, 13, 6, 10, 9, 14, 7, 14, 12, 15,
    2, 5, 6, 7, 6, 9, 10, 14, 4, 9, 9, 12, 8, 13, 14, 15,
    3, 7, 8, 11, 7, 12, 14, 15, 8, 14, 13, 15, 11, 15, 15, 16,
)  # fmt: skip


def _tricode(succ, v, u, w) -> int:
    code = 0
    for bit, (a, b) in enumerate(((v, u), (u, v), (v, w), (w, v), (u, w), (w, u))):
        if b in succ[a]:
            code |= 1 << bit
    return code


class Triads:
    def triad_census(self, options=None, **kw) -> dict:
        """Count every 3-vertex subgraph by MAN type.

        Returns
        ---
        dict[str, int]
            Counts keyed by type name, in canonical order; they sum to C(n, 3).

        """
        opts = AnalysisOptions.coerce(options, **kw)
        cached = self.cache.get("triads", opts.drop_isolates)
        if cached is not None:
            return dict(cached)
        order = [v.id for v in self._analysed(opts)]
        succ = {vid: set(self._visible_out(self._v(vid))) - {vid} for vid in order}
        counts = [0] * len(TRIAD_NAMES)
        n = len(order)
        with self._computation("triad_census", total=n, vertices=n) as tick:
            for i, v in enumerate(order):
                for u, w in itertools.combinations(order[i + 1 :], 2):
                    counts[_TRICODES[_tricode(succ, v, u, w)] - 1] += 1
                tick(i + 1)
        census = dict(zip(TRIAD_NAMES, counts))
        logger.debug("triad census over %d vertices: %s", n, census)
        self.cache.put("triads", opts.drop_isolates, census)
        self._metric_available("triad_census", vertices=n)
        return dict(census)
