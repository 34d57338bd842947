import time
from collections import deque

import numpy as np

from ..algorithms.centrality import Centrality
from ..algorithms.cliques import Cliques
from ..algorithms.clustering import Clustering
from ..algorithms.generators import Generators
from ..algorithms.layout import Layouts
from ..algorithms.matrices import MatrixClass
from ..algorithms.structure import Structure
from ..algorithms.traversal import Traversal
from ..algorithms.triads import Triads
from ..config import Settings, get_settings
from ._CacheManager import CacheManager
from ._History import History
from ._IndexManager import IndexManager
from ._Relations import RelationClass, RelationManager
from ._Store import StoreClass

# ===================================


class SocNet(
    StoreClass,
    RelationClass,
    History,
    Traversal,
    MatrixClass,
    Centrality,
    Structure,
    Cliques,
    Clustering,
    Triads,
    Generators,
    Layouts,
):
    """Multi-relational social network with on-demand analysis.

    Vertices live in a dense arena (``vertex_to_idx`` / ``idx_to_vertex`` map
    stable integer ids to arena rows). Ties are stored only inside the
    endpoints' per-relation adjacency maps. Derived results (geodesics,
    matrices, prominence indices, cliques, ...) are cached against the
    structural ``version`` and recomputed after any structural mutation.

    Parameters
    --
    directed : bool, default True
        Default tie type for ``add_edge`` (directed or undirected).
    settings : Settings, optional
        Engine defaults; ``get_settings()`` when omitted.
    **overrides
        Field overrides applied on top of ``settings`` (e.g. ``random_seed=1``).

    Notes
    -
    - A single relation named ``settings.default_relation`` exists and is current.
    - Namespaces: ``G.relations``, ``G.idx``, ``G.cache``.

    """

    def __init__(self, directed: bool = True, settings: Settings | None = None, **overrides):
        settings = settings or get_settings()
        if overrides:
            settings = type(settings).model_validate({**settings.model_dump(), **overrides})
        self.settings = settings
        self.directed = bool(directed)

        # Vertex arena + dense index
        self._vertices = []  # list[Vertex]
        self.vertex_to_idx = {}  # vertex_id -> arena row
        self.idx_to_vertex = {}  # arena row -> vertex_id

        # Relations
        self._relations = [settings.default_relation]
        self._current_relation = 0

        # Layout geometry
        self.canvas_width = float(settings.canvas_width)
        self.canvas_height = float(settings.canvas_height)
        self._rng = np.random.default_rng(settings.random_seed)

        # Dirty bit / version
        self._version = 0
        self._modified = False

        # Event log and listeners
        self._history = deque(maxlen=settings.history_limit)  # oldest events drop first
        self._history_enabled = settings.history_enabled
        self._history_clock0 = time.perf_counter_ns()
        self._event_seq = 0
        self._listeners = []

    @property
    def relations(self):
        """Relation operations (list, add, next, prev, rename)."""
        if not hasattr(self, "_relation_manager"):
            self._relation_manager = RelationManager(self)
        return self._relation_manager

    @property
    def idx(self):
        """Index lookups (vertex_id <-> arena row)."""
        if not hasattr(self, "_index_manager"):
            self._index_manager = IndexManager(self)
        return self._index_manager

    @property
    def cache(self):
        """Cache management for derived results."""
        if not hasattr(self, "_cache_manager"):
            self._cache_manager = CacheManager(self)
        return self._cache_manager

    def __len__(self):
        return len(self._vertices)

    def __contains__(self, vertex_id):
        return vertex_id in self.vertex_to_idx

    def __repr__(self):
        return (
            f"SocNet(directed={self.directed}, vertices={len(self._vertices)}, "
            f"edges={self.number_of_edges()}, relation={self.current_relation_name()!r})"
        )
