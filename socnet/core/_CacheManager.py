class CacheManager:
    """Cache manager for derived results (distances, matrices, centralities).

    Every entry is stamped with the graph version at computation time; an entry
    is dirty as soon as the graph version moves on. Mutations therefore
    invalidate every dependent result synchronously, without having to know
    which results exist.
    """

    def __init__(self, graph):
        self._G = graph
        self._entries = {}  # (name, key) -> (version, value)

    # ==================== Lookup ====================

    def get(self, name, key=None, default=None):
        """Return a clean cached value, or ``default`` when missing or dirty."""
        hit = self._entries.get((name, key))
        if hit is None or hit[0] != self._G._version:
            return default
        return hit[1]

    def put(self, name, key, value):
        """Store ``value`` as computed against the current graph version."""
        self._entries[(name, key)] = (self._G._version, value)
        return value

    def get_or_compute(self, name, key, compute):
        """Return the cached value, computing (and caching) it when dirty."""
        hit = self._entries.get((name, key))
        if hit is not None and hit[0] == self._G._version:
            return hit[1]
        value = compute()
        self._entries[(name, key)] = (self._G._version, value)
        return value

    def has(self, name, key=None) -> bool:
        """True if a clean entry exists for (name, key)."""
        hit = self._entries.get((name, key))
        return hit is not None and hit[0] == self._G._version

    def is_dirty(self, name, key=None) -> bool:
        """True if the entry is missing or was computed against an older graph."""
        return not self.has(name, key)

    # ==================== Cache Management ====================

    def invalidate(self, names=None):
        """Drop cached entries.

        Parameters
        --
        names : list[str], optional
            Result names to invalidate. If None, invalidate all.

        """
        if names is None:
            self._entries.clear()
            return
        names = set(names)
        for k in [k for k in self._entries if k[0] in names]:
            del self._entries[k]

    def clear(self):
        """Clear all caches."""
        self.invalidate()

    def info(self):
        """Get cache status.

        Returns
        ---
        dict
            ``{name: [{"key": ..., "version": ..., "dirty": bool}, ...]}``

        """
        out = {}
        for (name, key), (version, _value) in self._entries.items():
            out.setdefault(name, []).append(
                {"key": key, "version": version, "dirty": version != self._G._version}
            )
        return out
