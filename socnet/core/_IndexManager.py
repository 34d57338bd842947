from ._errors import NotFoundError


class IndexManager:
    """Namespace for index operations.
    Provides clean API over the vertex id <-> dense index tables.
    """

    def __init__(self, graph):
        self._G = graph

    # ==================== Vertex Indexes ====================

    def vertex_to_row(self, vertex_id):
        """Map vertex ID to its dense (arena) index."""
        if vertex_id not in self._G.vertex_to_idx:
            raise NotFoundError(f"Vertex '{vertex_id}' not found")
        return self._G.vertex_to_idx[vertex_id]

    def row_to_vertex(self, row):
        """Map dense index to vertex ID."""
        if row not in self._G.idx_to_vertex:
            raise NotFoundError(f"Row {row} not found")
        return self._G.idx_to_vertex[row]

    def vertices_to_rows(self, vertex_ids):
        """Batch convert vertex IDs to dense indices."""
        return [self._G.vertex_to_idx[v] for v in vertex_ids]

    def rows_to_vertices(self, rows):
        """Batch convert dense indices to vertex IDs."""
        return [self._G.idx_to_vertex[r] for r in rows]

    # ==================== Utilities ====================

    def has_vertex(self, vertex_id) -> bool:
        return vertex_id in self._G.vertex_to_idx

    def vertex_count(self) -> int:
        return len(self._G.vertex_to_idx)

    def stats(self):
        """Get index statistics."""
        ids = self._G.vertex_to_idx
        return {
            "n_vertices": len(ids),
            "min_id": min(ids) if ids else None,
            "max_id": max(ids) if ids else None,
            "max_row": max(self._G.idx_to_vertex) if self._G.idx_to_vertex else -1,
        }
