import logging

from ._errors import InvalidParameterError
from ._helpers import GraphChange

logger = logging.getLogger(__name__)


class RelationClass:
    # Relations (named edge layers over one vertex set)

    def list_relations(self):
        """Relation names in index order."""
        return list(self._relations)

    def relation_count(self) -> int:
        return len(self._relations)

    def current_relation(self) -> int:
        """Index of the current relation."""
        return self._current_relation

    def current_relation_name(self) -> str:
        return self._relations[self._current_relation]

    def add_relation(self, name, change: bool = False) -> int:
        """Append a relation.

        Parameters
        --
        name : str
            Display name; need not be unique.
        change : bool, default False
            Make the new relation current.

        Returns
        ---
        int
            Index of the new relation.

        """
        self._relations.append(str(name))
        index = len(self._relations) - 1
        logger.info("relation %d (%r) added", index, name)
        self._log_event("relation_added", index=index, name=str(name))
        if change:
            self.set_relation(index)
        return index

    def rename_current_relation(self, name):
        """Rename the current relation; edge data is untouched."""
        old = self._relations[self._current_relation]
        self._relations[self._current_relation] = str(name)
        self._log_event("relation_renamed", index=self._current_relation, old=old, name=str(name))

    def set_relation(self, index) -> int:
        """Make relation ``index`` current.

        Raises
        --
        InvalidParameterError
            If ``index`` is out of range.

        """
        index = self._rel(index)
        if index == self._current_relation:
            return index
        previous = self._current_relation
        self._current_relation = index
        logger.info("current relation %d -> %d", previous, index)
        self._log_event("relation_changed", index=index, previous=previous, name=self._relations[index])
        self._mark_modified(GraphChange.RELATION, relation=index)
        return index

    def next_relation(self) -> bool:
        """Advance the cursor; stays on the last relation. Returns whether it moved."""
        if self._current_relation + 1 >= len(self._relations):
            return False
        self.set_relation(self._current_relation + 1)
        return True

    def previous_relation(self) -> bool:
        """Step the cursor back; stays on the first relation. Returns whether it moved."""
        if self._current_relation == 0:
            return False
        self.set_relation(self._current_relation - 1)
        return True

    def clear_relations(self):
        """Drop every relation and its ties; a single default relation remains."""
        for v in self._vertices:
            v.outbound.clear()
            v.inbound.clear()
        self._relations = [self.settings.default_relation]
        self._current_relation = 0
        self._log_event("relations_cleared")
        self._mark_modified(GraphChange.EDGES, relation=0)

    def vertices_with_edges_in(self, relation=None):
        """Ids of vertices with at least one visible tie in ``relation``."""
        rel = self._rel(relation)
        return [
            v.id
            for v in self._vertices
            if any(t.enabled for t in v.out_ties(rel).values())
            or any(t.enabled for t in v.in_ties(rel).values())
        ]


class RelationManager:
    """Namespace for relation operations.

    Delegates to the graph's relation methods; ``G.relations.next()`` is the
    same as ``G.next_relation()``.
    """

    def __init__(self, graph):
        self._G = graph

    def list(self):
        return self._G.list_relations()

    def count(self) -> int:
        return self._G.relation_count()

    def add(self, name, change: bool = False) -> int:
        return self._G.add_relation(name, change=change)

    def current(self) -> int:
        return self._G.current_relation()

    def current_name(self) -> str:
        return self._G.current_relation_name()

    def set(self, index) -> int:
        return self._G.set_relation(index)

    def next(self) -> bool:
        return self._G.next_relation()

    def prev(self) -> bool:
        return self._G.previous_relation()

    def rename(self, name):
        return self._G.rename_current_relation(name)

    def clear(self):
        return self._G.clear_relations()

    def vertices_with_edges(self, relation=None):
        return self._G.vertices_with_edges_in(relation)

    def __len__(self):
        return self._G.relation_count()

    def __iter__(self):
        return iter(self._G.list_relations())
