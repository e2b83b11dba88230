"""Graph store interface and an in-memory implementation."""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping


class GraphStore(ABC):
    """Answers "who is connected to any of these users" over an undirected relation."""

    @abstractmethod
    def neighbors_of(self, ids: frozenset[str]) -> set[str]:
        """Return every user connected to at least one of ``ids``.

        Raises:
            GraphUnavailableError: If the store cannot be queried.
        """


class InMemoryGraphStore(GraphStore):
    """Adjacency-map store. Edges are made symmetric on construction.

    Usage::

        store = InMemoryGraphStore({"viewer": ["a"], "a": ["b", "c"]})
        store.neighbors_of(frozenset({"a"}))  # {"viewer", "b", "c"}
    """

    def __init__(self, adjacency: Mapping[str, Iterable[str]] | None = None) -> None:
        self._adjacency: dict[str, set[str]] = {}
        for user_id, peers in (adjacency or {}).items():
            for peer in peers:
                self.add_edge(user_id, peer)

    def add_edge(self, a: str, b: str) -> None:
        if a == b:
            return
        self._adjacency.setdefault(a, set()).add(b)
        self._adjacency.setdefault(b, set()).add(a)

    def neighbors_of(self, ids: frozenset[str]) -> set[str]:
        result: set[str] = set()
        for user_id in ids:
            result |= self._adjacency.get(user_id, set())
        return result
