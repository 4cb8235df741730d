"""Directed graph container with labelled edges.

The graph is a mapping ``vertex -> {neighbor -> label}``. Both levels are
plain insertion-ordered dicts, so vertex order follows first appearance and
neighbor order follows edge insertion. The enumerator relies on that order
for reproducible output.

Example:
    >>> graph = DirectedGraph()
    >>> graph.add_edge("idle", "running", "start")
    False
    >>> graph.add_edge("running", "idle", "stop")
    False
    >>> print(graph)
    idle -> running
    running -> idle
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, Generic, TypeVar

V = TypeVar("V", bound=Hashable)
L = TypeVar("L")


class DirectedGraph(Generic[V, L]):
    """Mutable adjacency map with at most one label per ordered vertex pair.

    Adding an edge creates both endpoints, so a vertex without outgoing
    edges still exists (and is enumerated as a leaf). Re-adding an existing
    pair overwrites its label.
    """

    __slots__ = ("_adjacency",)

    def __init__(self) -> None:
        self._adjacency: dict[V, dict[V, L | None]] = {}

    @classmethod
    def from_edges(cls, edges: Iterable[tuple[Any, ...]]) -> DirectedGraph[V, L]:
        """Build a graph from ``(source, target)`` or ``(source, target, label)`` tuples."""
        graph: DirectedGraph[V, L] = cls()
        for edge in edges:
            if len(edge) == 2:
                graph.add_edge(edge[0], edge[1])
            elif len(edge) == 3:
                graph.add_edge(edge[0], edge[1], edge[2])
            else:
                raise ValueError(f"Edge must have 2 or 3 items, got {edge!r}")
        return graph

    # -- mutation ---------------------------------------------------------

    def add_vertex(self, vertex: V) -> bool:
        """Add an isolated vertex. Returns True if it was already present."""
        if vertex in self._adjacency:
            return True
        self._adjacency[vertex] = {}
        return False

    def add_edge(self, source: V, target: V, label: L | None = None) -> bool:
        """Add or relabel the edge ``source -> target``.

        Returns:
            True if the pair already existed before this call.
        """
        neighbors = self._adjacency.setdefault(source, {})
        self._adjacency.setdefault(target, {})
        existed = target in neighbors
        neighbors[target] = label
        return existed

    def clear(self) -> None:
        """Remove every vertex and edge."""
        for neighbors in self._adjacency.values():
            neighbors.clear()
        self._adjacency.clear()

    def clone(self) -> DirectedGraph[V, L]:
        """Independent copy: new dicts, same vertex and label objects."""
        clone: DirectedGraph[V, L] = DirectedGraph()
        clone._adjacency = {
            vertex: dict(neighbors) for vertex, neighbors in self._adjacency.items()
        }
        return clone

    def __copy__(self) -> DirectedGraph[V, L]:
        return self.clone()

    def __deepcopy__(self, memo: dict[int, Any]) -> DirectedGraph[V, L]:
        return self.clone()

    # -- queries ----------------------------------------------------------

    @property
    def vertices(self) -> list[V]:
        return list(self._adjacency)

    def neighbors(self, vertex: V) -> Mapping[V, L | None]:
        """Read-only view of ``vertex``'s outgoing edges (empty if unknown)."""
        return MappingProxyType(self._adjacency.get(vertex, {}))

    def label(self, source: V, target: V) -> L | None:
        try:
            return self._adjacency[source][target]
        except KeyError:
            raise KeyError(f"No edge {source!r} -> {target!r}") from None

    def has_edge(self, source: V, target: V) -> bool:
        return target in self._adjacency.get(source, {})

    def out_degree(self, vertex: V) -> int:
        return len(self._adjacency.get(vertex, {}))

    def edges(self) -> Iterator[tuple[V, V, L | None]]:
        for source, neighbors in self._adjacency.items():
            for target, label in neighbors.items():
                yield source, target, label

    @property
    def edge_count(self) -> int:
        return sum(len(neighbors) for neighbors in self._adjacency.values())

    def to_dict(self) -> dict[V, dict[V, L | None]]:
        """Plain nested-dict snapshot of the adjacency map."""
        return {vertex: dict(neighbors) for vertex, neighbors in self._adjacency.items()}

    def render(self) -> str:
        """Adjacency listing, one ``vertex -> n1 n2`` line per vertex with edges."""
        lines = [
            f"{vertex} -> " + " ".join(str(neighbor) for neighbor in neighbors)
            for vertex, neighbors in self._adjacency.items()
            if neighbors
        ]
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"DirectedGraph(vertices={len(self)}, edges={self.edge_count})"

    def __contains__(self, vertex: object) -> bool:
        return vertex in self._adjacency

    def __iter__(self) -> Iterator[V]:
        return iter(list(self._adjacency))

    def __len__(self) -> int:
        return len(self._adjacency)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectedGraph):
            return NotImplemented
        return self._adjacency == other._adjacency

    __hash__ = None  # type: ignore[assignment]
