"""Tree-combination enumeration over a DirectedGraph.

For every vertex taken as a root, the enumerator chooses every non-empty
subset of the vertex's outgoing edges, then recurses into each chosen
neighbor that is not yet on the branch. Results are reported either as the
subgraph built so far (``OutputMode.SUBGRAPH``) or as the sequence of edge
labels along the current path (``OutputMode.TRACE``).

Traversal rules:
    - Subset sizes are tried from 1 up to the out-degree, and the subsets of
      each size in lexicographic index order.
    - Each subset size starts from its own copy of the branch's visited set.
      Combinations of the same size share that copy, so a neighbor entered
      by an earlier combination is not re-entered by a later one.
    - A neighbor already in the visited set is never entered again on that
      branch, which keeps the search finite on cyclic graphs.
    - Depth 1 is the root's first expansion. With a depth window, nothing
      deeper than ``maximum`` is expanded and only depths inside
      ``[minimum, maximum]`` are reported.

No deduplication happens here: the same subgraph or trace may be reported
by several branches.

Example:
    >>> graph = DirectedGraph.from_edges([("A", "B", "x"), ("A", "C", "y"), ("B", "C", "z")])
    >>> sorted(set(iter_traces(graph)))
    [('x',), ('x', 'z'), ('y',), ('z',)]
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from tracegen.combinatorial import count_subset_choices, lexicographic_combinations
from tracegen.core.graph import DirectedGraph
from tracegen.errors import DepthBound, InvalidDepthError

logger = logging.getLogger(__name__)

Trace = tuple[Any, ...]
SubgraphCallback = Callable[[DirectedGraph], None]
TraceCallback = Callable[[Trace], None]
Result = Union[DirectedGraph, Trace]


class OutputMode(Enum):
    """What the enumerator reports for each combination."""

    SUBGRAPH = "subgraph"
    TRACE = "trace"


@dataclass(frozen=True)
class DepthWindow:
    """Inclusive ``[minimum, maximum]`` range of reported expansion depths."""

    minimum: int
    maximum: int

    def __post_init__(self) -> None:
        if self.minimum < 0:
            raise InvalidDepthError(DepthBound.MINIMUM, self.minimum)
        if self.maximum < 0:
            raise InvalidDepthError(DepthBound.MAXIMUM, self.maximum)
        if self.minimum > self.maximum:
            raise ValueError(
                f"Window minimum {self.minimum} exceeds maximum {self.maximum}; "
                f"use DepthWindow.from_bounds() to normalize"
            )

    @classmethod
    def from_bounds(cls, min_depth: int, max_depth: int) -> DepthWindow:
        """Validate the caller's bounds, then normalize their order.

        Raises:
            InvalidDepthError: If either bound is negative. The minimum is
                checked first, against the argument as given.
        """
        if min_depth < 0:
            raise InvalidDepthError(DepthBound.MINIMUM, min_depth)
        if max_depth < 0:
            raise InvalidDepthError(DepthBound.MAXIMUM, max_depth)
        return cls(min(min_depth, max_depth), max(min_depth, max_depth))

    def admits(self, depth: int) -> bool:
        return self.minimum <= depth <= self.maximum

    def __str__(self) -> str:
        return f"[{self.minimum}, {self.maximum}]"


@dataclass
class EnumerationStats:
    """Counters collected during one enumeration run.

    Attributes:
        roots: Number of root vertices expanded.
        combinations: Number of edge subsets examined.
        emitted: Number of results handed to the consumer.
        deepest: Deepest expansion level reached.
    """

    roots: int = 0
    combinations: int = 0
    emitted: int = 0
    deepest: int = 0


def resolve_window(
    min_depth: int | None,
    max_depth: int | None,
) -> DepthWindow | None:
    """Build a window from optional bounds; both or neither must be given."""
    if min_depth is None and max_depth is None:
        return None
    if min_depth is None or max_depth is None:
        raise ValueError("min_depth and max_depth must be given together")
    return DepthWindow.from_bounds(min_depth, max_depth)


class TreeCombinationEnumerator:
    """Walks every root of a graph and yields its tree combinations.

    Args:
        graph: The graph to enumerate. It is only read; each branch works
            on its own clone.
        mode: Report subgraphs or label traces.
        depth_window: Optional inclusive window of reported depths.

    Example:
        >>> enumerator = TreeCombinationEnumerator(graph, OutputMode.TRACE)
        >>> for trace in enumerator:
        ...     print(" ".join(trace))
    """

    def __init__(
        self,
        graph: DirectedGraph,
        mode: OutputMode = OutputMode.TRACE,
        depth_window: DepthWindow | None = None,
    ) -> None:
        self.graph = graph
        self.mode = mode
        self.depth_window = depth_window
        self.stats = EnumerationStats()

    def __iter__(self) -> Iterator[Result]:
        return self.results()

    def results(self) -> Iterator[Result]:
        """Lazily yield every result, root by root in vertex order."""
        self.stats = EnumerationStats()
        for root in self.graph.vertices:
            self.stats.roots += 1
            logger.debug(
                "Expanding root %r (%d subset choices)",
                root,
                count_subset_choices(self.graph.out_degree(root)),
            )
            if self.mode is OutputMode.SUBGRAPH:
                yield from self._expand_subgraphs(root, {root}, DirectedGraph(), 1)
            else:
                yield from self._expand_traces(root, {root}, [], 1)

    def run(self, on_result: Callable[[Any], None]) -> EnumerationStats:
        """Feed every result to ``on_result`` and return the run's stats."""
        for result in self.results():
            on_result(result)
        logger.debug(
            "Enumeration finished: %d roots, %d combinations, %d results, depth %d",
            self.stats.roots,
            self.stats.combinations,
            self.stats.emitted,
            self.stats.deepest,
        )
        return self.stats

    def _beyond_window(self, depth: int) -> bool:
        return self.depth_window is not None and depth > self.depth_window.maximum

    def _reported(self, depth: int) -> bool:
        return self.depth_window is None or self.depth_window.admits(depth)

    def _choices(self, vertex: Hashable) -> Iterator[tuple[int, Sequence[tuple[Any, Any]]]]:
        """Yield ``(subset_size, chosen_edges)`` for every non-empty subset of edges."""
        edges = list(self.graph.neighbors(vertex).items())
        for size in range(1, len(edges) + 1):
            yield from self._size_group(edges, size)

    def _size_group(
        self, edges: list[tuple[Any, Any]], size: int
    ) -> Iterator[tuple[int, Sequence[tuple[Any, Any]]]]:
        for indices in lexicographic_combinations(len(edges), size):
            self.stats.combinations += 1
            yield size, [edges[index] for index in indices]

    def _expand_subgraphs(
        self,
        vertex: Hashable,
        visited: set,
        accumulator: DirectedGraph,
        depth: int,
    ) -> Iterator[DirectedGraph]:
        if self._beyond_window(depth):
            return
        self.stats.deepest = max(self.stats.deepest, depth)

        snapshot: set = set()
        current_size = 0
        for size, chosen in self._choices(vertex):
            if size != current_size:
                current_size = size
                snapshot = set(visited)

            combination = accumulator.clone()
            for neighbor, label in chosen:
                combination.add_edge(vertex, neighbor, label)

            if self._reported(depth):
                self.stats.emitted += 1
                yield combination.clone()

            for neighbor, _ in chosen:
                if neighbor in snapshot:
                    continue
                snapshot.add(neighbor)
                yield from self._expand_subgraphs(neighbor, snapshot, combination, depth + 1)

    def _expand_traces(
        self,
        vertex: Hashable,
        visited: set,
        trace: list,
        depth: int,
    ) -> Iterator[Trace]:
        if self._beyond_window(depth):
            return
        self.stats.deepest = max(self.stats.deepest, depth)

        snapshot: set = set()
        current_size = 0
        for size, chosen in self._choices(vertex):
            if size != current_size:
                current_size = size
                snapshot = set(visited)

            for neighbor, label in chosen:
                if neighbor in snapshot:
                    continue
                snapshot.add(neighbor)
                trace.append(label)
                try:
                    if self._reported(depth):
                        self.stats.emitted += 1
                        yield tuple(trace)
                    yield from self._expand_traces(neighbor, snapshot, trace, depth + 1)
                finally:
                    trace.pop()


def enumerate_combinations(
    graph: DirectedGraph,
    on_result: Callable[[Any], None],
    mode: OutputMode = OutputMode.SUBGRAPH,
    depth_window: DepthWindow | None = None,
) -> EnumerationStats:
    """Run one enumeration over ``graph`` and report each result to ``on_result``."""
    return TreeCombinationEnumerator(graph, mode, depth_window).run(on_result)


def tree_combinations(
    graph: DirectedGraph,
    callback: SubgraphCallback,
    min_depth: int | None = None,
    max_depth: int | None = None,
) -> EnumerationStats:
    """Report every subgraph combination, optionally inside a depth window.

    Raises:
        InvalidDepthError: If a bound is negative; raised before any callback.
    """
    window = resolve_window(min_depth, max_depth)
    return enumerate_combinations(graph, callback, OutputMode.SUBGRAPH, window)


def trace_combinations(
    graph: DirectedGraph,
    callback: TraceCallback,
    min_depth: int | None = None,
    max_depth: int | None = None,
) -> EnumerationStats:
    """Report every label trace, optionally inside a depth window.

    Raises:
        InvalidDepthError: If a bound is negative; raised before any callback.
    """
    window = resolve_window(min_depth, max_depth)
    return enumerate_combinations(graph, callback, OutputMode.TRACE, window)


def iter_tree_combinations(
    graph: DirectedGraph,
    min_depth: int | None = None,
    max_depth: int | None = None,
) -> Iterator[DirectedGraph]:
    """Generator form of :func:`tree_combinations`.

    The window is validated eagerly, when this function is called.
    """
    window = resolve_window(min_depth, max_depth)
    return TreeCombinationEnumerator(graph, OutputMode.SUBGRAPH, window).results()


def iter_traces(
    graph: DirectedGraph,
    min_depth: int | None = None,
    max_depth: int | None = None,
) -> Iterator[Trace]:
    """Generator form of :func:`trace_combinations`."""
    window = resolve_window(min_depth, max_depth)
    return TreeCombinationEnumerator(graph, OutputMode.TRACE, window).results()


def subgraph_traces(combination: DirectedGraph, root: Hashable) -> list[Trace]:
    """Root-to-leaf label sequences of a subgraph combination.

    Edges leading back to a vertex already on the path end the path there,
    the same way trace enumeration never re-enters a visited vertex.
    """
    traces: list[Trace] = []

    def walk(vertex: Hashable, on_path: set, labels: list) -> None:
        children = [
            (neighbor, label)
            for neighbor, label in combination.neighbors(vertex).items()
            if neighbor not in on_path
        ]
        if not children and labels:
            traces.append(tuple(labels))
        for neighbor, label in children:
            labels.append(label)
            on_path.add(neighbor)
            walk(neighbor, on_path, labels)
            on_path.discard(neighbor)
            labels.pop()

    walk(root, {root}, [])
    return traces
