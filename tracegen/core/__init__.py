"""Graph container and tree-combination enumeration."""

from tracegen.core.enumerator import (
    DepthWindow,
    EnumerationStats,
    OutputMode,
    SubgraphCallback,
    Trace,
    TraceCallback,
    TreeCombinationEnumerator,
    enumerate_combinations,
    iter_traces,
    iter_tree_combinations,
    resolve_window,
    subgraph_traces,
    trace_combinations,
    tree_combinations,
)
from tracegen.core.graph import DirectedGraph

__all__ = [
    "DepthWindow",
    "DirectedGraph",
    "EnumerationStats",
    "OutputMode",
    "SubgraphCallback",
    "Trace",
    "TraceCallback",
    "TreeCombinationEnumerator",
    "enumerate_combinations",
    "iter_traces",
    "iter_tree_combinations",
    "resolve_window",
    "subgraph_traces",
    "trace_combinations",
    "tree_combinations",
]
