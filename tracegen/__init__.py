"""tracegen - enumerate label traces from directed state graphs.

tracegen reads a state graph (DOT format), enumerates every tree
combination reachable from each vertex, and writes the distinct label
traces of each graph to a ``.traces`` file.

Example:
    >>> from tracegen import DirectedGraph, iter_traces
    >>> graph = DirectedGraph.from_edges([("A", "B", "x"), ("B", "C", "y")])
    >>> list(iter_traces(graph))
    [('x',), ('x', 'y'), ('y',)]
"""

from tracegen.core import (
    DepthWindow,
    DirectedGraph,
    EnumerationStats,
    OutputMode,
    TreeCombinationEnumerator,
    enumerate_combinations,
    iter_traces,
    iter_tree_combinations,
    trace_combinations,
    tree_combinations,
)
from tracegen.errors import (
    ConfigValidationError,
    DepthBound,
    DotSyntaxError,
    ErrorCode,
    InvalidDepthError,
    ParseError,
    SourceFileError,
    TraceGenError,
    TraceWriteError,
)
from tracegen.parsing import load_dot, parse_dot

__version__ = "1.0.0"

__all__ = [
    "ConfigValidationError",
    "DepthBound",
    "DepthWindow",
    "DirectedGraph",
    "DotSyntaxError",
    "EnumerationStats",
    "ErrorCode",
    "InvalidDepthError",
    "OutputMode",
    "ParseError",
    "SourceFileError",
    "TraceGenError",
    "TraceWriteError",
    "TreeCombinationEnumerator",
    "__version__",
    "enumerate_combinations",
    "iter_traces",
    "iter_tree_combinations",
    "load_dot",
    "parse_dot",
    "trace_combinations",
    "tree_combinations",
]
