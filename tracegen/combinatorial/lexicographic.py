"""Lexicographic k-subsets of index ranges.

The enumerator chooses subsets of a vertex's outgoing edges by position,
so everything here works on plain integer indices and knows nothing about
graphs.

Example:
    >>> list(lexicographic_combinations(4, 2))
    [(0, 1), (0, 2), (0, 3), (1, 2), (1, 3), (2, 3)]
"""

from __future__ import annotations

import itertools
import math
from collections.abc import Callable, Iterator

IndexVisitor = Callable[[tuple[int, ...]], None]


def _check_bounds(n: int, k: int) -> None:
    if n < 0:
        raise ValueError(f"Element count must be non-negative, got {n}")
    if n and not 1 <= k <= n:
        raise ValueError(f"Subset size must be between 1 and {n}, got {k}")


def lexicographic_combinations(n: int, k: int) -> Iterator[tuple[int, ...]]:
    """Yield every k-element subset of ``range(n)`` in lexicographic order.

    Indices inside each subset are strictly increasing. ``n == 0`` yields
    nothing regardless of ``k``.

    Raises:
        ValueError: If ``n`` is negative, or ``n > 0`` and ``k`` is not
            between 1 and ``n``.
    """
    _check_bounds(n, k)
    if n == 0:
        return
    yield from itertools.combinations(range(n), k)


def for_each_combination(n: int, k: int, visit: IndexVisitor) -> None:
    """Call ``visit`` once per k-subset of ``range(n)``, lexicographically.

    Re-entrant: ``visit`` may itself call ``for_each_combination``.
    """
    for indices in lexicographic_combinations(n, k):
        visit(indices)


def count_combinations(n: int, k: int) -> int:
    """Number of calls ``for_each_combination(n, k, ...)`` makes."""
    _check_bounds(n, k)
    if n == 0:
        return 0
    return math.comb(n, k)


def count_subset_choices(degree: int) -> int:
    """Number of non-empty subsets of ``degree`` outgoing edges (2**d - 1)."""
    if degree < 0:
        raise ValueError(f"Degree must be non-negative, got {degree}")
    return sum(count_combinations(degree, k) for k in range(1, degree + 1))
