"""Combination primitives used by the tree-combination enumerator."""

from tracegen.combinatorial.lexicographic import (
    IndexVisitor,
    count_combinations,
    count_subset_choices,
    for_each_combination,
    lexicographic_combinations,
)

__all__ = [
    "IndexVisitor",
    "count_combinations",
    "count_subset_choices",
    "for_each_combination",
    "lexicographic_combinations",
]
