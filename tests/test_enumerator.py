"""Tests for tree-combination enumeration."""

from __future__ import annotations

import pytest

from tracegen.core import (
    DepthWindow,
    DirectedGraph,
    OutputMode,
    TreeCombinationEnumerator,
    enumerate_combinations,
    iter_traces,
    iter_tree_combinations,
    resolve_window,
    subgraph_traces,
    trace_combinations,
    tree_combinations,
)
from tracegen.errors import DepthBound, ErrorCode, InvalidDepthError


def edge_sets(graphs):
    return [frozenset(graph.edges()) for graph in graphs]


def traces_with_prefixes(combinations):
    """Every root-to-leaf trace of each combination, plus its prefixes."""
    found = set()
    for combination in combinations:
        for trace in subgraph_traces(combination, combination.vertices[0]):
            found.update(trace[:end] for end in range(1, len(trace) + 1))
    return found


# ============================================================
# Trace mode
# ============================================================


class TestTraces:
    def test_abc_traces_in_order(self, abc_graph):
        assert list(iter_traces(abc_graph)) == [
            ("x",),
            ("x", "z"),
            ("y",),
            ("x",),
            ("x", "z"),
            ("y",),
            ("z",),
        ]

    def test_distinct_traces(self, abc_graph):
        assert sorted(set(iter_traces(abc_graph))) == [("x",), ("x", "z"), ("y",), ("z",)]

    def test_chain_traces(self, chain_graph):
        assert list(iter_traces(chain_graph)) == [
            ("e1",),
            ("e1", "e2"),
            ("e1", "e2", "e3"),
            ("e2",),
            ("e2", "e3"),
            ("e3",),
        ]

    def test_size_groups_share_visited_set(self, star_graph):
        # within one subset size, a child entered by an earlier subset is
        # not entered again by a later one
        assert list(iter_traces(star_graph)) == [
            ("1",),
            ("2",),
            ("3",),
            ("1",),
            ("2",),
            ("3",),
            ("1",),
            ("2",),
            ("3",),
        ]

    def test_cycle_terminates(self, cycle_graph):
        assert list(iter_traces(cycle_graph)) == [("ab",), ("ba",)]

    def test_self_loop_never_reentered(self):
        graph = DirectedGraph.from_edges([("a", "a", "spin"), ("a", "b", "go")])
        assert list(iter_traces(graph)) == [("go",), ("go",)]

    def test_empty_graph(self):
        assert list(iter_traces(DirectedGraph())) == []

    def test_isolated_vertex_produces_nothing(self):
        graph = DirectedGraph()
        graph.add_vertex("alone")
        assert list(iter_traces(graph)) == []

    def test_callback_form(self, abc_graph):
        seen = []
        stats = trace_combinations(abc_graph, seen.append)
        assert seen == list(iter_traces(abc_graph))
        assert stats.emitted == len(seen)

    def test_graph_unchanged(self, abc_graph):
        before = abc_graph.clone()
        list(iter_traces(abc_graph))
        list(iter_tree_combinations(abc_graph))
        assert abc_graph == before


# ============================================================
# Subgraph mode
# ============================================================


class TestSubgraphs:
    def test_star_root_covers_every_subset(self, star_graph):
        combos = list(iter_tree_combinations(star_graph))
        assert len(combos) == 2**3 - 1
        expected = {
            frozenset(("r", child, label) for child, label in subset)
            for subset in (
                [("a", "1")],
                [("b", "2")],
                [("c", "3")],
                [("a", "1"), ("b", "2")],
                [("a", "1"), ("c", "3")],
                [("b", "2"), ("c", "3")],
                [("a", "1"), ("b", "2"), ("c", "3")],
            )
        }
        assert set(edge_sets(combos)) == expected

    def test_abc_subgraphs(self, abc_graph):
        assert edge_sets(iter_tree_combinations(abc_graph)) == [
            frozenset({("A", "B", "x")}),
            frozenset({("A", "B", "x"), ("B", "C", "z")}),
            frozenset({("A", "C", "y")}),
            frozenset({("A", "B", "x"), ("A", "C", "y")}),
            frozenset({("A", "B", "x"), ("A", "C", "y"), ("B", "C", "z")}),
            frozenset({("B", "C", "z")}),
        ]

    def test_results_are_independent_graphs(self, abc_graph):
        combos = list(iter_tree_combinations(abc_graph))
        combos[0].add_edge("X", "Y", "extra")
        assert all(not combo.has_edge("X", "Y") for combo in combos[1:])

    def test_mutating_a_result_mid_iteration(self, abc_graph):
        combos = iter_tree_combinations(abc_graph)
        first = next(combos)
        first.add_edge("X", "Y", "extra")
        rest = list(combos)
        assert all(not combo.has_edge("X", "Y") for combo in rest)
        assert frozenset(rest[0].edges()) == {("A", "B", "x"), ("B", "C", "z")}

    def test_self_loop_reported_not_followed(self):
        graph = DirectedGraph.from_edges([("a", "a", "spin")])
        combos = list(iter_tree_combinations(graph))
        assert edge_sets(combos) == [frozenset({("a", "a", "spin")})]

    def test_callback_form(self, abc_graph):
        seen = []
        tree_combinations(abc_graph, seen.append)
        assert len(seen) == 6
        assert all(isinstance(graph, DirectedGraph) for graph in seen)

    def test_subgraph_traces(self, abc_graph):
        combination = abc_graph.clone()
        assert subgraph_traces(combination, "A") == [("x", "z"), ("y",)]

    def test_subgraph_traces_cycle(self, cycle_graph):
        assert subgraph_traces(cycle_graph, "A") == [("ab",)]

    @pytest.mark.parametrize("fixture", ["abc_graph", "chain_graph", "cycle_graph", "star_graph"])
    def test_combination_traces_match_trace_mode(self, fixture, request):
        graph = request.getfixturevalue(fixture)
        assert traces_with_prefixes(iter_tree_combinations(graph)) == set(iter_traces(graph))


# ============================================================
# Depth window
# ============================================================


class TestDepthWindow:
    def test_exact_depth_two(self, abc_graph):
        assert list(iter_traces(abc_graph, 2, 2)) == [("x", "z"), ("x", "z")]

    def test_depth_one(self, abc_graph):
        assert list(iter_traces(abc_graph, 1, 1)) == [("x",), ("y",), ("x",), ("y",), ("z",)]

    def test_window_skips_shallow_results(self, chain_graph):
        assert list(iter_traces(chain_graph, 2, 3)) == [
            ("e1", "e2"),
            ("e1", "e2", "e3"),
            ("e2", "e3"),
        ]

    def test_chain_window_one_to_three(self, chain_graph):
        assert list(iter_traces(chain_graph, 1, 3)) == [
            ("e1",),
            ("e1", "e2"),
            ("e1", "e2", "e3"),
            ("e2",),
            ("e2", "e3"),
            ("e3",),
        ]

    def test_reversed_bounds_are_normalized(self, chain_graph):
        assert list(iter_traces(chain_graph, 3, 1)) == list(iter_traces(chain_graph, 1, 3))

    def test_zero_window_reports_nothing(self, chain_graph):
        assert list(iter_traces(chain_graph, 0, 0)) == []

    def test_wide_window_matches_unbounded(self, chain_graph):
        assert list(iter_traces(chain_graph, 1, 10)) == list(iter_traces(chain_graph))

    def test_subgraph_window(self, abc_graph):
        assert edge_sets(iter_tree_combinations(abc_graph, 1, 1)) == [
            frozenset({("A", "B", "x")}),
            frozenset({("A", "C", "y")}),
            frozenset({("A", "B", "x"), ("A", "C", "y")}),
            frozenset({("B", "C", "z")}),
        ]

    def test_from_bounds(self):
        assert DepthWindow.from_bounds(3, 1) == DepthWindow(1, 3)
        assert str(DepthWindow(1, 3)) == "[1, 3]"

    def test_direct_construction_rejects_reversed(self):
        with pytest.raises(ValueError, match="exceeds"):
            DepthWindow(3, 1)

    def test_admits(self):
        window = DepthWindow(2, 4)
        assert [depth for depth in range(6) if window.admits(depth)] == [2, 3, 4]

    def test_bounds_must_come_together(self):
        assert resolve_window(None, None) is None
        with pytest.raises(ValueError, match="together"):
            resolve_window(1, None)


class TestInvalidDepth:
    def test_negative_minimum(self, abc_graph):
        seen = []
        with pytest.raises(InvalidDepthError) as exc_info:
            trace_combinations(abc_graph, seen.append, -1, 3)
        assert exc_info.value.bound is DepthBound.MINIMUM
        assert exc_info.value.value == -1
        assert exc_info.value.error_code is ErrorCode.INVALID_MINIMUM_DEPTH
        assert seen == []

    def test_negative_maximum(self, abc_graph):
        seen = []
        with pytest.raises(InvalidDepthError) as exc_info:
            tree_combinations(abc_graph, seen.append, 2, -1)
        assert exc_info.value.bound is DepthBound.MAXIMUM
        assert exc_info.value.error_code is ErrorCode.INVALID_MAXIMUM_DEPTH
        assert seen == []

    def test_minimum_checked_first(self, abc_graph):
        with pytest.raises(InvalidDepthError) as exc_info:
            trace_combinations(abc_graph, lambda trace: None, -1, -2)
        assert exc_info.value.bound is DepthBound.MINIMUM

    def test_argument_reported_before_normalization(self):
        # normalizing would move -5 into the minimum slot
        with pytest.raises(InvalidDepthError) as exc_info:
            DepthWindow.from_bounds(2, -5)
        assert exc_info.value.bound is DepthBound.MAXIMUM
        assert exc_info.value.value == -5

    def test_generator_form_validates_eagerly(self, abc_graph):
        with pytest.raises(InvalidDepthError):
            iter_traces(abc_graph, -1, 1)


# ============================================================
# Enumerator object
# ============================================================


class TestTreeCombinationEnumerator:
    def test_stats(self, star_graph):
        enumerator = TreeCombinationEnumerator(star_graph, OutputMode.TRACE)
        results = list(enumerator)
        assert enumerator.stats.roots == 4
        assert enumerator.stats.combinations == 7
        assert enumerator.stats.emitted == len(results) == 9
        assert enumerator.stats.deepest == 2

    def test_run_returns_stats(self, chain_graph):
        seen = []
        stats = enumerate_combinations(chain_graph, seen.append, OutputMode.TRACE)
        assert stats.emitted == 6
        assert stats.deepest == 4

    def test_stats_reset_between_runs(self, abc_graph):
        enumerator = TreeCombinationEnumerator(abc_graph)
        list(enumerator)
        list(enumerator)
        assert enumerator.stats.emitted == 7

    def test_default_mode_is_trace(self, abc_graph):
        enumerator = TreeCombinationEnumerator(abc_graph)
        assert all(isinstance(result, tuple) for result in enumerator)

    def test_lazy_results(self, chain_graph):
        results = TreeCombinationEnumerator(chain_graph).results()
        assert next(results) == ("e1",)
        assert next(results) == ("e1", "e2")
