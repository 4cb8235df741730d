"""Pytest fixtures for tracegen tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tracegen.core.graph import DirectedGraph

LOGIN_DOT = """\
digraph login {
    // states of the login form
    start -> form [label="open"];
    form -> home [label="submit"];
    form -> start [label="cancel"];
}
"""


@pytest.fixture
def abc_graph() -> DirectedGraph:
    """A -x-> B, A -y-> C, B -z-> C."""
    return DirectedGraph.from_edges([("A", "B", "x"), ("A", "C", "y"), ("B", "C", "z")])


@pytest.fixture
def chain_graph() -> DirectedGraph:
    """v0 -> v1 -> v2 -> v3, labels e1..e3."""
    return DirectedGraph.from_edges([("v0", "v1", "e1"), ("v1", "v2", "e2"), ("v2", "v3", "e3")])


@pytest.fixture
def cycle_graph() -> DirectedGraph:
    """Two vertices pointing at each other."""
    return DirectedGraph.from_edges([("A", "B", "ab"), ("B", "A", "ba")])


@pytest.fixture
def star_graph() -> DirectedGraph:
    """Root with three leaf children."""
    return DirectedGraph.from_edges([("r", "a", "1"), ("r", "b", "2"), ("r", "c", "3")])


@pytest.fixture
def login_dot(tmp_path: Path) -> Path:
    path = tmp_path / "login.dot"
    path.write_text(LOGIN_DOT)
    return path


@pytest.fixture
def broken_dot(tmp_path: Path) -> Path:
    path = tmp_path / "broken.dot"
    path.write_text("digraph {\n  a -> \n}\n")
    return path


@pytest.fixture(autouse=True)
def reset_tracegen_logger():
    """Drop handlers installed by configure_logging between tests."""
    yield
    logger = logging.getLogger("tracegen")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for key in (
        "TRACEGEN_MIN_DEPTH",
        "TRACEGEN_MAX_DEPTH",
        "TRACEGEN_INCLUDE",
        "TRACEGEN_INCLUDE_PATHS",
        "TRACEGEN_SHOW_TRACES",
        "TRACEGEN_VERBOSE",
        "TRACEGEN_JSON_LOGS",
    ):
        monkeypatch.delenv(key, raising=False)
