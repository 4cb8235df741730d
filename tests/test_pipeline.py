"""Tests for the source file pipeline."""

from __future__ import annotations

import pytest

from tracegen.core.enumerator import DepthWindow
from tracegen.errors import ErrorCode, SourceFileError
from tracegen.pipeline import (
    GenerateCombinations,
    MessageLevel,
    ParseFile,
    PhaseListener,
    PhaseMessage,
    Pipeline,
    SourceFile,
    discover_sources,
)

LOGIN_TRACES = ["open", "open submit", "submit", "cancel"]


# ============================================================
# SourceFile
# ============================================================


class TestSourceFile:
    def test_add_trace_deduplicates(self, tmp_path):
        source = SourceFile(tmp_path / "g.dot")
        assert source.add_trace("a b") is True
        assert source.add_trace("c") is True
        assert source.add_trace("a b") is False
        assert source.traces == ["a b", "c"]

    def test_traces_path(self, tmp_path):
        source = SourceFile(tmp_path / "g.dot")
        assert source.traces_path == tmp_path / "g.dot.traces"

    def test_custom_suffix(self, tmp_path):
        source = SourceFile(tmp_path / "g.dot", traces_suffix=".out")
        assert source.traces_path.name == "g.dot.out"

    def test_write(self, tmp_path):
        source = SourceFile(tmp_path / "g.dot")
        source.add_trace("x")
        source.add_trace("x z")
        path = source.write()
        assert path.read_text() == "x\nx z\n"

    def test_write_empty(self, tmp_path):
        source = SourceFile(tmp_path / "g.dot")
        assert source.write().read_text() == ""

    def test_read_missing_file(self, tmp_path):
        source = SourceFile(tmp_path / "missing.dot")
        with pytest.raises(SourceFileError):
            source.read_text()

    def test_completed_phases(self, login_dot):
        listener = PhaseListener()
        source = SourceFile(login_dot)
        parse = ParseFile(listener)
        assert source.last_completed_phase is None
        assert not source.has_been_completed_by(parse)

        parse.execute(source)

        assert source.has_been_completed_by(parse)
        assert source.has_been_completed_by(ParseFile)
        assert not source.has_been_completed_by(GenerateCombinations)
        assert source.last_completed_phase is ParseFile
        assert source.completed_phases == [ParseFile]


# ============================================================
# Listener
# ============================================================


class TestPhaseListener:
    def _message(self, level, path="g.dot"):
        return PhaseMessage(level=level, phase_name="ParseFile", source_path=path, text="hello")

    def test_messages_sorted_by_level(self):
        listener = PhaseListener()
        listener.notify(self._message(MessageLevel.INFO))
        listener.notify(self._message(MessageLevel.WARNING))
        listener.notify(self._message(MessageLevel.ERROR))
        assert len(listener.infos) == 1
        assert len(listener.warnings) == 1
        assert len(listener.errors) == 1
        assert len(listener.messages) == 3

    def test_errors_for(self):
        listener = PhaseListener()
        listener.notify(self._message(MessageLevel.ERROR, "a.dot"))
        listener.notify(self._message(MessageLevel.ERROR, "b.dot"))
        assert [m.source_path for m in listener.errors_for("b.dot")] == ["b.dot"]

    def test_messages_are_logged(self, caplog):
        listener = PhaseListener()
        with caplog.at_level("WARNING", logger="tracegen"):
            listener.notify(self._message(MessageLevel.WARNING))
        assert "g.dot: hello" in caplog.text

    def test_message_str_and_dict(self):
        message = self._message(MessageLevel.INFO)
        assert str(message) == "g.dot: hello"
        assert message.to_dict() == {
            "level": "info",
            "phase": "ParseFile",
            "source": "g.dot",
            "message": "hello",
        }


# ============================================================
# Phases
# ============================================================


class TestParseFile:
    def test_parses_graph(self, login_dot):
        listener = PhaseListener()
        source = SourceFile(login_dot)
        ParseFile(listener).execute(source)
        assert source.graph is not None
        assert source.graph.edge_count == 3
        assert listener.errors == []

    def test_syntax_error_reported(self, broken_dot):
        listener = PhaseListener()
        source = SourceFile(broken_dot)
        ParseFile(listener).execute(source)

        assert len(listener.errors) == 1
        error = listener.errors[0]
        assert error.phase_name == "ParseFile"
        assert error.error is not None
        assert error.error.error_code is ErrorCode.SYNTAX_ERROR
        assert error.error.context.phase_name == "ParseFile"
        assert source.graph is not None and len(source.graph) == 0

    def test_missing_file_reported(self, tmp_path):
        listener = PhaseListener()
        ParseFile(listener).execute(SourceFile(tmp_path / "gone.dot"))
        assert listener.errors[0].error.error_code is ErrorCode.SOURCE_NOT_FOUND

    def test_empty_graph_warns(self, tmp_path):
        path = tmp_path / "empty.dot"
        path.write_text("digraph {}")
        listener = PhaseListener()
        ParseFile(listener).execute(SourceFile(path))
        assert [m.text for m in listener.warnings] == ["Graph has no vertices"]

    def test_runs_once_per_file(self, login_dot):
        listener = PhaseListener()
        source = SourceFile(login_dot)
        phase = ParseFile(listener)
        phase.execute(source)
        count = len(listener.messages)
        phase.execute(source)
        assert len(listener.messages) == count

    def test_source_file_outside_execute(self):
        with pytest.raises(RuntimeError, match="not processing"):
            ParseFile(PhaseListener()).source_file


class TestGenerateCombinations:
    def _parsed(self, path, listener):
        source = SourceFile(path)
        ParseFile(listener).execute(source)
        return source

    def test_generates_and_writes(self, login_dot):
        listener = PhaseListener()
        source = self._parsed(login_dot, listener)
        GenerateCombinations(listener).execute(source)

        assert source.traces == LOGIN_TRACES
        assert source.traces_path.read_text() == "\n".join(LOGIN_TRACES) + "\n"
        assert "Generated 4 traces" in [m.text for m in listener.infos]

    def test_graph_cleared_after_generation(self, login_dot):
        listener = PhaseListener()
        source = self._parsed(login_dot, listener)
        GenerateCombinations(listener).execute(source)
        assert source.graph is not None and len(source.graph) == 0

    def test_show_traces(self, login_dot):
        listener = PhaseListener()
        source = self._parsed(login_dot, listener)
        GenerateCombinations(listener, show_traces=True).execute(source)
        generated = [m.text for m in listener.infos if m.text.startswith("Generated: ")]
        assert generated == [f"Generated: {trace}" for trace in LOGIN_TRACES]

    @pytest.mark.parametrize(
        "window,expected",
        [
            (DepthWindow(1, 1), ["open", "submit", "cancel"]),
            (DepthWindow(2, 2), ["open submit"]),
            ((2, 1), LOGIN_TRACES),
        ],
    )
    def test_depth_window(self, login_dot, window, expected):
        listener = PhaseListener()
        source = self._parsed(login_dot, listener)
        GenerateCombinations(listener, depth_window=window).execute(source)
        assert source.traces == expected

    def test_invalid_depth_reported(self, login_dot):
        listener = PhaseListener()
        source = self._parsed(login_dot, listener)
        GenerateCombinations(listener, depth_window=(-1, 2)).execute(source)

        assert source.traces == []
        assert len(listener.errors) == 1
        assert listener.errors[0].error.error_code is ErrorCode.INVALID_MINIMUM_DEPTH
        assert not source.traces_path.exists()

    def test_write_failure_reported(self, login_dot):
        listener = PhaseListener()
        source = self._parsed(login_dot, listener)
        source.traces_path.mkdir()
        GenerateCombinations(listener).execute(source)

        assert len(listener.errors) == 1
        assert listener.errors[0].error.error_code is ErrorCode.TRACE_WRITE_FAILED
        assert source.traces == LOGIN_TRACES


# ============================================================
# Pipeline
# ============================================================


class TestPipeline:
    def test_run(self, login_dot):
        results = Pipeline().run([login_dot])
        assert len(results) == 1
        result = results[0]
        assert result.ok
        assert result.trace_count == 4
        assert result.traces == LOGIN_TRACES
        assert result.traces_path == login_dot.with_name("login.dot.traces")
        assert result.traces_path.exists()

    def test_phase_order(self, login_dot):
        pipeline = Pipeline()
        source = SourceFile(login_dot)
        assert isinstance(pipeline.next_phase_for(source), ParseFile)
        pipeline.next_phase_for(source).execute(source)
        assert isinstance(pipeline.next_phase_for(source), GenerateCombinations)
        pipeline.process(source)
        assert pipeline.next_phase_for(source) is None

    def test_parse_error_stops_file_but_not_run(self, broken_dot, login_dot):
        results = Pipeline().run([broken_dot, login_dot])
        broken, good = results

        assert not broken.ok
        assert broken.trace_count == 0
        assert broken.traces_path is None
        assert not broken_dot.with_name("broken.dot.traces").exists()

        assert good.ok
        assert good.trace_count == 4

    def test_invalid_depth_fails_every_file(self, login_dot):
        results = Pipeline(depth_window=(1, -3)).run([login_dot])
        assert not results[0].ok
        assert results[0].errors[0].error.error_code is ErrorCode.INVALID_MAXIMUM_DEPTH

    def test_shared_listener(self, login_dot):
        listener = PhaseListener()
        Pipeline(listener=listener).run([login_dot])
        assert {m.phase_name for m in listener.infos} == {"ParseFile", "GenerateCombinations"}

    def test_result_to_dict(self, login_dot):
        data = Pipeline().run([login_dot])[0].to_dict()
        assert data["path"] == str(login_dot)
        assert data["trace_count"] == 4
        assert data["errors"] == []


# ============================================================
# Discovery
# ============================================================


class TestDiscoverSources:
    @pytest.fixture
    def graph_dir(self, tmp_path):
        (tmp_path / "b.dot").write_text("digraph {}")
        (tmp_path / "A.DOT").write_text("digraph {}")
        (tmp_path / "notes.txt").write_text("")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "c.dot").write_text("digraph {}")
        return tmp_path

    def test_directory_scan(self, graph_dir):
        found = discover_sources([graph_dir])
        assert [p.name for p in found] == ["A.DOT", "b.dot"]

    def test_no_paths_scans_include(self, graph_dir):
        found = discover_sources([], include=[graph_dir / "nested", graph_dir])
        assert [p.name for p in found] == ["c.dot", "A.DOT", "b.dot"]

    def test_relative_file_under_include(self, graph_dir):
        found = discover_sources(["b.dot"], include=[graph_dir / "missing", graph_dir])
        assert found == [graph_dir / "b.dot"]

    def test_explicit_file_with_other_suffix(self, graph_dir):
        assert discover_sources([graph_dir / "notes.txt"]) == [graph_dir / "notes.txt"]

    def test_deduplicated(self, graph_dir):
        found = discover_sources([graph_dir / "b.dot", graph_dir, graph_dir / "b.dot"])
        assert found == [graph_dir / "b.dot", graph_dir / "A.DOT"]

    def test_nothing_found(self, tmp_path, caplog):
        with caplog.at_level("WARNING", logger="tracegen"):
            assert discover_sources(["nothing.dot"], include=[tmp_path]) == []
        assert "No graph files found for nothing.dot" in caplog.text
