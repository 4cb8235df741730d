"""Pipeline phases that turn DOT files into traces files.

Each source file goes through the phases in order:

    ParseFile -> GenerateCombinations

A phase runs at most once per source file. Phases never raise for
problems in the input; they report :class:`PhaseMessage` objects to a
shared :class:`PhaseListener`, and the pipeline moves on to the next
file.

Example:
    >>> pipeline = Pipeline(depth_window=DepthWindow(1, 3))
    >>> for result in pipeline.run(["graphs/login.dot"]):
    ...     print(result.path, result.trace_count)
"""

from __future__ import annotations

import fnmatch
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

from tracegen.core.enumerator import DepthWindow, OutputMode, TreeCombinationEnumerator
from tracegen.core.graph import DirectedGraph
from tracegen.errors import InvalidDepthError, TraceGenError
from tracegen.observability.logging import get_logger, log_context
from tracegen.parsing.dot import parse_dot
from tracegen.pipeline.source import TRACES_SUFFIX, SourceFile

logger = logging.getLogger(__name__)

DepthBounds = Union[DepthWindow, tuple[int, int], None]


class MessageLevel(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    MessageLevel.INFO: logging.INFO,
    MessageLevel.WARNING: logging.WARNING,
    MessageLevel.ERROR: logging.ERROR,
}


@dataclass
class PhaseMessage:
    """Something a phase wants the user to know about a source file.

    Attributes:
        level: Severity of the message.
        phase_name: Name of the reporting phase.
        source_path: Path of the source file being processed.
        text: Human-readable message.
        error: The error behind an ERROR message, if any.
    """

    level: MessageLevel
    phase_name: str
    source_path: str
    text: str
    error: TraceGenError | None = None

    def __str__(self) -> str:
        return f"{self.source_path}: {self.text}"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "level": self.level.value,
            "phase": self.phase_name,
            "source": self.source_path,
            "message": self.text,
        }
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data


class PhaseListener:
    """Collects phase messages and logs them as they arrive."""

    def __init__(self) -> None:
        self.infos: list[PhaseMessage] = []
        self.warnings: list[PhaseMessage] = []
        self.errors: list[PhaseMessage] = []
        self._log = get_logger("tracegen.pipeline")

    def notify(self, message: PhaseMessage) -> None:
        data: dict[str, Any] = {"phase": message.phase_name}
        if message.error is not None:
            data["error_code"] = message.error.error_code.value
        self._log.log(_LOG_LEVELS[message.level], str(message), **data)

        if message.level is MessageLevel.INFO:
            self.infos.append(message)
        elif message.level is MessageLevel.WARNING:
            self.warnings.append(message)
        else:
            self.errors.append(message)

    @property
    def messages(self) -> list[PhaseMessage]:
        return [*self.infos, *self.warnings, *self.errors]

    def errors_for(self, source_file: SourceFile | str | Path) -> list[PhaseMessage]:
        path = str(source_file)
        return [message for message in self.errors if message.source_path == path]


class Phase(ABC):
    """One step of the pipeline, applied once per source file.

    Subclasses implement :meth:`execute_phase`, reading and updating
    :attr:`source_file` and reporting through :meth:`info`,
    :meth:`warning` and :meth:`error`.
    """

    def __init__(self, listener: PhaseListener) -> None:
        self.listener = listener
        self._source_file: SourceFile | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def source_file(self) -> SourceFile:
        if self._source_file is None:
            raise RuntimeError(f"{self.name} is not processing a source file")
        return self._source_file

    def execute(self, source_file: SourceFile) -> None:
        """Run this phase on ``source_file`` unless it already has."""
        if source_file.has_been_completed_by(self):
            logger.debug("%s already completed for %s", self.name, source_file)
            return

        self._source_file = source_file
        try:
            with log_context(source=str(source_file), phase=self.name):
                self.execute_phase()
            source_file.mark_completed(self)
        finally:
            self._source_file = None

    @abstractmethod
    def execute_phase(self) -> None:
        """Do this phase's work on :attr:`source_file`."""
        ...

    def _report(self, level: MessageLevel, text: str, error: TraceGenError | None = None) -> None:
        self.listener.notify(
            PhaseMessage(
                level=level,
                phase_name=self.name,
                source_path=str(self.source_file),
                text=text,
                error=error,
            )
        )

    def info(self, text: str) -> None:
        self._report(MessageLevel.INFO, text)

    def warning(self, text: str) -> None:
        self._report(MessageLevel.WARNING, text)

    def error(self, text: str, error: TraceGenError | None = None) -> None:
        if error is not None and error.context.phase_name is None:
            error.context.phase_name = self.name
        self._report(MessageLevel.ERROR, text, error)


class ParseFile(Phase):
    """Reads the DOT file into the source file's graph.

    On failure the source file gets an empty graph and an ERROR message.
    """

    def execute_phase(self) -> None:
        source_file = self.source_file
        self.info("Parsing file")
        try:
            graph = parse_dot(source_file.read_text(), source=str(source_file.path))
        except TraceGenError as e:
            self.error(f"Failed to parse file: {e.message}", e)
            graph = DirectedGraph()
        else:
            if len(graph) == 0:
                self.warning("Graph has no vertices")
            logger.debug(
                "Parsed %s: %d vertices, %d edges", source_file, len(graph), graph.edge_count
            )
        source_file.graph = graph


class GenerateCombinations(Phase):
    """Enumerates label traces, deduplicates them and writes the traces file.

    Args:
        listener: Receives the phase's messages.
        depth_window: A validated :class:`DepthWindow`, or raw
            ``(min_depth, max_depth)`` bounds validated when the phase runs.
            None enumerates without a window.
        show_traces: Report every newly generated trace as an INFO message.
    """

    def __init__(
        self,
        listener: PhaseListener,
        depth_window: DepthBounds = None,
        show_traces: bool = False,
    ) -> None:
        super().__init__(listener)
        self.depth_window = depth_window
        self.show_traces = show_traces

    def execute_phase(self) -> None:
        source_file = self.source_file
        graph = source_file.graph if source_file.graph is not None else DirectedGraph()
        self.info("Generating combinations")

        try:
            window = self._resolve_window()
        except InvalidDepthError as e:
            self.error(f"Invalid depth: {e.message}", e)
            graph.clear()
            return

        enumerator = TreeCombinationEnumerator(graph, OutputMode.TRACE, window)
        for trace in enumerator:
            line = " ".join(str(label) for label in trace)
            if source_file.add_trace(line) and self.show_traces:
                self.info(f"Generated: {line}")
        logger.debug(
            "%s: %d combinations, %d traces before deduplication",
            source_file,
            enumerator.stats.combinations,
            enumerator.stats.emitted,
        )

        self.info(f"Generated {len(source_file.traces)} traces")

        try:
            source_file.write()
        except TraceGenError as e:
            self.error(f"Failed to write traces: {e.message}", e)

        graph.clear()

    def _resolve_window(self) -> DepthWindow | None:
        if self.depth_window is None or isinstance(self.depth_window, DepthWindow):
            return self.depth_window
        min_depth, max_depth = self.depth_window
        return DepthWindow.from_bounds(min_depth, max_depth)


@dataclass
class PipelineResult:
    """Outcome of running the pipeline on one source file."""

    path: Path
    trace_count: int
    traces_path: Path | None
    traces: list[str] = field(default_factory=list)
    errors: list[PhaseMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "trace_count": self.trace_count,
            "traces_path": str(self.traces_path) if self.traces_path else None,
            "traces": self.traces,
            "errors": [error.to_dict() for error in self.errors],
        }


class Pipeline:
    """Runs every phase, in order, over each source file.

    A file stops advancing once a phase reports an error for it; the
    remaining files are still processed.
    """

    phase_order: tuple[type[Phase], ...] = (ParseFile, GenerateCombinations)

    def __init__(
        self,
        listener: PhaseListener | None = None,
        depth_window: DepthBounds = None,
        show_traces: bool = False,
        traces_suffix: str = TRACES_SUFFIX,
    ) -> None:
        self.listener = listener or PhaseListener()
        self.traces_suffix = traces_suffix
        self.phases: dict[type[Phase], Phase] = {
            ParseFile: ParseFile(self.listener),
            GenerateCombinations: GenerateCombinations(
                self.listener, depth_window=depth_window, show_traces=show_traces
            ),
        }

    def next_phase_for(self, source_file: SourceFile) -> Phase | None:
        """The first phase ``source_file`` has not completed, or None when done."""
        for phase_type in self.phase_order:
            if not source_file.has_been_completed_by(phase_type):
                return self.phases[phase_type]
        return None

    def process(self, source_file: SourceFile) -> PipelineResult:
        error_count = len(self.listener.errors_for(source_file))
        phase = self.next_phase_for(source_file)
        while phase is not None:
            phase.execute(source_file)
            errors = self.listener.errors_for(source_file)
            if len(errors) > error_count:
                break
            phase = self.next_phase_for(source_file)

        errors = self.listener.errors_for(source_file)
        written = source_file.has_been_completed_by(GenerateCombinations) and not errors
        return PipelineResult(
            path=source_file.path,
            trace_count=len(source_file.traces),
            traces_path=source_file.traces_path if written else None,
            traces=source_file.traces,
            errors=errors,
        )

    def run(self, paths: Iterable[str | Path]) -> list[PipelineResult]:
        """Process each file in ``paths`` and return one result per file."""
        results = []
        for path in paths:
            source_file = SourceFile(path, traces_suffix=self.traces_suffix)
            results.append(self.process(source_file))
        return results


def _matches(path: Path, pattern: str) -> bool:
    return fnmatch.fnmatch(path.name.lower(), pattern.lower())


def _files_in(directory: Path, pattern: str) -> list[Path]:
    return sorted(
        (entry for entry in directory.iterdir() if entry.is_file() and _matches(entry, pattern)),
        key=lambda entry: entry.name,
    )


def discover_sources(
    paths: Sequence[str | Path],
    include: Sequence[str | Path] = (".",),
    pattern: str = "*.dot",
) -> list[Path]:
    """Expand files and directories into the DOT files to process.

    Relative paths are looked up under each include directory in turn.
    Directories contribute their matching files (not recursively). With
    no ``paths``, the include directories themselves are scanned. The
    result is deduplicated and keeps first-seen order.
    """
    if not paths:
        candidates = [Path(prefix) for prefix in include]
    else:
        candidates = []
        for path in paths:
            path = Path(path)
            if path.is_absolute():
                candidates.append(path)
            else:
                candidates.extend(Path(prefix) / path for prefix in include)

    found: dict[Path, None] = {}
    for candidate in candidates:
        if candidate.is_dir():
            for entry in _files_in(candidate, pattern):
                found.setdefault(entry, None)
        elif candidate.is_file():
            found.setdefault(candidate, None)

    for path in paths:
        if not any(_is_under(match, path, include) for match in found):
            logger.warning("No graph files found for %s", path)

    return list(found)


def _is_under(match: Path, requested: str | Path, include: Sequence[str | Path]) -> bool:
    requested = Path(requested)
    roots = [requested] if requested.is_absolute() else [Path(p) / requested for p in include]
    return any(match == root or root in match.parents for root in roots)
