"""A graph source file moving through the pipeline phases."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from tracegen.core.graph import DirectedGraph
from tracegen.errors import ErrorContext, SourceFileError, TraceWriteError

if TYPE_CHECKING:
    from tracegen.pipeline.phases import Phase

logger = logging.getLogger(__name__)

TRACES_SUFFIX = ".traces"


class SourceFile:
    """One DOT file, its parsed graph, and the traces generated from it.

    Traces are kept in first-seen order and written one per line to
    ``<path>.traces``.

    Attributes:
        path: Location of the DOT file.
        graph: Graph produced by the parse phase, or None before parsing.
        last_completed_phase: Class of the most recently completed phase.
    """

    def __init__(self, path: str | Path, traces_suffix: str = TRACES_SUFFIX) -> None:
        self.path = Path(path)
        self.traces_suffix = traces_suffix
        self.graph: DirectedGraph | None = None
        self.last_completed_phase: type[Phase] | None = None
        self._traces: dict[str, None] = {}
        self._completed: dict[type[Phase], None] = {}

    def __repr__(self) -> str:
        return f"SourceFile({str(self.path)!r}, traces={len(self._traces)})"

    def __str__(self) -> str:
        return str(self.path)

    @property
    def traces(self) -> list[str]:
        return list(self._traces)

    @property
    def traces_path(self) -> Path:
        return self.path.with_name(self.path.name + self.traces_suffix)

    @property
    def completed_phases(self) -> list[type[Phase]]:
        return list(self._completed)

    def add_trace(self, trace: str) -> bool:
        """Record ``trace``. Returns True if it had not been seen before."""
        if trace in self._traces:
            return False
        self._traces[trace] = None
        return True

    def read_text(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise SourceFileError(
                message=f"Cannot read {self.path}: {e.strerror or e}",
                context=ErrorContext(source_path=str(self.path)),
                cause=e,
            ) from e

    def write(self) -> Path:
        """Write every trace, one per line, to :attr:`traces_path`.

        Raises:
            TraceWriteError: If the file cannot be written.
        """
        target = self.traces_path
        try:
            with open(target, "w", encoding="utf-8") as f:
                for trace in self._traces:
                    f.write(trace + "\n")
        except OSError as e:
            raise TraceWriteError(
                message=f"Cannot write {target}: {e.strerror or e}",
                context=ErrorContext(source_path=str(self.path)),
                cause=e,
            ) from e
        logger.debug("Wrote %d traces to %s", len(self._traces), target)
        return target

    def mark_completed(self, phase: Phase) -> None:
        phase_type = type(phase)
        if phase_type not in self._completed:
            self._completed[phase_type] = None
            self.last_completed_phase = phase_type

    def has_been_completed_by(self, phase: Phase | type[Phase]) -> bool:
        phase_type = phase if isinstance(phase, type) else type(phase)
        return phase_type in self._completed
