"""Phases that turn DOT files into traces files."""

from tracegen.pipeline.phases import (
    GenerateCombinations,
    MessageLevel,
    ParseFile,
    Phase,
    PhaseListener,
    PhaseMessage,
    Pipeline,
    PipelineResult,
    discover_sources,
)
from tracegen.pipeline.source import TRACES_SUFFIX, SourceFile

__all__ = [
    "GenerateCombinations",
    "MessageLevel",
    "ParseFile",
    "Phase",
    "PhaseListener",
    "PhaseMessage",
    "Pipeline",
    "PipelineResult",
    "SourceFile",
    "TRACES_SUFFIX",
    "discover_sources",
]
