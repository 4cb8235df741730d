"""Exception hierarchy for tracegen.

Every tracegen error carries:
- error_code: a unique ErrorCode for programmatic handling
- context: ErrorContext with source file, phase and position details
- suggestions: actionable steps to resolve the issue

Example:
    try:
        pipeline.run(["graphs/login.dot"])
    except TraceGenError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for tracegen.

    Error codes are organized by category:
    - E1xx: Enumeration errors (depth window)
    - E2xx: Configuration errors
    - E3xx: Parsing errors
    - E4xx: Source file and pipeline errors
    - E9xx: Unknown/internal errors
    """

    # Enumeration errors (E1xx)
    INVALID_MINIMUM_DEPTH = "E101"
    INVALID_MAXIMUM_DEPTH = "E102"

    # Configuration errors (E2xx)
    INVALID_CONFIG = "E201"

    # Parsing errors (E3xx)
    PARSE_FAILED = "E301"
    SYNTAX_ERROR = "E302"

    # Source file / pipeline errors (E4xx)
    SOURCE_NOT_FOUND = "E401"
    TRACE_WRITE_FAILED = "E402"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "enumeration"
        elif code_num < 300:
            return "config"
        elif code_num < 400:
            return "parsing"
        elif code_num < 500:
            return "pipeline"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context attached to an error.

    Attributes:
        source_path: Path of the graph file being processed.
        phase_name: Name of the pipeline phase that failed.
        line: 1-based line in the source file, if known.
        column: 1-based column in the source file, if known.
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    source_path: str | None = None
    phase_name: str | None = None
    line: int | None = None
    column: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "source_path": self.source_path,
            "phase_name": self.phase_name,
            "line": self.line,
            "column": self.column,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.source_path:
            position = self.source_path
            if self.line is not None:
                position += f":{self.line}"
                if self.column is not None:
                    position += f":{self.column}"
            parts.append(position)
        elif self.line is not None:
            parts.append(f"line {self.line}")
        if self.phase_name:
            parts.append(f"phase={self.phase_name}")
        return " > ".join(parts) if parts else "unknown location"


class TraceGenError(Exception):
    """Base exception for all tracegen errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}]: {self.message}",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.cause is not None:
            lines.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class DepthBound(Enum):
    """Which end of a depth window was rejected."""

    MINIMUM = "minimum"
    MAXIMUM = "maximum"


class InvalidDepthError(TraceGenError):
    """A depth window was requested with a negative bound.

    Raised before any enumeration work begins. The ``bound`` attribute
    tells which argument was rejected and ``value`` holds the argument as
    the caller supplied it (before min/max normalization).
    """

    error_code = ErrorCode.INVALID_MINIMUM_DEPTH
    default_suggestions = [
        "Depth bounds count expansion levels from the root and start at 1",
        "Omit both --min and --max to enumerate without a depth window",
    ]

    def __init__(self, bound: DepthBound, value: int, **kwargs: Any) -> None:
        self.bound = bound
        self.value = value
        kwargs.setdefault(
            "error_code",
            ErrorCode.INVALID_MINIMUM_DEPTH
            if bound is DepthBound.MINIMUM
            else ErrorCode.INVALID_MAXIMUM_DEPTH,
        )
        super().__init__(message=f"Invalid {bound.value} depth: {value}", **kwargs)


class ConfigValidationError(TraceGenError):
    """Configuration value failed validation."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check tracegen.yaml for typos in option names",
        "Environment variables use the TRACEGEN_ prefix",
    ]

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message=message, **kwargs)
        if field is not None:
            self.context.extra["field"] = field


class ParseError(TraceGenError):
    """A graph description could not be read."""

    error_code = ErrorCode.PARSE_FAILED
    default_message = "Failed to parse graph description"
    default_suggestions = [
        "Render the file with 'dot -Tsvg' to check that Graphviz accepts it",
    ]


class DotSyntaxError(ParseError):
    """Malformed DOT input."""

    error_code = ErrorCode.SYNTAX_ERROR
    default_message = "DOT syntax error"

    def __init__(
        self,
        message: str | None = None,
        line: int | None = None,
        column: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message=message, **kwargs)
        self.context.line = line
        self.context.column = column


class SourceFileError(TraceGenError):
    """A source graph file could not be opened."""

    error_code = ErrorCode.SOURCE_NOT_FOUND
    default_message = "Source file not found"
    default_suggestions = [
        "Check the path, or the --include directories used for discovery",
    ]


class TraceWriteError(TraceGenError):
    """Generated traces could not be written."""

    error_code = ErrorCode.TRACE_WRITE_FAILED
    default_message = "Failed to write traces file"
    default_suggestions = [
        "Make sure the directory holding the graph file is writable",
    ]
