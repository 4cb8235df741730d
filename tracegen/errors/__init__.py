"""tracegen error handling.

Exception hierarchy with error codes, structured context and
troubleshooting suggestions.
"""

from tracegen.errors.base import (
    ConfigValidationError,
    DepthBound,
    DotSyntaxError,
    ErrorCode,
    ErrorContext,
    InvalidDepthError,
    ParseError,
    SourceFileError,
    TraceGenError,
    TraceWriteError,
)

__all__ = [
    "ConfigValidationError",
    "DepthBound",
    "DotSyntaxError",
    "ErrorCode",
    "ErrorContext",
    "InvalidDepthError",
    "ParseError",
    "SourceFileError",
    "TraceGenError",
    "TraceWriteError",
]
