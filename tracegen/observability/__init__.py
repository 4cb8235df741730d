"""Logging support for tracegen."""

from tracegen.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    StructuredLogger,
    configure_logging,
    get_context,
    get_logger,
    log_context,
)

__all__ = [
    "HumanReadableFormatter",
    "StructuredFormatter",
    "StructuredLogger",
    "configure_logging",
    "get_context",
    "get_logger",
    "log_context",
]
