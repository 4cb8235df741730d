"""Structured logging for tracegen.

Library modules log through ``logging.getLogger(__name__)``, which places
them under the ``tracegen`` logger. :func:`configure_logging` attaches a
single stderr handler there, so stdout stays free for generated traces
and ``--format json`` output.

Example:
    Key-value data::

        from tracegen.observability.logging import get_logger

        logger = get_logger("tracegen.cli")
        logger.info("Traces written", path="login.dot.traces", count=12)

    With context::

        with log_context(source="login.dot", phase="GenerateCombinations"):
            logger.info("Enumerating")  # Includes source and phase
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, TextIO

ROOT_LOGGER_NAME = "tracegen"

_context_fields: ContextVar[dict[str, Any] | None] = ContextVar("tracegen_log_context", default=None)


class StructuredFormatter(logging.Formatter):
    """JSON formatter, one object per record.

    Attributes:
        include_location: Whether to include file/line/function in output.
    """

    def __init__(
        self,
        include_location: bool = False,
    ) -> None:
        super().__init__()
        self.include_location = include_location

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
            "logger": record.name,
        }

        if self.include_location:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        context = _context_fields.get()
        if context:
            log_data["context"] = dict(context)

        structured_data = getattr(record, "structured_data", None)
        if structured_data:
            log_data["data"] = dict(structured_data)

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str, ensure_ascii=False)


class HumanReadableFormatter(logging.Formatter):
    """Colored single-line console formatter."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream: TextIO | None = None) -> None:
        super().__init__()
        self.use_colors = use_colors and self._supports_color(stream or sys.stderr)

    @staticmethod
    def _supports_color(stream: TextIO) -> bool:
        if os.environ.get("NO_COLOR"):
            return False
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            level = f"{color}{record.levelname:8}{self.RESET}"
        else:
            level = f"{record.levelname:8}"

        base = f"{timestamp} {level} [{record.name}] {record.getMessage()}"

        context = _context_fields.get()
        if context:
            base += " | " + " ".join(f"{key}={value}" for key, value in context.items())

        structured_data = getattr(record, "structured_data", None)
        if structured_data:
            base += f" | data={json.dumps(structured_data, default=str)}"

        if record.exc_info:
            base += f"\n{self.formatException(record.exc_info)}"

        return base


class StructuredLogger:
    """Logger whose methods accept key-value data.

    Records go through the standard ``logging`` tree, so they reach
    whatever handler :func:`configure_logging` installed.

    Example:
        >>> logger = StructuredLogger("tracegen.pipeline")
        >>> logger.info("Traces written", count=12)
    """

    def __init__(self, name: str, fields: dict[str, Any] | None = None) -> None:
        self.name = name
        self._logger = logging.getLogger(name)
        self._fields = fields or {}

    def _log(self, level: int, message: str, exc_info: Any = None, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        record = self._logger.makeRecord(
            self.name,
            level,
            "",
            0,
            message,
            (),
            exc_info,
        )
        record.structured_data = {**self._fields, **kwargs}  # type: ignore[attr-defined]
        self._logger.handle(record)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log at ERROR level with the active exception's traceback."""
        self._log(logging.ERROR, message, exc_info=sys.exc_info(), **kwargs)

    def log(self, level: int | str, message: str, **kwargs: Any) -> None:
        self._log(_coerce_level(level), message, **kwargs)

    def bind(self, **kwargs: Any) -> StructuredLogger:
        """Return a logger that adds ``kwargs`` to every record."""
        return StructuredLogger(self.name, {**self._fields, **kwargs})


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    """Get a structured logger for ``name``."""
    return StructuredLogger(name)


def json_logs_from_env() -> bool:
    return os.environ.get("TRACEGEN_JSON_LOGS", "false").lower() in ("true", "1", "yes")


def configure_logging(
    level: int | str = logging.WARNING,
    json_format: bool | None = None,
    include_location: bool = False,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install the tracegen handler on the ``tracegen`` logger.

    Args:
        level: Minimum log level.
        json_format: Emit JSON records. If None, uses TRACEGEN_JSON_LOGS.
        include_location: Include file/line/function in JSON output.
        stream: Output stream (defaults to sys.stderr).

    Returns:
        The configured ``tracegen`` logger.
    """
    if json_format is None:
        json_format = json_logs_from_env()
    level = _coerce_level(level)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(StructuredFormatter(include_location=include_location))
    else:
        handler.setFormatter(HumanReadableFormatter(stream=stream))

    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return root_logger


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Add fields to every record logged inside the block."""
    current = dict(_context_fields.get() or {})
    current.update(kwargs)
    token = _context_fields.set(current)
    try:
        yield
    finally:
        _context_fields.reset(token)


def get_context() -> dict[str, Any]:
    """Copy of the current logging context."""
    return dict(_context_fields.get() or {})
