"""Configuration settings and loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from tracegen.core.enumerator import DepthWindow
from tracegen.errors import ConfigValidationError, ErrorContext

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE_PATHS = ["src/main/resources/dot_files", "."]


class TraceGenConfig(BaseSettings):
    """Configuration for tracegen."""

    model_config = SettingsConfigDict(
        env_prefix="TRACEGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    min_depth: int | None = Field(default=None, description="Smallest reported expansion depth")
    max_depth: int | None = Field(default=None, description="Largest expanded depth")
    include_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE_PATHS))
    file_pattern: str = "*.dot"
    traces_suffix: str = ".traces"
    show_traces: bool = False
    verbose: bool = False
    json_logs: bool = False

    @field_validator("min_depth", "max_depth", mode="before")
    @classmethod
    def validate_depth(cls, v: Any, info: Any) -> Any:
        if v is None or v == "":
            return None
        try:
            depth = int(v)
        except (TypeError, ValueError):
            raise ConfigValidationError(
                message=f"{info.field_name} must be an integer, got {v!r}",
                field=info.field_name,
                value=v,
            ) from None
        if depth < 0:
            raise ConfigValidationError(
                message=f"{info.field_name} must be non-negative, got {depth}",
                field=info.field_name,
                value=depth,
                context=ErrorContext(extra={"hint": "omit the option for unbounded depth"}),
            )
        return depth

    @field_validator("include_paths", mode="before")
    @classmethod
    def validate_include_paths(cls, v: Any) -> list[str]:
        if isinstance(v, str):
            return [p for p in v.split(":") if p] or ["."]
        return v

    @field_validator("traces_suffix")
    @classmethod
    def validate_traces_suffix(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v:
            raise ConfigValidationError(
                message=f"traces_suffix must be a plain file suffix, got {v!r}",
                field="traces_suffix",
                value=v,
            )
        return v

    def depth_window(self) -> DepthWindow | None:
        """The configured depth window, or None for unbounded enumeration.

        Both bounds are needed for a window; a lone bound is ignored.
        """
        if self.min_depth is None and self.max_depth is None:
            return None
        if self.min_depth is None or self.max_depth is None:
            logger.warning(
                "Only one depth bound configured (min=%s, max=%s); enumerating without a window",
                self.min_depth,
                self.max_depth,
            )
            return None
        return DepthWindow.from_bounds(self.min_depth, self.max_depth)


def load_config(config_path: str | Path | None = None) -> TraceGenConfig:
    """Load configuration from file and environment.

    Priority: CLI args > env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ConfigValidationError(
                    message=f"Configuration must be a YAML mapping, got {type(loaded).__name__}",
                    context=ErrorContext(source_path=str(config_path)),
                )
            config_data = loaded
        else:
            logger.warning("Config file %s not found, using defaults", config_path)

    config_data.update(_get_env_overrides())

    return TraceGenConfig(**config_data)


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "TRACEGEN_MIN_DEPTH": "min_depth",
        "TRACEGEN_MAX_DEPTH": "max_depth",
        "TRACEGEN_INCLUDE": "include_paths",
        "TRACEGEN_SHOW_TRACES": ("show_traces", lambda x: x.lower() in ("true", "1", "yes")),
        "TRACEGEN_VERBOSE": ("verbose", lambda x: x.lower() in ("true", "1", "yes")),
        "TRACEGEN_JSON_LOGS": ("json_logs", lambda x: x.lower() in ("true", "1", "yes")),
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                overrides[key] = converter(value)
            else:
                overrides[config_key] = value

    return overrides
