"""Configuration for tracegen."""

from tracegen.config.settings import DEFAULT_INCLUDE_PATHS, TraceGenConfig, load_config

__all__ = ["DEFAULT_INCLUDE_PATHS", "TraceGenConfig", "load_config"]
