"""Logging helpers shared across refgraph."""

from refgraph.utils.logging_config import LogLevel, resolve_log_level, setup_logging

__all__ = ["LogLevel", "resolve_log_level", "setup_logging"]
