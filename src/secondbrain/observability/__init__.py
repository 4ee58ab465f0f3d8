"""Diagnostic logging configuration."""

from secondbrain.observability.logging import (
    LoggingConfig,
    LoggingHandle,
    configure_logging,
    parse_log_level,
)

__all__ = ["LoggingConfig", "LoggingHandle", "configure_logging", "parse_log_level"]
