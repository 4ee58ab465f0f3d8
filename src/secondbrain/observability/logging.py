"""Diagnostic logging setup: structlog events routed through stdlib ``logging``.

File: src/secondbrain/observability/logging.py

Purpose
- Engine modules emit structured events with ``structlog.get_logger(__name__)``.
- ``configure_logging`` wires those events to stderr at the requested level and,
  optionally, to a JSON-lines file.

User-facing progress lines do not go through here; they are written by the CLI
renderer. Diagnostic events stay quiet (WARNING) unless asked for.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import structlog

_DEFAULT_LOGGER_NAME: Final[str] = "secondbrain"
_DEFAULT_LEVEL: Final[str] = "WARNING"
_LEVEL_NAMES: Final[frozenset[str]] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

_SHARED_PROCESSORS: Final[tuple[structlog.types.Processor, ...]] = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
)


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Configuration for diagnostic logging."""

    level: int | str = _DEFAULT_LEVEL
    log_file: Path | str | None = None
    logger_name: str = _DEFAULT_LOGGER_NAME
    log_to_stderr: bool = True


class LoggingHandle:
    """Handlers installed by ``configure_logging``; ``shutdown`` detaches them."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        handlers: tuple[logging.Handler, ...],
        log_path: Path | None,
    ) -> None:
        self.logger = logger
        self.log_path = log_path
        self._handlers = handlers

    def flush(self) -> None:
        for handler in self._handlers:
            handler.flush()

    def shutdown(self) -> None:
        for handler in self._handlers:
            handler.flush()
            self.logger.removeHandler(handler)
            handler.close()


def parse_log_level(level: int | str) -> int:
    if isinstance(level, bool):
        raise ValueError("log level must be a level name or integer")
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name not in _LEVEL_NAMES:
        raise ValueError(f"unknown log level: {level!r}")
    return int(logging.getLevelName(name))


def configure_logging(
    level: int | str = _DEFAULT_LEVEL,
    log_file: Path | str | None = None,
    *,
    config: LoggingConfig | None = None,
) -> LoggingHandle:
    """Route structlog events to stderr and optionally a JSON-lines file.

    Calling it again replaces the handlers installed by the previous call.
    """

    cfg = config if config is not None else LoggingConfig(level=level, log_file=log_file)
    numeric_level = parse_log_level(cfg.level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    logger = logging.getLogger(cfg.logger_name)
    logger.setLevel(numeric_level)
    logger.propagate = False
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    handlers: list[logging.Handler] = []
    if cfg.log_to_stderr:
        stderr_handler = logging.StreamHandler()
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(colors=False),
                ],
                foreign_pre_chain=list(_SHARED_PROCESSORS),
            )
        )
        handlers.append(stderr_handler)

    log_path: Path | None = None
    if cfg.log_file is not None:
        log_path = Path(cfg.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(sort_keys=True),
                ],
                foreign_pre_chain=list(_SHARED_PROCESSORS),
            )
        )
        handlers.append(file_handler)

    for handler in handlers:
        logger.addHandler(handler)

    return LoggingHandle(logger=logger, handlers=tuple(handlers), log_path=log_path)


__all__ = ["LoggingConfig", "LoggingHandle", "configure_logging", "parse_log_level"]
