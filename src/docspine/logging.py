"""
Structured logging for docspine.

Manifesto:
    A documentation build touches hundreds of files and runs a multi-stage
    resolution pass. Logs should say which file was being parsed and which
    stage took how long, in a shape machines can read:

    - **Structures:** JSON output when piped, colored console on a tty
    - **Correlates:** the current ``file`` is bound through contextvars
    - **Times:** every resolution stage logs ``stage_completed`` with
      ``duration_ms``

Architecture:
    ::

        configure_logging(level, json_format)
              │
              ▼
        structlog processor chain:
          1. TimeStamper(iso)
          2. merge_contextvars   (file=..., stage=...)
          3. add_log_level
          4. JSONRenderer | ConsoleRenderer

        logger = get_logger(__name__)
        with log_stage("hierarchy", records=120) as timer:
            ...
        # DEBUG stage_started   stage=hierarchy
        # INFO  stage_completed stage=hierarchy duration_ms=1.84 records=120

Examples:
    >>> from docspine.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> get_logger(__name__).info("parsing_file", file="lib/ajax.js")

Tags:
    logging, structlog, observability, timing, docspine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog
from structlog._config import BoundLoggerLazyProxy
from structlog.types import Processor

LOG_LEVEL_ENV = "DOCSPINE_LOG_LEVEL"


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for docspine.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Falls back to
            ``DOCSPINE_LOG_LEVEL`` and then to WARNING.
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        add_timestamp: Include ISO timestamp in logs
    """
    level = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    numeric_level = getattr(logging, level, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    if json_format is None:
        json_format = not sys.stderr.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    The name is bound as the ``logger`` key. ``PrintLogger`` carries no
    name of its own, so ``add_logger_name`` cannot supply it.

    Args:
        name: Logger name (usually __name__)
    """
    if name is None:
        return structlog.get_logger()
    return BoundLoggerLazyProxy(None, initial_values={"logger": name}, logger_factory_args=())


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(file="lib/ajax.js")
        logger.info("parsing_file")  # Includes file
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(file="lib/ajax.js", parser=".js"):
            logger.info("parsing_file")
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


@dataclass
class StageTimer:
    """Timing for one resolution stage."""

    stage: str
    started_at: float = field(default_factory=time.perf_counter)
    ended_at: float | None = None
    metrics: dict[str, Any] = field(default_factory=dict)

    def stop(self) -> StageTimer:
        self.ended_at = time.perf_counter()
        return self

    @property
    def duration_ms(self) -> float:
        end = self.ended_at if self.ended_at is not None else time.perf_counter()
        return (end - self.started_at) * 1000

    def add_metric(self, key: str, value: Any) -> StageTimer:
        """Add a metric to include in the completion log."""
        self.metrics[key] = value
        return self

    def to_log_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"stage": self.stage, "duration_ms": round(self.duration_ms, 2)}
        result.update(self.metrics)
        return result


@contextmanager
def log_stage(stage: str, **extra_metrics: Any) -> Iterator[StageTimer]:
    """
    Log a named stage with its duration.

    Logs ``stage_started`` at DEBUG and ``stage_completed`` at INFO with
    ``duration_ms``. On an exception, logs ``stage_failed`` and re-raises.

    Usage:
        with log_stage("inheritance", classes=12) as timer:
            merged = resolver.run()
            timer.add_metric("merged", merged)
    """
    log = get_logger("docspine.timing")
    timer = StageTimer(stage=stage, metrics=dict(extra_metrics))
    log.debug("stage_started", stage=stage, **extra_metrics)
    try:
        yield timer
    except Exception as e:
        timer.stop()
        log.error("stage_failed", error_type=type(e).__name__, error=str(e), **timer.to_log_dict())
        raise
    timer.stop()
    log.info("stage_completed", **timer.to_log_dict())


__all__ = [
    "LOG_LEVEL_ENV",
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    "StageTimer",
    "log_stage",
]
