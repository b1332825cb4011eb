"""structlog setup for the cloudmap CLI.

Log lines always go to stderr; stdout carries only command output, so a
rendered relationship tree can be piped without log noise in it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

LOG_FORMATS = ("json", "console")


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # Resolved per logger so a redirected sys.stderr is honoured.
    return structlog.PrintLogger(file=sys.stderr)


def _renderer(fmt: str) -> structlog.typing.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    if fmt == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    raise ValueError(f"Unknown log format: {fmt}. Must be one of {LOG_FORMATS}")


def build_processors(fmt: str = "json") -> list[structlog.typing.Processor]:
    """Processor chain ending in the renderer for *fmt*."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
        structlog.processors.format_exc_info,
        _renderer(fmt),
    ]


def setup_logging(level: str = "warning", fmt: str = "json") -> None:
    """Route cloudmap events at or above *level* to stderr, rendered as *fmt*."""
    threshold = logging.getLevelNamesMapping().get(level.upper())
    if threshold is None:
        raise ValueError(f"Unknown log level: {level}")

    structlog.configure(
        processors=build_processors(fmt),
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(component: str) -> structlog.typing.FilteringBoundLogger:
    """Logger carrying ``component=<component>`` on every event."""
    return structlog.get_logger(component=component)  # type: ignore[no-any-return]
