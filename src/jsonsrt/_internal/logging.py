"""Structured logging for the jsonsrt command line.

The kernel never logs; only the CLI driver reports per-file progress
(``file_canonicalized``, ``file_unchanged``, ``parse_failed``). Records
go to stderr so that canonical output on stdout stays clean.
"""

import logging
import sys
from typing import Any

import structlog
from structlog._config import BoundLoggerLazyProxy


def _renderer(json_output: bool) -> Any:
    if json_output:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "WARNING",
) -> None:
    """Configure structlog for one CLI invocation.

    Args:
        json_output: If True, emit one JSON object per line. If False,
            ``key=value`` console lines.
        level: Lowest level emitted (DEBUG, INFO, WARNING, ERROR).
    """
    processors: list[Any] = [structlog.processors.add_log_level]
    if json_output:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors.append(_renderer(json_output))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper())),
        context_class=dict,
        # Bound at configure time so a replaced sys.stderr is picked up
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Get a logger for a module; records carry the module name."""
    # structlog.get_logger(logger=...) collides with wrap_logger's own
    # ``logger`` parameter, so build the same lazy proxy directly.
    return BoundLoggerLazyProxy(None, initial_values={"logger": name}, logger_factory_args=())
