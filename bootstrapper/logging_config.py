"""Structured logging configuration for the bootstrapper.

Console output renders one severity-tagged line per event, e.g.::

    [INFO] Copying template to new project directory
    [SUCCESS] Template copied path=/work/demo-api

Successes are ordinary info events bound with ``outcome="success"``; use
``log_success`` rather than binding it by hand. JSON output is available for
CI logs.

Usage:
    from bootstrapper.logging_config import get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Checking host dependencies")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Literal, TextIO

import structlog
from structlog.types import EventDict, Processor

RESET = "\033[0m"
TAG_COLORS = {
    "INFO": "\033[0;34m",
    "SUCCESS": "\033[0;32m",
    "WARNING": "\033[1;33m",
    "ERROR": "\033[0;31m",
    "DEBUG": "\033[0;37m",
}


class TaggedConsoleRenderer:
    """Render ``[TAG] message key=value ...`` lines."""

    def __init__(self, colors: bool = False) -> None:
        self._colors = colors

    def __call__(self, _logger: Any, _name: str, event_dict: EventDict) -> str:
        level = str(event_dict.pop("level", "info")).upper()
        if level == "CRITICAL":
            level = "ERROR"
        if event_dict.pop("outcome", None) == "success" and level == "INFO":
            level = "SUCCESS"
        event = str(event_dict.pop("event", ""))
        exc = event_dict.pop("exception", None)
        event_dict.pop("logger", None)
        event_dict.pop("timestamp", None)

        tag = f"[{level}]"
        if self._colors:
            tag = f"{TAG_COLORS.get(level, '')}{tag}{RESET}"

        parts = [tag, event]
        parts.extend(f"{k}={v}" for k, v in event_dict.items())
        line = " ".join(p for p in parts if p)
        if exc:
            line += "\n" + str(exc)
        return line


def setup_logging(
    log_format: Literal["json", "console"] | None = None,
    log_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        log_format: "console" for tagged lines, "json" for machine-readable
            output. Falls back to LOG_FORMAT env var or "console".
        log_level: DEBUG, INFO, WARNING or ERROR. Falls back to LOG_LEVEL env
            var or "INFO".
        stream: Output stream, stderr by default.
    """
    log_format = log_format or os.getenv("LOG_FORMAT", "console")  # type: ignore[assignment]
    log_level = log_level or os.getenv("LOG_LEVEL", "INFO")
    stream = stream or sys.stderr

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=numeric_level,
        force=True,
    )

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.insert(3, structlog.processors.TimeStamper(fmt="iso", utc=True))
        processors.append(structlog.processors.JSONRenderer(sort_keys=False))
    else:
        colors = hasattr(stream, "isatty") and stream.isatty() and "NO_COLOR" not in os.environ
        processors.append(TaggedConsoleRenderer(colors=colors))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure per invocation; cached loggers would keep stale processors.
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_success(logger: Any, event: str, **kw: Any) -> None:
    logger.info(event, outcome="success", **kw)
