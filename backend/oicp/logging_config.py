"""
Structlog setup for the OICP command line.

Library modules only call structlog.get_logger("oicp.<module>"); the entry
point calls configure() once. Records go through stdlib logging to stderr
because stdout carries the evaluation results: JSON lines when redirected,
a console renderer when attached to a terminal.
"""
import logging
import os
import sys
from typing import Optional, TextIO

import structlog

LOG_LEVEL_ENV = "OICP_LOG_LEVEL"

_PRE_CHAIN = (
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
)


def resolve_level(log_level: Optional[str] = None) -> int:
    """Explicit level, else $OICP_LOG_LEVEL, else INFO; unknown names -> INFO."""
    name = (log_level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _handler(stream: TextIO) -> logging.Handler:
    renderer = (
        structlog.dev.ConsoleRenderer(colors=False)
        if stream.isatty()
        else structlog.processors.JSONRenderer(ensure_ascii=False)
    )
    handler = logging.StreamHandler(stream)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=list(_PRE_CHAIN),
    ))
    return handler


def configure(log_level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """
    Route structlog and stdlib records to ``stream`` (stderr by default).

    Replaces any handler already on the root logger, so calling it again
    switches level or destination.
    """
    structlog.configure(
        processors=[*_PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_handler(stream or sys.stderr))
    root.setLevel(resolve_level(log_level))
