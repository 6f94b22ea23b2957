"""
Structured logging configuration using structlog.

Masking sessions bind their id into the structlog context so that every event
emitted while serving a session (alignment misses, dropped history pushes)
can be correlated without threading the id through the core.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog

from .config import settings


def setup_logging() -> None:
    """
    Configure structlog for the masking service.

    Processor chain: contextvars merge, log level, stack info, exception
    info, ISO timestamp, then JSON or console rendering based on settings.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (
                structlog.processors.JSONRenderer()
                if settings.log_json
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


@contextmanager
def session_log_context(session_id: str) -> Iterator[None]:
    """
    Bind a masking session id to every log event emitted inside the block.

    Args:
        session_id: Identifier of the masking session being served
    """
    with structlog.contextvars.bound_contextvars(session_id=session_id):
        yield
