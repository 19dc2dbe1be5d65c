"""
Logging configuration for MVP Arena.

Every service logs event-style names ("bet_placed", "user_settled") with
keyword context. Output is one JSON object per line by default; set
LOG_FORMAT=console for a readable local view.
"""

import logging
import sys
from typing import List

import structlog
from structlog.stdlib import LoggerFactory

from src.core.config import Config


def _renderer(log_format: str):
    if log_format.lower() == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def build_processors(log_format: str) -> List:
    """Processor chain shared by every logger, ending in the chosen renderer."""
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _renderer(log_format),
    ]


def configure_logging() -> None:
    """Route structlog through stdlib logging on stderr at Config.LOG_LEVEL."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    )

    structlog.configure(
        processors=build_processors(Config.LOG_FORMAT),
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


configure_logging()
