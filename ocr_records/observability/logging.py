"""
Logging setup for the API, CLI and tests.

Records go through stdlib logging so uvicorn and library messages share one
stream with the structlog events emitted by the upload pipeline and stores.
"""

import logging
import sys
import uuid
from functools import lru_cache

import structlog

from ocr_records.config import get_settings

# Libraries that log every decoded chunk or connection at DEBUG
_CHATTY_LOGGERS = ("PIL", "urllib3", "multipart", "python_multipart")


def _renderer(log_format: str, stream):
    if log_format == "json":
        return [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=stream.isatty())]


def setup_logging(settings=None, log_level: str = None, log_format: str = None):
    """
    Configure structlog and the root logger from settings.

    Args:
        settings: Settings whose log_level and log_format apply (global settings if omitted)
        log_level: Overrides settings.log_level
        log_format: Overrides settings.log_format ('json' or 'console')

    Safe to call more than once; the last call wins.
    """
    settings = settings or get_settings()
    level = logging.getLevelName((log_level or settings.log_level).upper())
    fmt = log_format or settings.log_format
    stream = sys.stdout

    logging.basicConfig(format="%(message)s", stream=stream, level=level, force=True)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderer(fmt, stream),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level loggers must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )


@lru_cache()
def get_logger(name: str = None):
    return structlog.get_logger(name)


def bind_request_context(request_id: str = None, **kwargs) -> str:
    """Start a fresh log context for one request and return its id."""
    structlog.contextvars.clear_contextvars()
    request_id = request_id or uuid.uuid4().hex[:8]
    structlog.contextvars.bind_contextvars(request_id=request_id, **kwargs)
    return request_id
