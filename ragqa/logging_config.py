"""
structlog setup for the knowledge base service.
Console output in development, one JSON object per line when LOG_JSON=true.
"""
import logging
import sys

import structlog

from . import config

# Client libraries that log every HTTP request at INFO
NOISY_LOGGERS = ("httpx", "openai", "urllib3")


def _renderer(json_logs: bool):
    if json_logs:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stdout.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def setup_logging(log_level: str = "INFO", json_logs: bool = False):
    """Configure structlog and the stdlib root logger; return the shared logger."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    # uvicorn and sqlalchemy log through stdlib onto the same stream
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            *_renderer(json_logs),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
    return structlog.get_logger("ragqa")


logger = setup_logging(log_level=config.LOG_LEVEL, json_logs=config.LOG_JSON)
