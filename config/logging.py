"""
Logging setup — structlog over the stdlib logging module.

Every module logs through ``structlog.get_logger()`` with snake_case event
names and keyword context. Call ``configure_logging()`` once at startup;
without it structlog falls back to its default console output.
"""
from __future__ import annotations

import logging
import sys

import structlog

from config.settings import Settings, get_settings


def configure_logging(settings: Settings = None) -> None:
    settings = settings or get_settings()
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
