"""structlog configuration shared by the app and scripts."""

import logging

import structlog
from structlog.contextvars import merge_contextvars

from microguide.config import get_settings


def configure_logging() -> None:
    """Route stdlib logging and structlog through one renderer."""
    settings = get_settings()
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
