import logging
import sys

import structlog

from .config import settings


def configure_logging(level: str = None, log_format: str = None) -> None:
    """Configure structlog on top of the stdlib logging module."""
    level = (level or settings.LOG_LEVEL).upper()
    log_format = (log_format or settings.LOG_FORMAT).lower()

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
