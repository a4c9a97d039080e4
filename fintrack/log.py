"""
Structured Logging

Engine functions log what they filtered and aggregated at debug level;
the orchestrator logs every mutation. All of it goes through structlog
on top of the standard library logging module.
"""

import logging
import sys
from typing import Optional

import structlog

from fintrack.config import AppSettings


def configure_logging(settings: Optional[AppSettings] = None, force: bool = False) -> None:
    """
    Configure structlog once for the process.

    Subsequent calls are no-ops unless force is set.
    """
    if structlog.is_configured() and not force:
        return

    settings = settings or AppSettings()
    level = getattr(logging, settings.effective_log_level)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=force,
    )
    logging.getLogger("fintrack").setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

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
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger, configuring logging on first use."""
    configure_logging()
    return structlog.get_logger(name)
