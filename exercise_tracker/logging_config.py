"""Logging setup for the Exercise Tracker service.

Infrastructure modules log through the standard library; the application
layer emits key/value events through structlog. Both end up on the root
logger, rendered as JSON or as console text depending on ``LOG_FORMAT``.
"""

import logging

import structlog

from .config import Config


def configure_logging(config: Config) -> None:
    """Configure stdlib logging and structlog from the service config."""
    logging.basicConfig(
        level=config.log_level,
        format="%(message)s" if config.log_format == "json" else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logging.getLogger().setLevel(config.log_level)

    # Reduce driver noise unless we are debugging SQL
    if config.log_level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    if config.log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=config.is_development())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
