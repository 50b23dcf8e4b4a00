"""Logging setup for the Recruiting Company API."""

import logging.config

from .config import settings


def setup_logging(level: str = None) -> None:
    """Configure the root logger with a single stream handler.

    Args:
        level: Log level name; defaults to ``settings.LOG_LEVEL``.
    """
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
        "loggers": {
            # SQL echo is controlled by DEBUG on the engine
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    })
