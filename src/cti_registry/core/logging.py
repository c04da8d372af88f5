"""Logging configuration for the registry service."""

from __future__ import annotations

import logging
import logging.config

from cti_registry.core.settings import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Apply the console logging configuration.

    Args:
        level: Log level name; defaults to ``settings.log_level``.
    """
    resolved = (level or settings.log_level).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "cti_registry": {
                    "handlers": ["console"],
                    "level": resolved,
                    "propagate": False,
                },
                "sqlalchemy.engine": {
                    "handlers": ["console"],
                    "level": "INFO" if settings.sql_debug else "WARNING",
                    "propagate": False,
                },
            },
        }
    )
    logging.getLogger(__name__).debug("Logging configured at level %s", resolved)
