"""
Logging configuration for the engine and the action scripts.

Engine modules log through ``logging.getLogger(__name__)`` and never configure
handlers themselves. Entry points (the scripts in ``actions/``) call
``setup_logging()`` exactly once at startup.
"""

import logging
import logging.config
import os

from src.config.settings import LoggingSettings


def build_logging_config(settings: LoggingSettings) -> dict:
    """
    Build a ``logging.config.dictConfig`` dictionary from settings.

    A console handler is always installed. When ``settings.log_file`` is set,
    a rotating file handler capturing DEBUG records is added as well.

    Args:
        settings: LoggingSettings with the level and optional log file path.

    Returns:
        Dictionary suitable for ``logging.config.dictConfig``.
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": settings.level,
        },
    }
    if settings.log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": settings.log_file,
            "maxBytes": 10_485_760,
            "backupCount": 5,
            "formatter": "standard",
            "level": "DEBUG",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "root": {
            "level": "DEBUG" if settings.log_file else settings.level,
            "handlers": list(handlers),
        },
    }


def setup_logging(settings: LoggingSettings | None = None) -> None:
    """Install handlers for the root logger (console, plus file if configured)."""
    if settings is None:
        settings = LoggingSettings.from_env()

    if settings.log_file:
        log_dir = os.path.dirname(settings.log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    logging.config.dictConfig(build_logging_config(settings))
