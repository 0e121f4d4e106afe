"""Central logging configuration.

Installs a single stdout handler on the root logger so every module logger
(``logging.getLogger(__name__)``) emits without per-module setup. uvicorn's
loggers share the same handler.
"""
import logging
from logging.config import dictConfig

from . import config


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging() -> None:
    """Configure logging once; no-op if the root logger already has handlers."""
    root = logging.getLogger()
    if root.handlers:
        return
    dictConfig(_dict_config(config.LOG_LEVEL))
