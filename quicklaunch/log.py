"""Logging setup for the application index."""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def level_from_name(name: Optional[str]) -> int:
    """Map a configured level name to a logging level (unknown names mean INFO)."""
    return LEVELS.get((name or "").strip().lower(), logging.INFO)


def configure_logging(level: str = "info", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger once for the running process.

    Args:
        level: Level name ("error", "warn", "info" or "debug")
        log_file: Optional file to log to in addition to the console

    Returns:
        The package logger, to be handed to the index controller
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        except OSError as e:
            logging.getLogger(__name__).warning("Cannot log to %s: %s", log_file, e)

    logging.basicConfig(level=level_from_name(level), format=LOG_FORMAT, handlers=handlers, force=True)
    return logging.getLogger("quicklaunch")
