"""Logging setup for the todo backend."""

from __future__ import annotations

import logging

APP_LOGGER_NAME = "todo_api"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once and set the application logger level.

    Existing root handlers (e.g. installed by uvicorn or pytest) are left alone.
    """
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s level=%(levelname)s logger=%(name)s message="%(message)s"',
        )
    logging.getLogger(APP_LOGGER_NAME).setLevel(level)
