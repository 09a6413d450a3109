"""Logging bootstrap for the Notelock service."""

from __future__ import annotations

import logging

from notelock.core.settings import Settings

LOG_FORMAT = "[%(name)s] %(asctime)s %(levelname)s : %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings.

    ``logging.basicConfig`` is a no-op once handlers exist, so repeated
    app construction (as in tests) keeps the first configuration.
    """
    level = logging.DEBUG if settings.debug else getattr(
        logging, settings.log_level.upper(), logging.INFO
    )
    logging.basicConfig(format=LOG_FORMAT, level=level)
