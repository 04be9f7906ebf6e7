"""Utilities to configure logging from environment settings."""

from __future__ import annotations

import logging

from catalog.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, filename: str | None = None) -> None:
    """Apply the configured log level; write to ``filename`` when given."""

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if filename:
        logging.basicConfig(level=level, format=_FORMAT, filename=filename, force=True)
    else:
        logging.basicConfig(level=level, format=_FORMAT)
    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(level))
