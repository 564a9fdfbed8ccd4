"""Logging setup shared by the command line and embedding applications."""

from __future__ import annotations

import logging

from helpdesk_client.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(level: str | None = None, *, force: bool = False) -> str:
    """Configure the root logger once; returns the level name in effect."""
    level_name = (level or settings.LOG_LEVEL or "INFO").upper()
    if logging.getLogger().handlers and not force:
        return logging.getLevelName(logging.getLogger().level)

    logging.basicConfig(level=level_name, format=LOG_FORMAT, force=force)
    # transport libraries log every request at INFO
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level_name == "DEBUG" else logging.WARNING)
    return level_name
