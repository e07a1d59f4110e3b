"""Logging configuration for netprobe."""
from __future__ import annotations

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: Optional[str] = None) -> int:
    """
    Configure application-wide logging on stderr via ``rich``.

    *level* wins over the ``NETPROBE_LOG_LEVEL`` environment variable;
    unknown names fall back to WARNING so probe chatter stays out of the
    results display.  Returns the level that was applied.

    Examples::

        $ NETPROBE_LOG_LEVEL=DEBUG netprobe
        $ netprobe --verbose
    """
    name = (level or os.environ.get("NETPROBE_LOG_LEVEL", "WARNING")).upper()
    log_level = _LEVELS.get(name, logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s", logging.getLevelName(log_level)
    )
    return log_level
