"""Logging setup for the CLI.

Core modules log through `logging.getLogger(__name__)`. The CLI routes those
records to stderr through rich, keeping stdout for candidate lists and tables.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "storagegc"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure the `storagegc` logger (INFO, or DEBUG when verbose)."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("[%(name)s] %(message)s"))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False
    return logger
