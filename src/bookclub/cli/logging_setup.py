# ABOUTME: Logging configuration for the Bookclub CLI.
# ABOUTME: Routes the bookclub logger through a rich handler on stderr.

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(log_level: str = "WARNING") -> logging.Logger:
    """Configure the bookclub logger for console output.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR).

    Returns:
        The bookclub package logger.
    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    logger = logging.getLogger("bookclub")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger
