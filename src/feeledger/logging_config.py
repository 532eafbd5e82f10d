"""Logging configuration for the feeledger command line.

Level comes from the --log-level option or the LOG_LEVEL environment
variable. Default: WARNING, so command output stays readable; INFO shows
every recorded payment and status change.
"""

import logging
import os
import sys

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name, falling back to LOG_LEVEL and then WARNING."""
    level_str = (level_name or os.getenv("LOG_LEVEL", "WARNING")).upper()
    return LOG_LEVEL_MAP.get(level_str, logging.WARNING)


def setup_logging(level_name: str | None = None) -> None:
    """Configure the root logger with a single stderr handler."""
    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log_level = get_log_level(level_name)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove any existing handlers to avoid duplicates
    for handler in list(root_logger.handlers):
        if getattr(handler, "_feeledger", False):
            root_logger.removeHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(log_level)
    stderr_handler.setFormatter(formatter)
    stderr_handler._feeledger = True
    root_logger.addHandler(stderr_handler)
