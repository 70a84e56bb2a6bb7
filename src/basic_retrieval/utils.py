"""Utility functions for basic-retrieval."""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logging(
    env: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console: bool = True,
) -> None:  # pragma: no cover
    """
    Configure logging for the application.

    Args:
        env: The environment name (dev, test, user)
        log_level: The logging level to use
        log_file: Optional file to write logs to, rotated at 10 MB
        console: Whether to log to stderr
    """
    # Tests configure their own capture
    if env == "test":
        return

    logger.remove()

    if console:
        logger.add(sys.stderr, level=log_level, backtrace=True, diagnose=True, colorize=True)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=True,
            enqueue=True,
            colorize=False,
        )

    logger.info(f"ENV: '{env}' Log level: '{log_level}' Logging to {log_file}")
