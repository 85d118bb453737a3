"""
Logging configuration for rebarCAD applications.

The library modules only create loggers with ``logging.getLogger(__name__)``;
nothing is printed unless an application configures logging.  The command
line tool calls :func:`configure` once at start up.
"""

import logging
import sys
from typing import Optional


def configure(debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure console (and optionally file) logging for the ``rebarcad`` loggers.

    Args:
        debug: If True, log DEBUG records, otherwise INFO and above
        log_file: Optional path of a file receiving the same records with
                  timestamps

    Returns:
        The configured ``rebarcad`` package logger
    """
    level = logging.DEBUG if debug else logging.INFO
    logger = logging.getLogger("rebarcad")
    logger.setLevel(level)

    # Clear any handlers from an earlier call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    if debug:
        console_formatter = logging.Formatter('%(name)s - %(levelname)s: %(message)s')
    else:
        console_formatter = logging.Formatter('%(levelname)s: %(message)s')
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a logger for a module, optionally with its own level.

    Args:
        name: Logger name, typically __name__
        level: Optional specific level for this logger
    """
    logger = logging.getLogger(name)
    if level:
        logger.setLevel(level)
    return logger


__all__ = ["configure", "get_logger"]
