"""
Logging configuration for PdfQuill.

Library modules only create module loggers (``logging.getLogger(__name__)``);
applications opt in to output by calling ``configure_logging``.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance for module.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if not name or not isinstance(name, str):
        raise ValueError("Logger name must be a non-empty string")
    return logging.getLogger(name)


def _level(level: str) -> int:
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ValueError(f"Invalid log level: {level}")
    return getattr(logging, level.upper())


def configure_logging(level: str = "INFO", rich: bool = True, log_file: Optional[str] = None,
                      max_file_size: int = 10 * 1024 * 1024, backup_count: int = 5,
                      console: Optional[Console] = None) -> logging.Logger:
    """
    Configure logging for the ``pdfquill`` package.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rich: Use a rich console handler instead of a plain stream handler
        log_file: Optional log file path (rotated)
        max_file_size: Maximum log file size in bytes
        backup_count: Number of backup files to keep
        console: Console for the rich handler (defaults to stderr)

    Returns:
        The configured package logger
    """
    numeric = _level(level)
    logger = logging.getLogger("pdfquill")
    logger.setLevel(numeric)
    logger.handlers.clear()

    if rich:
        handler: logging.Handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=True,
            show_path=True,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
    handler.setLevel(numeric)
    logger.addHandler(handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        file_handler = RotatingFileHandler(log_file, maxBytes=max_file_size, backupCount=backup_count)
        file_handler.setLevel(numeric)
        file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT))
        logger.addHandler(file_handler)

    return logger
