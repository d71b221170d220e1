"""
Logging configuration for the statement converter.

Log records go to stderr by default: the converter may write ledger text to
stdout, and the two must not interleave.
"""
import logging
import os
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str, level: Optional[str] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure and return a logger instance.

    Args:
        name: Logger name (usually __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env LOG_LEVEL or INFO.
        stream: Handler stream, stderr when omitted

    Returns:
        Configured logger instance
    """
    log_level = getattr(logging, (level or os.getenv("LOG_LEVEL", "INFO")).upper())

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return logger
