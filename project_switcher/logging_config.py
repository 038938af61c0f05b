"""Logging configuration for the project switcher.

Provides:
- Configurable log levels (WARNING, INFO, DEBUG)
- Colored terminal output
- Performance timing logs for switch phases
- Structured failure records
"""

import logging
import sys
import time
from contextlib import contextmanager
from functools import wraps
from typing import Callable, Optional

from .errors import SwitcherError


DEFAULT_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"

ROOT_LOGGER = "project_switcher"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        """Format log record with colors."""
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Configure logging for the project switcher package.

    Args:
        verbose: Enable verbose logging (INFO level)
        debug: Enable debug logging (DEBUG level)

    Returns:
        Configured package logger

    Examples:
        >>> logger = setup_logging(verbose=True)
        >>> logger.info("Switching project")
        2026-01-01 10:30:45 [INFO] project_switcher: Switching project
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()

    if debug:
        logger.setLevel(logging.DEBUG)
        log_format = DEBUG_FORMAT
    elif verbose:
        logger.setLevel(logging.INFO)
        log_format = VERBOSE_FORMAT
    else:
        logger.setLevel(logging.WARNING)
        log_format = DEFAULT_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logger.level)

    if sys.stderr.isatty():
        formatter = ColoredFormatter(log_format)
    else:
        formatter = logging.Formatter(log_format)

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def log_switcher_error(
    logger: logging.Logger,
    error: SwitcherError,
    level: int = logging.ERROR,
    operation: Optional[str] = None,
) -> None:
    """Emit one structured record for a switcher failure.

    The error dictionary is attached as ``record.switcher_error`` so handlers
    can serialize it.

    Args:
        logger: Logger instance
        error: The failure to record
        level: Log level (default: ERROR)
        operation: Operation that failed, prefixed to the message
    """
    prefix = f"{operation}: " if operation else ""
    logger.log(
        level,
        f"{prefix}[{error.code.name}] {error.message}",
        extra={"switcher_error": error.to_dict()},
    )


@contextmanager
def log_timing(operation: str, logger: logging.Logger):
    """Context manager for logging operation timing.

    Args:
        operation: Operation description
        logger: Logger instance

    Examples:
        >>> with log_timing("Restore tabs", logger):
        ...     await engine.restore(snapshot, project)
        DEBUG: Restore tabs completed in 15.32ms
    """
    start = time.perf_counter()
    logger.debug(f"Starting: {operation}")

    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"{operation} completed in {elapsed_ms:.2f}ms")


def log_async_performance(func: Callable) -> Callable:
    """Decorator for logging async function performance.

    Args:
        func: Async function to wrap

    Returns:
        Wrapped async function with performance logging
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__)
        start = time.perf_counter()

        try:
            result = await func(*args, **kwargs)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.debug(f"{func.__qualname__} completed in {elapsed_ms:.2f}ms")
            return result
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.error(f"{func.__qualname__} failed after {elapsed_ms:.2f}ms: {e}")
            raise

    return wrapper
