"""Logging configuration for the codebase graph package."""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Dict, Iterator


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class GraphLogger:
    """
    Thin wrapper around the ``codebase_graph`` logger.

    Besides the usual level methods it records how long named operations
    take, so the analyzer can report per-section timings.
    """

    def __init__(self, name: str = "codebase_graph", level: str = "INFO"):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.timings: Dict[str, float] = {}

        # Host applications may have configured the logger already
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(handler)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message."""
        self.logger.error(message, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self.logger.critical(message, **kwargs)

    @contextmanager
    def timed(self, operation: str) -> Iterator[None]:
        """Log the duration of ``operation`` at DEBUG, and at ERROR if it raises."""
        start_time = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start_time
            self.timings[operation] = elapsed
            self.logger.error(f"{operation} failed after {elapsed:.3f}s: {e}")
            raise
        elapsed = time.perf_counter() - start_time
        self.timings[operation] = elapsed
        self.logger.debug(f"{operation} completed in {elapsed:.3f}s")


_logger = GraphLogger()


def get_logger() -> GraphLogger:
    """Get the global logger instance."""
    return _logger


def set_log_level(level: str):
    """Set the global log level."""
    _logger.logger.setLevel(getattr(logging, level.upper()))
