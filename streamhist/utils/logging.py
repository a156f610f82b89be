"""
Logging utilities for the streaming histogram tools.
"""

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast


def setup_logging(log_level: str = "WARNING") -> None:
    """Log to stderr at `log_level`, replacing any earlier configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


F = TypeVar("F", bound=Callable[..., Any])


def log_execution_time(func: F) -> F:
    """
    Log the wall time of every call to `func` on its module's logger.

    The return value is included in the message, so a reader that returns the
    number of ingested values reports it next to the elapsed time.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        logger = get_logger(func.__module__)
        start = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed = time.perf_counter() - start
            logger.error(f"{func.__qualname__} failed after {elapsed:.3f}s: {e}")
            raise
        elapsed = time.perf_counter() - start
        logger.info(f"{func.__qualname__} returned {result!r} in {elapsed:.3f}s")
        return result

    return cast(F, wrapper)
