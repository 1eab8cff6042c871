"""Step timing for the quiz pipeline, only logged when DEBUG is on."""
import time
from typing import Optional, Callable
import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def now_ms() -> float:
    """Current high-resolution time in milliseconds."""
    return time.perf_counter() * 1000


def log_elapsed(start_ms: float, label: str, log_fn: Optional[Callable[[str], None]] = None) -> float:
    """
    Log time elapsed since ``start_ms`` and return the current time, so calls chain:

        t = now_ms()
        t = log_elapsed(t, "normalize")
        t = log_elapsed(t, "resolve")
    """
    elapsed = now_ms() - start_ms
    (log_fn or logger.debug)(f"{label}: {elapsed:.2f}ms")
    return now_ms()


def debug_elapsed(start_ms: float, label: str, log_fn: Optional[Callable[[str], None]] = None) -> float:
    """Like log_elapsed, but silent unless settings.DEBUG is set."""
    if settings.DEBUG:
        return log_elapsed(start_ms, label, log_fn)
    return now_ms()
