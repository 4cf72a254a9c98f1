"""Persistence metrics and timing utilities for the BuildSheet store."""
import functools
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger("buildsheet-store.perf")


def timed(func: Callable) -> Callable:
    """
    Decorator that measures and logs execution time for synchronous functions.

    Usage::

        @timed
        def save(self):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.debug(
                f"{func.__qualname__} took {duration_ms}ms",
                extra={"qualname": func.__qualname__, "duration_ms": duration_ms},
            )
    return wrapper


class PersistenceTracker:
    """
    Thread-safe in-memory counters for the document write path.

    Tracks:
    - Successful writes, and how many of those needed a degraded payload
    - Generated images trimmed from persisted copies
    - Hard failures (quota exhausted, or any other storage error)
    - Slowest write observed
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._writes: int = 0
        self._degraded_writes: int = 0
        self._images_trimmed: int = 0
        self._failures: int = 0
        self._last_failure: Optional[str] = None
        self._slowest_write_ms: float = 0.0

    # ------------------------------------------------------------------
    # Public write API
    # ------------------------------------------------------------------

    def record_write(self, duration_ms: float, dropped_images: int = 0) -> None:
        with self._lock:
            self._writes += 1
            if dropped_images:
                self._degraded_writes += 1
                self._images_trimmed += dropped_images
            if duration_ms > self._slowest_write_ms:
                self._slowest_write_ms = duration_ms

    def record_failure(self, reason: str) -> None:
        with self._lock:
            self._failures += 1
            self._last_failure = reason

    # ------------------------------------------------------------------
    # Public read API
    # ------------------------------------------------------------------

    def get_metrics(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "writes": self._writes,
                "degraded_writes": self._degraded_writes,
                "images_trimmed": self._images_trimmed,
                "failures": self._failures,
                "last_failure": self._last_failure,
                "slowest_write_ms": round(self._slowest_write_ms, 2),
            }

    def reset(self) -> None:
        """Reset all counters (useful in tests)."""
        with self._lock:
            self._writes = 0
            self._degraded_writes = 0
            self._images_trimmed = 0
            self._failures = 0
            self._last_failure = None
            self._slowest_write_ms = 0.0


# Module-level singleton; import this instance everywhere else.
tracker = PersistenceTracker()
