"""
Minimum-spacing rate limiter shared by every rate-limited weather.gov call.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

logger = logging.getLogger(__name__)

MIN_REQUEST_INTERVAL = 0.5


class RateLimiter:
    """
    Delay callers so that consecutive dispatches are at least
    ``min_interval`` seconds apart.

    The earliest next dispatch time is read and updated under a lock, so
    concurrent callers are released one at a time. Nothing is queued or
    rejected; callers only wait.
    """

    def __init__(
        self,
        min_interval: float = MIN_REQUEST_INTERVAL,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._next_dispatch: float | None = None

    def wait(self) -> None:
        with self._lock:
            now = self._clock()
            if self._next_dispatch is not None and now < self._next_dispatch:
                delay = self._next_dispatch - now
                logger.debug("Rate limit: waiting %.3fs", delay)
                self._sleep(delay)
                now = self._clock()
            self._next_dispatch = now + self.min_interval


__all__ = ["MIN_REQUEST_INTERVAL", "RateLimiter"]
