"""Request throttling for HTTP API clients."""

import logging
import threading
import time
from collections import deque
from enum import Enum
from typing import Optional

import requests


class RateLimitStrategy(Enum):
    """How requests are spaced out."""

    FIXED_INTERVAL = "fixed_interval"  # at least 1/rate seconds between calls
    SLIDING_WINDOW = "sliding_window"  # at most `rate` calls in any 1s window


class RateLimitedSession(requests.Session):
    """requests.Session that blocks before each request to honour a rate limit."""

    def __init__(
        self,
        calls_per_second: float = 5.0,
        strategy: RateLimitStrategy = RateLimitStrategy.FIXED_INTERVAL,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__()
        if calls_per_second <= 0:
            raise ValueError("calls_per_second must be positive")
        self.calls_per_second = calls_per_second
        self.strategy = strategy
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self._lock = threading.Lock()
        self._last_call = 0.0
        self._window = deque()

    def _wait_fixed_interval(self):
        min_interval = 1.0 / self.calls_per_second
        elapsed = time.monotonic() - self._last_call
        if elapsed < min_interval:
            time.sleep(min_interval - elapsed)
        self._last_call = time.monotonic()

    def _wait_sliding_window(self):
        limit = max(1, int(self.calls_per_second))
        now = time.monotonic()
        while self._window and now - self._window[0] >= 1.0:
            self._window.popleft()
        if len(self._window) >= limit:
            delay = 1.0 - (now - self._window[0])
            if delay > 0:
                self.logger.debug(f"Rate limit reached, sleeping {delay:.3f}s")
                time.sleep(delay)
            self._window.popleft()
        self._window.append(time.monotonic())

    def request(self, method, url, *args, **kwargs):
        with self._lock:
            if self.strategy is RateLimitStrategy.SLIDING_WINDOW:
                self._wait_sliding_window()
            else:
                self._wait_fixed_interval()
        return super().request(method, url, *args, **kwargs)
