"""Simple rate limiting for calls to the text oracle."""

from __future__ import annotations

import threading
import time


class RateLimiter:
    def __init__(self, requests_per_minute: int) -> None:
        if requests_per_minute <= 0:
            raise ValueError("requests_per_minute must be positive")
        self._min_interval = 60.0 / requests_per_minute
        self._lock = threading.Lock()
        self._last_time: float | None = None

    def wait(self) -> None:
        # Runs on worker threads (see RefinementGateway), never on the event loop.
        with self._lock:
            now = time.monotonic()
            if self._last_time is not None:
                sleep_time = self._min_interval - (now - self._last_time)
                if sleep_time > 0:
                    time.sleep(sleep_time)
            self._last_time = time.monotonic()
