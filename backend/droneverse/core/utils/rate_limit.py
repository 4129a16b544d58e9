import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class _Window:
    count: int
    start: float


class FixedWindowRateLimiter:
    """Allows at most max_requests per key within each window_seconds window.

    The window for a key starts at its first request and restarts once it has elapsed.
    Expired windows are swept at most once per window_seconds, so idle keys do not
    accumulate.
    """

    def __init__(self, max_requests: int = 100, window_seconds: float = 60.0,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_prune = clock()

    def hit(self, key: str) -> bool:
        """Record a request for key; False when the key is over its limit."""
        now = self._clock()
        with self._lock:
            if now - self._last_prune > self.window_seconds:
                self._prune(now)
            window = self._windows.get(key)
            if window is None or now - window.start > self.window_seconds:
                self._windows[key] = _Window(count=1, start=now)
                return True
            if window.count >= self.max_requests:
                return False
            window.count += 1
            return True

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now - w.start > self.window_seconds]
        for k in expired:
            del self._windows[k]
        self._last_prune = now

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
