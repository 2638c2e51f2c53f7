from dataclasses import dataclass
import threading
import time
from typing import Callable, Dict


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after(self, now: float) -> int:
        return max(1, int(self.reset_at - now + 0.999))


@dataclass
class _Window:
    count: int
    reset_at: float


class RateLimiter:
    """
    Fixed-window request limiter for inbound API calls.

    State lives on the instance (one limiter per route family) rather than in
    a module-level table. Expired windows are swept lazily on access, at most
    once per `sweep_interval`, so no background timer is needed.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        *,
        sweep_interval: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.sweep_interval = sweep_interval
        self.clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        if now - self._last_sweep < self.sweep_interval:
            return
        self._last_sweep = now
        for key in [k for k, w in self._windows.items() if w.reset_at < now]:
            del self._windows[key]

    def check(self, identifier: str) -> RateLimitResult:
        with self._lock:
            now = self.clock()
            self._sweep(now)

            window = self._windows.get(identifier)
            if window is None or window.reset_at < now:
                window = _Window(count=1, reset_at=now + self.window_seconds)
                self._windows[identifier] = window
                return RateLimitResult(True, self.max_requests - 1, window.reset_at)

            window.count += 1
            if window.count > self.max_requests:
                return RateLimitResult(False, 0, window.reset_at)
            return RateLimitResult(
                True, self.max_requests - window.count, window.reset_at
            )

    def __len__(self) -> int:
        return len(self._windows)
