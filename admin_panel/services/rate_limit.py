"""Fixed-window rate limiting for the authentication endpoints."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, MutableMapping


@dataclass
class _Window:
    count: int
    reset_at: float


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int = 0


class RateLimiter:
    """Counts requests per key inside a fixed window.

    `store` is the backing mapping; the default in-process dict is only
    suitable for a single worker.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        store: MutableMapping[str, _Window] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._store = store if store is not None else {}
        self._clock = clock
        self._lock = threading.Lock()
        self._next_sweep = clock() + window_seconds

    def check(self, key: str) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            window = self._store.get(key)
            if window is None or now >= window.reset_at:
                self._store[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return RateLimitResult(allowed=True, remaining=self.max_requests - 1)

            if window.count >= self.max_requests:
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    retry_after=max(1, int(window.reset_at - now)),
                )

            window.count += 1
            return RateLimitResult(allowed=True, remaining=self.max_requests - window.count)

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        expired = [key for key, window in self._store.items() if now >= window.reset_at]
        for key in expired:
            del self._store[key]
        self._next_sweep = now + self.window_seconds

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._store.clear()
            else:
                self._store.pop(key, None)
