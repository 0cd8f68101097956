from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class Bucket:
    tokens: float
    last_ts: float


class InMemoryRateLimiter:
    """
    Token bucket per client key (the caller's IP for the public API).

    capacity requests may burst; tokens refill continuously at
    capacity / window_seconds. Process-local: each worker counts on its own.
    """

    def __init__(self, capacity: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        if capacity < 1 or window_seconds <= 0:
            raise ValueError("capacity must be >= 1 and window_seconds > 0")
        self.capacity = float(capacity)
        self.refill_per_sec = self.capacity / float(window_seconds)
        self._clock = clock
        self._buckets: Dict[str, Bucket] = {}
        # sync routes run in the threadpool
        self._lock = threading.Lock()

    def _bucket(self, client_key: str, now: float) -> Bucket:
        b = self._buckets.get(client_key)
        if b is None:
            b = self._buckets[client_key] = Bucket(tokens=self.capacity, last_ts=now)
        else:
            elapsed = max(0.0, now - b.last_ts)
            b.tokens = min(self.capacity, b.tokens + elapsed * self.refill_per_sec)
            b.last_ts = now
        return b

    def allow(self, client_key: str) -> bool:
        with self._lock:
            b = self._bucket(client_key, self._clock())
            if b.tokens >= 1.0:
                b.tokens -= 1.0
                return True
            return False

    def retry_after(self, client_key: str) -> int:
        """Whole seconds until client_key has a token again."""
        with self._lock:
            b = self._bucket(client_key, self._clock())
            missing = max(0.0, 1.0 - b.tokens)
            return max(1, math.ceil(missing / self.refill_per_sec))

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
