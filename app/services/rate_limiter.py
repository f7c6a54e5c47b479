"""Sliding-window rate limiter keyed by client IP."""
import time
from collections import defaultdict, deque
from typing import Callable


class SlidingWindowRateLimiter:
    """Allow at most ``max_requests`` per ``window_seconds`` for each key."""

    def __init__(self, max_requests: int, window_seconds: int,
                 clock: Callable[[], float] = time.monotonic):
        self.max_requests = max_requests
        self.window = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._last_sweep = clock()

    def is_allowed(self, key: str) -> tuple[bool, int, int]:
        """Returns (allowed, remaining, retry_after_seconds)."""
        now = self._clock()
        cutoff = now - self.window
        if now - self._last_sweep >= self.window:
            self._sweep(cutoff)
            self._last_sweep = now
        hits = self._hits[key]
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if len(hits) >= self.max_requests:
            return False, 0, int(hits[0] - cutoff) + 1
        hits.append(now)
        return True, self.max_requests - len(hits), 0

    @property
    def tracked_keys(self) -> int:
        return len(self._hits)

    def _sweep(self, cutoff: float) -> None:
        """Forget clients with no hit inside the current window."""
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            del self._hits[key]

    def reset(self) -> None:
        self._hits.clear()
        self._last_sweep = self._clock()
