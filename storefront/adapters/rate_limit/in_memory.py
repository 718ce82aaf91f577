"""In-memory fixed-window request rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows that have already ended are pruned whenever the table grows past
  ``prune_threshold`` keys.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from storefront.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _WindowState:
    window_start: int
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    Limits requests per key within a fixed window (e.g. 300 requests per
    15 minutes per client address).
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
        prune_threshold: int = 10_000,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source function returning UNIX time in seconds.
            prune_threshold: Table size above which expired windows are dropped.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._prune_threshold = prune_threshold
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._state_by_key)

    def _prune_locked(self, current_window: int) -> None:
        stale = [k for k, s in self._state_by_key.items() if s.window_start < current_window]
        for key in stale:
            del self._state_by_key[key]

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for the provided key.

        Checks the current window usage and counts the request when allowed.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        window_start = int(now // self.window_seconds) * self.window_seconds
        reset_at = window_start + self.window_seconds

        with self._lock:
            state = self._state_by_key.get(key)
            if state is None or state.window_start != window_start:
                if len(self._state_by_key) >= self._prune_threshold:
                    self._prune_locked(window_start)
                state = _WindowState(window_start=window_start, count=0)
                self._state_by_key[key] = state

            if state.count + cost <= self.limit:
                state.count += cost
                return RateLimitResult(
                    allowed=True,
                    limit=self.limit,
                    remaining=max(0, self.limit - state.count),
                    reset_at=reset_at,
                    retry_after_seconds=None,
                )

            return RateLimitResult(
                allowed=False,
                limit=self.limit,
                remaining=max(0, self.limit - state.count),
                reset_at=reset_at,
                retry_after_seconds=max(0, int(math.ceil(reset_at - now))),
            )

    def release(self, key: str, *, cost: int = 1) -> None:
        """Return ``cost`` units to the current window of ``key``.

        Units from a window that has already ended are not carried over.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")

        window_start = int(self._clock() // self.window_seconds) * self.window_seconds
        with self._lock:
            state = self._state_by_key.get(key)
            if state is None or state.window_start != window_start:
                return
            state.count = max(0, state.count - cost)
