"""In-memory failed-login guard keyed by client address.

A client moves through three states:

- clear: no record
- accumulating: 1..max_failures-1 failures on record
- locked: at least max_failures failures, the last one less than
  ``cooldown_seconds`` ago

The lockout is evaluated lazily from the last failure timestamp; once the
cooldown has elapsed the record stays in the table but no longer blocks. A
successful login deletes the record.

Notes:
- Per-process only, like the request rate limiter.
- The table is bounded by ``max_records``; when full, the client whose last
  failure is oldest is evicted first.
- Client addresses are a weak identity (NAT, proxies). Good enough to slow down
  credential guessing against a single endpoint.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable

from storefront.adapters.rate_limit.base import (
    AbstractLoginGuard,
    LoginGuardDecision,
    ThrottleRecord,
)
from storefront.core.logging import hash_identifier

logger = logging.getLogger(__name__)

DEFAULT_MAX_FAILURES = 5
DEFAULT_COOLDOWN_SECONDS = 15 * 60


class InMemoryLoginGuard(AbstractLoginGuard):
    """Lock out client keys after repeated failed logins."""

    def __init__(
        self,
        *,
        max_failures: int = DEFAULT_MAX_FAILURES,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        max_records: int | None = 10_000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the guard.

        Args:
            max_failures: Failures that trigger a lockout.
            cooldown_seconds: Lockout length, measured from the last failure.
            max_records: Maximum tracked keys (None for unbounded).
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If any limit is not positive.
        """
        if max_failures < 1:
            raise ValueError("max_failures must be >= 1")
        if cooldown_seconds <= 0:
            raise ValueError("cooldown_seconds must be > 0")
        if max_records is not None and max_records < 1:
            raise ValueError("max_records must be >= 1")

        self.max_failures = max_failures
        self.cooldown_seconds = cooldown_seconds
        self.max_records = max_records
        self._clock = clock
        self._lock = threading.Lock()
        # Ordered by last failure, oldest first
        self._records: OrderedDict[str, ThrottleRecord] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get_record(self, key: str) -> ThrottleRecord | None:
        """Return a copy of the record for ``key``, if any."""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            return ThrottleRecord(record.client_key, record.failure_count, record.last_failure_at)

    def check(self, key: str) -> LoginGuardDecision:
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return LoginGuardDecision(allowed=True, failure_count=0)

            elapsed = self._clock() - record.last_failure_at
            if record.failure_count >= self.max_failures and elapsed < self.cooldown_seconds:
                return LoginGuardDecision(
                    allowed=False,
                    failure_count=record.failure_count,
                    retry_after_seconds=self.cooldown_seconds - elapsed,
                )
            return LoginGuardDecision(allowed=True, failure_count=record.failure_count)

    def record_failure(self, key: str) -> ThrottleRecord:
        now = self._clock()
        with self._lock:
            record = self._records.get(key)
            if record is None:
                self._evict_if_full_locked()
                record = ThrottleRecord(client_key=key, failure_count=0, last_failure_at=now)
                self._records[key] = record

            record.failure_count += 1
            record.last_failure_at = now
            self._records.move_to_end(key)
            snapshot = ThrottleRecord(key, record.failure_count, record.last_failure_at)

        if snapshot.failure_count == self.max_failures:
            logger.warning(
                "login_guard.locked",
                extra={
                    "client_hash": hash_identifier(key),
                    "failure_count": snapshot.failure_count,
                    "cooldown_s": self.cooldown_seconds,
                },
            )
        return snapshot

    def record_success(self, key: str) -> None:
        with self._lock:
            removed = self._records.pop(key, None)
        if removed is not None:
            logger.info(
                "login_guard.cleared",
                extra={
                    "client_hash": hash_identifier(key),
                    "previous_failures": removed.failure_count,
                },
            )

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def _evict_if_full_locked(self) -> None:
        if self.max_records is None:
            return
        while len(self._records) >= self.max_records:
            evicted_key, _ = self._records.popitem(last=False)
            logger.debug(
                "login_guard.evicted",
                extra={"client_hash": hash_identifier(evicted_key)},
            )
