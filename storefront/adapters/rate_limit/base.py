"""Rate limiter and login guard interfaces.

The API depends on these abstractions (not the concrete implementations) so
the in-memory tables can later move to a shared store without touching routes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check/consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window resets.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


@dataclass
class ThrottleRecord:
    """Failed-login bookkeeping for one client key."""

    client_key: str
    failure_count: int
    last_failure_at: float


@dataclass(frozen=True)
class LoginGuardDecision:
    """Outcome of consulting the login guard before checking credentials.

    Attributes:
        allowed: False while the client is locked out.
        failure_count: Failures currently on record for the client.
        retry_after_seconds: Remaining lockout in seconds (0 when allowed).
    """

    allowed: bool
    failure_count: int
    retry_after_seconds: float = 0.0

    @property
    def retry_after_minutes(self) -> int:
        """Remaining lockout rounded up to whole minutes."""
        return int(math.ceil(self.retry_after_seconds / 60))


class AbstractRateLimiter(ABC):
    """Interface for request rate limiters."""

    @abstractmethod
    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for a given key.

        Args:
            key: Unique identifier (e.g., client address).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def release(self, key: str, *, cost: int = 1) -> None:
        """Give back units consumed in the current window (never below zero)."""
        raise NotImplementedError


class AbstractLoginGuard(ABC):
    """Interface for failed-login lockout tracking."""

    max_failures: int

    @abstractmethod
    def check(self, key: str) -> LoginGuardDecision:
        """Decide whether a login attempt from ``key`` may proceed."""
        raise NotImplementedError

    @abstractmethod
    def record_failure(self, key: str) -> ThrottleRecord:
        """Count a failed attempt and return the updated record."""
        raise NotImplementedError

    @abstractmethod
    def record_success(self, key: str) -> None:
        """Forget all failures for ``key``."""
        raise NotImplementedError
