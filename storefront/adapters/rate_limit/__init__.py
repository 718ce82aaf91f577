"""Rate limiting adapters.

This package provides a small abstraction layer so the API can start with
in-memory tables (request limiter, failed-login guard) and later migrate to
Redis or another shared store without changing the API layer.
"""

from storefront.adapters.rate_limit.base import (
    AbstractLoginGuard,
    AbstractRateLimiter,
    LoginGuardDecision,
    RateLimitResult,
    ThrottleRecord,
)
from storefront.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from storefront.adapters.rate_limit.login_guard import InMemoryLoginGuard

__all__ = [
    "AbstractLoginGuard",
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "InMemoryLoginGuard",
    "LoginGuardDecision",
    "RateLimitResult",
    "ThrottleRecord",
]
