"""API rate limiting dependencies.

Wires the request rate limiter adapters into the HTTP layer.

Rate limiting strategy:
- Global fixed-window limit per client address (300 requests per 15 minutes),
  applied to the users and orders routers; catalog browsing and health checks
  are exempt, as are CORS preflight requests.
- Auth limit on login and registration (20 per 15 minutes per client
  address) that only counts failed requests: a successful call gives its
  unit back.
- The limiter instances live on ``app.state`` so each app (and each test) owns
  its own tables.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from fastapi import HTTPException, Request, status

from storefront.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from storefront.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from storefront.core.config import AppSettings, settings
from storefront.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    cfg = app_settings or settings.app
    return InMemoryFixedWindowRateLimiter(
        limit=cfg.rate_limit_requests,
        window_seconds=cfg.rate_limit_window_seconds,
    )


def build_auth_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    cfg = app_settings or settings.app
    return InMemoryFixedWindowRateLimiter(
        limit=cfg.auth_rate_limit_requests,
        window_seconds=cfg.auth_rate_limit_window_seconds,
    )


def client_address(request: Request) -> str:
    """Client network address used as the limiter and login guard key."""
    return request.client.host if request.client else "unknown"


def _throttled(result: RateLimitResult, key: str, *, event: str, detail: str) -> HTTPException:
    retry_after = result.retry_after_seconds or 0
    logger.warning(
        event,
        extra={
            "key_hash": hash_identifier(key),
            "limit": result.limit,
            "retry_after_s": retry_after,
        },
    )

    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        headers["Retry-After"] = str(retry_after)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(result.reset_at)

    return HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail=detail,
        headers=headers or None,
    )


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing the global request budget.

    Raises:
        HTTPException: 429 Too Many Requests when the budget is exhausted.
    """

    if not request.app.state.rate_limit_enabled or request.method == "OPTIONS":
        return

    limiter: AbstractRateLimiter = request.app.state.rate_limiter
    key = f"ip:{client_address(request)}"

    result = limiter.consume(key)
    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={"key_hash": hash_identifier(key), "remaining": result.remaining},
        )
        return

    raise _throttled(
        result,
        key,
        event="rate_limit.exceeded",
        detail="Too many requests, please try again later",
    )


async def enforce_auth_rate_limit(request: Request) -> AsyncIterator[None]:
    """FastAPI dependency limiting failed login/registration calls per address.

    Every call takes a unit up front; the unit is released when the endpoint
    completes without raising, so only failures use up the budget.

    Raises:
        HTTPException: 429 Too Many Requests when the budget is exhausted.
    """

    if not request.app.state.rate_limit_enabled:
        yield
        return

    limiter: AbstractRateLimiter = request.app.state.auth_rate_limiter
    key = f"auth:{client_address(request)}"

    result = limiter.consume(key)
    if not result.allowed:
        raise _throttled(
            result,
            key,
            event="rate_limit.auth_exceeded",
            detail="Too many login attempts, please try again later",
        )

    yield
    limiter.release(key)
