"""Application factory for the storefront API.

Centralizes app construction (metadata, middleware, handlers, routers) and
the per-process components the handlers share: document stores, the request
rate limiter and the failed-login guard. Each call builds fresh components,
so tests get isolated state by creating their own app.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.adapters.rate_limit.base import AbstractLoginGuard, AbstractRateLimiter
from storefront.adapters.rate_limit.login_guard import InMemoryLoginGuard
from storefront.adapters.store.base import (
    AbstractOrderStore,
    AbstractProductStore,
    AbstractUserStore,
)
from storefront.adapters.store.in_memory import (
    InMemoryOrderStore,
    InMemoryProductStore,
    InMemoryUserStore,
)
from storefront.api.routes import health_router, orders_router, products_router, users_router
from storefront.core.config import settings
from storefront.core.exception_handlers import setup_exception_handlers
from storefront.core.logging import configure_logging
from storefront.core.middleware import body_size_limit_middleware, request_id_middleware
from storefront.core.openapi import TAGS_METADATA, apply_openapi_customizations
from storefront.core.rate_limit import build_auth_rate_limiter, build_rate_limiter


def build_login_guard() -> AbstractLoginGuard:
    return InMemoryLoginGuard(
        max_failures=settings.auth.login_max_failures,
        cooldown_seconds=settings.auth.login_cooldown_seconds,
        max_records=settings.auth.login_guard_max_records,
    )


def create_app(
    *,
    users: AbstractUserStore | None = None,
    products: AbstractProductStore | None = None,
    orders: AbstractOrderStore | None = None,
    login_guard: AbstractLoginGuard | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
    auth_rate_limiter: AbstractRateLimiter | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        users: Credential store (in-memory by default).
        products: Catalog store (in-memory by default).
        orders: Order store (in-memory by default).
        login_guard: Failed-login lockout tracker.
        rate_limiter: Global request limiter.
        auth_rate_limiter: Failed login/registration limiter.
        configure_logs: Reconfigure root logging (disable when embedding).

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    if configure_logs:
        configure_logging(settings.log)

    app = FastAPI(
        title="Storefront API",
        description=(
            "REST backend for the storefront: catalog browsing, cart checkout, "
            "order history and admin product management. Bearer-token auth with "
            "failed-login lockout and per-address rate limiting."
        ),
        version="0.1.0",
        openapi_tags=TAGS_METADATA,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    # Shared components
    app.state.users = users if users is not None else InMemoryUserStore()
    app.state.products = products if products is not None else InMemoryProductStore()
    app.state.orders = orders if orders is not None else InMemoryOrderStore()
    app.state.login_guard = login_guard if login_guard is not None else build_login_guard()
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else build_rate_limiter()
    app.state.auth_rate_limiter = (
        auth_rate_limiter if auth_rate_limiter is not None else build_auth_rate_limiter()
    )
    app.state.rate_limit_enabled = settings.app.rate_limit_enabled
    app.state.max_body_bytes = settings.app.max_body_bytes

    # Middleware
    app.middleware("http")(body_size_limit_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.app.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", settings.log.request_id_header],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    for router in (products_router, users_router, orders_router, health_router):
        app.include_router(router, prefix="/api")

    # OpenAPI customizations (security scheme, tags)
    apply_openapi_customizations(app)

    return app
