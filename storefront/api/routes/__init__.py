from __future__ import annotations

from storefront.api.routes.health import router as health_router
from storefront.api.routes.orders import router as orders_router
from storefront.api.routes.products import router as products_router
from storefront.api.routes.users import router as users_router

__all__ = ["health_router", "orders_router", "products_router", "users_router"]
