"""Document store adapters (users, products, orders)."""

from storefront.adapters.store.base import (
    AbstractOrderStore,
    AbstractProductStore,
    AbstractUserStore,
    OrderRecord,
    ProductRecord,
    UserRecord,
)
from storefront.adapters.store.in_memory import (
    InMemoryOrderStore,
    InMemoryProductStore,
    InMemoryUserStore,
)

__all__ = [
    "AbstractOrderStore",
    "AbstractProductStore",
    "AbstractUserStore",
    "InMemoryOrderStore",
    "InMemoryProductStore",
    "InMemoryUserStore",
    "OrderRecord",
    "ProductRecord",
    "UserRecord",
]
