"""Document store records and repository interfaces.

Services depend on these abstractions; the in-memory implementation backs
development and tests, and a database-backed one can be swapped in without
touching routes or services.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from storefront.core.security import verify_password
from storefront.schemas.order import OrderItem, PaymentResult, ShippingAddress


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    email: str
    password_hash: str
    is_admin: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class ProductRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    description: str = ""
    price: float
    image: str = ""
    stock: int = 0
    is_featured: bool = False
    user_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class OrderRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    order_items: list[OrderItem]
    shipping_address: ShippingAddress
    payment_method: str
    items_price: float = 0.0
    tax_price: float = 0.0
    shipping_price: float = 0.0
    total_price: float = 0.0
    is_paid: bool = False
    paid_at: datetime | None = None
    payment_result: PaymentResult | None = None
    is_delivered: bool = False
    delivered_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)


class AbstractUserStore(ABC):
    """Credential store."""

    @abstractmethod
    def find_by_email(self, email: str) -> UserRecord | None:
        raise NotImplementedError

    @abstractmethod
    def find_by_id(self, user_id: str) -> UserRecord | None:
        raise NotImplementedError

    @abstractmethod
    def create(self, record: UserRecord) -> UserRecord:
        """Insert a new user.

        Raises:
            ValueError: If the email is already taken.
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, record: UserRecord) -> UserRecord:
        """Replace an existing user document."""
        raise NotImplementedError

    def verify_password(self, record: UserRecord, plaintext: str) -> bool:
        return verify_password(record.password_hash, plaintext)


class AbstractProductStore(ABC):
    """Catalog store."""

    @abstractmethod
    def search(self, keyword: str | None, *, offset: int, limit: int) -> list[ProductRecord]:
        """Products whose name contains ``keyword`` (case-insensitive), oldest first."""
        raise NotImplementedError

    @abstractmethod
    def count(self, keyword: str | None = None) -> int:
        raise NotImplementedError

    @abstractmethod
    def list_featured(self, limit: int) -> list[ProductRecord]:
        """Featured products, newest first."""
        raise NotImplementedError

    @abstractmethod
    def get(self, product_id: str) -> ProductRecord | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, record: ProductRecord) -> ProductRecord:
        """Insert or replace a product document."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, product_id: str) -> bool:
        """Remove a product; return False when it did not exist."""
        raise NotImplementedError


class AbstractOrderStore(ABC):
    """Order store."""

    @abstractmethod
    def get(self, order_id: str) -> OrderRecord | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, record: OrderRecord) -> OrderRecord:
        """Insert or replace an order document."""
        raise NotImplementedError

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[OrderRecord]:
        """Orders placed by ``user_id``, newest first."""
        raise NotImplementedError

    @abstractmethod
    def list_all(self) -> list[OrderRecord]:
        """All orders, newest first."""
        raise NotImplementedError
