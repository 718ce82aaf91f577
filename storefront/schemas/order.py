"""Pydantic schemas for order placement and order history."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ShippingAddress(BaseModel):
    """Destination of an order. All four fields are required at checkout."""

    address: str = Field(default="", description="Street address.")
    city: str = Field(default="", description="City.")
    postal_code: str = Field(default="", description="Postal / ZIP code.")
    country: str = Field(default="", description="Country.")

    def is_complete(self) -> bool:
        return all(
            value.strip() for value in (self.address, self.city, self.postal_code, self.country)
        )


class OrderItem(BaseModel):
    """One purchased product line, snapshotted at checkout."""

    product_id: str = Field(..., description="Identifier of the ordered product.")
    name: str = Field(default="", description="Product name at checkout time.")
    image: str = Field(default="", description="Product image URL at checkout time.")
    price: float = Field(default=0.0, ge=0, description="Unit price at checkout time.")
    quantity: int = Field(default=0, description="Ordered quantity (must be > 0).")


class PaymentResult(BaseModel):
    """Payment confirmation as reported by the payment provider."""

    id: str | None = None
    status: str | None = None
    update_time: str | None = None
    email_address: str | None = None


class OrderCreateRequest(BaseModel):
    """Payload sent by the storefront to place an order.

    Presence checks (non-empty items, complete address, payment method) are
    done by the order service so clients get a readable message instead of
    a schema validation dump.
    """

    order_items: list[OrderItem] = Field(default_factory=list)
    shipping_address: ShippingAddress | None = None
    payment_method: str = ""
    items_price: float = Field(default=0.0, ge=0)
    tax_price: float = Field(default=0.0, ge=0)
    shipping_price: float = Field(default=0.0, ge=0)
    total_price: float = Field(default=0.0, ge=0)


class OrderResponse(BaseModel):
    """Order as returned by the API."""

    id: str
    user_id: str
    order_items: list[OrderItem]
    shipping_address: ShippingAddress
    payment_method: str
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    is_paid: bool = False
    paid_at: datetime | None = None
    payment_result: PaymentResult | None = None
    is_delivered: bool = False
    delivered_at: datetime | None = None
    created_at: datetime
