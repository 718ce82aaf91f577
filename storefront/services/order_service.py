"""Order placement and order lifecycle (paid, delivered)."""

from __future__ import annotations

import logging

from storefront.adapters.store.base import (
    AbstractOrderStore,
    AbstractProductStore,
    OrderRecord,
    UserRecord,
    utcnow,
)
from storefront.core.errors import NotFoundAppError, PermissionAppError, ValidationAppError
from storefront.schemas.order import OrderCreateRequest, OrderResponse, PaymentResult

logger = logging.getLogger(__name__)


def to_order_response(record: OrderRecord) -> OrderResponse:
    return OrderResponse.model_validate(record.model_dump())


class OrderService:
    """Service for creating and tracking orders.

    Attributes:
        orders: Order store.
        products: Catalog store, used to reject items for unknown products.
    """

    def __init__(self, orders: AbstractOrderStore, products: AbstractProductStore) -> None:
        self.orders = orders
        self.products = products

    def _validate(self, payload: OrderCreateRequest) -> None:
        """Check presence and sanity of the checkout payload.

        Raises:
            ValidationAppError: On the first problem found.
        """
        if not payload.order_items:
            raise ValidationAppError(code="no_order_items", message="No order items")

        address = payload.shipping_address
        if address is None or not address.is_complete():
            raise ValidationAppError(
                code="incomplete_shipping_address",
                message="Please provide complete shipping address",
            )

        if not payload.payment_method.strip():
            raise ValidationAppError(
                code="payment_method_required",
                message="Payment method is required",
            )

        for item in payload.order_items:
            if self.products.get(item.product_id) is None:
                raise ValidationAppError(
                    code="invalid_product_id",
                    message=f"Invalid product ID: {item.product_id}",
                    details={"resource_id": item.product_id},
                )
            if item.quantity <= 0:
                raise ValidationAppError(
                    code="invalid_quantity",
                    message=f"Invalid quantity for product {item.product_id}",
                    details={"resource_id": item.product_id},
                )

    def create_order(self, user: UserRecord, payload: OrderCreateRequest) -> OrderResponse:
        self._validate(payload)
        record = OrderRecord(
            user_id=user.id,
            order_items=payload.order_items,
            shipping_address=payload.shipping_address,
            payment_method=payload.payment_method.strip(),
            items_price=payload.items_price,
            tax_price=payload.tax_price,
            shipping_price=payload.shipping_price,
            total_price=payload.total_price,
        )
        self.orders.save(record)
        logger.info(
            "orders.created",
            extra={
                "order_id": record.id,
                "user_id": user.id,
                "items": len(record.order_items),
                "total_price": record.total_price,
            },
        )
        return to_order_response(record)

    def get_order(self, order_id: str, user: UserRecord) -> OrderResponse:
        return to_order_response(self._require_visible(order_id, user))

    def list_user_orders(self, user: UserRecord) -> list[OrderResponse]:
        return [to_order_response(r) for r in self.orders.list_by_user(user.id)]

    def list_all_orders(self) -> list[OrderResponse]:
        return [to_order_response(r) for r in self.orders.list_all()]

    def mark_paid(self, order_id: str, user: UserRecord, payment: PaymentResult) -> OrderResponse:
        record = self._require_visible(order_id, user)
        record.is_paid = True
        record.paid_at = utcnow()
        record.payment_result = payment
        self.orders.save(record)
        logger.info("orders.paid", extra={"order_id": order_id, "user_id": user.id})
        return to_order_response(record)

    def mark_delivered(self, order_id: str) -> OrderResponse:
        record = self._require(order_id)
        record.is_delivered = True
        record.delivered_at = utcnow()
        self.orders.save(record)
        logger.info("orders.delivered", extra={"order_id": order_id})
        return to_order_response(record)

    def _require(self, order_id: str) -> OrderRecord:
        record = self.orders.get(order_id)
        if record is None:
            raise NotFoundAppError(
                code="order_not_found",
                message="Order not found",
                details={"resource_id": order_id},
            )
        return record

    def _require_visible(self, order_id: str, user: UserRecord) -> OrderRecord:
        record = self._require(order_id)
        if record.user_id != user.id and not user.is_admin:
            raise PermissionAppError(
                code="order_forbidden",
                message="Not authorized to view this order",
            )
        return record
