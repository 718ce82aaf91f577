from __future__ import annotations

from fastapi import APIRouter, Depends, status

from storefront.api.dependencies import OrderServiceDep
from storefront.core.auth import AdminUser, CurrentUser
from storefront.core.rate_limit import enforce_rate_limit
from storefront.schemas.order import OrderCreateRequest, OrderResponse, PaymentResult

router = APIRouter(
    prefix="/orders",
    tags=["Orders"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreateRequest, user: CurrentUser, orders: OrderServiceDep) -> OrderResponse:
    return orders.create_order(user, payload)


# Declared before /{order_id} so "myorders" is not taken for an id
@router.get("/myorders", response_model=list[OrderResponse])
def my_orders(user: CurrentUser, orders: OrderServiceDep) -> list[OrderResponse]:
    """Orders of the authenticated user, newest first."""
    return orders.list_user_orders(user)


@router.get("", response_model=list[OrderResponse])
def list_orders(admin: AdminUser, orders: OrderServiceDep) -> list[OrderResponse]:
    return orders.list_all_orders()


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, user: CurrentUser, orders: OrderServiceDep) -> OrderResponse:
    return orders.get_order(order_id, user)


@router.put("/{order_id}/pay", response_model=OrderResponse)
def pay_order(
    order_id: str,
    payment: PaymentResult,
    user: CurrentUser,
    orders: OrderServiceDep,
) -> OrderResponse:
    return orders.mark_paid(order_id, user, payment)


@router.put("/{order_id}/deliver", response_model=OrderResponse)
def deliver_order(order_id: str, admin: AdminUser, orders: OrderServiceDep) -> OrderResponse:
    return orders.mark_delivered(order_id)
