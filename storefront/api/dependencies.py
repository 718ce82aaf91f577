"""Service providers resolved from the components held on ``app.state``."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from storefront.services.auth_service import AuthService
from storefront.services.catalog_service import CatalogService
from storefront.services.order_service import OrderService


def get_auth_service(request: Request) -> AuthService:
    state = request.app.state
    return AuthService(users=state.users, guard=state.login_guard)


def get_catalog_service(request: Request) -> CatalogService:
    return CatalogService(products=request.app.state.products)


def get_order_service(request: Request) -> OrderService:
    state = request.app.state
    return OrderService(orders=state.orders, products=state.products)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
