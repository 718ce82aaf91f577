from __future__ import annotations

from fastapi import APIRouter, Query, status

from storefront.api.dependencies import CatalogServiceDep
from storefront.core.auth import AdminUser
from storefront.schemas.product import (
    ProductCreateRequest,
    ProductPage,
    ProductResponse,
    ProductUpdateRequest,
)

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=ProductPage)
def list_products(
    catalog: CatalogServiceDep,
    keyword: str | None = Query(default=None, description="Case-insensitive name filter."),
    page_number: int = Query(default=1, description="1-based page number."),
) -> ProductPage:
    return catalog.list_products(keyword, page_number)


@router.get("/featured", response_model=list[ProductResponse])
def list_featured(catalog: CatalogServiceDep) -> list[ProductResponse]:
    return catalog.list_featured()


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, catalog: CatalogServiceDep) -> ProductResponse:
    return catalog.get_product(product_id)


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreateRequest,
    admin: AdminUser,
    catalog: CatalogServiceDep,
) -> ProductResponse:
    return catalog.create_product(payload, user_id=admin.id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    payload: ProductUpdateRequest,
    admin: AdminUser,
    catalog: CatalogServiceDep,
) -> ProductResponse:
    return catalog.update_product(product_id, payload)


@router.delete("/{product_id}")
def delete_product(product_id: str, admin: AdminUser, catalog: CatalogServiceDep) -> dict:
    catalog.delete_product(product_id)
    return {"message": "Product removed"}
