"""Product catalog service: paginated search, featured list, admin CRUD."""

from __future__ import annotations

import logging
import math

from storefront.adapters.store.base import AbstractProductStore, ProductRecord
from storefront.core.config import settings
from storefront.core.errors import NotFoundAppError
from storefront.schemas.product import (
    ProductCreateRequest,
    ProductPage,
    ProductResponse,
    ProductUpdateRequest,
)

logger = logging.getLogger(__name__)


def to_product_response(record: ProductRecord) -> ProductResponse:
    return ProductResponse.model_validate(record.model_dump())


class CatalogService:
    def __init__(self, products: AbstractProductStore) -> None:
        self.products = products

    def list_products(self, keyword: str | None = None, page: int = 1) -> ProductPage:
        """Return one page of products whose name contains ``keyword``.

        Pages are 1-based; values below 1 are treated as the first page.
        """
        page_size = settings.app.products_page_size
        page = max(1, page)
        total = self.products.count(keyword)
        records = self.products.search(keyword, offset=page_size * (page - 1), limit=page_size)
        return ProductPage(
            products=[to_product_response(r) for r in records],
            page=page,
            pages=math.ceil(total / page_size),
        )

    def list_featured(self) -> list[ProductResponse]:
        records = self.products.list_featured(settings.app.featured_products_limit)
        return [to_product_response(r) for r in records]

    def get_product(self, product_id: str) -> ProductResponse:
        return to_product_response(self._require(product_id))

    def create_product(self, data: ProductCreateRequest, *, user_id: str) -> ProductResponse:
        record = ProductRecord(**data.model_dump(), user_id=user_id)
        self.products.save(record)
        logger.info("catalog.product_created", extra={"product_id": record.id, "user_id": user_id})
        return to_product_response(record)

    def update_product(self, product_id: str, data: ProductUpdateRequest) -> ProductResponse:
        record = self._require(product_id)
        changes = data.model_dump(exclude_none=True)
        updated = record.model_copy(update=changes)
        self.products.save(updated)
        logger.info(
            "catalog.product_updated",
            extra={"product_id": product_id, "fields": sorted(changes)},
        )
        return to_product_response(updated)

    def delete_product(self, product_id: str) -> None:
        if not self.products.delete(product_id):
            raise NotFoundAppError(
                code="product_not_found",
                message="Product not found",
                details={"resource_id": product_id},
            )
        logger.info("catalog.product_deleted", extra={"product_id": product_id})

    def _require(self, product_id: str) -> ProductRecord:
        record = self.products.get(product_id)
        if record is None:
            raise NotFoundAppError(
                code="product_not_found",
                message="Product not found",
                details={"resource_id": product_id},
            )
        return record
