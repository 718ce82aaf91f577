"""Pydantic schemas for the product catalog."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, computed_field


class ProductCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: float = Field(..., ge=0)
    image: str = ""
    stock: int = Field(default=0, ge=0)
    is_featured: bool = False


class ProductUpdateRequest(BaseModel):
    """Partial product update; ``None`` keeps the current value."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    image: str | None = None
    stock: int | None = Field(default=None, ge=0)
    is_featured: bool | None = None


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    price: float
    image: str = ""
    stock: int = 0
    is_featured: bool = False
    user_id: str | None = None
    created_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def count_in_stock(self) -> int:
        """Alias of ``stock`` used by storefront cart validation."""
        return self.stock


class ProductPage(BaseModel):
    products: list[ProductResponse]
    page: int
    pages: int
