"""Pydantic response schemas for the Catalogue API."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from catalogue.products import Product, ProductDetail

# --- Product Response Schemas ---


class ProductResponse(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "macbook-pro-16",
                    "name": "MacBook Pro 16-inch",
                    "slug": "macbook-pro-16",
                    "price": "2499.00",
                    "category": "Laptops",
                    "color": "Silver",
                    "storage": 1000,
                    "image_url": "https://images.example.com/macbook-pro-16/front.jpg",
                }
            ]
        }
    }

    product_id: str
    name: str
    slug: str
    price: Decimal
    category: str
    color: str | None = None
    storage: int | None = None
    stock_quantity: int = 0
    image_url: str | None = None

    @classmethod
    def from_product(cls, product: Product) -> ProductResponse:
        return cls.model_validate(product.model_dump())


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    count: int
    active_filters: int


class ProductDetailResponse(ProductResponse):
    description: str | None = None
    specs: dict[str, Any] | None = None
    images: list[str] = []

    @classmethod
    def from_detail(cls, detail: ProductDetail) -> ProductDetailResponse:
        return cls.model_validate(detail.model_dump())


# --- Filter Option Schemas ---


class FilterOptionsResponse(BaseModel):
    categories: list[str]
    colors: list[str]
    storage: list[str]
    price_ranges: list[str]
    sort_options: list[str]
