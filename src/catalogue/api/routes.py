"""FastAPI endpoints for the Catalogue domain."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from catalogue.api.schemas import (
    FilterOptionsResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductResponse,
)
from catalogue.filters import (
    ALL_CATEGORIES,
    ALL_PRICES,
    CATEGORIES,
    COLORS,
    DEFAULT_SORT,
    PRICE_RANGES,
    SORT_OPTIONS,
    STORAGE_OPTIONS,
    FilterState,
)
from storefront.api.dependencies import get_storefront
from storefront.container import Storefront
from storefront.errors import InvalidFilterError

product_router = APIRouter(prefix="/products", tags=["products"])


def filter_state(
    search: str = "",
    category: str = ALL_CATEGORIES,
    sort_by: str = DEFAULT_SORT,
    price_range: str = ALL_PRICES,
    colors: list[str] = Query([]),
    storage: list[str] = Query([]),
) -> FilterState:
    try:
        return FilterState(
            search=search,
            category=category,
            sort_by=sort_by,
            price_range=price_range,
            colors=tuple(colors),
            storage=tuple(storage),
        )
    except ValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        raise InvalidFilterError(messages) from exc


# --- Product endpoints ---


@product_router.get("", response_model=ProductListResponse)
async def list_products(
    state: FilterState = Depends(filter_state),
    storefront: Storefront = Depends(get_storefront),
) -> ProductListResponse:
    products = await storefront.catalog.search(state)
    return ProductListResponse(
        products=[ProductResponse.from_product(product) for product in products],
        count=len(products),
        active_filters=state.active_filter_count,
    )


@product_router.get("/filters", response_model=FilterOptionsResponse)
async def filter_options() -> FilterOptionsResponse:
    return FilterOptionsResponse(
        categories=list(CATEGORIES),
        colors=list(COLORS),
        storage=list(STORAGE_OPTIONS),
        price_ranges=list(PRICE_RANGES),
        sort_options=list(SORT_OPTIONS),
    )


@product_router.get("/{slug}", response_model=ProductDetailResponse)
async def get_product(slug: str, storefront: Storefront = Depends(get_storefront)) -> ProductDetailResponse:
    detail = await storefront.catalog.get_by_slug(slug)
    if detail is None:
        raise HTTPException(status_code=404, detail=f"Product {slug} not found")
    return ProductDetailResponse.from_detail(detail)
