"""Product listing and detail reads against the backing store."""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from catalogue.compiler import PRODUCTS, compile_filters
from catalogue.filters import FilterState
from storefront.store import BackingStore, Query
from storefront.trace import TraceLog

logger = structlog.get_logger(__name__)

PRODUCT_IMAGES = "product_images"
PRODUCT_DETAIL_ACTION = "View Product Details"


class Product(BaseModel):
    """Listing card: one product row plus its primary image."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    slug: str
    description: str | None = None
    price: Decimal
    category: str
    color: str | None = None
    storage: int | None = None
    stock_quantity: int = 0
    specs: dict[str, Any] | None = None
    image_url: str | None = None


class ProductDetail(Product):
    images: tuple[str, ...] = ()


async def primary_image_urls(store: BackingStore, product_ids: Iterable[str]) -> dict[str, str]:
    """Map each product id to its primary image url, where it has one."""
    ids = tuple(dict.fromkeys(product_ids))
    if not ids:
        return {}
    rows = await store.find(PRODUCT_IMAGES, Query().filter(product_id__in=ids, is_primary=True))
    urls: dict[str, str] = {}
    for row in rows:
        urls.setdefault(row["product_id"], row["image_url"])
    return urls


class ProductCatalog:
    def __init__(self, store: BackingStore, trace_log: TraceLog) -> None:
        self._store = store
        self._trace_log = trace_log

    async def search(self, state: FilterState) -> list[Product]:
        """Run the filtered, sorted product listing for ``state``."""
        compiled = compile_filters(state, self._trace_log)
        rows = await self._store.find(PRODUCTS, compiled.query)
        images = await primary_image_urls(self._store, (row["product_id"] for row in rows))

        logger.debug("Products listed", count=len(rows), active_filters=state.active_filter_count)
        return [Product(**row, image_url=images.get(row["product_id"])) for row in rows]

    async def get_by_slug(self, slug: str) -> ProductDetail | None:
        self._trace_log.log_action(
            PRODUCT_DETAIL_ACTION,
            "SELECT * FROM products WHERE slug = '<slug>' LIMIT 1",
            {"slug": slug},
        )

        row = await self._store.find_one(PRODUCTS, Query().filter(slug=slug))
        if row is None:
            logger.info("Product not found", slug=slug)
            return None

        image_rows = await self._store.find(
            PRODUCT_IMAGES,
            Query().filter(product_id=row["product_id"]).order_by("sort_order"),
        )
        images = tuple(image["image_url"] for image in image_rows)
        primary = next((image["image_url"] for image in image_rows if image["is_primary"]), None)
        return ProductDetail(**row, image_url=primary or (images[0] if images else None), images=images)
