"""Application tests for ProductCatalog against the in-memory store.

Covers:
- Listing returns exactly the rows the traced query describes
- Primary images are attached to listing cards
- Detail lookup by slug, including the not-found case
- Seeding is idempotent
"""

from decimal import Decimal

import pytest

from catalogue.compiler import FILTER_ACTION
from catalogue.filters import FilterState
from catalogue.products import PRODUCT_DETAIL_ACTION, ProductCatalog
from catalogue.seed import DEMO_PRODUCTS, seed_catalogue


@pytest.fixture()
def catalog(store, trace_log):
    return ProductCatalog(store, trace_log)


class TestSearch:
    async def test_default_listing_returns_everything_by_name(self, catalog):
        products = await catalog.search(FilterState())
        names = [p.name for p in products]
        assert len(products) == len(DEMO_PRODUCTS)
        assert names == sorted(names)

    async def test_laptops_silver_price_desc(self, catalog, trace_log):
        state = FilterState(category="Laptops", colors=("Silver",), sort_by="price-desc")
        products = await catalog.search(state)

        assert [p.product_id for p in products] == ["macbook-pro-16"]
        (entry,) = trace_log.history()
        assert entry.action == FILTER_ACTION
        assert entry.rendered.splitlines() == [
            "SELECT * FROM products WHERE 1=1",
            "AND category = 'Laptops'",
            "AND color IN ('Silver')",
            "ORDER BY price DESC",
        ]

    async def test_search_is_case_insensitive(self, catalog):
        products = await catalog.search(FilterState(search="IPHONE"))
        assert {p.product_id for p in products} == {"iphone-15", "iphone-15-pro"}

    @pytest.mark.parametrize(("search", "expected"), [("_", 9), ("%", 9), ("i_hone", 2), ("air%13", 1)])
    async def test_search_wildcards_match_the_traced_ilike(self, catalog, trace_log, search, expected):
        products = await catalog.search(FilterState(search=search))

        assert len(products) == expected
        assert f"AND name ILIKE '%{search}%'" in trace_log.history()[-1].rendered

    async def test_storage_filter_matches_terabytes(self, catalog):
        products = await catalog.search(FilterState(storage=("1TB",), sort_by="price-asc"))
        assert [p.product_id for p in products] == ["macbook-pro-14", "macbook-pro-16"]

    async def test_listing_cards_carry_primary_image(self, catalog):
        products = await catalog.search(FilterState(search="iPad"))
        assert products[0].image_url == "https://images.example.com/ipad-air/front.jpg"

    async def test_no_matches(self, catalog):
        assert await catalog.search(FilterState(category="Laptops", colors=("Pink",))) == []

    async def test_disabled_trace_still_lists(self, store, trace_log):
        trace_log.disable()
        products = await ProductCatalog(store, trace_log).search(FilterState(category="Audio"))
        assert [p.product_id for p in products] == ["airpods-pro"]
        assert trace_log.history() == []


class TestDetail:
    async def test_get_by_slug(self, catalog, trace_log):
        detail = await catalog.get_by_slug("macbook-air-13")

        assert detail.name == "MacBook Air 13"
        assert detail.price == Decimal("1099.00")
        assert detail.images == (
            "https://images.example.com/macbook-air-13/front.jpg",
            "https://images.example.com/macbook-air-13/back.jpg",
        )
        assert detail.image_url == detail.images[0]

        (entry,) = trace_log.history()
        assert entry.action == PRODUCT_DETAIL_ACTION
        assert entry.rendered == "SELECT * FROM products WHERE slug = 'macbook-air-13' LIMIT 1"

    async def test_unknown_slug(self, catalog):
        assert await catalog.get_by_slug("nokia-3310") is None


class TestSeed:
    async def test_seeding_twice_adds_nothing_new(self, store):
        assert await seed_catalogue(store) == 0
        assert len(await store.find("products")) == len(DEMO_PRODUCTS)
