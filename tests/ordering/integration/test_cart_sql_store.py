"""Cart manager tests against SQLite through the SQLAlchemy store."""

from decimal import Decimal

import pytest

from catalogue.seed import seed_catalogue
from ordering.cart.manager import CART_LINES, CartManager
from ordering.session import FileSessionStore, MemorySessionStore
from storefront.store import SqlStore
from storefront.trace import TraceLog


@pytest.fixture()
async def sql_store(tmp_path):
    store = SqlStore.from_url(f"sqlite+aiosqlite:///{tmp_path / 'shop.db'}")
    await store.create_all()
    await seed_catalogue(store)
    yield store
    await store.close()


class TestCartOnSql:
    async def test_full_scenario(self, sql_store):
        manager = CartManager(sql_store, MemorySessionStore(), TraceLog())
        await manager.initialize()

        cart = await manager.add_item("macbook-air-13")
        cart = await manager.add_item("macbook-air-13")
        assert cart.lines[0].quantity == 2
        assert manager.total == Decimal("2198.00")

        line_id = cart.lines[0].line_id
        await manager.set_quantity(line_id, 5)
        assert manager.count == 5

        await manager.remove_item(line_id)
        assert manager.lines == ()
        assert await sql_store.find(CART_LINES) == []

    async def test_cart_survives_restart_with_persistent_session(self, sql_store, tmp_path):
        session_file = tmp_path / "session.json"
        first = CartManager(sql_store, FileSessionStore(session_file), TraceLog())
        await first.initialize()
        await first.add_item("imac-24")

        restarted = CartManager(sql_store, FileSessionStore(session_file), TraceLog())
        cart = await restarted.initialize()

        assert cart.cart_id == first.cart.cart_id
        assert [line.product_id for line in cart.lines] == ["imac-24"]
        assert cart.lines[0].product.image_url == "https://images.example.com/imac-24/front.jpg"
