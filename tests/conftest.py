import asyncio
import inspect
import os
from pathlib import Path

import pytest

from catalogue.seed import seed_catalogue
from ordering.cart.manager import CartManager
from ordering.session import MemorySessionStore
from storefront.errors import StoreUnavailableError
from storefront.store import MemoryStore
from storefront.trace import TraceLog


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Pins STOREFRONT_ENV so settings built during the run pick the quiet test
    logging profile and never touch a developer's database.
    """
    os.environ["STOREFRONT_ENV"] = session.config.option.env
    os.environ["STOREFRONT_DATABASE_URL"] = "memory://"
    os.environ.pop("STOREFRONT_SESSION_FILE", None)


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Store doubles
# ---------------------------------------------------------------------------
class YieldingStore:
    """Delegating store that suspends before every call.

    The memory store never awaits, so without this wrapper concurrent tasks
    could never interleave between store calls.
    """

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def __getattr__(self, name):
        target = getattr(self.inner, name)
        if not inspect.iscoroutinefunction(target):
            return target

        async def call(*args, **kwargs):
            self.calls.append(name)
            await asyncio.sleep(0)
            return await target(*args, **kwargs)

        return call


class FailingStore(YieldingStore):
    """Delegating store whose chosen operations raise ``StoreUnavailableError``."""

    def __init__(self, inner):
        super().__init__(inner)
        self.failing = set()

    def fail(self, *operations):
        self.failing.update(operations)

    def heal(self):
        self.failing.clear()

    def __getattr__(self, name):
        if name in self.failing:

            async def broken(*args, **kwargs):
                self.calls.append(name)
                raise StoreUnavailableError(f"{name} unavailable")

            return broken
        return super().__getattr__(name)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def trace_log():
    return TraceLog(enabled=True)


@pytest.fixture()
async def store():
    memory = MemoryStore()
    await seed_catalogue(memory)
    return memory


@pytest.fixture()
def session_store():
    return MemorySessionStore()


@pytest.fixture()
def cart_manager(store, session_store, trace_log):
    return CartManager(store, session_store, trace_log)


@pytest.fixture()
async def ready_cart(cart_manager):
    await cart_manager.initialize()
    return cart_manager


@pytest.fixture()
def yielding_store(store):
    return YieldingStore(store)


@pytest.fixture()
def failing_store(store):
    return FailingStore(store)
