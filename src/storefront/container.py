"""Application container that builds and owns the process-wide components.

There is one ``TraceLog`` per process; it lives here and is passed to the
catalogue and the cart manager explicitly rather than imported as a global.
"""

import structlog

from catalogue.products import ProductCatalog
from catalogue.seed import seed_catalogue
from ordering.cart.manager import CartManager
from ordering.session import FileSessionStore, MemorySessionStore, SessionStore
from storefront.settings import Settings
from storefront.store import BackingStore
from storefront.store.factory import create_store
from storefront.trace import TraceLog

logger = structlog.get_logger(__name__)


class Storefront:
    def __init__(
        self,
        settings: Settings,
        store: BackingStore,
        session_store: SessionStore,
        trace_log: TraceLog | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.session_store = session_store
        self.trace_log = trace_log or TraceLog(enabled=settings.trace_enabled)
        self.catalog = ProductCatalog(store, self.trace_log)
        self.cart = CartManager(store, session_store, self.trace_log)

    @classmethod
    async def create(cls, settings: Settings) -> "Storefront":
        store = await create_store(settings)
        if settings.seed_catalogue:
            await seed_catalogue(store)

        session_store: SessionStore
        if settings.session_file:
            session_store = FileSessionStore(settings.session_file)
        else:
            session_store = MemorySessionStore()

        return cls(settings, store, session_store)

    async def close(self) -> None:
        await self.store.close()
        logger.info("Storefront closed")
