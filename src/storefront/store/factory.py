"""Build the configured backing store."""

import structlog

from storefront.settings import Settings
from storefront.store.memory import MemoryStore
from storefront.store.protocol import BackingStore
from storefront.store.sql import SqlStore

logger = structlog.get_logger(__name__)


async def create_store(settings: Settings) -> BackingStore:
    """Return the store named by ``settings.database_url``.

    SQL stores get their schema created on the way out, so a fresh SQLite file
    is usable immediately.
    """
    if settings.uses_memory_store:
        logger.info("Using in-memory backing store")
        return MemoryStore()

    store = SqlStore.from_url(settings.database_url)
    await store.create_all()
    logger.info("Using SQL backing store", dialect=store.engine.dialect.name)
    return store
