from storefront.store.memory import MemoryStore
from storefront.store.protocol import BackingStore, Row
from storefront.store.query import Direction, Op, Predicate, Query, Sort
from storefront.store.sql import SqlStore

__all__ = [
    "BackingStore",
    "Direction",
    "MemoryStore",
    "Op",
    "Predicate",
    "Query",
    "Row",
    "Sort",
    "SqlStore",
]
