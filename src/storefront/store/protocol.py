"""Backing store protocol.

The store of record is row-oriented: named collections of dict rows, each
with a string primary key. Implementations: ``SqlStore`` (SQLite or
PostgreSQL through SQLAlchemy) and ``MemoryStore`` (tests, demos).
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from storefront.store.query import Query

Row = dict[str, Any]


@runtime_checkable
class BackingStore(Protocol):
    async def find(self, collection: str, query: Query | None = None) -> list[Row]:
        """Return every row of ``collection`` matching ``query``, in query order."""
        ...

    async def find_one(self, collection: str, query: Query) -> Row | None:
        """Return the first matching row, or None."""
        ...

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Row:
        """Insert a row, generating its primary key when absent.

        Raises DuplicateKeyError when a unique constraint is violated.
        """
        ...

    async def update(self, collection: str, row_id: str, values: Mapping[str, Any]) -> Row | None:
        """Update a row by primary key. Returns the updated row, or None if absent."""
        ...

    async def delete(self, collection: str, row_id: str) -> bool:
        """Delete a row by primary key. Returns whether a row was removed."""
        ...

    async def upsert(
        self,
        collection: str,
        values: Mapping[str, Any],
        conflict_on: Sequence[str],
        increment: str,
    ) -> Row:
        """Insert ``values``; on a ``conflict_on`` clash add ``values[increment]`` to the existing row.

        The check and the write happen as one atomic step.
        """
        ...

    async def close(self) -> None:
        ...
