"""SQL backing store on SQLAlchemy's asyncio extension.

Works against SQLite (``sqlite+aiosqlite://``) and PostgreSQL
(``postgresql+asyncpg://``). Unique constraints live in the database and the
cart-line upsert is a native ``INSERT ... ON CONFLICT DO UPDATE``, so
concurrent writers converge without any client-side locking.
"""

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from sqlalchemy import Table, delete, insert, make_url, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.errors import DuplicateKeyError, StoreError, StoreUnavailableError, UnknownCollectionError
from storefront.store.protocol import Row
from storefront.store.query import Op, Query
from storefront.store.schema import COLLECTIONS, metadata, primary_key

logger = structlog.get_logger(__name__)

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _integrity_error(collection: str, exc: IntegrityError) -> StoreError:
    if "unique" in str(exc.orig).lower() or "duplicate key" in str(exc.orig).lower():
        return DuplicateKeyError(collection, ())
    return StoreError(f"Constraint violated on {collection}: {exc.orig}")


class SqlStore:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "SqlStore":
        parsed = make_url(url)
        if parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees a fresh empty database
            engine_kwargs.setdefault("poolclass", StaticPool)
        return cls(create_async_engine(url, **engine_kwargs))

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def create_all(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def drop_all(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(metadata.drop_all)

    async def close(self) -> None:
        await self._engine.dispose()

    def _table(self, collection: str) -> Table:
        try:
            return COLLECTIONS[collection]
        except KeyError:
            raise UnknownCollectionError(f"Unknown collection: {collection}") from None

    def _column(self, table: Table, name: str):
        try:
            return table.c[name]
        except KeyError:
            raise StoreError(f"Unknown column on {table.name}: {name}") from None

    def _select(self, table: Table, query: Query):
        stmt = select(table)
        for predicate in query.predicates:
            column = self._column(table, predicate.field)
            if predicate.op is Op.EQ:
                stmt = stmt.where(column == predicate.value)
            elif predicate.op is Op.ICONTAINS:
                stmt = stmt.where(column.icontains(predicate.value))
            elif predicate.op is Op.IN:
                stmt = stmt.where(column.in_(list(predicate.value)))
        for sort in query.sort:
            column = self._column(table, sort.field)
            stmt = stmt.order_by(column.desc() if sort.descending else column.asc())
        if query.row_limit is not None:
            stmt = stmt.limit(query.row_limit)
        return stmt

    async def _fetch_by_pk(self, conn: AsyncConnection, table: Table, row_id: str) -> Row | None:
        pk = table.c[primary_key(table)]
        result = await conn.execute(select(table).where(pk == row_id))
        row = result.mappings().first()
        return dict(row) if row is not None else None

    def _check_columns(self, table: Table, values: Mapping[str, Any]) -> None:
        for name in values:
            self._column(table, name)

    async def find(self, collection: str, query: Query | None = None) -> list[Row]:
        table = self._table(collection)
        stmt = self._select(table, query or Query())
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Query on {collection} failed: {exc}") from exc

    async def find_one(self, collection: str, query: Query) -> Row | None:
        rows = await self.find(collection, query.limit(1))
        return rows[0] if rows else None

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Row:
        table = self._table(collection)
        self._check_columns(table, values)
        pk = primary_key(table)
        row = dict(values)
        if row.get(pk) is None:
            row[pk] = uuid.uuid4().hex

        try:
            async with self._engine.begin() as conn:
                await conn.execute(insert(table).values(**row))
                inserted = await self._fetch_by_pk(conn, table, row[pk])
        except IntegrityError as exc:
            raise _integrity_error(collection, exc) from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Insert into {collection} failed: {exc}") from exc

        logger.debug("Row inserted", collection=collection, row_id=row[pk])
        return inserted

    async def update(self, collection: str, row_id: str, values: Mapping[str, Any]) -> Row | None:
        table = self._table(collection)
        self._check_columns(table, values)
        pk = table.c[primary_key(table)]

        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(update(table).where(pk == row_id).values(**values))
                if result.rowcount == 0:
                    return None
                return await self._fetch_by_pk(conn, table, row_id)
        except IntegrityError as exc:
            raise _integrity_error(collection, exc) from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Update of {collection} failed: {exc}") from exc

    async def delete(self, collection: str, row_id: str) -> bool:
        table = self._table(collection)
        pk = table.c[primary_key(table)]

        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(delete(table).where(pk == row_id))
                return result.rowcount > 0
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Delete from {collection} failed: {exc}") from exc

    async def upsert(
        self,
        collection: str,
        values: Mapping[str, Any],
        conflict_on: Sequence[str],
        increment: str,
    ) -> Row:
        table = self._table(collection)
        self._check_columns(table, values)
        dialect = self._engine.dialect.name
        try:
            dialect_insert = _UPSERT_DIALECTS[dialect]
        except KeyError:
            raise StoreError(f"Upsert is not supported on {dialect}") from None

        pk = primary_key(table)
        row = dict(values)
        if row.get(pk) is None:
            row[pk] = uuid.uuid4().hex

        stmt = dialect_insert(table).values(**row)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c[name] for name in conflict_on],
            set_={increment: table.c[increment] + stmt.excluded[increment]},
        )

        lookup = select(table)
        for name in conflict_on:
            lookup = lookup.where(table.c[name] == row[name])

        try:
            async with self._engine.begin() as conn:
                await conn.execute(stmt)
                result = await conn.execute(lookup)
                return dict(result.mappings().one())
        except SQLAlchemyError as exc:
            raise StoreUnavailableError(f"Upsert into {collection} failed: {exc}") from exc
