"""In-memory backing store.

Dict-based storage implementing the full ``BackingStore`` protocol. Not for
production use; all data is lost when the process exits.

Every operation completes without awaiting, so under asyncio each one is
atomic with respect to other tasks. That is what makes ``upsert`` a real
merge-on-conflict rather than a racy read-then-write.
"""

import re
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from sqlalchemy import Table

from storefront.errors import DuplicateKeyError, StoreError, UnknownCollectionError
from storefront.store.protocol import Row
from storefront.store.query import Op, Predicate, Query
from storefront.store.schema import COLLECTIONS, check_rules, primary_key, unique_keys

logger = structlog.get_logger(__name__)


def _like_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a LIKE pattern: ``%`` is any run of characters, ``_`` any single one."""
    translated = "".join(
        ".*" if char == "%" else "." if char == "_" else re.escape(char) for char in pattern
    )
    return re.compile(translated, re.IGNORECASE | re.DOTALL)


def _matches(row: Row, predicate: Predicate) -> bool:
    value = row.get(predicate.field)
    if predicate.op is Op.EQ:
        return value == predicate.value
    if predicate.op is Op.ICONTAINS:
        return value is not None and _like_pattern(str(predicate.value)).search(str(value)) is not None
    if predicate.op is Op.IN:
        return value in predicate.value
    raise StoreError(f"Unsupported operator: {predicate.op}")


class MemoryStore:
    def __init__(self, tables: Mapping[str, Table] | None = None) -> None:
        self._tables = dict(tables or COLLECTIONS)
        self._rows: dict[str, dict[str, Row]] = {name: {} for name in self._tables}

    def _table(self, collection: str) -> Table:
        try:
            return self._tables[collection]
        except KeyError:
            raise UnknownCollectionError(f"Unknown collection: {collection}") from None

    def _check_columns(self, table: Table, names: set[str]) -> None:
        unknown = names - set(table.c.keys())
        if unknown:
            raise StoreError(f"Unknown column(s) on {table.name}: {', '.join(sorted(unknown))}")

    def _select(self, collection: str, query: Query | None) -> list[Row]:
        table = self._table(collection)
        query = query or Query()
        self._check_columns(table, query.fields())

        rows = [row for row in self._rows[collection].values() if all(_matches(row, p) for p in query.predicates)]

        # Stable sorts applied last key first give a multi-key ordering; NULLs sort first
        for sort in reversed(query.sort):
            rows.sort(
                key=lambda row, field=sort.field: (row.get(field) is not None, row.get(field)),
                reverse=sort.descending,
            )

        if query.row_limit is not None:
            rows = rows[: query.row_limit]
        return [dict(row) for row in rows]

    def _with_defaults(self, table: Table, values: Mapping[str, Any]) -> Row:
        self._check_columns(table, set(values))
        row: Row = {}
        for column in table.c:
            if column.name in values:
                row[column.name] = values[column.name]
            elif column.default is not None and column.default.is_scalar:
                row[column.name] = column.default.arg
            else:
                row[column.name] = None

        pk = primary_key(table)
        if row[pk] is None:
            row[pk] = uuid.uuid4().hex
        return row

    def _conflicting(self, collection: str, row: Row, columns: tuple[str, ...], exclude: str | None = None) -> Row | None:
        pk = primary_key(self._table(collection))
        for existing in self._rows[collection].values():
            if exclude is not None and existing[pk] == exclude:
                continue
            if all(existing.get(column) == row.get(column) for column in columns):
                return existing
        return None

    def _check_rules(self, table: Table, row: Row) -> None:
        for name, column, compare, bound in check_rules(table):
            value = row.get(column)
            # NULL passes a CHECK, as in SQL
            if value is not None and not compare(value, bound):
                raise StoreError(f"Constraint violated on {table.name}: {name}")

    def _check_unique(self, collection: str, row: Row, exclude: str | None = None) -> None:
        table = self._table(collection)
        pk = primary_key(table)
        if exclude is None and row[pk] in self._rows[collection]:
            raise DuplicateKeyError(collection, (pk,))
        for columns in unique_keys(table):
            if self._conflicting(collection, row, columns, exclude=exclude) is not None:
                raise DuplicateKeyError(collection, columns)

    async def find(self, collection: str, query: Query | None = None) -> list[Row]:
        return self._select(collection, query)

    async def find_one(self, collection: str, query: Query) -> Row | None:
        rows = self._select(collection, query.limit(1))
        return rows[0] if rows else None

    async def insert(self, collection: str, values: Mapping[str, Any]) -> Row:
        table = self._table(collection)
        row = self._with_defaults(table, values)
        self._check_rules(table, row)
        self._check_unique(collection, row)
        self._rows[collection][row[primary_key(table)]] = row
        logger.debug("Row inserted", collection=collection, row_id=row[primary_key(table)])
        return dict(row)

    async def update(self, collection: str, row_id: str, values: Mapping[str, Any]) -> Row | None:
        table = self._table(collection)
        self._check_columns(table, set(values))
        existing = self._rows[collection].get(row_id)
        if existing is None:
            return None

        updated = {**existing, **values}
        self._check_rules(table, updated)
        self._check_unique(collection, updated, exclude=row_id)
        self._rows[collection][row_id] = updated
        return dict(updated)

    async def delete(self, collection: str, row_id: str) -> bool:
        self._table(collection)
        return self._rows[collection].pop(row_id, None) is not None

    async def upsert(
        self,
        collection: str,
        values: Mapping[str, Any],
        conflict_on: Sequence[str],
        increment: str,
    ) -> Row:
        table = self._table(collection)
        row = self._with_defaults(table, values)
        existing = self._conflicting(collection, row, tuple(conflict_on))
        if existing is None:
            self._check_rules(table, row)
            self._check_unique(collection, row)
            self._rows[collection][row[primary_key(table)]] = row
            return dict(row)

        merged = {**existing, increment: (existing.get(increment) or 0) + values[increment]}
        self._check_rules(table, merged)
        existing.update(merged)
        return dict(existing)

    async def close(self) -> None:
        return None

    def reset(self) -> None:
        """Drop every row in every collection."""
        for rows in self._rows.values():
            rows.clear()
