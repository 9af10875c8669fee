"""Store-agnostic query description.

A ``Query`` is a conjunction of predicates plus an ordered list of sort keys
and an optional row limit. Both store providers execute the same description,
so code that builds queries never depends on which provider is configured.

Lookups follow the ``field__op`` convention::

    Query().filter(category="Laptops", color__in=["Silver"]).order_by("-price")
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class Op(Enum):
    EQ = "eq"
    # Case-insensitive LIKE around the value: ``%`` and ``_`` stay wildcards
    ICONTAINS = "icontains"
    IN = "in"


class Direction(Enum):
    ASC = "ASC"
    DESC = "DESC"


class Predicate(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    op: Op = Op.EQ
    value: Any = None


class Sort(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: str
    direction: Direction = Direction.ASC

    @property
    def descending(self) -> bool:
        return self.direction is Direction.DESC


class Query(BaseModel):
    model_config = ConfigDict(frozen=True)

    predicates: tuple[Predicate, ...] = ()
    sort: tuple[Sort, ...] = ()
    row_limit: int | None = None

    def where(self, predicate: Predicate) -> "Query":
        if predicate.op is Op.IN:
            predicate = predicate.model_copy(update={"value": tuple(predicate.value)})
        return self.model_copy(update={"predicates": (*self.predicates, predicate)})

    def filter(self, **lookups: Any) -> "Query":
        query = self
        for key, value in lookups.items():
            field, _, lookup = key.partition("__")
            query = query.where(Predicate(field=field, op=Op(lookup or "eq"), value=value))
        return query

    def sorted_by(self, sort: Sort) -> "Query":
        return self.model_copy(update={"sort": (*self.sort, sort)})

    def order_by(self, *fields: str) -> "Query":
        """Append sort keys; a leading ``-`` sorts descending."""
        query = self
        for field in fields:
            if field.startswith("-"):
                query = query.sorted_by(Sort(field=field[1:], direction=Direction.DESC))
            else:
                query = query.sorted_by(Sort(field=field))
        return query

    def limit(self, count: int) -> "Query":
        return self.model_copy(update={"row_limit": count})

    def fields(self) -> set[str]:
        return {p.field for p in self.predicates} | {s.field for s in self.sort}
