"""Collection schema shared by every store provider.

The SQL provider creates these tables; the memory provider reads the same
metadata for primary keys, unique constraints, column defaults and the
single-comparison check constraints, so both enforce identical constraints.
"""

from collections.abc import Callable
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql.elements import BinaryExpression

metadata = MetaData()

products = Table(
    "products",
    metadata,
    Column("product_id", String(64), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("slug", String(255), nullable=False),
    Column("description", Text),
    Column("price", Numeric(10, 2), nullable=False),
    Column("category", String(64), nullable=False),
    Column("color", String(64)),
    Column("storage", Integer),
    Column("stock_quantity", Integer, nullable=False, default=0),
    Column("specs", JSON),
    UniqueConstraint("slug", name="uq_products_slug"),
)

product_images = Table(
    "product_images",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("product_id", String(64), nullable=False, index=True),
    Column("image_url", String(1024), nullable=False),
    Column("is_primary", Boolean, nullable=False, default=False),
    Column("sort_order", Integer, nullable=False, default=0),
)

carts = Table(
    "carts",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("session_id", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True)),
    UniqueConstraint("session_id", name="uq_carts_session_id"),
)

cart_lines = Table(
    "cart_lines",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("cart_id", String(64), nullable=False, index=True),
    Column("product_id", String(64), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("added_at", DateTime(timezone=True)),
    UniqueConstraint("cart_id", "product_id", name="uq_cart_lines_cart_product"),
)
cart_lines.append_constraint(CheckConstraint(cart_lines.c.quantity > 0, name="ck_cart_lines_quantity_positive"))

COLLECTIONS: dict[str, Table] = {table.name: table for table in metadata.sorted_tables}


def primary_key(table: Table) -> str:
    return next(iter(table.primary_key.columns)).name


def unique_keys(table: Table) -> list[tuple[str, ...]]:
    return [
        tuple(column.name for column in constraint.columns)
        for constraint in table.constraints
        if isinstance(constraint, UniqueConstraint)
    ]


def check_rules(table: Table) -> list[tuple[str, str, Callable[[Any, Any], bool], Any]]:
    """``(name, column, operator, bound)`` for every ``column <op> literal`` check."""
    rules = []
    for constraint in table.constraints:
        if isinstance(constraint, CheckConstraint) and isinstance(constraint.sqltext, BinaryExpression):
            expression = constraint.sqltext
            rules.append((constraint.name, expression.left.name, expression.operator, expression.right.value))
    return rules
