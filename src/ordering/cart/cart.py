"""Cart aggregate: the in-memory projection of one session's cart.

Instances are immutable snapshots. The manager replaces the whole aggregate
after every reload instead of patching lines, so there is exactly one source
of truth: the store of record.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProductSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    name: str
    price: Decimal
    slug: str
    image_url: str | None = None


class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_id: str
    product_id: str
    quantity: int = Field(ge=1)
    product: ProductSnapshot

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


class CartAggregate(BaseModel):
    model_config = ConfigDict(frozen=True)

    cart_id: str
    session_id: str
    lines: tuple[CartLine, ...] = ()

    @model_validator(mode="after")
    def one_line_per_product(self) -> "CartAggregate":
        product_ids = [line.product_id for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("A cart holds at most one line per product")
        return self

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))

    def line(self, line_id: str) -> CartLine | None:
        return next((line for line in self.lines if line.line_id == line_id), None)

    def line_for_product(self, product_id: str) -> CartLine | None:
        return next((line for line in self.lines if line.product_id == product_id), None)
