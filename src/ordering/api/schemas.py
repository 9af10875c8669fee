"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the cart aggregate so the
aggregate can change shape without breaking clients.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from ordering.cart.cart import CartAggregate, CartLine
from ordering.cart.summary import CartSummary


# ---------------------------------------------------------------------------
# Cart requests
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str = Field(min_length=1)


class UpdateCartQuantityRequest(BaseModel):
    """A quantity of zero or less removes the line."""

    quantity: int


# ---------------------------------------------------------------------------
# Cart responses
# ---------------------------------------------------------------------------
class CartLineResponse(BaseModel):
    line_id: str
    product_id: str
    name: str
    slug: str
    price: Decimal
    quantity: int
    subtotal: Decimal
    image_url: str | None = None

    @classmethod
    def from_line(cls, line: CartLine) -> "CartLineResponse":
        return cls(
            line_id=line.line_id,
            product_id=line.product_id,
            name=line.product.name,
            slug=line.product.slug,
            price=line.product.price,
            quantity=line.quantity,
            subtotal=line.subtotal,
            image_url=line.product.image_url,
        )


class CartResponse(BaseModel):
    cart_id: str
    lines: list[CartLineResponse]
    count: int
    total: Decimal

    @classmethod
    def from_cart(cls, cart: CartAggregate) -> "CartResponse":
        return cls(
            cart_id=cart.cart_id,
            lines=[CartLineResponse.from_line(line) for line in cart.lines],
            count=cart.count,
            total=cart.total,
        )


class CartSummaryResponse(BaseModel):
    item_count: int
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal

    @classmethod
    def from_summary(cls, summary: CartSummary) -> "CartSummaryResponse":
        return cls.model_validate(summary.model_dump())
