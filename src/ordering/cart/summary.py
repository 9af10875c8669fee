"""Order summary shown on the cart and checkout pages.

Shipping is always free and tax is a single flat rate; there is no tax-rule
engine behind this.
"""

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict

from ordering.cart.cart import CartAggregate

CENTS = Decimal("0.01")


def _money(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class CartSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_count: int
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal


def summarize(cart: CartAggregate, tax_rate: Decimal) -> CartSummary:
    subtotal = _money(cart.total)
    shipping = Decimal("0.00")
    tax = _money(subtotal * tax_rate)
    return CartSummary(
        item_count=cart.count,
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=subtotal + shipping + tax,
    )
