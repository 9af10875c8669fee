"""Tests for the CartAggregate snapshot and its derived values."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from ordering.cart.cart import CartAggregate, CartLine, ProductSnapshot


def _line(line_id, product_id, price, quantity):
    return CartLine(
        line_id=line_id,
        product_id=product_id,
        quantity=quantity,
        product=ProductSnapshot(product_id=product_id, name=product_id.title(), price=Decimal(price), slug=product_id),
    )


class TestCartLine:
    def test_subtotal(self):
        assert _line("l1", "ipad", "599.00", 3).subtotal == Decimal("1797.00")

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            _line("l1", "ipad", "599.00", 0)


class TestCartAggregate:
    def test_empty_cart(self):
        cart = CartAggregate(cart_id="c1", session_id="s1")
        assert cart.count == 0
        assert cart.total == Decimal("0")
        assert cart.lines == ()

    def test_count_and_total_derive_from_lines(self):
        cart = CartAggregate(
            cart_id="c1",
            session_id="s1",
            lines=(_line("l1", "ipad", "599.00", 2), _line("l2", "airpods", "249.00", 1)),
        )
        assert cart.count == 3
        assert cart.total == Decimal("1447.00")

    def test_one_line_per_product(self):
        with pytest.raises(ValidationError):
            CartAggregate(
                cart_id="c1",
                session_id="s1",
                lines=(_line("l1", "ipad", "599.00", 1), _line("l2", "ipad", "599.00", 1)),
            )

    def test_line_lookups(self):
        line = _line("l1", "ipad", "599.00", 1)
        cart = CartAggregate(cart_id="c1", session_id="s1", lines=(line,))

        assert cart.line("l1") == line
        assert cart.line("missing") is None
        assert cart.line_for_product("ipad") == line
        assert cart.line_for_product("imac") is None
