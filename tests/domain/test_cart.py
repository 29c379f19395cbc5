"""Unit tests for the Cart aggregate and CartLine."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import MAX_LINE_QUANTITY, Cart, CartLine
from storefront.domain.model.value_objects import Money, Quantity


def _line(
    product_id: str = "p1",
    qty: int = 1,
    price: str = "10.00",
    name: str = "Brake Pad",
    stock: int | None = None,
    image: str | None = "pad.png",
) -> CartLine:
    return CartLine(
        product_id=product_id,
        name=name,
        unit_price=Money.of(price),
        quantity=Quantity(qty),
        stock_available=stock,
        image_ref=image,
    )


# ── CartLine ─────────────────────────────────────────────────────────────────


class TestCartLine:

    def test_line_total(self):
        assert _line(qty=3, price="2.50").line_total == Money.of("7.50")

    def test_increment_capped_at_stock(self):
        line = _line(qty=2, stock=3)
        line.increment()
        line.increment()
        assert line.quantity.value == 3

    def test_increment_without_stock_capped_at_max(self):
        line = _line(qty=MAX_LINE_QUANTITY)
        line.increment()
        assert line.quantity.value == MAX_LINE_QUANTITY

    def test_decrement_floors_at_one(self):
        line = _line(qty=1)
        line.decrement()
        assert line.quantity.value == 1

    def test_placeholder_name_needs_enrichment(self):
        assert _line(name="Unnamed").needs_enrichment

    def test_zero_price_needs_enrichment(self):
        assert _line(price="0").needs_enrichment

    def test_missing_image_needs_enrichment(self):
        assert _line(image=None).needs_enrichment

    def test_complete_line_needs_nothing(self):
        assert not _line().needs_enrichment

    def test_with_details_never_overwrites_with_empty(self):
        line = _line(name="Brake Pad", price="10.00", image=None)
        merged = line.with_details(name=None, unit_price=Money.zero(), image_ref="new.png")
        assert merged.name == "Brake Pad"
        assert merged.unit_price == Money.of("10.00")
        assert merged.image_ref == "new.png"

    def test_to_raw_shape(self):
        assert _line(qty=2, stock=5).to_raw() == {
            "_id": "p1",
            "name": "Brake Pad",
            "price": 10,
            "qty": 2,
            "stock": 5,
            "imageUrl": "pad.png",
        }


# ── Cart ─────────────────────────────────────────────────────────────────────


class TestCart:

    def test_add_new_product_goes_first(self):
        cart = Cart()
        cart.add(_line("p1"))
        cart.add(_line("p2"))
        assert [line.product_id for line in cart.lines] == ["p2", "p1"]

    def test_add_existing_product_merges_quantity(self):
        cart = Cart()
        cart.add(_line("p1", qty=2))
        cart.add(_line("p1", qty=3))
        assert len(cart) == 1
        assert cart.lines[0].quantity.value == 5

    def test_update_quantity(self):
        cart = Cart([_line("p1", qty=2)])
        cart.update_quantity("p1", 1)
        assert cart.lines[0].quantity.value == 3

    def test_update_quantity_to_zero_removes_line(self):
        cart = Cart([_line("p1", qty=1), _line("p2")])
        cart.update_quantity("p1", -1)
        assert [line.product_id for line in cart.lines] == ["p2"]

    def test_update_unknown_product_rejected(self):
        with pytest.raises(ValidationError, match="not in the cart"):
            Cart().update_quantity("nope", 1)

    def test_count_and_subtotal(self):
        cart = Cart([_line("p1", qty=2, price="10.00"), _line("p2", qty=1, price="5.50")])
        assert cart.count == 3
        assert cart.subtotal.amount == Decimal("25.50")

    def test_clear(self):
        cart = Cart([_line("p1")])
        cart.clear()
        assert cart.is_empty
