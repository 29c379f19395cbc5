"""Unit tests for the ReceiptNormalizer domain service."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.payment import PaymentMethod
from storefront.domain.service.receipt_normalizer import ReceiptNormalizer


@pytest.fixture
def normalizer() -> ReceiptNormalizer:
    return ReceiptNormalizer()


def _full_order() -> dict:
    return {
        "success": True,
        "data": {
            "order": {
                "_id": "o1",
                "status": "pending",
                "createdAt": "2024-05-01T10:30:00Z",
                "items": [
                    {
                        "product": {"_id": "p1", "name": "Brake Pad", "price": 50},
                        "quantity": 2,
                        "salePrice": 45,
                    },
                    {"productId": "p2", "name": "Oil Filter", "price": "12.50", "quantity": 1},
                ],
                "shippingAddress": {
                    "firstName": "Ann",
                    "lastName": "Lee",
                    "street": "1 Main St",
                    "district": "Central",
                },
                "paymentMethod": {"_id": "pm1", "brand": "Visa", "last4": "4242"},
                "shippingCost": 5,
                "tax": "8.25",
                "couponValue": 10,
                "adjustments": -0.25,
            }
        },
    }


# ── Envelope ─────────────────────────────────────────────────────────────────


class TestEnvelope:

    @pytest.mark.parametrize(
        "raw",
        [
            {"success": True, "data": {"order": {"_id": "o1"}}},
            {"data": {"result": {"_id": "o1"}}},
            {"data": {"_id": "o1"}},
            {"order": {"_id": "o1"}},
            {"result": {"order": {"_id": "o1"}}},
            {"_id": "o1"},
            {"orderId": "o1"},
        ],
    )
    def test_known_shapes_unwrap(self, normalizer, raw):
        assert normalizer.normalize(raw).id == "o1"

    @pytest.mark.parametrize("key", ["items", "orderItems", "products"])
    def test_item_aliases(self, normalizer, key):
        order = normalizer.normalize({key: [{"productId": "p1", "quantity": 3, "price": 2}]})
        assert len(order.items) == 1
        assert order.items[0].quantity.value == 3

    def test_missing_items_default_to_empty(self, normalizer):
        order = normalizer.normalize({"_id": "o1"})
        assert order.items == ()
        assert order.payable_total.is_zero

    def test_non_mapping_rejected(self, normalizer):
        with pytest.raises(ValidationError):
            normalizer.normalize(["not", "an", "order"])

    def test_order_instance_passes_through(self, normalizer):
        order = normalizer.normalize(_full_order())
        assert normalizer.normalize(order) is order


# ── Fields ───────────────────────────────────────────────────────────────────


class TestFields:

    def test_full_order_fields(self, normalizer):
        order = normalizer.normalize(_full_order())
        assert order.status == "pending"
        assert order.created_at == datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)
        assert order.shipping.full_name == "Ann Lee"
        assert order.payment_method == PaymentMethod(brand="Visa", last4="4242", id="pm1")
        assert order.items[0].name == "Brake Pad"
        assert order.items[0].product_id == "p1"
        assert order.items[1].name == "Oil Filter"

    def test_string_payment_stays_a_string(self, normalizer):
        order = normalizer.normalize({"paymentMethod": "mastercard"})
        assert order.payment_method == "mastercard"
        assert order.payment_label == "Mastercard"

    def test_unparseable_date_is_none(self, normalizer):
        assert normalizer.normalize({"createdAt": "yesterday"}).created_at is None


# ── Totals ───────────────────────────────────────────────────────────────────


class TestTotals:

    def test_explicit_total_wins(self, normalizer):
        order = normalizer.normalize({"total": 500, "subtotal": 100})
        assert order.payable_total.amount == Decimal("500")
        assert order.subtotal.amount == Decimal("100")

    def test_explicit_amount_wins(self, normalizer):
        order = normalizer.normalize({"amount": "42.10", "subtotal": 100, "tax": 9})
        assert order.payable_total.amount == Decimal("42.10")

    def test_percentage_discount(self, normalizer):
        order = normalizer.normalize({"discount": "10%", "subtotal": 200})
        assert order.order_discount.amount == Decimal("20")
        assert order.payable_total.amount == Decimal("180")

    def test_fractional_discount_is_a_rate(self, normalizer):
        order = normalizer.normalize({"discount": 0.25, "subtotal": 80})
        assert order.order_discount.amount == Decimal("20")

    def test_whole_number_discount_is_an_amount(self, normalizer):
        order = normalizer.normalize({"discount": 15, "subtotal": 80})
        assert order.order_discount.amount == Decimal("15")

    def test_first_non_negative_discount_alias(self, normalizer):
        order = normalizer.normalize(
            {"discountAmount": -5, "couponValue": 7, "couponAmount": 9, "subtotal": 50}
        )
        assert order.order_discount.amount == Decimal("7")

    def test_subtotal_priced_at_list_price(self, normalizer):
        order = normalizer.normalize(
            {"items": [{"productId": "p1", "price": 50, "salePrice": 40, "quantity": 2}]}
        )
        assert order.subtotal.amount == Decimal("100")
        assert order.line_discount.amount == Decimal("20")
        assert order.payable_total.amount == Decimal("80")

    def test_sale_discount_subtracted_once(self, normalizer):
        order = normalizer.normalize(
            {"items": [{"productId": "p1", "price": 100, "salePrice": 80, "quantity": 1}]}
        )
        assert order.payable_total.amount == Decimal("80")

    def test_sale_price_without_list_price(self, normalizer):
        order = normalizer.normalize({"items": [{"productId": "p1", "salePrice": 30, "quantity": 2}]})
        assert order.subtotal.amount == Decimal("60")
        assert order.line_discount.is_zero
        assert order.payable_total.amount == Decimal("60")

    def test_full_breakdown(self, normalizer):
        order = normalizer.normalize(_full_order())
        # 50 * 2 + 12.50
        assert order.subtotal.amount == Decimal("112.50")
        assert order.line_discount.amount == Decimal("10")
        assert order.order_discount.amount == Decimal("10")
        assert order.discount_total.amount == Decimal("20")
        # 112.50 + 5 + 8.25 - 20 - 0.25
        assert order.payable_total.amount == Decimal("105.50")

    def test_negative_adjustments_allowed(self, normalizer):
        order = normalizer.normalize({"subtotal": 10, "adjustment": -1.5})
        assert order.adjustments == Decimal("-1.5")
        assert order.payable_total.amount == Decimal("8.5")

    def test_payable_clamped_at_zero(self, normalizer):
        order = normalizer.normalize({"subtotal": 10, "discountAmount": 50})
        assert order.payable_total.is_zero

    def test_more_discount_never_raises_total(self, normalizer):
        base = {"subtotal": 100, "tax": 10, "shippingCost": 5}
        totals = [
            normalizer.normalize({**base, "discountAmount": d}).payable_total.amount
            for d in (0, 10, 50, 200)
        ]
        assert totals == sorted(totals, reverse=True)


# ── Idempotence ──────────────────────────────────────────────────────────────


class TestIdempotence:

    def test_normalizing_canonical_form_is_stable(self, normalizer):
        order = normalizer.normalize(_full_order())
        again = normalizer.normalize(order.to_raw())
        assert again == order

    def test_percentage_discount_not_applied_twice(self, normalizer):
        order = normalizer.normalize({"discount": "10%", "subtotal": 200})
        again = normalizer.normalize(order.to_raw())
        assert again.discount_total == order.discount_total
        assert again.payable_total == order.payable_total
