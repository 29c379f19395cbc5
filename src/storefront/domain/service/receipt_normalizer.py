"""Domain service: Receipt Normalizer.

The backend has returned orders in several shapes over time: wrapped in
``{success, data: {order}}``, under ``data.result`` or ``order``, or bare;
with line items under ``items``, ``orderItems`` or ``products``; and with
discounts spread over a handful of differently-named fields.  This service
is the single boundary where all of that becomes a canonical ``Order``.

Totals precedence:

1. An explicit numeric ``total`` / ``amount`` is the payable amount, full
   stop.  The receipt must never show less than the customer was charged.
2. Otherwise ``subtotal + shipping + tax - discounts + adjustments``, where
   the subtotal is priced at list price so a sale-price discount is only
   subtracted once.

Normalizing an already-canonical order (or its ``to_raw()`` form) returns
an equal order.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping

from storefront.domain.exceptions import ValidationError
from storefront.domain.model import fields
from storefront.domain.model.address import ShippingAddress
from storefront.domain.model.order import Order, OrderItem
from storefront.domain.model.payment import PaymentMethod
from storefront.domain.model.value_objects import Money, Quantity

_HUNDRED = Decimal("100")


class ReceiptNormalizer:

    def normalize(self, raw: Order | Mapping[str, Any] | None) -> Order:
        """Convert any known order shape into a canonical Order."""
        if isinstance(raw, Order):
            return raw
        if not isinstance(raw, Mapping):
            raise ValidationError("Order payload must be a JSON object")

        body = self._unwrap(raw)
        items = [self._item(it) for it in self._raw_items(body) if isinstance(it, Mapping)]

        subtotal = self._subtotal(body, items)
        shipping_cost = Money.clamped(fields.first_number(body, fields.SHIPPING_COST) or Decimal("0"))
        tax = Money.clamped(fields.first_number(body, fields.TAX) or Decimal("0"))
        line_discount, order_discount, discount_total = self._discounts(body, items, subtotal)
        adjustments = fields.first_number(body, fields.ADJUSTMENTS) or Decimal("0")

        explicit_total = fields.first_number(body, fields.EXPLICIT_TOTAL)
        if explicit_total is not None:
            payable = Money.clamped(explicit_total)
        else:
            payable = Money.clamped(
                subtotal.amount
                + shipping_cost.amount
                + tax.amount
                - discount_total.amount
                + adjustments
            )

        return Order(
            id=fields.id_of(body, fields.ORDER_ID),
            status=self._status(body),
            created_at=self._created_at(body),
            items=tuple(items),
            shipping=self._shipping(body),
            payment_method=self._payment(body),
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            tax=tax,
            line_discount=line_discount,
            order_discount=order_discount,
            discount_total=discount_total,
            adjustments=adjustments,
            payable_total=payable,
        )

    # --- Envelope -------------------------------------------------------------

    @staticmethod
    def _unwrap(raw: Mapping[str, Any]) -> Mapping[str, Any]:
        """Peel response wrappers in fixed precedence order."""
        body = raw
        data = body.get("data")
        if isinstance(data, Mapping):
            if isinstance(data.get("order"), Mapping):
                body = data["order"]
            elif isinstance(data.get("result"), Mapping):
                body = data["result"]
            else:
                body = data
        if isinstance(body.get("order"), Mapping):
            body = body["order"]
        result = body.get("result")
        if isinstance(result, Mapping) and isinstance(result.get("order"), Mapping):
            body = result["order"]
        return body

    @staticmethod
    def _raw_items(body: Mapping[str, Any]) -> list[Any]:
        for key in fields.ORDER_ITEMS:
            value = body.get(key)
            if isinstance(value, list):
                return value
        return []

    # --- Items ----------------------------------------------------------------

    def _item(self, raw: Mapping[str, Any]) -> OrderItem:
        product = raw.get("product")
        if not isinstance(product, Mapping):
            product = raw.get("productId") if isinstance(raw.get("productId"), Mapping) else {}

        product_id = (
            fields.id_of(product, fields.ENTITY_ID)
            or fields.id_of(raw.get("productId"))
            or fields.id_of(raw.get("product_id"))
            or fields.id_of(raw.get("product"))
            or fields.id_of(raw, fields.ENTITY_ID)
        )
        name = (
            fields.first_truthy(product, fields.PRODUCT_NAME)
            or fields.first_truthy(raw, fields.PRODUCT_NAME)
            or product_id
            or "Item"
        )
        price = fields.first_truthy(product, ("price", "unitPrice")) or fields.first_truthy(
            raw, ("price", "unitPrice")
        )
        sale = fields.first_truthy(product, fields.SALE_PRICE) or fields.first_truthy(
            raw, fields.SALE_PRICE
        )
        sale_amount = fields.to_decimal(sale)
        image = fields.first_truthy(product, fields.IMAGE_REF) or fields.first_truthy(
            raw, fields.IMAGE_REF
        )
        if not image and isinstance(product.get("images"), list) and product["images"]:
            image = product["images"][0]

        return OrderItem(
            product_id=product_id,
            name=str(name),
            quantity=Quantity(max(fields.to_int(raw.get("quantity"), 1), 1)),
            unit_price=Money.clamped(fields.to_decimal(price) or Decimal("0")),
            sale_price=Money.clamped(sale_amount) if sale_amount is not None else None,
            image_ref=str(image) if image else None,
        )

    # --- Totals ---------------------------------------------------------------

    @staticmethod
    def _subtotal(body: Mapping[str, Any], items: list[OrderItem]) -> Money:
        explicit = fields.first_number(body, ("subtotal",))
        if explicit:
            return Money.clamped(explicit)
        result = Money.zero()
        for item in items:
            result = result + item.gross_total
        return result

    def _discounts(
        self,
        body: Mapping[str, Any],
        items: list[OrderItem],
        subtotal: Money,
    ) -> tuple[Money, Money, Money]:
        """Return (line discount, order discount, discount total)."""
        canonical = fields.first_number(body, ("discountTotal",))
        if canonical is not None:
            # Already normalized: the breakdown travels alongside the total.
            return (
                Money.clamped(fields.first_number(body, ("lineDiscount",)) or Decimal("0")),
                Money.clamped(fields.first_number(body, ("orderDiscount",)) or Decimal("0")),
                Money.clamped(canonical),
            )

        line = Money.zero()
        for item in items:
            line = line + item.line_discount

        order_level = self._explicit_discount(body) + self._rate_discount(body, subtotal)
        order_discount = Money.clamped(order_level)
        return line, order_discount, line + order_discount

    @staticmethod
    def _explicit_discount(body: Mapping[str, Any]) -> Decimal:
        """First non-negative amount across the known discount aliases."""
        for key in fields.DISCOUNT_AMOUNT:
            value = fields.to_decimal(body.get(key))
            if value is None or value < 0:
                continue
            if key == "discount" and 0 < value < 1:
                continue  # a fraction, handled as a rate
            return value
        return Decimal("0")

    @staticmethod
    def _rate_discount(body: Mapping[str, Any], subtotal: Money) -> Decimal:
        """Percentage string ("10%") or fraction (0.1) applied to subtotal."""
        discount = body.get("discount")
        rate: Decimal | None = None
        if isinstance(discount, str) and discount.strip().endswith("%"):
            pct = fields.to_decimal(discount.strip()[:-1])
            if pct is not None:
                rate = pct / _HUNDRED
        elif not isinstance(discount, (str, bool)):
            value = fields.to_decimal(discount)
            if value is not None and 0 < value < 1:
                rate = value
        if rate is None or rate <= 0:
            return Decimal("0")
        return subtotal.amount * rate

    # --- Other fields ---------------------------------------------------------

    @staticmethod
    def _status(body: Mapping[str, Any]) -> str | None:
        value = fields.first_truthy(body, fields.ORDER_STATUS)
        return str(value) if value else None

    @staticmethod
    def _created_at(body: Mapping[str, Any]) -> datetime | None:
        value = fields.first_truthy(body, fields.CREATED_AT)
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None

    @staticmethod
    def _shipping(body: Mapping[str, Any]) -> ShippingAddress | None:
        value = fields.first_truthy(body, fields.ORDER_SHIPPING)
        if isinstance(value, Mapping):
            return ShippingAddress.from_raw(value)
        return None

    @staticmethod
    def _payment(body: Mapping[str, Any]) -> PaymentMethod | str | None:
        value = fields.first_truthy(body, fields.ORDER_PAYMENT)
        if isinstance(value, Mapping):
            return PaymentMethod.from_raw(value)
        if isinstance(value, str):
            return value
        return None
