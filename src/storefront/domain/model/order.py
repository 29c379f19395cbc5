"""Order — the canonical, read-only view of a persisted order.

Orders are created server-side on submission and never mutated by the
client afterwards.  Whatever shape the backend returns, it is converted
into this type exactly once by ``ReceiptNormalizer``; nothing past that
boundary sees raw payloads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from storefront.domain.model.address import ShippingAddress
from storefront.domain.model.cart import CartLine
from storefront.domain.model.payment import PaymentMethod, describe_payment
from storefront.domain.model.value_objects import Money, Quantity


@dataclass(frozen=True)
class OrderItem:
    """A line on a created order, with the prices the server reported."""

    product_id: str | None
    name: str
    quantity: Quantity
    unit_price: Money
    sale_price: Money | None = None
    image_ref: str | None = None

    @property
    def effective_price(self) -> Money:
        return self.sale_price if self.sale_price is not None else self.unit_price

    @property
    def line_total(self) -> Money:
        return self.effective_price * self.quantity.value

    @property
    def line_discount(self) -> Money:
        """Implicit discount from ``price - salePrice`` where positive."""
        if self.sale_price is None or self.sale_price >= self.unit_price:
            return Money.zero()
        return (self.unit_price - self.sale_price) * self.quantity.value

    @property
    def gross_total(self) -> Money:
        """Line total before the sale-price discount."""
        return self.line_total + self.line_discount

    def to_raw(self) -> dict:
        raw: dict[str, Any] = {
            "productId": self.product_id,
            "name": self.name,
            "quantity": self.quantity.value,
            "price": str(self.unit_price.amount),
        }
        if self.sale_price is not None:
            raw["salePrice"] = str(self.sale_price.amount)
        if self.image_ref:
            raw["imageUrl"] = self.image_ref
        return raw


@dataclass(frozen=True)
class Order:
    """Canonical order with a fully resolved totals breakdown."""

    id: str | None
    status: str | None
    created_at: datetime | None
    items: tuple[OrderItem, ...]
    shipping: ShippingAddress | None
    payment_method: PaymentMethod | str | None
    subtotal: Money
    shipping_cost: Money
    tax: Money
    line_discount: Money
    order_discount: Money
    discount_total: Money
    adjustments: Decimal
    payable_total: Money

    @property
    def payment_label(self) -> str:
        return describe_payment(self.payment_method)

    @property
    def payment_method_id(self) -> str | None:
        """The bare id, when the order only carries a reference."""
        if isinstance(self.payment_method, str):
            return self.payment_method
        return None

    def with_payment_method(self, method: PaymentMethod) -> Order:
        return replace(self, payment_method=method)

    def with_items(self, items: list[OrderItem]) -> Order:
        return replace(self, items=tuple(items))

    def to_raw(self) -> dict:
        """Canonical JSON shape; normalizing it again yields an equal Order."""
        if isinstance(self.payment_method, PaymentMethod):
            payment: Any = self.payment_method.to_raw()
        else:
            payment = self.payment_method
        return {
            "_id": self.id,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "items": [item.to_raw() for item in self.items],
            "shipping": self.shipping.to_raw() if self.shipping else None,
            "paymentMethod": payment,
            "subtotal": str(self.subtotal.amount),
            "shippingCost": str(self.shipping_cost.amount),
            "tax": str(self.tax.amount),
            "lineDiscount": str(self.line_discount.amount),
            "orderDiscount": str(self.order_discount.amount),
            "discountTotal": str(self.discount_total.amount),
            "adjustments": str(self.adjustments),
            "total": str(self.payable_total.amount),
        }


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderRequestItem:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderRequest:
    """What the client submits to create an order.  Immutable once built."""

    items: tuple[OrderRequestItem, ...]
    shipping: ShippingAddress | None
    payment_method: str
    client_token: str = field(default="", compare=False)

    @staticmethod
    def from_cart(
        lines: list[CartLine],
        shipping: ShippingAddress | None,
        payment_method: str,
        client_token: str = "",
    ) -> OrderRequest:
        return OrderRequest(
            items=tuple(
                OrderRequestItem(product_id=line.product_id, quantity=line.quantity.value)
                for line in lines
            ),
            shipping=shipping,
            payment_method=payment_method,
            client_token=client_token,
        )

    def with_token(self, client_token: str) -> OrderRequest:
        return replace(self, client_token=client_token)

    @property
    def fingerprint(self) -> str:
        """Stable digest of the request contents, ignoring the token."""
        body = self.to_payload()
        body.pop("clientToken", None)
        return json.dumps(body, sort_keys=True)

    def to_payload(self) -> dict:
        return {
            "items": [
                {"productId": item.product_id, "quantity": item.quantity}
                for item in self.items
            ],
            "shipping": self.shipping.to_raw() if self.shipping else None,
            "paymentMethod": self.payment_method,
            "clientToken": self.client_token,
        }
