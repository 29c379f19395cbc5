"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.cart import Cart
from storefront.domain.model.order import Order


@dataclass(frozen=True)
class CartLineDTO:
    product_id: str
    name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str
    stock: int | None


@dataclass(frozen=True)
class CartDTO:
    lines: list[CartLineDTO]
    count: int
    subtotal: str

    @staticmethod
    def from_cart(cart: Cart) -> CartDTO:
        return CartDTO(
            lines=[
                CartLineDTO(
                    product_id=line.product_id,
                    name=line.name,
                    quantity=line.quantity.value,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                    stock=line.stock_available,
                )
                for line in cart.lines
            ],
            count=cart.count,
            subtotal=str(cart.subtotal),
        )


@dataclass(frozen=True)
class ReceiptLineDTO:
    name: str
    quantity: int
    unit_price: str
    line_total: str


@dataclass(frozen=True)
class ReceiptDTO:
    """Output: a created order as displayed on the receipt."""

    id: str
    status: str
    created_at: str
    payment: str
    ship_to: str
    items: list[ReceiptLineDTO]
    subtotal: str
    shipping_cost: str
    tax: str
    discount_total: str
    adjustments: str
    payable_total: str

    @staticmethod
    def from_order(order: Order) -> ReceiptDTO:
        shipping = order.shipping
        ship_to = ", ".join(
            part
            for part in (
                shipping.full_name if shipping else "",
                shipping.line1 if shipping else "",
                shipping.district if shipping else "",
                shipping.postal_code if shipping else "",
            )
            if part
        )
        return ReceiptDTO(
            id=order.id or "-",
            status=order.status or "pending",
            created_at=(
                order.created_at.strftime("%Y-%m-%d %H:%M UTC") if order.created_at else "-"
            ),
            payment=order.payment_label,
            ship_to=ship_to or "-",
            items=[
                ReceiptLineDTO(
                    name=item.name,
                    quantity=item.quantity.value,
                    unit_price=str(item.effective_price),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            subtotal=str(order.subtotal),
            shipping_cost=str(order.shipping_cost),
            tax=str(order.tax),
            discount_total=str(order.discount_total),
            adjustments=f"{order.adjustments:.2f}",
            payable_total=str(order.payable_total),
        )
