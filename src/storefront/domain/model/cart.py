"""Cart aggregate — the client-side basket awaiting checkout.

A Cart owns an ordered list of CartLines.  Lines are created when a
product is added or a screen hands over a snapshot, mutated by the
quantity +/- actions, and destroyed on removal or after a successful
order submission.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, Quantity

PLACEHOLDER_NAME = "Unnamed"
MAX_LINE_QUANTITY = 999


@dataclass
class CartLine:
    """One product + quantity entry.

    ``unit_price`` is whatever the source handed us (or enrichment found);
    the server prices the order authoritatively at submission time.
    """

    product_id: str
    name: str
    unit_price: Money
    quantity: Quantity
    stock_available: int | None = None
    image_ref: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def needs_enrichment(self) -> bool:
        """True when the line is still showing placeholder details."""
        return (
            not self.name
            or self.name == PLACEHOLDER_NAME
            or self.unit_price.is_zero
            or not self.image_ref
        )

    def increment(self) -> None:
        """Add one unit, capped at known stock (or MAX_LINE_QUANTITY)."""
        cap = self.stock_available or MAX_LINE_QUANTITY
        self.quantity = Quantity(max(min(self.quantity.value + 1, cap), 1))

    def decrement(self) -> None:
        """Remove one unit, never going below one."""
        self.quantity = Quantity(max(self.quantity.value - 1, 1))

    def with_details(
        self,
        name: str | None = None,
        unit_price: Money | None = None,
        image_ref: str | None = None,
        stock_available: int | None = None,
    ) -> CartLine:
        """Return a copy with fetched product details merged in.

        Empty values never overwrite what the line already has.
        """
        return replace(
            self,
            name=name or self.name,
            unit_price=unit_price if unit_price and not unit_price.is_zero else self.unit_price,
            image_ref=image_ref or self.image_ref,
            stock_available=(
                stock_available if stock_available is not None else self.stock_available
            ),
        )

    # --- Persistence shape ----------------------------------------------------

    def to_raw(self) -> dict:
        return {
            "_id": self.product_id,
            "name": self.name,
            "price": self.unit_price.to_json(),
            "qty": self.quantity.value,
            "stock": self.stock_available,
            "imageUrl": self.image_ref,
        }


@dataclass
class Cart:
    """Aggregate root for the basket.

    Invariant: at most one line per product id.
    """

    lines: list[CartLine] = field(default_factory=list)

    def add(self, line: CartLine) -> None:
        """Add a line, merging quantities if the product is already present.

        New products go to the front, matching the order the storefront
        displays them in.
        """
        existing = self._find(line.product_id)
        if existing is not None:
            existing.quantity = Quantity(existing.quantity.value + line.quantity.value)
            return
        self.lines.insert(0, line)

    def update_quantity(self, product_id: str, delta: int) -> None:
        """Apply a +/- delta; a line that reaches zero is dropped."""
        line = self._find(product_id)
        if line is None:
            raise ValidationError(f"Product '{product_id}' is not in the cart")
        new_qty = line.quantity.value + delta
        if new_qty <= 0:
            self.remove(product_id)
            return
        line.quantity = Quantity(new_qty)

    def remove(self, product_id: str) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def clear(self) -> None:
        self.lines = []

    def replace_lines(self, lines: list[CartLine]) -> None:
        self.lines = list(lines)

    # --- Computed properties --------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def count(self) -> int:
        """Total units across all lines."""
        return sum(line.quantity.value for line in self.lines)

    @property
    def subtotal(self) -> Money:
        result = Money(Decimal("0.00"))
        for line in self.lines:
            result = result + line.line_total
        return result

    def __len__(self) -> int:
        return len(self.lines)

    # --- Internal helpers -----------------------------------------------------

    def _find(self, product_id: str) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None
