"""CartRepository stored under the ``@cart_items`` local key."""

from __future__ import annotations

import logging
from decimal import Decimal

from storefront.domain.exceptions import ValidationError
from storefront.domain.model import fields
from storefront.domain.model.cart import PLACEHOLDER_NAME, Cart, CartLine
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.local_store import CART_ITEMS_KEY, LocalStore

logger = logging.getLogger(__name__)


class LocalCartRepository(CartRepository):

    def __init__(self, local_store: LocalStore) -> None:
        self._local_store = local_store

    def load(self) -> Cart:
        raw = self._local_store.get_json(CART_ITEMS_KEY)
        if not isinstance(raw, list):
            return Cart()
        lines: list[CartLine] = []
        for entry in raw:
            if not isinstance(entry, dict):
                continue
            try:
                lines.append(self._to_domain(entry))
            except ValidationError as exc:
                logger.warning("Dropping unreadable cart entry %r: %s", entry, exc)
        return Cart(lines=lines)

    def save(self, cart: Cart) -> None:
        self._local_store.set_json(CART_ITEMS_KEY, [line.to_raw() for line in cart.lines])

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(raw: dict) -> CartLine:
        product_id = fields.id_of(raw, fields.PRODUCT_ID)
        if not product_id:
            raise ValidationError("Cart entry has no product id")
        price = fields.to_decimal(raw.get("price")) or Decimal("0")
        stock = raw.get("stock")
        return CartLine(
            product_id=product_id,
            name=str(raw.get("name") or PLACEHOLDER_NAME),
            unit_price=Money.clamped(price),
            quantity=Quantity(max(fields.to_int(raw.get("qty") or raw.get("quantity"), 1), 1)),
            stock_available=fields.to_int(stock, 0) if stock is not None else None,
            image_ref=raw.get("imageUrl") or None,
        )
