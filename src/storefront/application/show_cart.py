"""Application service: Show Cart use case (query).

Loads the persisted cart and, unless told otherwise, enriches lines that
still carry placeholder details.  Enriched details are written back so
the next load does not repeat the lookups.
"""

from __future__ import annotations

from storefront.application.dto import CartDTO
from storefront.application.normalize_cart import CartNormalizer
from storefront.domain.model.cart import Cart
from storefront.domain.repository.cart_repository import CartRepository


class ShowCartHandler:

    def __init__(self, cart_repo: CartRepository, normalizer: CartNormalizer) -> None:
        self._cart_repo = cart_repo
        self._normalizer = normalizer

    async def handle(self, enrich: bool = True) -> CartDTO:
        return CartDTO.from_cart(await self.load(enrich))

    async def load(self, enrich: bool = True) -> Cart:
        """Return the cart aggregate itself, for callers that go on to check out."""
        cart = self._cart_repo.load()
        if enrich and not cart.is_empty:
            enriched = await self._normalizer.enrich(cart.lines)
            if enriched != cart.lines:
                cart.replace_lines(enriched)
                self._cart_repo.save(cart)
        return cart
