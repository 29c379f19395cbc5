"""Application service: Add To Cart use case."""

from __future__ import annotations

from typing import Any

from storefront.application.dto import CartDTO
from storefront.application.normalize_cart import CartNormalizer
from storefront.domain.exceptions import ValidationError
from storefront.domain.repository.cart_repository import CartRepository


class AddToCartHandler:

    def __init__(self, cart_repo: CartRepository, normalizer: CartNormalizer) -> None:
        self._cart_repo = cart_repo
        self._normalizer = normalizer

    async def handle(self, item: Any, enrich: bool = True) -> CartDTO:
        """Add a product snapshot (or bare id) to the persisted cart.

        Adding a product that is already in the cart merges the quantities.
        """
        lines = self._normalizer.normalize([item])
        if not lines:
            raise ValidationError("Nothing to add: the item has no product id")
        if enrich:
            lines = await self._normalizer.enrich(lines)

        cart = self._cart_repo.load()
        for line in lines:
            cart.add(line)
        self._cart_repo.save(cart)
        return CartDTO.from_cart(cart)
