"""Application service: Update Cart use cases (quantity, remove, clear)."""

from __future__ import annotations

from storefront.application.dto import CartDTO
from storefront.domain.exceptions import ValidationError
from storefront.domain.repository.cart_repository import CartRepository


class UpdateCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, product_id: str, delta: int) -> CartDTO:
        """Apply a +/- delta to a line; a line that reaches zero is removed."""
        if delta == 0:
            raise ValidationError("Quantity change must be non-zero")
        cart = self._cart_repo.load()
        cart.update_quantity(product_id, delta)
        self._cart_repo.save(cart)
        return CartDTO.from_cart(cart)


class RemoveFromCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self, product_id: str) -> CartDTO:
        cart = self._cart_repo.load()
        cart.remove(product_id)
        self._cart_repo.save(cart)
        return CartDTO.from_cart(cart)


class ClearCartHandler:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo

    def handle(self) -> None:
        cart = self._cart_repo.load()
        cart.clear()
        self._cart_repo.save(cart)
