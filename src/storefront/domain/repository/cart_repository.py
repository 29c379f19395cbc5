"""Abstract repository for the persisted cart."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def load(self) -> Cart:
        """Return the persisted cart (empty if none)."""

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist the cart, replacing whatever was stored."""
