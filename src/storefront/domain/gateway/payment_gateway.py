"""Abstract gateway for the user's saved payment methods."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.payment import CardInput, PaymentMethod


class PaymentMethodGateway(ABC):

    @abstractmethod
    async def list_methods(self) -> list[PaymentMethod]:
        """Return the account's saved methods (usually zero or one)."""

    @abstractmethod
    async def create(self, card: CardInput) -> PaymentMethod | None:
        """Create a method; return it if the server echoed one back."""

    @abstractmethod
    async def update(self, method_id: str, card: CardInput) -> PaymentMethod | None:
        """Update metadata of an existing method."""

    @abstractmethod
    async def delete(self, method_id: str) -> None:
        """Remove a saved method."""
