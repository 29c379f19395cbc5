"""Abstract gateway for the user's shipping addresses."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.address import ShippingAddress


class ShippingGateway(ABC):

    @abstractmethod
    async def list_addresses(self) -> list[ShippingAddress]:
        """Return the addresses saved on the profile."""

    @abstractmethod
    async def create(self, address: ShippingAddress) -> None:
        """Add a new address."""

    @abstractmethod
    async def update(self, address: ShippingAddress) -> None:
        """Overwrite an existing address (``address.id`` must be set)."""
