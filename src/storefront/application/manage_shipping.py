"""Application service: Shipping Address use cases.

Addresses are owned by the user profile on the server.  Checkout only
needs the selected one, which is cached under ``@shipping_destination``.
"""

from __future__ import annotations

import logging

from storefront.domain.exceptions import NetworkError, Unauthenticated
from storefront.domain.gateway.shipping_gateway import ShippingGateway
from storefront.domain.model.address import ShippingAddress
from storefront.domain.repository.local_store import (
    SHIPPING_DESTINATION_KEY,
    LocalStore,
)
from storefront.domain.repository.session import Session

logger = logging.getLogger(__name__)


class ShippingAddressHandler:

    def __init__(
        self,
        gateway: ShippingGateway,
        local_store: LocalStore,
        session: Session,
    ) -> None:
        self._gateway = gateway
        self._local_store = local_store
        self._session = session

    async def list_addresses(self) -> list[ShippingAddress]:
        """Saved addresses; empty when logged out or the server is unreachable."""
        if not self._session.is_authenticated:
            return []
        try:
            return await self._gateway.list_addresses()
        except NetworkError as exc:
            logger.warning("Could not load shipping addresses: %s", exc)
            return []

    async def save(self, address: ShippingAddress) -> ShippingAddress:
        """Create or update *address* on the profile, then select it."""
        address.validate()
        if not self._session.is_authenticated:
            raise Unauthenticated("Please log in to save a shipping address")

        if address.id:
            await self._gateway.update(address)
        else:
            await self._gateway.create(address)

        self.select(address)
        return address

    def select(self, address: ShippingAddress) -> None:
        try:
            self._local_store.set_json(SHIPPING_DESTINATION_KEY, address.to_raw())
        except OSError as exc:
            logger.warning("Could not persist shipping selection: %s", exc)

    def selected(self) -> ShippingAddress | None:
        raw = self._local_store.get_json(SHIPPING_DESTINATION_KEY)
        if not isinstance(raw, dict):
            return None
        return ShippingAddress.from_raw(raw)
