"""httpx-backed implementation of ShippingGateway."""

from __future__ import annotations

from typing import Any

from storefront.domain.gateway.shipping_gateway import ShippingGateway
from storefront.domain.model.address import ShippingAddress
from storefront.infrastructure.http.api_client import ApiClient

_PATH = "/api/users/shipping"


class HttpShippingGateway(ShippingGateway):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_addresses(self) -> list[ShippingAddress]:
        body = await self._client.get(_PATH)
        return [ShippingAddress.from_raw(raw) for raw in self._extract(body)]

    async def create(self, address: ShippingAddress) -> None:
        await self._client.post(_PATH, json=address.to_profile_payload())

    async def update(self, address: ShippingAddress) -> None:
        await self._client.put(f"{_PATH}/{address.id}", json=address.to_profile_payload())

    @staticmethod
    def _extract(body: Any) -> list[dict]:
        if isinstance(body, list):
            candidates: Any = body
        elif isinstance(body, dict):
            data = body.get("data")
            candidates = data.get("addresses") if isinstance(data, dict) else body.get("addresses")
        else:
            candidates = None
        if not isinstance(candidates, list):
            return []
        return [raw for raw in candidates if isinstance(raw, dict)]
