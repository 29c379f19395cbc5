"""httpx-backed implementation of ProductCatalog."""

from __future__ import annotations

from typing import Any

from storefront.domain.exceptions import NotFound
from storefront.domain.gateway.product_catalog import ProductCatalog
from storefront.infrastructure.http.api_client import ApiClient


class HttpProductCatalog(ProductCatalog):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def get_product(self, product_id: str) -> dict[str, Any]:
        body = await self._client.get(f"/api/products/{product_id}")
        return self._unwrap(body, product_id)

    async def get_public_product(self, product_id: str) -> dict[str, Any]:
        body = await self._client.get(f"/api/public/products/{product_id}", authenticated=False)
        return self._unwrap(body, product_id)

    @staticmethod
    def _unwrap(body: Any, product_id: str) -> dict[str, Any]:
        """Accept ``{data: {product}}``, ``{product}``, ``{data}`` or a bare product."""
        if isinstance(body, dict):
            data = body.get("data")
            if isinstance(data, dict) and isinstance(data.get("product"), dict):
                return data["product"]
            if isinstance(body.get("product"), dict):
                return body["product"]
            if isinstance(data, dict) and data:
                return data
            if body:
                return body
        raise NotFound(f"Product '{product_id}' not found")
