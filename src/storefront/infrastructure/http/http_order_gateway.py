"""httpx-backed implementation of OrderGateway."""

from __future__ import annotations

import logging
from typing import Any

from storefront.domain.exceptions import NetworkError, NotFound
from storefront.domain.gateway.order_gateway import OrderGateway
from storefront.domain.model.order import OrderRequest
from storefront.infrastructure.http.api_client import ApiClient

logger = logging.getLogger(__name__)


class HttpOrderGateway(OrderGateway):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def create(self, request: OrderRequest) -> dict[str, Any]:
        body = await self._client.post(
            "/api/orders",
            json=request.to_payload(),
            headers={"Idempotency-Key": request.client_token},
        )
        return self._as_dict(body, "order creation")

    async def fetch(self, order_id: str) -> dict[str, Any]:
        try:
            body = await self._client.get(f"/api/orders/{order_id}")
        except NotFound:
            logger.debug("Order %s not under /api/orders; trying legacy path", order_id)
            body = await self._client.get(f"/orders/{order_id}", legacy=True)
        return self._as_dict(body, f"order {order_id}")

    @staticmethod
    def _as_dict(body: Any, what: str) -> dict[str, Any]:
        if not isinstance(body, dict):
            raise NetworkError(f"Unexpected response for {what}")
        if body.get("success") is False:
            raise NetworkError(str(body.get("message") or f"Backend rejected {what}"))
        return body
