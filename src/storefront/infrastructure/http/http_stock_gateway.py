"""httpx-backed implementation of StockGateway."""

from __future__ import annotations

from storefront.domain.exceptions import NetworkError
from storefront.domain.gateway.stock_gateway import StockGateway
from storefront.domain.model.stock import StockTransaction
from storefront.infrastructure.http.api_client import ApiClient


class HttpStockGateway(StockGateway):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def record(self, transaction: StockTransaction) -> None:
        body = await self._client.post(
            "/api/transactions",
            json=transaction.to_payload(),
            headers={"Idempotency-Key": transaction.idempotency_key},
        )
        if isinstance(body, dict) and body.get("success") is False:
            raise NetworkError(
                str(body.get("message") or f"Stock update {transaction.idempotency_key} rejected")
            )
