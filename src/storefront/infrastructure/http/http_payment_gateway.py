"""httpx-backed implementation of PaymentMethodGateway.

The payment-methods endpoint has answered with a bare list,
``{data: {paymentMethods}}``, ``{paymentMethods}`` and a single
``{data: {payment}}`` over time; all of them are accepted.
"""

from __future__ import annotations

from typing import Any

from storefront.domain.gateway.payment_gateway import PaymentMethodGateway
from storefront.domain.model.payment import CardInput, PaymentMethod
from storefront.infrastructure.http.api_client import ApiClient

_PATH = "/api/users/payment-methods"


class HttpPaymentMethodGateway(PaymentMethodGateway):

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_methods(self) -> list[PaymentMethod]:
        body = await self._client.get(_PATH)
        return [PaymentMethod.from_raw(raw) for raw in self._extract_list(body)]

    async def create(self, card: CardInput) -> PaymentMethod | None:
        body = await self._client.post(_PATH, json=card.to_create_payload())
        return self._extract_one(body)

    async def update(self, method_id: str, card: CardInput) -> PaymentMethod | None:
        body = await self._client.put(f"{_PATH}/{method_id}", json=card.to_update_payload())
        return self._extract_one(body)

    async def delete(self, method_id: str) -> None:
        await self._client.delete(f"{_PATH}/{method_id}")

    # --- Response shapes ------------------------------------------------------

    @staticmethod
    def _extract_list(body: Any) -> list[dict]:
        if isinstance(body, list):
            candidates: Any = body
        elif isinstance(body, dict):
            data = body.get("data") if isinstance(body.get("data"), dict) else {}
            candidates = data.get("paymentMethods") or body.get("paymentMethods")
            if candidates is None and isinstance(data.get("payment"), dict):
                candidates = [data["payment"]]
        else:
            candidates = None
        if not isinstance(candidates, list):
            return []
        return [raw for raw in candidates if isinstance(raw, dict)]

    @staticmethod
    def _extract_one(body: Any) -> PaymentMethod | None:
        if not isinstance(body, dict):
            return None
        data = body.get("data")
        if isinstance(data, dict):
            raw = data.get("paymentMethod") or data.get("payment") or data
        else:
            raw = body.get("paymentMethod")
        if not isinstance(raw, dict) or not raw:
            return None
        method = PaymentMethod.from_raw(raw)
        if not method.id and not method.brand and not method.last4:
            return None
        return method
