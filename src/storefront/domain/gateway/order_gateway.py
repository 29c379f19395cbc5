"""Abstract gateway for the order endpoints.

Defined in the domain layer so use cases never depend on HTTP details.
Implementations translate transport failures into ``NetworkError`` and
missing resources into ``NotFound``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from storefront.domain.model.order import OrderRequest


class OrderGateway(ABC):

    @abstractmethod
    async def create(self, request: OrderRequest) -> dict[str, Any]:
        """Submit an order; return the raw (shape-ambiguous) response body."""

    @abstractmethod
    async def fetch(self, order_id: str) -> dict[str, Any]:
        """Re-fetch an order read-only for the receipt."""
