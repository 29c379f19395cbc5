"""Abstract gateway for product detail lookups (used for enrichment only)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ProductCatalog(ABC):

    @abstractmethod
    async def get_product(self, product_id: str) -> dict[str, Any]:
        """Authenticated lookup; may carry more fields than the public one."""

    @abstractmethod
    async def get_public_product(self, product_id: str) -> dict[str, Any]:
        """Unauthenticated lookup, used as the fallback."""
