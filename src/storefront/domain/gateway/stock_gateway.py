"""Abstract gateway for stock transactions."""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.stock import StockTransaction


class StockGateway(ABC):

    @abstractmethod
    async def record(self, transaction: StockTransaction) -> None:
        """Post one stock transaction; raise on any failure."""
