"""Abstract repository for the stock reconciliation queue.

Holds stock decrements that failed after their order was created, keyed
by idempotency key (``<order_id>:<product_id>``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.stock import PendingStockTransaction


class ReconciliationRepository(ABC):

    @abstractmethod
    def list_pending(self, include_abandoned: bool = False) -> list[PendingStockTransaction]:
        """Return queued entries, oldest first."""

    @abstractmethod
    def save(self, entry: PendingStockTransaction) -> None:
        """Insert or replace an entry by its key."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Drop an entry once its transaction has succeeded."""
