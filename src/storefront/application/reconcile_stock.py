"""Application service: Reconcile Stock use case.

Background sweep over the reconciliation queue.  Every pending stock
decrement is retried with its original idempotency key (at-least-once);
successes leave the queue, failures bump their attempt counter, and
entries that exhaust ``max_attempts`` are parked as abandoned for a human
to reconcile.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from storefront.domain.gateway.stock_gateway import StockGateway
from storefront.domain.model.stock import PendingStockTransaction
from storefront.domain.repository.reconciliation_repository import (
    ReconciliationRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


@dataclass(frozen=True)
class ReconciliationReport:
    retried: int
    succeeded: int
    failed: int
    abandoned: int


@dataclass(frozen=True)
class PendingLineDTO:
    key: str
    order_id: str
    product_id: str
    quantity: int
    attempts: int
    last_error: str
    abandoned: bool


class ReconcileStockHandler:

    def __init__(
        self,
        stock_gateway: StockGateway,
        reconciliation_repo: ReconciliationRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        self._stock_gateway = stock_gateway
        self._reconciliation_repo = reconciliation_repo
        self._max_attempts = max_attempts

    async def handle(self) -> ReconciliationReport:
        pending = self._reconciliation_repo.list_pending()
        if not pending:
            return ReconciliationReport(retried=0, succeeded=0, failed=0, abandoned=0)

        outcomes = await asyncio.gather(
            *(self._stock_gateway.record(entry.transaction) for entry in pending),
            return_exceptions=True,
        )

        succeeded = failed = abandoned = 0
        for entry, outcome in zip(pending, outcomes):
            if outcome is None:
                self._reconciliation_repo.remove(entry.key)
                succeeded += 1
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            entry.record_failure(str(outcome), self._max_attempts)
            self._reconciliation_repo.save(entry)
            if entry.abandoned:
                abandoned += 1
                logger.error(
                    "Giving up on stock update %s after %d attempts: %s",
                    entry.key,
                    entry.attempts,
                    outcome,
                )
            else:
                failed += 1

        logger.info(
            "Stock reconciliation: %d retried, %d succeeded, %d failed, %d abandoned",
            len(pending),
            succeeded,
            failed,
            abandoned,
        )
        return ReconciliationReport(
            retried=len(pending),
            succeeded=succeeded,
            failed=failed,
            abandoned=abandoned,
        )


class ListPendingStockHandler:
    """Query: what is still waiting for reconciliation."""

    def __init__(self, reconciliation_repo: ReconciliationRepository) -> None:
        self._reconciliation_repo = reconciliation_repo

    def handle(self, include_abandoned: bool = True) -> list[PendingLineDTO]:
        return [
            self._to_dto(entry)
            for entry in self._reconciliation_repo.list_pending(include_abandoned)
        ]

    @staticmethod
    def _to_dto(entry: PendingStockTransaction) -> PendingLineDTO:
        return PendingLineDTO(
            key=entry.key,
            order_id=entry.order_id,
            product_id=entry.transaction.product_id,
            quantity=entry.transaction.quantity.value,
            attempts=entry.attempts,
            last_error=entry.last_error,
            abandoned=entry.abandoned,
        )
