"""Stock decrements that follow an order, and their reconciliation state.

Order creation and stock decrement are two independent, non-transactional
backend calls.  Once the order exists it is authoritative; a failed
decrement never invalidates it.  Failures are recorded as
PendingStockTransactions and retried later by the reconciliation sweep,
each carrying the same idempotency key as the original attempt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from storefront.domain.model.value_objects import Quantity

STOCK_OUT = "out"


@dataclass(frozen=True)
class StockTransaction:
    product_id: str
    quantity: Quantity
    idempotency_key: str
    type: str = STOCK_OUT

    @staticmethod
    def for_order_line(order_id: str, product_id: str, quantity: Quantity) -> StockTransaction:
        """One transaction per order line, keyed so retries are recognisable."""
        return StockTransaction(
            product_id=product_id,
            quantity=quantity,
            idempotency_key=f"{order_id}:{product_id}",
        )

    def to_payload(self) -> dict:
        return {
            "type": self.type,
            "productId": self.product_id,
            "quantity": self.quantity.value,
        }


@dataclass(frozen=True)
class PartialFulfillment:
    """Order created, but one or more stock decrements failed.

    A warning value, not an error: the order stands and the discrepancy is
    queued for reconciliation.
    """

    order_id: str
    failed: tuple[StockTransaction, ...]

    @property
    def message(self) -> str:
        return (
            f"Order {self.order_id} created but {len(self.failed)} stock "
            f"update(s) failed; queued for reconciliation."
        )


@dataclass
class PendingStockTransaction:
    """A queued stock decrement awaiting a successful retry.

    Mutable: ``attempts`` / ``last_error`` / ``abandoned`` are updated by
    the sweep.
    """

    order_id: str
    transaction: StockTransaction
    attempts: int = 1
    last_error: str = ""
    abandoned: bool = False
    queued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> str:
        return self.transaction.idempotency_key

    def record_failure(self, error: str, max_attempts: int) -> None:
        self.attempts += 1
        self.last_error = error
        if self.attempts >= max_attempts:
            self.abandoned = True
