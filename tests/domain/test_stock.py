"""Unit tests for stock transactions and the reconciliation state."""

from storefront.domain.model.stock import (
    PartialFulfillment,
    PendingStockTransaction,
    StockTransaction,
)
from storefront.domain.model.value_objects import Quantity


class TestStockTransaction:

    def test_one_transaction_per_line_keyed_by_order_and_product(self):
        tx = StockTransaction.for_order_line("o1", "p1", Quantity(2))
        assert tx.idempotency_key == "o1:p1"
        assert tx.to_payload() == {"type": "out", "productId": "p1", "quantity": 2}

    def test_partial_fulfillment_message(self):
        tx = StockTransaction.for_order_line("o1", "p1", Quantity(2))
        partial = PartialFulfillment(order_id="o1", failed=(tx,))
        assert "Order o1 created" in partial.message
        assert "1 stock update(s) failed" in partial.message


class TestPendingStockTransaction:

    def _pending(self) -> PendingStockTransaction:
        return PendingStockTransaction(
            order_id="o1",
            transaction=StockTransaction.for_order_line("o1", "p1", Quantity(1)),
        )

    def test_keyed_by_idempotency_key(self):
        assert self._pending().key == "o1:p1"

    def test_failure_increments_attempts(self):
        entry = self._pending()
        entry.record_failure("HTTP 500", max_attempts=5)
        assert entry.attempts == 2
        assert entry.last_error == "HTTP 500"
        assert not entry.abandoned

    def test_abandoned_after_max_attempts(self):
        entry = self._pending()
        entry.record_failure("HTTP 500", max_attempts=2)
        assert entry.abandoned
