"""JSON-file-backed implementation of ReconciliationRepository."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

from storefront.domain.model.stock import PendingStockTransaction, StockTransaction
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.reconciliation_repository import (
    ReconciliationRepository,
)


class JsonReconciliationRepository(ReconciliationRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- ReconciliationRepository interface -----------------------------------

    def list_pending(self, include_abandoned: bool = False) -> list[PendingStockTransaction]:
        entries = [self._to_domain(raw) for raw in self._load_raw()]
        if not include_abandoned:
            entries = [e for e in entries if not e.abandoned]
        return sorted(entries, key=lambda e: e.queued_at)

    def save(self, entry: PendingStockTransaction) -> None:
        entries = self._load_raw()

        # Upsert by idempotency key
        replaced = False
        for i, raw in enumerate(entries):
            if raw["key"] == entry.key:
                entries[i] = self._to_raw(entry)
                replaced = True
                break
        if not replaced:
            entries.append(self._to_raw(entry))

        self._persist_raw(entries)

    def remove(self, key: str) -> None:
        entries = self._load_raw()
        remaining = [raw for raw in entries if raw["key"] != key]
        if len(remaining) != len(entries):
            self._persist_raw(remaining)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(entry: PendingStockTransaction) -> dict:
        tx = entry.transaction
        return {
            "key": entry.key,
            "order_id": entry.order_id,
            "product_id": tx.product_id,
            "quantity": tx.quantity.value,
            "type": tx.type,
            "attempts": entry.attempts,
            "last_error": entry.last_error,
            "abandoned": entry.abandoned,
            "queued_at": entry.queued_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> PendingStockTransaction:
        return PendingStockTransaction(
            order_id=raw["order_id"],
            transaction=StockTransaction(
                product_id=raw["product_id"],
                quantity=Quantity(raw["quantity"]),
                idempotency_key=raw["key"],
                type=raw.get("type", "out"),
            ),
            attempts=raw.get("attempts", 1),
            last_error=raw.get("last_error", ""),
            abandoned=raw.get("abandoned", False),
            queued_at=datetime.fromisoformat(raw["queued_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _persist_raw(self, entries: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(entries, indent=2) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
