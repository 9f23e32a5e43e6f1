"""JSON-file-backed implementation of StockAdjustmentRepository."""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from pathlib import Path

from boutique.domain.model.stock_adjustment import (
    AdjustmentReason,
    AdjustmentStatus,
    StockAdjustment,
)
from boutique.domain.model.variant import VariantKey
from boutique.domain.repository.stock_adjustment_repository import (
    StockAdjustmentRepository,
)


class JsonStockAdjustmentRepository(StockAdjustmentRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- StockAdjustmentRepository interface ----------------------------------

    def get_by_id(self, adjustment_id: int) -> StockAdjustment | None:
        for raw in self._read():
            if raw["id"] == adjustment_id:
                return self._to_domain(raw)
        return None

    def list_unapplied(self) -> list[StockAdjustment]:
        return [
            self._to_domain(raw)
            for raw in self._read()
            if raw["status"] != AdjustmentStatus.APPLIED.value
        ]

    def save(self, adjustment: StockAdjustment) -> None:
        with self._lock:
            records = self._load_raw()
            if adjustment.id is None:
                adjustment.id = max((r["id"] for r in records), default=0) + 1

            replaced = False
            for i, raw in enumerate(records):
                if raw["id"] == adjustment.id:
                    records[i] = self._to_raw(adjustment)
                    replaced = True
                    break
            if not replaced:
                records.append(self._to_raw(adjustment))
            self._persist_raw(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(adjustment: StockAdjustment) -> dict:
        return {
            "id": adjustment.id,
            "order_id": adjustment.order_id,
            "product_id": adjustment.product_id,
            "variant": {
                "id": adjustment.variant.variant_id,
                "image": adjustment.variant.image,
                "name": adjustment.variant.name,
            },
            "delta": adjustment.delta,
            "reason": adjustment.reason.value,
            "status": adjustment.status.value,
            "attempts": adjustment.attempts,
            "last_error": adjustment.last_error,
            "created_at": adjustment.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> StockAdjustment:
        variant = raw.get("variant") or {}
        return StockAdjustment(
            id=raw["id"],
            order_id=raw["order_id"],
            product_id=raw["product_id"],
            variant=VariantKey(
                variant_id=variant.get("id"),
                image=variant.get("image"),
                name=variant.get("name"),
            ),
            delta=raw["delta"],
            reason=AdjustmentReason(raw["reason"]),
            status=AdjustmentStatus(raw["status"]),
            attempts=raw.get("attempts", 0),
            last_error=raw.get("last_error"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _read(self) -> list[dict]:
        with self._lock:
            return self._load_raw()

    def _persist_raw(self, records: list[dict]) -> None:
        # Readers must never see a truncated file.
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(
            json.dumps(records, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
