"""Application services: stock reconciliation.

Stock adjustments that could not be applied when their order operation
ran stay ``pending`` or ``failed``.  These handlers list them and retry
them.
"""

from __future__ import annotations

from dataclasses import dataclass

from boutique.application.stock_sync import ReconcileReport, StockSynchronizer
from boutique.domain.repository.stock_adjustment_repository import (
    StockAdjustmentRepository,
)


@dataclass(frozen=True)
class UnappliedAdjustmentDTO:
    id: int
    order_id: int
    product_id: str
    variant: str
    delta: int
    reason: str
    status: str
    attempts: int
    last_error: str | None


class ShowUnappliedAdjustmentsHandler:

    def __init__(self, adjustment_repo: StockAdjustmentRepository) -> None:
        self._adjustment_repo = adjustment_repo

    def handle(self) -> list[UnappliedAdjustmentDTO]:
        return [
            UnappliedAdjustmentDTO(
                id=adj.id,  # type: ignore[arg-type]
                order_id=adj.order_id,
                product_id=adj.product_id,
                variant=adj.variant.name or adj.variant.image or adj.variant.variant_id or "",
                delta=adj.delta,
                reason=adj.reason.value,
                status=adj.status.value,
                attempts=adj.attempts,
                last_error=adj.last_error,
            )
            for adj in self._adjustment_repo.list_unapplied()
        ]


class ReconcileStockHandler:

    def __init__(self, stock_sync: StockSynchronizer, max_attempts: int = 5) -> None:
        self._stock_sync = stock_sync
        self._max_attempts = max_attempts

    def handle(self) -> ReconcileReport:
        return self._stock_sync.retry_unapplied(self._max_attempts)
