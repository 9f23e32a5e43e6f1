"""Application service: Stock Synchronizer.

Bridges order operations and the Stock Ledger.  Every stock change an
order operation needs is recorded as a StockAdjustment first and applied
afterwards.  Application is best-effort: a failure is logged and recorded
on the adjustment, never raised to the order operation, and
``retry_unapplied`` can apply it later once the cause is fixed.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from boutique.domain.exceptions import StockLedgerError
from boutique.domain.model.stock_adjustment import AdjustmentReason, StockAdjustment
from boutique.domain.model.variant import VariantKey
from boutique.domain.repository.stock_adjustment_repository import (
    StockAdjustmentRepository,
)
from boutique.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockDelta:
    product_id: str
    variant: VariantKey
    delta: int


@dataclass(frozen=True)
class ReconcileReport:
    applied: int
    failed: int
    skipped: int


class StockSynchronizer:

    def __init__(
        self,
        ledger: StockLedger,
        adjustment_repo: StockAdjustmentRepository,
    ) -> None:
        self._ledger = ledger
        self._adjustment_repo = adjustment_repo

    def submit(
        self,
        order_id: int,
        reason: AdjustmentReason,
        deltas: list[StockDelta],
    ) -> list[StockAdjustment]:
        """Record every delta, then apply each one independently."""
        adjustments: list[StockAdjustment] = []
        for d in deltas:
            adjustment = StockAdjustment(
                id=None,
                order_id=order_id,
                product_id=d.product_id,
                variant=d.variant,
                delta=d.delta,
                reason=reason,
            )
            self._record(adjustment)
            adjustments.append(adjustment)

        for adjustment in adjustments:
            self._apply(adjustment)
        return adjustments

    def retry_unapplied(self, max_attempts: int) -> ReconcileReport:
        """Re-apply pending and failed adjustments.

        Adjustments that already used *max_attempts* attempts are skipped
        and left for an operator.
        """
        applied = failed = skipped = 0
        for adjustment in self._adjustment_repo.list_unapplied():
            if adjustment.attempts >= max_attempts:
                skipped += 1
                continue
            if self._apply(adjustment):
                applied += 1
            else:
                failed += 1

        logger.info(
            "stock_reconciled", applied=applied, failed=failed, skipped=skipped
        )
        return ReconcileReport(applied=applied, failed=failed, skipped=skipped)

    def _apply(self, adjustment: StockAdjustment) -> bool:
        try:
            self._ledger.apply_delta(
                adjustment.product_id, adjustment.variant, adjustment.delta
            )
        except (StockLedgerError, OSError, ValueError) as exc:
            # ValueError covers a storage file that cannot be decoded.
            adjustment.mark_failed(str(exc))
            logger.warning(
                "stock_adjustment_failed",
                adjustment_id=adjustment.id,
                order_id=adjustment.order_id,
                product_id=adjustment.product_id,
                delta=adjustment.delta,
                reason=adjustment.reason.value,
                error=str(exc),
            )
        else:
            adjustment.mark_applied()
        self._record(adjustment)
        return adjustment.is_applied

    def _record(self, adjustment: StockAdjustment) -> None:
        # The order is already committed; a lost record is logged, not raised.
        try:
            self._adjustment_repo.save(adjustment)
        except (OSError, ValueError) as exc:
            logger.error(
                "stock_adjustment_not_recorded",
                order_id=adjustment.order_id,
                product_id=adjustment.product_id,
                delta=adjustment.delta,
                status=adjustment.status.value,
                error=str(exc),
            )
