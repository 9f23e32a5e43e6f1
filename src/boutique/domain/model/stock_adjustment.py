"""StockAdjustment — a durable record of an intended stock change.

Order writes and stock writes touch different documents and cannot be
committed together.  Every stock change an order operation needs is
therefore recorded first, then applied; an adjustment that could not be
applied stays visible as ``failed`` until reconciliation applies it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from boutique.domain.model.variant import VariantKey


class AdjustmentStatus(Enum):
    PENDING = "pending"
    APPLIED = "applied"
    FAILED = "failed"


class AdjustmentReason(Enum):
    ORDER_CREATED = "order-created"
    LINE_REMOVED = "line-removed"
    ORDER_DELETED = "order-deleted"


@dataclass
class StockAdjustment:

    id: int | None
    order_id: int
    product_id: str
    variant: VariantKey
    delta: int
    reason: AdjustmentReason
    status: AdjustmentStatus = AdjustmentStatus.PENDING
    attempts: int = 0
    last_error: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_applied(self) -> bool:
        return self.status == AdjustmentStatus.APPLIED

    def mark_applied(self) -> None:
        self.attempts += 1
        self.status = AdjustmentStatus.APPLIED
        self.last_error = None

    def mark_failed(self, error: str) -> None:
        self.attempts += 1
        self.status = AdjustmentStatus.FAILED
        self.last_error = error
