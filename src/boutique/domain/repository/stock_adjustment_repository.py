"""Abstract repository for StockAdjustment records (the stock outbox)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from boutique.domain.model.stock_adjustment import StockAdjustment


class StockAdjustmentRepository(ABC):

    @abstractmethod
    def get_by_id(self, adjustment_id: int) -> StockAdjustment | None:
        """Return an adjustment by its ID, or None if not found."""

    @abstractmethod
    def list_unapplied(self) -> list[StockAdjustment]:
        """Return every pending or failed adjustment, oldest first."""

    @abstractmethod
    def save(self, adjustment: StockAdjustment) -> None:
        """Persist a new or updated adjustment, assigning an ID if needed."""
