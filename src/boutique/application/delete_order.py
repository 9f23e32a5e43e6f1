"""Application service: Delete Order use case.

Puts every line's quantity back in stock, then deletes the order.  Stock
restores are best-effort and independent per line: one failing line does
not stop the others, and never keeps the order alive.
"""

from __future__ import annotations

import structlog

from boutique.application.stock_sync import StockDelta, StockSynchronizer
from boutique.domain.exceptions import EntityNotFoundError
from boutique.domain.model.stock_adjustment import AdjustmentReason
from boutique.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class DeleteOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        stock_sync: StockSynchronizer,
    ) -> None:
        self._order_repo = order_repo
        self._stock_sync = stock_sync

    def handle(self, order_id: int) -> None:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        self._stock_sync.submit(
            order_id,
            AdjustmentReason.ORDER_DELETED,
            [
                StockDelta(line.product_id, line.variant.as_key(), line.quantity.value)
                for line in order.lines
            ],
        )

        self._order_repo.delete(order_id)
        logger.info("order_deleted", order_id=order_id, lines=len(order.lines))
